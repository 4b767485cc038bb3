"""Directory lifecycle event dataclasses.

Fired through a registry's own EventDrive (``registry.events``) under the
class name, with the dataclass fields (plus ``ts``) as data:

    registry.events.on("ServiceDeclared", lambda ev: ...)
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from time import time
from typing import Any, Dict

from svcbus import metrics as _metrics
from svcbus.eventbus import EventDrive


@dataclass(slots=True)
class BaseEvent:
    def to_event(self) -> Dict[str, Any]:  # noqa: D401
        data = asdict(self)
        data["ts"] = time()
        return data


@dataclass(slots=True)
class ModuleCreated(BaseEvent):
    module: str
    generated_name: bool = False


@dataclass(slots=True)
class ServiceDeclared(BaseEvent):
    module: str
    service: str
    defer: bool
    waiters: int = 0  # deferred calls released by this declaration


@dataclass(slots=True)
class InvocationDeferred(BaseEvent):
    """A defer-mode call was queued instead of running synchronously.

    caller: name of the notifying module (None for direct invocation).
    """
    module: str
    service: str
    caller: str | None
    pending: int


@dataclass(slots=True)
class DeferredCancelled(BaseEvent):
    module: str
    service: str
    count: int


def _metrics_collector(name: str, payload: Dict[str, Any]) -> None:
    if name == "ModuleCreated":
        _metrics.inc("modules_created_total")
    elif name == "ServiceDeclared":
        _metrics.inc(
            "services_declared_total",
            {"defer": str(payload.get("defer", False)).lower()},
        )
    elif name == "InvocationDeferred":
        _metrics.inc("deferred_queued_total")


def emit(drive: EventDrive, ev: BaseEvent) -> None:
    name = ev.__class__.__name__
    payload = ev.to_event()
    _metrics_collector(name, payload)
    drive.fire(name, payload)


__all__ = [
    "emit",
    "BaseEvent",
    "ModuleCreated",
    "ServiceDeclared",
    "InvocationDeferred",
    "DeferredCancelled",
]

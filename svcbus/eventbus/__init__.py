"""EventDrive: per-owner synchronous publish/subscribe with last-value memory.

Features:
  - on(event_type, handler) / off(event_type, handler); types are
    case-insensitive, the same handler is registered at most once per type
  - fire(event_type, data) records the latest data, then calls handlers in
    registration order with a frozen Event(type, timestamp, data)
  - get_latest_event_data(event_type) reads the last fired value on demand
  - handler isolation (exceptions logged + counted, not propagated)
  - metrics counters:
        events_fired_total, event_handler_exceptions_total{event}

No replay: a handler registered after a fire does not see that fire.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import RLock
from time import time
from typing import Any, Callable, Dict, List

from svcbus import metrics
from svcbus.errors import error_type_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Event:
    type: str
    timestamp: float
    data: Any = None


Handler = Callable[[Event], Any]

_MISSING = object()


def _norm(event_type: str) -> str:
    return str(event_type).lower()


class EventDrive:
    def __init__(self, owner: str | None = None) -> None:
        self._owner = owner
        self._subs: Dict[str, List[Handler]] = {}
        self._latest: Dict[str, Any] = {}
        self._lock = RLock()

    def on(self, event_type: str, handler: Handler) -> None:
        if not callable(handler):
            raise TypeError(f"Event handler for '{event_type}' is not callable")
        with self._lock:
            subs = self._subs.setdefault(_norm(event_type), [])
            if handler not in subs:
                subs.append(handler)

    def off(self, event_type: str, handler: Handler) -> None:
        with self._lock:
            subs = self._subs.get(_norm(event_type))
            if subs and handler in subs:
                subs.remove(handler)

    def fire(self, event_type: str, data: Any = None) -> Event:
        key = _norm(event_type)
        event = Event(type=event_type, timestamp=time(), data=data)
        with self._lock:
            self._latest[key] = data
            subs = list(self._subs.get(key, ()))
        metrics.inc("events_fired_total")
        for h in subs:
            try:
                h(event)
            except Exception as e:  # noqa: BLE001
                metrics.inc(
                    "event_handler_exceptions_total", {"event": key}
                )
                logger.exception(
                    "event handler failed owner=%s event=%s error_type=%s",
                    self._owner,
                    key,
                    error_type_of(e, default="event-handler-error"),
                )
        return event

    def get_latest_event_data(self, event_type: str, default: Any = None) -> Any:
        with self._lock:
            return self._latest.get(_norm(event_type), default)

    def has_fired(self, event_type: str) -> bool:
        with self._lock:
            return self._latest.get(_norm(event_type), _MISSING) is not _MISSING

    def handler_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._subs.get(_norm(event_type), ()))


__all__ = ["Event", "EventDrive", "Handler"]

"""NotifyDispatcher: resolve a target spec, invoke, aggregate results.

Return shape follows the target shape:
    Single / Named  -> the one result (None for an unknown name)
    Pattern         -> list, one result per matching module, registry order
    Many            -> list, one result per entry (entries resolve recursively)
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from svcbus import metrics

from .exceptions import InvalidModuleError
from .module import Module
from .services import CallerIdentity
from .targets import Many, Named, Pattern, Single, TargetSpec, as_target, target_kind

if TYPE_CHECKING:  # pragma: no cover
    from .registry import ModuleRegistry

logger = logging.getLogger(__name__)


class NotifyDispatcher:
    def __init__(self, registry: "ModuleRegistry"):
        self._registry = registry

    def notify(
        self,
        target: Any,
        service: str,
        payload: Any = None,
        *,
        caller: Module,
        defer: bool = False,
    ) -> Any:
        if not isinstance(caller, Module):
            raise InvalidModuleError(caller)
        identity = CallerIdentity(module=caller.name)
        spec = as_target(target)
        self._check(spec)
        metrics.inc("notify_dispatch_total", {"target": target_kind(spec)})
        return self._resolve(spec, service, payload, identity, defer)

    def _check(self, spec: TargetSpec) -> None:
        """Reject an invalid entry before any handler runs."""
        if isinstance(spec, Many):
            for item in spec.items:
                self._check(item)
        elif isinstance(spec, Single) and not isinstance(spec.module, Module):
            raise InvalidModuleError(spec.module)
        elif not isinstance(spec, (Single, Named, Pattern, Many)):
            raise InvalidModuleError(spec)

    def _resolve(
        self,
        spec: TargetSpec,
        service: str,
        payload: Any,
        identity: CallerIdentity,
        defer: bool,
    ) -> Any:
        if isinstance(spec, Many):
            return [
                self._resolve(item, service, payload, identity, defer)
                for item in spec.items
            ]
        if isinstance(spec, Pattern):
            return [
                m._invoke(service, payload, identity, defer)
                for m in self._registry.snapshot()
                if spec.matches(m.name)
            ]
        if isinstance(spec, Named):
            module = self._registry.get(spec.name)
            if module is None:
                logger.debug(
                    "notify to unknown module=%s service=%s ignored",
                    spec.name,
                    service,
                )
                return None
            return module._invoke(service, payload, identity, defer)
        return spec.module._invoke(service, payload, identity, defer)


__all__ = ["NotifyDispatcher"]

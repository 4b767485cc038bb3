"""Module: a named owner of services, a context store and an event drive.

Modules are created through a ``ModuleRegistry`` (``create`` or
``get_or_create``), never directly. They live as long as their registry;
there is no teardown.

Invocation modes
----------------
``invoke_service(name, payload)``
    Runs the handler synchronously and returns its value;
    ``MissingServiceError`` when the service is not declared.
``invoke_service(name, payload, defer=True)``
    Same fast path when the service exists and was declared without
    ``defer``. Otherwise the call is parked on the registry's deferred
    engine under ``ServiceKey(module, name)`` and runs (result discarded)
    once the service is declared with ``defer=True``. Always returns None
    in that case.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict

from svcbus import metrics
from svcbus.eventbus import Event, EventDrive
from svcbus.events import (
    DeferredCancelled,
    InvocationDeferred,
    ServiceDeclared,
    emit,
)

from .exceptions import MissingServiceError
from .services import (
    CallerIdentity,
    Service,
    ServiceCall,
    ServiceHandler,
    ServiceKey,
    ServiceTable,
)
from .targets import ALL

if TYPE_CHECKING:  # pragma: no cover
    from .registry import ModuleRegistry

logger = logging.getLogger(__name__)


class Module:
    __slots__ = ("_name", "_registry", "_services", "_context", "_events")

    def __init__(self, name: str, registry: "ModuleRegistry"):
        self._name = name
        self._registry = registry
        self._services = ServiceTable(name)
        self._context: Dict[str, Any] = {}
        self._events = EventDrive(owner=name)

    @property
    def name(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"Module<{self._name}, services={len(self._services)}>"

    # --- Services --------------------------------------------------------
    def declare_service(
        self, name: str, handler: ServiceHandler, *, defer: bool = False
    ) -> Service:
        service = self._services.declare(name, handler, defer)
        key = ServiceKey(self._name, name)
        engine = self._registry.engine
        waiters = engine.pending(key)
        logger.debug(
            "service declared module=%s service=%s defer=%s",
            self._name,
            name,
            defer,
        )
        if defer:
            try:
                engine.complete(key)
            except Exception:
                # Parked calls stay queued; the name can be declared again.
                self._services.withdraw(service)
                raise
        elif waiters:
            # Only a defer declaration releases parked calls.
            logger.warning(
                "service %s declared without defer; %d deferred call(s) "
                "keep waiting",
                key,
                waiters,
            )
        emit(
            self._registry.events,
            ServiceDeclared(
                module=self._name,
                service=name,
                defer=defer,
                waiters=waiters if defer else 0,
            ),
        )
        return service

    def provides(
        self, name: str, *, defer: bool = False
    ) -> Callable[[ServiceHandler], ServiceHandler]:
        """Decorator form of :meth:`declare_service`."""

        def decorator(handler: ServiceHandler) -> ServiceHandler:
            self.declare_service(name, handler, defer=defer)
            return handler

        return decorator

    def has_service(self, name: str) -> bool:
        return name in self._services

    def service_names(self) -> list[str]:
        return self._services.names()

    def invoke_service(
        self, name: str, payload: Any = None, *, defer: bool = False
    ) -> Any:
        return self._invoke(name, payload, None, defer)

    def _invoke(
        self,
        name: str,
        payload: Any,
        caller: CallerIdentity | None,
        defer: bool,
    ) -> Any:
        call = ServiceCall(payload=payload, caller=caller)
        service = self._services.get(name)
        if not defer:
            if service is None:
                raise MissingServiceError(self._name, name)
            metrics.inc("service_invocations_total", {"mode": "sync"})
            return service(call)
        if service is not None and not service.is_defer_declared:
            metrics.inc("service_invocations_total", {"mode": "sync"})
            return service(call)
        self._park(name, call)
        return None

    def _park(self, name: str, call: ServiceCall) -> None:
        key = ServiceKey(self._name, name)
        engine = self._registry.engine

        def _run_deferred() -> None:
            service = self._services.get(name)
            if service is None:  # pragma: no cover - key completes on declare
                raise MissingServiceError(self._name, name)
            metrics.inc("service_invocations_total", {"mode": "deferred"})
            service(call)

        engine.on_complete(key, _run_deferred)
        logger.debug("invocation deferred key=%s", key)
        emit(
            self._registry.events,
            InvocationDeferred(
                module=self._name,
                service=name,
                caller=call.caller.module if call.caller else None,
                pending=engine.pending(key),
            ),
        )

    def pending_calls(self, name: str | None = None) -> int:
        """Deferred calls still waiting on this module's services."""
        engine = self._registry.engine
        if name is not None:
            return engine.pending(ServiceKey(self._name, name))
        return sum(
            engine.pending(k)
            for k in engine.waiting_keys()
            if isinstance(k, ServiceKey) and k.module == self._name
        )

    def cancel_deferred(self, name: str) -> int:
        """Drop deferred calls parked on service `name`; returns the count."""
        count = self._registry.engine.cancel(ServiceKey(self._name, name))
        if count:
            emit(
                self._registry.events,
                DeferredCancelled(module=self._name, service=name, count=count),
            )
        return count

    # --- Broadcast -------------------------------------------------------
    def notify(
        self,
        target: Any = ALL,
        service: str = "",
        payload: Any = None,
        *,
        defer: bool = False,
    ) -> Any:
        return self._registry.dispatcher.notify(
            target, service, payload, caller=self, defer=defer
        )

    # --- Context ---------------------------------------------------------
    def get_context(self) -> Dict[str, Any]:
        return self._context

    def clear_context(self) -> Dict[str, Any]:
        self._context = {}
        return self._context

    # --- Events ----------------------------------------------------------
    def on(self, event_type: str, handler: Callable[[Event], Any]) -> None:
        self._events.on(event_type, handler)

    def off(self, event_type: str, handler: Callable[[Event], Any]) -> None:
        self._events.off(event_type, handler)

    def fire(self, event_type: str, data: Any = None) -> Event:
        return self._events.fire(event_type, data)

    def get_latest_event_data(self, event_type: str, default: Any = None) -> Any:
        return self._events.get_latest_event_data(event_type, default)


__all__ = ["Module"]

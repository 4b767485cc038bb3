"""Service records and the per-module service table."""
from __future__ import annotations

from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Dict

from .exceptions import DuplicateServiceError, InvalidHandlerError


@dataclass(frozen=True, slots=True)
class CallerIdentity:
    """Module that initiated an invocation. Built by the dispatcher only."""

    module: str


@dataclass(frozen=True, slots=True)
class ServiceCall:
    payload: Any = None
    caller: CallerIdentity | None = None


ServiceHandler = Callable[[ServiceCall], Any]


@dataclass(frozen=True, slots=True)
class ServiceKey:
    """Composite wait-list key for a (module, service) pair."""

    module: str
    service: str

    def __str__(self) -> str:
        return f"service@{self.module}#{self.service}"


class Service:
    __slots__ = ("_name", "_handler", "_defer_declared")

    def __init__(
        self, name: str, handler: ServiceHandler, defer_declared: bool = False
    ):
        if not callable(handler):
            raise InvalidHandlerError(name, handler)
        self._name = name
        self._handler = handler
        self._defer_declared = defer_declared

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_defer_declared(self) -> bool:
        return self._defer_declared

    def __call__(self, call: ServiceCall) -> Any:
        return self._handler(call)

    def __repr__(self) -> str:
        return f"Service<{self._name}, defer={self._defer_declared}>"


class ServiceTable:
    """Name → Service map; a name can be declared once.

    The only removal is ``withdraw`` of a declaration that failed to complete.
    """

    def __init__(self, owner: str):
        self._owner = owner
        self._services: Dict[str, Service] = {}
        self._lock = RLock()

    def declare(
        self, name: str, handler: ServiceHandler, defer: bool = False
    ) -> Service:
        with self._lock:
            if name in self._services:
                raise DuplicateServiceError(self._owner, name)
            service = Service(name, handler, defer)
            self._services[name] = service
        return service

    def withdraw(self, service: Service) -> None:
        """Undo a declaration whose follow-up failed; no-op if replaced."""
        with self._lock:
            if self._services.get(service.name) is service:
                del self._services[service.name]

    def get(self, name: str) -> Service | None:
        with self._lock:
            return self._services.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._services.keys())

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._services

    def __len__(self) -> int:
        with self._lock:
            return len(self._services)


__all__ = [
    "CallerIdentity",
    "ServiceCall",
    "ServiceHandler",
    "ServiceKey",
    "Service",
    "ServiceTable",
]

"""Directory exception hierarchy.

All raised synchronously at the point of violation; nothing here is retried.
"""
from __future__ import annotations

from typing import Any


class DirectoryError(Exception):
    """Base exception for registry, service table and dispatch errors.

    Subclasses set ``error_type``; the base class has no code of its own.
    """

    error_type: str


class DuplicateNameError(DirectoryError):
    """Module name already registered."""

    error_type = "duplicate-name"

    def __init__(self, name: str):
        super().__init__(f"Module: {name} exists already")
        self.name = name


class DuplicateServiceError(DirectoryError):
    """Service name already declared in the module. Module state unchanged."""

    error_type = "duplicate-service"

    def __init__(self, module: str, service: str):
        super().__init__(
            f"There exists a service with the same name: {service} "
            f"in module: {module}"
        )
        self.module = module
        self.service = service


class MissingServiceError(DirectoryError):
    """Non-defer invocation of a service the module does not offer."""

    error_type = "missing-service"

    def __init__(self, module: str, service: str):
        super().__init__(
            f"Service: {service} does not exist in module: {module}"
        )
        self.module = module
        self.service = service


class InvalidModuleError(DirectoryError):
    """Notify target is not a module, name, pattern or collection thereof."""

    error_type = "invalid-module"

    def __init__(self, target: Any):
        super().__init__(f"Module: {target!r} is not a valid module target")
        self.target = target


class InvalidHandlerError(DirectoryError):
    error_type = "invalid-handler"

    def __init__(self, service: str, handler: Any):
        super().__init__(f"Service of: {service} is not a valid function")
        self.service = service
        self.handler = handler


__all__ = [
    "DirectoryError",
    "DuplicateNameError",
    "DuplicateServiceError",
    "MissingServiceError",
    "InvalidModuleError",
    "InvalidHandlerError",
]

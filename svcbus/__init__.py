"""svcbus: in-process module service directory and deferred-invocation bus."""
from __future__ import annotations

from svcbus.eventbus import Event, EventDrive  # noqa: F401
from svcbus.modules import (  # noqa: F401
    ALL,
    CallerIdentity,
    DirectoryError,
    DuplicateNameError,
    DuplicateServiceError,
    InvalidHandlerError,
    InvalidModuleError,
    Many,
    MissingServiceError,
    Module,
    ModuleRegistry,
    Named,
    Pattern,
    ServiceCall,
    Single,
)

__version__ = "0.1.0"

__all__ = [
    "ALL",
    "CallerIdentity",
    "DirectoryError",
    "DuplicateNameError",
    "DuplicateServiceError",
    "Event",
    "EventDrive",
    "InvalidHandlerError",
    "InvalidModuleError",
    "Many",
    "MissingServiceError",
    "Module",
    "ModuleRegistry",
    "Named",
    "Pattern",
    "ServiceCall",
    "Single",
]

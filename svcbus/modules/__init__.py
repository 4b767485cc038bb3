"""Module service directory.

Defines the in-process directory of named modules and their services:
 - ModuleRegistry: name uniqueness, lazy get-or-create, shared engine
 - Module: service declaration / invocation, context store, event drive
 - NotifyDispatcher + target specs: broadcast resolution with caller identity
"""
from __future__ import annotations

from .dispatch import NotifyDispatcher  # noqa: F401
from .exceptions import (  # noqa: F401
    DirectoryError,
    DuplicateNameError,
    DuplicateServiceError,
    InvalidHandlerError,
    InvalidModuleError,
    MissingServiceError,
)
from .module import Module  # noqa: F401
from .registry import ModuleRegistry, NameGenerator  # noqa: F401
from .services import (  # noqa: F401
    CallerIdentity,
    Service,
    ServiceCall,
    ServiceKey,
    ServiceTable,
)
from .targets import ALL, Many, Named, Pattern, Single, as_target  # noqa: F401

__all__ = [
    "ALL",
    "CallerIdentity",
    "DirectoryError",
    "DuplicateNameError",
    "DuplicateServiceError",
    "InvalidHandlerError",
    "InvalidModuleError",
    "Many",
    "MissingServiceError",
    "Module",
    "ModuleRegistry",
    "NameGenerator",
    "Named",
    "NotifyDispatcher",
    "Pattern",
    "Service",
    "ServiceCall",
    "ServiceKey",
    "ServiceTable",
    "Single",
    "as_target",
]

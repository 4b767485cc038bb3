"""Central error taxonomy enforcement.

Every exception raised by the directory carries one of these codes in its
``error_type`` attribute; metrics and log records use the same strings.
"""
from __future__ import annotations

_ALLOWED_ERROR_TYPES = {
    # registry
    "duplicate-name",
    # service table
    "duplicate-service",
    "missing-service",
    "invalid-handler",
    # dispatch
    "invalid-module",
    # defer engine / event drive
    "continuation-error",
    "event-handler-error",
    # config
    "config-invalid",
    "config-out-of-range",
}


def validate_error_type(code: str) -> str:
    assert (
        code in _ALLOWED_ERROR_TYPES
    ), f"Unknown error_type '{code}' (not in taxonomy)"
    return code


def error_type_of(e: BaseException, default: str = "continuation-error") -> str:
    """Taxonomy code for an exception raised anywhere in svcbus.

    Exceptions that do not declare ``error_type`` (raised by user handlers)
    map to ``default``, the code of the layer that observed them.
    """
    code = getattr(e, "error_type", None)
    if isinstance(code, str) and code in _ALLOWED_ERROR_TYPES:
        return code
    return validate_error_type(default)


__all__ = ["validate_error_type", "error_type_of"]

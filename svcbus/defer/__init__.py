"""Deferred invocation: keyed wait-lists plus the run-later schedulers."""
from __future__ import annotations

from .engine import DeferredInvocationEngine  # noqa: F401
from .scheduler import (  # noqa: F401
    AsyncioScheduler,
    QueueScheduler,
    Scheduler,
    build_scheduler,
)

__all__ = [
    "DeferredInvocationEngine",
    "AsyncioScheduler",
    "QueueScheduler",
    "Scheduler",
    "build_scheduler",
]

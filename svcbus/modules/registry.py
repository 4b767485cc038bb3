"""ModuleRegistry: name → Module directory plus its shared collaborators.

One registry owns:
  - the module map (insertion order is the broadcast "registry order")
  - the DeferredInvocationEngine (and its scheduler) for defer-mode calls
  - the NotifyDispatcher used by ``Module.notify``
  - ``events``: an EventDrive carrying lifecycle events (see svcbus.events)

Registries are plain objects; create as many as needed (one per test).
"""
from __future__ import annotations

import logging
import time
from threading import RLock
from typing import Iterator, List

from svcbus.config import AggregatedConfig, get_config
from svcbus.defer import (
    DeferredInvocationEngine,
    QueueScheduler,
    Scheduler,
    build_scheduler,
)
from svcbus.eventbus import EventDrive
from svcbus.events import ModuleCreated, emit

from .dispatch import NotifyDispatcher
from .exceptions import DuplicateNameError
from .module import Module

logger = logging.getLogger(__name__)


class NameGenerator:
    """Placeholder module names: prefix + epoch ms + rolling counter."""

    def __init__(self, prefix: str = "TMPMODULE", wrap: int = 100):
        self._prefix = prefix
        self._wrap = wrap
        self._count = 0
        self._lock = RLock()

    def __call__(self) -> str:
        with self._lock:
            if self._count >= self._wrap:
                self._count = 0
            count = self._count
            self._count += 1
        return f"{self._prefix}{int(time.time() * 1000)}{count}"


class ModuleRegistry:
    def __init__(
        self,
        config: AggregatedConfig | None = None,
        scheduler: Scheduler | None = None,
    ):
        cfg = config or get_config()
        self._modules: dict[str, Module] = {}
        self._lock = RLock()
        self._next_name = NameGenerator(
            cfg.registry.name_prefix, cfg.registry.name_counter_wrap
        )
        self.engine = DeferredInvocationEngine(
            scheduler or build_scheduler(cfg.defer.scheduler),
            late_registration=cfg.defer.late_registration,
        )
        self.dispatcher = NotifyDispatcher(self)
        self.events = EventDrive(owner="registry")

    def create(self, name: str | None = None) -> Module:
        generated = name is None
        if not generated and not isinstance(name, str):
            raise TypeError(f"Module name must be str, got {type(name).__name__}")
        with self._lock:
            if generated:
                # Counter wraps, so a burst within one millisecond can repeat.
                name = self._next_name()
                while name in self._modules:
                    name = self._next_name()
            elif name in self._modules:
                raise DuplicateNameError(name)
            module = Module(name, self)
            self._modules[name] = module
        logger.debug("module created name=%s generated=%s", name, generated)
        emit(self.events, ModuleCreated(module=name, generated_name=generated))
        return module

    def get_or_create(self, name: str | None = None) -> Module:
        if name is not None:
            with self._lock:
                module = self._modules.get(name)
                if module is not None:
                    return module
                return self.create(name)
        return self.create()

    def get(self, name: str) -> Module | None:
        with self._lock:
            return self._modules.get(name)

    def names(self) -> List[str]:
        with self._lock:
            return list(self._modules.keys())

    def snapshot(self) -> List[Module]:
        """Registered modules in registry order, copied at call time."""
        with self._lock:
            return list(self._modules.values())

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._modules

    def __len__(self) -> int:
        with self._lock:
            return len(self._modules)

    def __iter__(self) -> Iterator[Module]:
        return iter(self.snapshot())

    def run_pending(self) -> int:
        """Drain deferred work when the registry runs on a QueueScheduler.

        Returns the number of flush tasks executed (0 for other schedulers,
        which drain themselves).
        """
        scheduler = self.engine.scheduler
        if isinstance(scheduler, QueueScheduler):
            return scheduler.run_pending()
        return 0


__all__ = ["ModuleRegistry", "NameGenerator"]

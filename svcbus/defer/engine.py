"""DeferredInvocationEngine: keyed wait-lists flushed on completion.

Keys are arbitrary hashables; the directory uses ``ServiceKey`` records but
nothing here depends on the module layer.

Lifecycle of a key:
    on_complete(key, fn)*  -> queued in FIFO order
    complete(key)          -> key marked complete, list detached, one flush
                              task scheduled; the list is discarded after it
                              runs (each entry drained exactly once)
    on_complete(key, fn)   -> after completion: scheduled (``run``) or left
                              queued forever (``drop``, still counted by
                              pending() and removable by cancel())

No timeouts. A key that never completes keeps its waiters until cancel().
"""
from __future__ import annotations

import logging
from threading import RLock
from typing import Callable, Dict, Hashable, List, Set

from svcbus import metrics
from svcbus.errors import error_type_of

from .scheduler import QueueScheduler, Scheduler

logger = logging.getLogger(__name__)

Continuation = Callable[[], object]

LATE_POLICIES = ("run", "drop")


class DeferredInvocationEngine:
    def __init__(
        self,
        scheduler: Scheduler | None = None,
        late_registration: str = "run",
    ) -> None:
        if late_registration not in LATE_POLICIES:
            raise ValueError(
                f"late_registration must be one of {LATE_POLICIES}"
            )
        self._scheduler = scheduler or QueueScheduler()
        self._late = late_registration
        self._waiting: Dict[Hashable, List[Continuation]] = {}
        self._completed: Set[Hashable] = set()
        self._lock = RLock()

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    def on_complete(self, key: Hashable, continuation: Continuation) -> None:
        if not callable(continuation):
            raise TypeError("continuation must be callable")
        with self._lock:
            if key not in self._completed or self._late == "drop":
                self._waiting.setdefault(key, []).append(continuation)
                if key in self._completed:
                    # Stays queued (visible to pending/cancel) but never runs.
                    logger.debug("late continuation stranded key=%s", key)
                return
        self._scheduler.schedule(lambda: self._flush(key, [continuation]))

    def complete(self, key: Hashable) -> None:
        """Mark ``key`` complete and schedule one flush of its waiters.

        State changes only after the scheduler accepted the flush; if
        ``schedule`` raises, the waiters stay queued and the key stays open.
        """
        with self._lock:
            if key in self._completed:
                return
            entries = self._waiting.get(key)
            if entries:
                self._scheduler.schedule(lambda: self._flush(key, entries))
                del self._waiting[key]
                logger.debug(
                    "flush scheduled key=%s waiters=%d", key, len(entries)
                )
            self._completed.add(key)

    def cancel(self, key: Hashable) -> int:
        """Discard every continuation still waiting on ``key``."""
        with self._lock:
            entries = self._waiting.pop(key, None) or []
        if entries:
            metrics.inc("deferred_cancelled_total", value=len(entries))
            logger.info("deferred waiters cancelled key=%s count=%d", key, len(entries))
        return len(entries)

    def is_completed(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._completed

    def pending(self, key: Hashable | None = None) -> int:
        with self._lock:
            if key is not None:
                return len(self._waiting.get(key, ()))
            return sum(len(v) for v in self._waiting.values())

    def waiting_keys(self) -> list[Hashable]:
        with self._lock:
            return list(self._waiting.keys())

    def _flush(self, key: Hashable, entries: List[Continuation]) -> None:
        metrics.observe("deferred_flush_size", len(entries))
        for fn in entries:
            try:
                fn()
            except Exception as e:  # noqa: BLE001
                metrics.inc("deferred_continuation_errors_total")
                logger.exception(
                    "deferred continuation failed key=%s error_type=%s",
                    key,
                    error_type_of(e),
                )
            else:
                metrics.inc("deferred_flushed_total")


__all__ = ["DeferredInvocationEngine", "Continuation", "LATE_POLICIES"]

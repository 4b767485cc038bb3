"""Run-later primitives used to flush deferred continuations.

A scheduler guarantees that a task runs after the current synchronous call
stack unwinds, and that tasks scheduled in the same tick run in FIFO order.

QueueScheduler
    Explicit FIFO queue, drained by ``run_pending()``. Deterministic; the
    default for synchronous applications and tests.
AsyncioScheduler
    ``loop.call_soon`` on the given loop (or the one running at construction).
"""
from __future__ import annotations

import asyncio
from collections import deque
from threading import RLock
from typing import Callable, Deque, Protocol

Task = Callable[[], None]


class Scheduler(Protocol):  # pragma: no cover
    def schedule(self, fn: Task) -> None:  # noqa: D401
        ...


class QueueScheduler:
    def __init__(self) -> None:
        self._tasks: Deque[Task] = deque()
        self._lock = RLock()
        self._draining = False

    def schedule(self, fn: Task) -> None:
        with self._lock:
            self._tasks.append(fn)

    def pending(self) -> int:
        with self._lock:
            return len(self._tasks)

    def run_pending(self) -> int:
        """Run queued tasks (including ones queued meanwhile) until empty.

        Returns the number of tasks executed. A nested call made from inside
        a running task returns 0; the outer drain picks up the new work.
        """
        with self._lock:
            if self._draining:
                return 0
            self._draining = True
        ran = 0
        try:
            while True:
                with self._lock:
                    if not self._tasks:
                        break
                    fn = self._tasks.popleft()
                fn()
                ran += 1
        finally:
            with self._lock:
                self._draining = False
        return ran


class AsyncioScheduler:
    """Binds to ``loop`` or, when omitted, to the loop running at construction.

    Raises RuntimeError when built outside a running loop without one.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as e:
                raise RuntimeError(
                    "AsyncioScheduler needs an event loop: pass one or "
                    "construct it inside a running loop"
                ) from e
        self._loop = loop

    def schedule(self, fn: Task) -> None:
        self._loop.call_soon(fn)


def build_scheduler(kind: str) -> Scheduler:
    if kind == "queue":
        return QueueScheduler()
    if kind == "asyncio":
        return AsyncioScheduler()
    raise ValueError(f"Unknown scheduler kind '{kind}'")


__all__ = [
    "Scheduler",
    "QueueScheduler",
    "AsyncioScheduler",
    "build_scheduler",
    "Task",
]

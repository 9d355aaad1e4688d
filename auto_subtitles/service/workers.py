"""Reusable transcription worker handles.

WHY: Each transcription job needs its own staging state and retry budget,
and a batch caller (many files, several threads) must not build an
unbounded number of them. Finished workers are parked and handed out
again instead of being rebuilt.

HOW: Three components:
  WorkerState  enum of lifecycle states (idle -> active -> inactive)
  Worker       protocol-by-convention: any object with ``id`` and ``state``
  WorkerPool   thread-safe pool that creates workers through a factory,
               reuses inactive ones, and reports counts

RULES:
- All pool mutations are protected by threading.Lock
- acquire() prefers an INACTIVE worker; otherwise creates one in IDLE state
- A bounded pool (max_workers) raises PoolExhaustedError when every worker
  is checked out
- release() puts the worker back as INACTIVE; releasing an unknown worker
  raises ValueError
- The pool holds no module-level state; create as many pools as needed
"""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

logger = logging.getLogger(__name__)


class WorkerState(str, enum.Enum):
    """Lifecycle of a worker.

    RULES:
    - IDLE: created, never used
    - ACTIVE: running a job
    - INACTIVE: finished a job, available for reuse
    """

    IDLE = "IDLE"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class PoolExhaustedError(RuntimeError):
    """Raised by a bounded pool when no worker can be handed out."""


class WorkerPool:
    """Thread-safe pool of worker objects.

    Args:
        factory: Zero-argument callable creating a new worker. The worker
            must expose writable ``id`` and ``state`` attributes.
        max_workers: Upper bound on live workers, or None for unbounded.
    """

    def __init__(self, factory: Callable[[], Any], max_workers: int | None = None) -> None:
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._factory = factory
        self.max_workers = max_workers
        self._workers: list[Any] = []
        self._checked_out: set[int] = set()
        self._lock = threading.Lock()

    def acquire(self) -> Any:
        with self._lock:
            for worker in self._workers:
                if worker.state == WorkerState.INACTIVE and id(worker) not in self._checked_out:
                    self._checked_out.add(id(worker))
                    logger.debug("Reusing worker %s", worker.id)
                    return worker

            if self.max_workers is not None and len(self._workers) >= self.max_workers:
                raise PoolExhaustedError(f"All {self.max_workers} workers are busy")

            worker = self._factory()
            worker.state = WorkerState.IDLE
            self._workers.append(worker)
            self._checked_out.add(id(worker))
            logger.debug("Created worker %s (%d total)", worker.id, len(self._workers))
            return worker

    def release(self, worker: Any) -> None:
        with self._lock:
            if id(worker) not in self._checked_out:
                raise ValueError(f"Worker {getattr(worker, 'id', worker)} is not checked out of this pool")
            self._checked_out.discard(id(worker))
            worker.state = WorkerState.INACTIVE

    @contextmanager
    def worker(self) -> Iterator[Any]:
        """Acquire a worker for the duration of a ``with`` block."""
        handle = self.acquire()
        try:
            yield handle
        finally:
            self.release(handle)

    def stats(self) -> dict[str, int]:
        """Return total/active/idle/inactive worker counts."""
        with self._lock:
            counts = {state: 0 for state in WorkerState}
            for worker in self._workers:
                counts[WorkerState(worker.state)] += 1
            return {
                "total": len(self._workers),
                "active": counts[WorkerState.ACTIVE],
                "idle": counts[WorkerState.IDLE],
                "inactive": counts[WorkerState.INACTIVE],
            }

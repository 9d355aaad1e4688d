"""Unit tests for the worker pool.

WHY: Batch callers share one pool across threads. A double hand-out means
two jobs clobber each other's staging state; a leak means the pool runs dry.

HOW: Uses a tiny _Handle class as the worker type and checks state
transitions, reuse, bounds, and stats. One test hammers the pool from
several threads to check the lock.

RULES:
- Workers are created IDLE, released INACTIVE, and reused before new ones
  are created
"""

from __future__ import annotations

import itertools
import threading

import pytest

from auto_subtitles.service.workers import PoolExhaustedError, WorkerPool, WorkerState

_ids = itertools.count()


class _Handle:
    def __init__(self):
        self.id = f"w{next(_ids)}"
        self.state = None


class TestWorkerPool:
    def test_new_worker_is_idle(self):
        pool = WorkerPool(_Handle)
        worker = pool.acquire()
        assert worker.state == WorkerState.IDLE
        assert pool.stats() == {"total": 1, "active": 0, "idle": 1, "inactive": 0}

    def test_released_worker_is_reused(self):
        pool = WorkerPool(_Handle)
        first = pool.acquire()
        pool.release(first)
        assert first.state == WorkerState.INACTIVE
        assert pool.acquire() is first
        assert pool.stats()["total"] == 1

    def test_checked_out_worker_not_handed_out_twice(self):
        pool = WorkerPool(_Handle)
        first = pool.acquire()
        second = pool.acquire()
        assert first is not second

    def test_bounded_pool_exhausts(self):
        pool = WorkerPool(_Handle, max_workers=1)
        pool.acquire()
        with pytest.raises(PoolExhaustedError):
            pool.acquire()

    def test_inactive_worker_still_checked_out_is_skipped(self):
        """A worker marked INACTIVE by its job but not yet released stays reserved."""
        pool = WorkerPool(_Handle)
        first = pool.acquire()
        first.state = WorkerState.INACTIVE
        assert pool.acquire() is not first

    def test_release_unknown_worker(self):
        pool = WorkerPool(_Handle)
        with pytest.raises(ValueError, match="not checked out"):
            pool.release(_Handle())

    def test_double_release(self):
        pool = WorkerPool(_Handle)
        worker = pool.acquire()
        pool.release(worker)
        with pytest.raises(ValueError):
            pool.release(worker)

    def test_invalid_bound(self):
        with pytest.raises(ValueError, match="at least 1"):
            WorkerPool(_Handle, max_workers=0)

    def test_context_manager_releases_on_error(self):
        pool = WorkerPool(_Handle, max_workers=1)
        with pytest.raises(RuntimeError):
            with pool.worker() as worker:
                worker.state = WorkerState.ACTIVE
                raise RuntimeError("job failed")
        assert worker.state == WorkerState.INACTIVE
        assert pool.acquire() is worker

    def test_stats_counts_states(self):
        pool = WorkerPool(_Handle)
        a, b, c = pool.acquire(), pool.acquire(), pool.acquire()
        b.state = WorkerState.ACTIVE
        pool.release(c)
        assert pool.stats() == {"total": 3, "active": 1, "idle": 1, "inactive": 1}

    def test_concurrent_acquire_release(self):
        pool = WorkerPool(_Handle, max_workers=4)
        errors = []

        def run():
            for _ in range(200):
                try:
                    with pool.worker():
                        pass
                except PoolExhaustedError as e:
                    errors.append(e)

        threads = [threading.Thread(target=run) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        stats = pool.stats()
        assert stats["total"] <= 4
        assert stats["inactive"] == stats["total"]


class TestWorkerState:
    def test_values_are_uppercase(self):
        assert [s.value for s in WorkerState] == ["IDLE", "ACTIVE", "INACTIVE"]
        assert WorkerState("ACTIVE") is WorkerState.ACTIVE

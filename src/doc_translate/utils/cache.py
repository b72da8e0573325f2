"""
In-memory store for finished translation jobs.

Entries expire a fixed time after insertion. Expiry is enforced on lookup
against an injectable clock and, by default, also by a deferred timer that
deletes the entry without waiting for a lookup.
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class JobCache:
    """Job id -> TranslationJob with time-to-live eviction."""

    def __init__(
        self,
        ttl_seconds: float = 30 * 60,
        clock: Callable[[], float] = time.monotonic,
        schedule_eviction: bool = True
    ):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.schedule_eviction = schedule_eviction

        self._entries: Dict[str, Tuple[object, float]] = {}
        self._timers: Dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def insert(self, job) -> None:
        """Store a finished job under job.job_id."""
        with self._lock:
            inserted_at = self.clock()
            self._entries[job.job_id] = (job, inserted_at)
            if self.schedule_eviction:
                timer = threading.Timer(
                    self.ttl_seconds, self._expire, args=(job.job_id, inserted_at)
                )
                timer.daemon = True
                old = self._timers.pop(job.job_id, None)
                if old is not None:
                    old.cancel()
                self._timers[job.job_id] = timer
                timer.start()

        logger.info(f"Cached job {job.job_id} for {self.ttl_seconds:.0f}s")

    def lookup(self, job_id: str):
        """Return the job, or None when it is missing or expired."""
        with self._lock:
            entry = self._entries.get(job_id)
            if entry is None:
                return None
            job, inserted_at = entry
            if self.clock() - inserted_at < self.ttl_seconds:
                return job

        self.evict(job_id)
        return None

    def _expire(self, job_id: str, inserted_at: float) -> bool:
        """Timer callback; only removes the entry stored at inserted_at."""
        with self._lock:
            entry = self._entries.get(job_id)
            if entry is None or entry[1] != inserted_at:
                return False
            del self._entries[job_id]
            self._timers.pop(job_id, None)

        logger.info(f"Expired job {job_id}")
        return True

    def evict(self, job_id: str) -> bool:
        """Delete a job; returns False when it was already gone."""
        with self._lock:
            timer = self._timers.pop(job_id, None)
            removed = self._entries.pop(job_id, None) is not None

        if timer is not None and timer is not threading.current_thread():
            timer.cancel()
        if removed:
            logger.info(f"Evicted job {job_id}")
        return removed

    def purge_expired(self) -> int:
        """Evict every expired entry; returns how many were removed."""
        now = self.clock()
        with self._lock:
            expired = [
                job_id for job_id, (_, inserted_at) in self._entries.items()
                if now - inserted_at >= self.ttl_seconds
            ]
        return sum(1 for job_id in expired if self.evict(job_id))

    def close(self) -> None:
        """Cancel pending eviction timers and drop all entries."""
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
            self._entries.clear()
        for timer in timers:
            timer.cancel()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, job_id: str) -> bool:
        return self.lookup(job_id) is not None

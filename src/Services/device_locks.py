# src/Services/device_locks.py
"""
Per-device mutual exclusion for read-decide-write sequences.

Two telemetry pushes, or a manual command and a telemetry push, for the
same device must not interleave between reading the device row and
committing the new state. Each device_id gets its own threading.Lock;
different devices never share a lock and proceed in parallel.

This complements SELECT ... FOR UPDATE (see Repositories/device.py), which
covers multi-process deployments on PostgreSQL/MySQL but is a no-op on
SQLite.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List


class DeviceLockRegistry:
    """
    Lock per device identifier, reference counted.

    An entry exists only while some caller holds or waits on it, so
    requests for unknown identifiers do not accumulate locks. A device
    deleted and re-registered under the same identifier still serialises
    against requests waiting on the old entry, since the entry lives as
    long as they do.
    """

    def __init__(self):
        # device_id -> [lock, number of holders + waiters]
        self._locks: Dict[str, List] = {}
        self._guard = threading.Lock()

    def _acquire_entry(self, device_id: str) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(device_id)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[device_id] = entry
            entry[1] += 1
            return entry[0]

    def _release_entry(self, device_id: str):
        with self._guard:
            entry = self._locks[device_id]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[device_id]

    @contextmanager
    def hold(self, device_id: str) -> Iterator[None]:
        """Hold the device's lock for the duration of the block."""
        lock = self._acquire_entry(device_id)
        try:
            with lock:
                yield
        finally:
            self._release_entry(device_id)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# --------------------------------------------------------
# GLOBAL INSTANCE (Singleton)
# --------------------------------------------------------
device_locks = DeviceLockRegistry()

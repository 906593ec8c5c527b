"""Per-contractor serialization of rating writes."""

from __future__ import annotations

import asyncio


class ContractorLocks:
    """Hand out one asyncio.Lock per contractor.

    Every rating policy is a read-modify-write. Holding the contractor's lock
    across the read and the commit stops two submissions for the same
    contractor from reading the same rating and losing an update. Different
    contractors never wait on each other. Writers in other processes are
    caught by the rating version check in ContractorRepository.mutate.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def __call__(self, contractor_id: str) -> asyncio.Lock:
        lock = self._locks.get(contractor_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[contractor_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)

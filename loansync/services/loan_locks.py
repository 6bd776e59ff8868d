"""Loan Locks — one asyncio.Lock per loan, serializing sync sequences in this process.

Invariants:
    - At most one synchronize/recalculate sequence per loan id runs at a time
    - Locks for different loans never block each other

Design Decisions:
    - In-memory registry: single-process uvicorn; multi-worker deployments need
      a DB-level lock instead
    - Idle locks are dropped on release so the registry doesn't grow with every loan
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from loansync.core.domain_types import LoanId


class LoanLocks:
    def __init__(self):
        self._locks: dict[LoanId, asyncio.Lock] = {}
        self._waiters: dict[LoanId, int] = {}

    @asynccontextmanager
    async def hold(self, loan_id: LoanId) -> AsyncIterator[None]:
        lock = self._locks.setdefault(loan_id, asyncio.Lock())
        self._waiters[loan_id] = self._waiters.get(loan_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[loan_id] -= 1
            if self._waiters[loan_id] == 0:
                del self._waiters[loan_id]
                del self._locks[loan_id]

    def is_held(self, loan_id: LoanId) -> bool:
        lock = self._locks.get(loan_id)
        return lock is not None and lock.locked()


loan_locks = LoanLocks()

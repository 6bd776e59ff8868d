"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Every save is atomic per entity (save_all: per batch)

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE their results are never async themselves —
      services/ orchestrates the awaits around the pure logic
    - Repositories return None for missing rows: not-found is an expected state
      for the synchronization engine, never an exception
"""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from loansync.core.domain_types import AccountId, LoanId
from loansync.core.entities import Account, Loan, LoanRecord, Transaction


# Lifecycle hook awaited around background loan updates.
BackgroundHook = Callable[[], Awaitable[None]]


@dataclass(frozen=True)
class RecordBasis:
    """Account and amounts a loan record's conversion is computed from."""
    account_id: AccountId | None
    amount: float
    converted_amount: float | None = None


@dataclass(frozen=True)
class ConversionRequest:
    """Input of one converted-amount computation.

    `old` is what the record looked like, `new` is what it looks like now;
    `loan_account_id` is the backing account whose currency is the target.
    """
    old: RecordBasis
    new: RecordBasis
    loan_account_id: AccountId | None
    accounts: Sequence[Account]


class AccountRepository(Protocol):
    """Contract for account lookup — implemented by shell."""
    async def get_all(self) -> list[Account]: ...
    async def get(self, account_id: AccountId) -> Account | None: ...


class LoanRepository(Protocol):
    """Contract for loan persistence — implemented by shell."""
    async def get(self, loan_id: LoanId) -> Loan | None: ...
    async def save(self, loan: Loan) -> None: ...


class LoanRecordRepository(Protocol):
    """Contract for loan record persistence — implemented by shell."""
    async def get_by_loan(self, loan_id: LoanId) -> list[LoanRecord]: ...
    async def save_all(self, records: Sequence[LoanRecord]) -> None: ...


class TransactionRepository(Protocol):
    """Contract for transaction persistence — implemented by shell."""
    async def save(self, transaction: Transaction) -> None: ...
    async def get_mirror(self, loan_id: LoanId) -> Transaction | None: ...
    async def delete_by_loan(self, loan_id: LoanId) -> int: ...


class CurrencyConverter(Protocol):
    """Contract for converted-amount computation — implemented by shell.

    Returns None when no conversion is required. May return None or raise
    ConversionUnavailableError when no rate exists; callers treat both alike.
    """
    async def compute_converted_amount(
        self, request: ConversionRequest,
    ) -> float | None: ...

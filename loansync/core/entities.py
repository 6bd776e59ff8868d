"""Domain Entities — immutable snapshots of accounts, loans, loan records and transactions.

Invariants:
    - Entities are frozen: every change produces a new instance via dataclasses.replace
    - A Transaction with loan_id set and loan_record_id unset is the loan's mirror
    - LoanRecord.converted_amount is expressed in the loan's backing-account currency,
      None when no conversion is required or no rate is available

Design Decisions:
    - Frozen dataclasses over ORM objects: core never touches a DB session
      (repositories map ORM rows to these at the boundary)
    - Amounts are floats, matching the REAL/Float columns they are stored in
"""

from dataclasses import dataclass
from datetime import datetime

from loansync.core.domain_types import (
    AccountId, LoanId, LoanRecordId, TransactionId,
    LoanType, TransactionType,
)


@dataclass(frozen=True)
class Account:
    id: AccountId
    currency: str
    name: str = ""


@dataclass(frozen=True)
class Loan:
    id: LoanId
    name: str
    amount: float
    type: LoanType
    account_id: AccountId | None = None


@dataclass(frozen=True)
class LoanRecord:
    """Partial payment or settlement entry against a loan, in its own account's currency."""
    id: LoanRecordId
    loan_id: LoanId
    amount: float
    account_id: AccountId | None = None
    converted_amount: float | None = None
    note: str | None = None
    date_time: datetime | None = None


@dataclass(frozen=True)
class Transaction:
    id: TransactionId
    account_id: AccountId
    amount: float
    type: TransactionType
    title: str | None = None
    date_time: datetime | None = None
    loan_id: LoanId | None = None
    loan_record_id: LoanRecordId | None = None

    @property
    def is_loan_mirror(self) -> bool:
        return self.loan_id is not None and self.loan_record_id is None


@dataclass(frozen=True)
class CreateLoanData:
    """Input captured when a loan is created."""
    name: str
    amount: float
    type: LoanType
    account_id: AccountId | None = None
    create_loan_transaction: bool = False

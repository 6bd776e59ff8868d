"""Loan Mirroring — pure rules linking a loan to its mirror transaction.

Invariants:
    - Mirror fields: Loan.amount == Transaction.amount, Loan.account_id == Transaction.account_id
    - Loan type derives from transaction type: INCOME -> BORROW, anything else -> LEND
    - An empty or missing transaction title never overwrites the loan name
    - Currency resolution falls back to the base currency for absent or unknown accounts

Design Decisions:
    - Base currency is a parameter, never read from ambient state
    - Functions return new frozen entities; persistence is the caller's job
"""

from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, timezone
from uuid import uuid4

from loansync.core.domain_types import (
    AccountId, LoanId, TransactionId, LoanType, TransactionType,
)
from loansync.core.entities import Account, Loan, Transaction


def loan_type_for(transaction_type: TransactionType) -> LoanType:
    if transaction_type == TransactionType.INCOME:
        return LoanType.BORROW
    return LoanType.LEND


def transaction_type_for(loan_type: LoanType) -> TransactionType:
    if loan_type == LoanType.BORROW:
        return TransactionType.INCOME
    return TransactionType.EXPENSE


def loan_from_transaction(loan: Loan, transaction: Transaction) -> Loan:
    """Apply an edited mirror transaction onto its loan."""
    return replace(
        loan,
        amount=transaction.amount,
        name=transaction.title if transaction.title else loan.name,
        type=loan_type_for(transaction.type),
        account_id=transaction.account_id,
    )


def mirror_transaction(
    loan_id: LoanId,
    amount: float,
    loan_type: LoanType,
    account_id: AccountId,
    title: str,
    existing: Transaction | None = None,
    date_time: datetime | None = None,
) -> Transaction:
    """Build the mirror transaction for a loan, updating `existing` when given.

    The timestamp is taken from `date_time`, then from `existing`, then now.
    """
    when = date_time or (existing.date_time if existing else None)
    if when is None:
        when = datetime.now(timezone.utc)
    return Transaction(
        id=existing.id if existing else TransactionId(uuid4()),
        account_id=account_id,
        amount=amount,
        type=transaction_type_for(loan_type),
        title=title,
        date_time=when,
        loan_id=loan_id,
        loan_record_id=None,
    )


def find_account(
    accounts: Sequence[Account], account_id: AccountId | None,
) -> Account | None:
    if account_id is None:
        return None
    return next((a for a in accounts if a.id == account_id), None)


def resolve_currency(
    account_id: AccountId | None,
    accounts: Sequence[Account],
    base_currency: str,
) -> str:
    """Currency of the account, or the base currency when it can't be found."""
    account = find_account(accounts, account_id)
    return account.currency if account else base_currency


def currency_changed(
    old_account_id: AccountId | None,
    new_account_id: AccountId | None,
    accounts: Sequence[Account],
    base_currency: str,
) -> bool:
    """True when moving a loan between these accounts changes its currency."""
    if old_account_id == new_account_id:
        return False
    old_currency = resolve_currency(old_account_id, accounts, base_currency)
    new_currency = resolve_currency(new_account_id, accounts, base_currency)
    return old_currency != new_currency

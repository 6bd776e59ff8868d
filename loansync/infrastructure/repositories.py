"""SQL Repositories — SQLAlchemy implementations of the core boundary Protocols.

Invariants:
    - Every save commits: one loan / one transaction / one batch of records per commit
    - ORM rows never leave this module; callers receive frozen core entities
    - Missing rows come back as None, never as an exception

Design Decisions:
    - One AsyncSession shared by all repositories of a request: the services
      await calls sequentially against it (the conversion fan-out never touches it)
    - Upsert via session.get + attribute assignment: keeps ORM defaults and
      relationships intact, works the same on PostgreSQL and SQLite
"""

import logging
from collections.abc import Sequence

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from loansync.core.domain_types import (
    AccountId, LoanId, LoanRecordId, TransactionId, LoanType, TransactionType,
)
from loansync.core.entities import Account, Loan, LoanRecord, Transaction
from loansync.models.account import Account as AccountModel
from loansync.models.loan import Loan as LoanModel
from loansync.models.loan_record import LoanRecord as LoanRecordModel
from loansync.models.transaction import Transaction as TransactionModel

logger = logging.getLogger(__name__)


# ─── Row -> entity mapping ──────────────────────────────────────

def account_from_row(row: AccountModel) -> Account:
    return Account(id=AccountId(row.id), currency=row.currency, name=row.name)


def loan_from_row(row: LoanModel) -> Loan:
    return Loan(
        id=LoanId(row.id),
        name=row.name,
        amount=row.amount,
        type=LoanType(row.type),
        account_id=AccountId(row.account_id) if row.account_id else None,
    )


def loan_record_from_row(row: LoanRecordModel) -> LoanRecord:
    return LoanRecord(
        id=LoanRecordId(row.id),
        loan_id=LoanId(row.loan_id),
        amount=row.amount,
        account_id=AccountId(row.account_id) if row.account_id else None,
        converted_amount=row.converted_amount,
        note=row.note,
        date_time=row.date_time,
    )


def transaction_from_row(row: TransactionModel) -> Transaction:
    return Transaction(
        id=TransactionId(row.id),
        account_id=AccountId(row.account_id),
        amount=row.amount,
        type=TransactionType(row.type),
        title=row.title,
        date_time=row.date_time,
        loan_id=LoanId(row.loan_id) if row.loan_id else None,
        loan_record_id=LoanRecordId(row.loan_record_id) if row.loan_record_id else None,
    )


# ─── Repositories ───────────────────────────────────────────────

class SqlAccountRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all(self) -> list[Account]:
        result = await self.db.execute(select(AccountModel))
        return [account_from_row(row) for row in result.scalars().all()]

    async def get(self, account_id: AccountId) -> Account | None:
        row = await self.db.get(AccountModel, account_id)
        return account_from_row(row) if row else None


class SqlLoanRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, loan_id: LoanId) -> Loan | None:
        row = await self.db.get(LoanModel, loan_id)
        return loan_from_row(row) if row else None

    async def save(self, loan: Loan) -> None:
        row = await self.db.get(LoanModel, loan.id)
        if row is None:
            row = LoanModel(id=loan.id)
            self.db.add(row)
        row.name = loan.name
        row.amount = loan.amount
        row.type = loan.type.value
        row.account_id = loan.account_id
        await self.db.commit()

    async def delete(self, loan_id: LoanId) -> bool:
        row = await self.db.get(LoanModel, loan_id)
        if row is None:
            return False
        await self.db.delete(row)
        await self.db.commit()
        return True


class SqlLoanRecordRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_loan(self, loan_id: LoanId) -> list[LoanRecord]:
        result = await self.db.execute(
            select(LoanRecordModel)
            .where(LoanRecordModel.loan_id == loan_id)
            .order_by(LoanRecordModel.date_time)
        )
        return [loan_record_from_row(row) for row in result.scalars().all()]

    async def save_all(self, records: Sequence[LoanRecord]) -> None:
        for record in records:
            row = await self.db.get(LoanRecordModel, record.id)
            if row is None:
                row = LoanRecordModel(id=record.id)
                self.db.add(row)
            row.loan_id = record.loan_id
            row.account_id = record.account_id
            row.amount = record.amount
            row.converted_amount = record.converted_amount
            row.note = record.note
            if record.date_time is not None:
                row.date_time = record.date_time
        await self.db.commit()
        logger.debug("Saved loan records", extra={"record_count": len(records)})


class SqlTransactionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, transaction_id: TransactionId) -> Transaction | None:
        row = await self.db.get(TransactionModel, transaction_id)
        return transaction_from_row(row) if row else None

    async def get_mirror(self, loan_id: LoanId) -> Transaction | None:
        result = await self.db.execute(
            select(TransactionModel)
            .where(TransactionModel.loan_id == loan_id)
            .where(TransactionModel.loan_record_id.is_(None))
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return transaction_from_row(row) if row else None

    async def save(self, transaction: Transaction) -> None:
        row = await self.db.get(TransactionModel, transaction.id)
        if row is None:
            row = TransactionModel(id=transaction.id)
            self.db.add(row)
        row.account_id = transaction.account_id
        row.amount = transaction.amount
        row.type = transaction.type.value
        row.title = transaction.title
        if transaction.date_time is not None:
            row.date_time = transaction.date_time
        row.loan_id = transaction.loan_id
        row.loan_record_id = transaction.loan_record_id
        await self.db.commit()

    async def delete_by_loan(self, loan_id: LoanId) -> int:
        result = await self.db.execute(
            delete(TransactionModel).where(TransactionModel.loan_id == loan_id),
        )
        await self.db.commit()
        return result.rowcount or 0

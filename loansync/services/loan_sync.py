"""Loan Sync Wiring — builds the three sync components over one DB session.

Invariants:
    - All components of one LoanSync share the same session and repositories
    - Base currency and concurrency come from Settings, passed in explicitly

Design Decisions:
    - Components instantiated per request with shared context, like handlers
      under a dispatcher; nothing here is cached across requests
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from loansync.config import Settings
from loansync.infrastructure.currency_converter import ExchangeRateConverter
from loansync.infrastructure.repositories import (
    SqlAccountRepository, SqlLoanRecordRepository, SqlLoanRepository,
    SqlTransactionRepository,
)
from loansync.services.loan_record_recalculator import LoanRecordRecalculator
from loansync.services.loan_update_propagator import LoanUpdatePropagator
from loansync.services.transaction_synchronizer import AssociatedTransactionSynchronizer


@dataclass
class LoanSync:
    accounts: SqlAccountRepository
    loans: SqlLoanRepository
    loan_records: SqlLoanRecordRepository
    transactions: SqlTransactionRepository
    synchronizer: AssociatedTransactionSynchronizer
    propagator: LoanUpdatePropagator


def build_loan_sync(db: AsyncSession, settings: Settings) -> LoanSync:
    accounts = SqlAccountRepository(db)
    loans = SqlLoanRepository(db)
    loan_records = SqlLoanRecordRepository(db)
    transactions = SqlTransactionRepository(db)
    recalculator = LoanRecordRecalculator(
        accounts,
        loan_records,
        ExchangeRateConverter(db, settings.base_currency),
        concurrency=settings.conversion_concurrency,
    )
    return LoanSync(
        accounts=accounts,
        loans=loans,
        loan_records=loan_records,
        transactions=transactions,
        synchronizer=AssociatedTransactionSynchronizer(transactions),
        propagator=LoanUpdatePropagator(
            accounts, loans, loan_records, recalculator, settings.base_currency,
        ),
    )

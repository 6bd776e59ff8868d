"""Loan Update Propagator — carries edits of a mirror transaction back onto its loan.

Invariants:
    - A transaction without a loan link is a complete no-op: no on_start, no writes
    - on_start is awaited only once real work begins (the transaction is linked)
    - on_end is awaited on every call, from a finally block — including the
      unlinked short-circuit, a missing loan, and collaborator failures
    - When accounts changed, recalculated records are saved BEFORE the loan
    - Recalculation is skipped when old and new accounts resolve to one currency
      (absent accounts resolve to the base currency)
    - Missing loans are silent no-ops; persistence failures propagate

Design Decisions:
    - Two-phase hook protocol (begin only on work, end always): callers can pair
      end with a spinner shown optimistically, without tracking which path ran
    - Field mapping lives in core/loan_mirroring.py so it is tested without IO
"""

import logging

from loansync.core.domain_types import AccountId, LoanId
from loansync.core.entities import Transaction
from loansync.core.loan_mirroring import currency_changed, loan_from_transaction
from loansync.core.repository_protocols import (
    AccountRepository, BackgroundHook, LoanRecordRepository, LoanRepository,
)
from loansync.services.loan_record_recalculator import LoanRecordRecalculator

logger = logging.getLogger(__name__)


class LoanUpdatePropagator:
    """Keeps a loan equal to its edited mirror transaction."""

    def __init__(
        self,
        accounts: AccountRepository,
        loans: LoanRepository,
        loan_records: LoanRecordRepository,
        recalculator: LoanRecordRecalculator,
        base_currency: str,
    ):
        self.accounts = accounts
        self.loans = loans
        self.loan_records = loan_records
        self.recalculator = recalculator
        self.base_currency = base_currency

    async def update_associated_loan(
        self,
        transaction: Transaction | None,
        on_start: BackgroundHook | None = None,
        on_end: BackgroundHook | None = None,
        accounts_changed: bool = True,
    ) -> None:
        try:
            if transaction is None or transaction.loan_id is None:
                return
            if on_start:
                await on_start()
            await self._apply(transaction, transaction.loan_id, accounts_changed)
        finally:
            if on_end:
                await on_end()

    async def _apply(
        self, transaction: Transaction, loan_id: LoanId, accounts_changed: bool,
    ) -> None:
        loan = await self.loans.get(loan_id)
        if loan is None:
            logger.info(
                "Linked loan not found, skipping update",
                extra={"loan_id": loan_id, "transaction_id": transaction.id},
            )
            return

        if accounts_changed:
            records = await self.recalculator.recalculate(
                loan_id, transaction.account_id,
            )
            await self.loan_records.save_all(records)

        await self.loans.save(loan_from_transaction(loan, transaction))
        logger.info(
            "Loan updated from transaction",
            extra={"loan_id": loan_id, "transaction_id": transaction.id},
        )

    async def recalculate_loan_records(
        self,
        old_account_id: AccountId | None,
        new_account_id: AccountId | None,
        loan_id: LoanId,
    ) -> None:
        if old_account_id == new_account_id:
            return
        accounts = await self.accounts.get_all()
        if not currency_changed(
            old_account_id, new_account_id, accounts, self.base_currency,
        ):
            return

        records = await self.recalculator.recalculate(loan_id, new_account_id)
        await self.loan_records.save_all(records)

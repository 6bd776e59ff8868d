"""Associated Transaction Synchronizer — writes, refreshes and removes a loan's mirror transaction.

Invariants:
    - At most one mirror transaction per loan (loan_id set, loan_record_id unset)
    - A mirror always carries the loan's amount, name and account; its type
      follows the loan type (BORROW -> INCOME, LEND -> EXPENSE)
    - No account, no mirror: a loan without a backing account gets no transaction
    - Deleting when nothing is linked is a no-op, not an error

Design Decisions:
    - Callers pass the existing mirror to edit_associated_transaction (they
      already loaded it to render the loan); the synchronizer never guesses
    - Existing mirror keeps its id and timestamp, so ledger ordering is stable
"""

import logging

from loansync.core.domain_types import AccountId, LoanId, LoanType
from loansync.core.entities import CreateLoanData, Loan, Transaction
from loansync.core.loan_mirroring import mirror_transaction
from loansync.core.repository_protocols import TransactionRepository

logger = logging.getLogger(__name__)


class AssociatedTransactionSynchronizer:
    """Maintains the one-to-one mirror between a loan and a transaction."""

    def __init__(self, transactions: TransactionRepository):
        self.transactions = transactions

    async def create_associated_transaction(
        self, data: CreateLoanData, loan_id: LoanId,
    ) -> Transaction | None:
        if not data.create_loan_transaction:
            return None
        return await self._write_mirror(
            loan_id=loan_id,
            amount=data.amount,
            loan_type=data.type,
            account_id=data.account_id,
            title=data.name,
        )

    async def edit_associated_transaction(
        self,
        loan: Loan,
        create_if_missing: bool = False,
        transaction: Transaction | None = None,
    ) -> Transaction | None:
        if transaction is None and not create_if_missing:
            return None
        return await self._write_mirror(
            loan_id=loan.id,
            amount=loan.amount,
            loan_type=loan.type,
            account_id=loan.account_id,
            title=loan.name,
            existing=transaction,
        )

    async def delete_associated_transactions(self, loan_id: LoanId) -> None:
        deleted = await self.transactions.delete_by_loan(loan_id)
        if deleted:
            logger.info(
                "Deleted %d loan transaction(s)", deleted,
                extra={"loan_id": loan_id},
            )

    async def _write_mirror(
        self,
        loan_id: LoanId,
        amount: float,
        loan_type: LoanType,
        account_id: AccountId | None,
        title: str,
        existing: Transaction | None = None,
    ) -> Transaction | None:
        if account_id is None:
            logger.warning(
                "Loan has no account, mirror transaction not written",
                extra={"loan_id": loan_id},
            )
            return None
        transaction = mirror_transaction(
            loan_id=loan_id,
            amount=amount,
            loan_type=loan_type,
            account_id=account_id,
            title=title,
            existing=existing,
            date_time=existing.date_time if existing else None,
        )
        await self.transactions.save(transaction)
        logger.info(
            "Mirror transaction %s", "updated" if existing else "created",
            extra={"loan_id": loan_id, "transaction_id": transaction.id},
        )
        return transaction

"""Transaction Routes — edit a ledger transaction and carry the edit onto its loan.

Invariants:
    - The transaction is saved before the loan is touched
    - Only a loan's mirror (loan_id set, loan_record_id unset) updates the loan;
      record-level transactions are saved and nothing else
    - Mirror edits run under the loan's lock
    - accounts_changed is true exactly when the edit moved the transaction to another account

Design Decisions:
    - Background hooks only log here; a UI client polls GET /loans/{id} (syncing flag)
"""

import logging
from dataclasses import replace
from uuid import UUID

from fastapi import APIRouter, Depends

from loansync.api.dependencies import get_loan_sync, require_account
from loansync.core.domain_types import AccountId, TransactionId
from loansync.core.errors import ErrorContext, ResourceNotFoundError
from loansync.schemas.loan import TransactionResponse, TransactionUpdate
from loansync.services.loan_locks import loan_locks
from loansync.services.loan_sync import LoanSync

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


@router.put("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: UUID,
    body: TransactionUpdate,
    sync: LoanSync = Depends(get_loan_sync),
):
    """Edit a transaction; if it mirrors a loan, update the loan to match."""
    existing = await sync.transactions.get(TransactionId(transaction_id))
    if existing is None:
        raise ResourceNotFoundError(
            "Transaction", str(transaction_id),
            ErrorContext(transaction_id=str(transaction_id)),
        )
    await require_account(AccountId(body.account_id), sync)

    transaction = replace(
        existing,
        account_id=AccountId(body.account_id),
        amount=body.amount,
        type=body.type,
        title=body.title,
        date_time=body.date_time or existing.date_time,
    )

    if not transaction.is_loan_mirror:
        await sync.transactions.save(transaction)
        return TransactionResponse.from_entity(transaction)

    async def on_start():
        logger.info(
            "Loan sync started",
            extra={"loan_id": transaction.loan_id, "transaction_id": transaction.id},
        )

    async def on_end():
        logger.info("Loan sync finished", extra={"transaction_id": transaction.id})

    async with loan_locks.hold(transaction.loan_id):
        await sync.transactions.save(transaction)
        await sync.propagator.update_associated_loan(
            transaction,
            on_start=on_start,
            on_end=on_end,
            accounts_changed=existing.account_id != transaction.account_id,
        )
    return TransactionResponse.from_entity(transaction)

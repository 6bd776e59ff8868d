"""Loan Routes — create, read, edit and delete loans, keeping their mirror transactions in step.

Invariants:
    - Every edit/delete runs under the loan's lock (services/loan_locks.py):
      one sync sequence per loan at a time
    - Edit order: save loan -> refresh mirror -> recalculate records
    - Delete order: remove linked transactions -> remove loan (records cascade)
    - Unknown loan or account ids → 404 ResourceNotFoundError carrying the id

Design Decisions:
    - Mirror looked up here and handed to the synchronizer: the synchronizer
      only writes what it's given
"""

import logging
from dataclasses import replace
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, Response, status

from loansync.api.dependencies import get_loan_sync, require_account
from loansync.core.domain_types import AccountId, LoanId
from loansync.core.entities import CreateLoanData, Loan
from loansync.core.errors import ErrorContext, ResourceNotFoundError
from loansync.schemas.loan import LoanCreate, LoanResponse, LoanUpdate
from loansync.services.loan_locks import loan_locks
from loansync.services.loan_sync import LoanSync

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/loans", tags=["loans"])


async def get_loan_or_404(loan_id: UUID, sync: LoanSync) -> Loan:
    loan = await sync.loans.get(LoanId(loan_id))
    if loan is None:
        raise ResourceNotFoundError(
            "Loan", str(loan_id), ErrorContext(loan_id=str(loan_id)),
        )
    return loan


@router.post(
    "", response_model=LoanResponse, status_code=status.HTTP_201_CREATED,
)
async def create_loan(
    body: LoanCreate, sync: LoanSync = Depends(get_loan_sync),
):
    """Create a loan and, when requested, its mirror transaction."""
    data = CreateLoanData(
        name=body.name,
        amount=body.amount,
        type=body.type,
        account_id=AccountId(body.account_id) if body.account_id else None,
        create_loan_transaction=body.create_loan_transaction,
    )
    if data.account_id is not None:
        await require_account(data.account_id, sync)
    loan = Loan(
        id=LoanId(uuid4()),
        name=data.name,
        amount=data.amount,
        type=data.type,
        account_id=data.account_id,
    )
    await sync.loans.save(loan)
    await sync.synchronizer.create_associated_transaction(data, loan.id)
    logger.info("Loan created", extra={"loan_id": loan.id})
    return LoanResponse.from_entity(loan)


@router.get("/{loan_id}", response_model=LoanResponse)
async def get_loan(loan_id: UUID, sync: LoanSync = Depends(get_loan_sync)):
    """Loan with its records; syncing=True while a sync sequence holds it."""
    loan = await get_loan_or_404(loan_id, sync)
    records = await sync.loan_records.get_by_loan(loan.id)
    return LoanResponse.from_entity(
        loan, records, syncing=loan_locks.is_held(loan.id),
    )


@router.put("/{loan_id}", response_model=LoanResponse)
async def update_loan(
    loan_id: UUID, body: LoanUpdate, sync: LoanSync = Depends(get_loan_sync),
):
    """Edit a loan, refresh its mirror transaction and re-convert its records."""
    async with loan_locks.hold(LoanId(loan_id)):
        old = await get_loan_or_404(loan_id, sync)
        if body.account_id is not None:
            await require_account(AccountId(body.account_id), sync)
        loan = replace(
            old,
            name=body.name,
            amount=body.amount,
            type=body.type,
            account_id=AccountId(body.account_id) if body.account_id else None,
        )
        await sync.loans.save(loan)

        mirror = await sync.transactions.get_mirror(loan.id)
        await sync.synchronizer.edit_associated_transaction(
            loan,
            create_if_missing=body.create_loan_transaction,
            transaction=mirror,
        )
        await sync.propagator.recalculate_loan_records(
            old.account_id, loan.account_id, loan.id,
        )
        records = await sync.loan_records.get_by_loan(loan.id)
    return LoanResponse.from_entity(loan, records)


@router.delete("/{loan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_loan(loan_id: UUID, sync: LoanSync = Depends(get_loan_sync)):
    """Delete a loan and every transaction linked to it."""
    async with loan_locks.hold(LoanId(loan_id)):
        loan = await get_loan_or_404(loan_id, sync)
        await sync.synchronizer.delete_associated_transactions(loan.id)
        await sync.loans.delete(loan.id)
    logger.info("Loan deleted", extra={"loan_id": loan.id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)

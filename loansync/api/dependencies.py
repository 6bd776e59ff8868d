"""Route Dependencies — per-request wiring of the loan sync services."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from loansync.config import get_settings
from loansync.core.domain_types import AccountId
from loansync.core.entities import Account
from loansync.core.errors import ErrorContext, ResourceNotFoundError
from loansync.infrastructure.database import get_db
from loansync.services.loan_sync import LoanSync, build_loan_sync


async def get_loan_sync(db: AsyncSession = Depends(get_db)) -> LoanSync:
    return build_loan_sync(db, get_settings())


async def require_account(account_id: AccountId, sync: LoanSync) -> Account:
    """404 unless the account exists; mirrors and loans may only point at real accounts."""
    account = await sync.accounts.get(account_id)
    if account is None:
        raise ResourceNotFoundError(
            "Account", str(account_id), ErrorContext(account_id=str(account_id)),
        )
    return account

"""Loan & Transaction Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - Names and titles are stripped; loan names cannot be blank
    - Amounts are strictly positive
    - type fields accept only the enum values of core/domain_types

Design Decisions:
    - Enum-typed fields: Pydantic rejects unknown directions before the route runs
    - Responses built from core entities, never from ORM rows
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from loansync.core.domain_types import LoanType, TransactionType
from loansync.core.entities import Loan, LoanRecord, Transaction


class LoanCreate(BaseModel):
    """Loan creation — optionally writes the mirror transaction."""
    name: str = Field(min_length=1, max_length=200)
    amount: float = Field(gt=0)
    type: LoanType
    account_id: UUID | None = None
    create_loan_transaction: bool = False

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class LoanUpdate(LoanCreate):
    """Loan edit — create_loan_transaction creates a missing mirror."""


class TransactionUpdate(BaseModel):
    account_id: UUID
    amount: float = Field(gt=0)
    type: TransactionType
    title: str | None = Field(None, max_length=200)
    date_time: datetime | None = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None


class LoanRecordResponse(BaseModel):
    id: UUID
    amount: float
    account_id: UUID | None
    converted_amount: float | None
    note: str | None = None

    @classmethod
    def from_entity(cls, record: LoanRecord) -> "LoanRecordResponse":
        return cls(
            id=record.id,
            amount=record.amount,
            account_id=record.account_id,
            converted_amount=record.converted_amount,
            note=record.note,
        )


class LoanResponse(BaseModel):
    id: UUID
    name: str
    amount: float
    type: LoanType
    account_id: UUID | None
    records: list[LoanRecordResponse] = []
    syncing: bool = False

    @classmethod
    def from_entity(
        cls, loan: Loan, records: list[LoanRecord] | None = None,
        syncing: bool = False,
    ) -> "LoanResponse":
        return cls(
            id=loan.id,
            name=loan.name,
            amount=loan.amount,
            type=loan.type,
            account_id=loan.account_id,
            records=[LoanRecordResponse.from_entity(r) for r in records or []],
            syncing=syncing,
        )


class TransactionResponse(BaseModel):
    id: UUID
    account_id: UUID
    amount: float
    type: TransactionType
    title: str | None
    date_time: datetime | None
    loan_id: UUID | None

    @classmethod
    def from_entity(cls, transaction: Transaction) -> "TransactionResponse":
        return cls(
            id=transaction.id,
            account_id=transaction.account_id,
            amount=transaction.amount,
            type=transaction.type,
            title=transaction.title,
            date_time=transaction.date_time,
            loan_id=transaction.loan_id,
        )

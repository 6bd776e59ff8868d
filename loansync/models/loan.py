"""Loan ORM — persists a lending or borrowing obligation.

Invariants:
    - type is "borrow" or "lend" (core/domain_types.LoanType)
    - account_id is optional: a loan without one reports in the base currency
    - Deleting a loan deletes its records (cascade); transactions are removed
      explicitly by the synchronizer before the loan goes

Design Decisions:
    - records loaded with selectin: async sessions can't lazy-load on attribute access
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Float, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from loansync.db.base import Base


class Loan(Base):
    """Loan aggregate root — owns its loan records."""
    __tablename__ = "loans"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    account_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("accounts.id"), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    records: Mapped[list["LoanRecord"]] = relationship(
        "LoanRecord", back_populates="loan",
        cascade="all, delete-orphan", lazy="selectin",
    )

"""LoanRecord ORM — a partial payment or settlement against a loan.

Invariants:
    - Always belongs to a Loan (loan_id FK)
    - amount is in the record's own account currency
    - converted_amount is in the loan's backing-account currency, NULL when no
      conversion is required or no rate was available
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Float, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from loansync.db.base import Base


class LoanRecord(Base):
    __tablename__ = "loan_records"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    loan_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("loans.id"), nullable=False,
    )
    account_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("accounts.id"), nullable=True,
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    converted_amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    loan: Mapped["Loan"] = relationship("Loan", back_populates="records")

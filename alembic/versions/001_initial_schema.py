"""Initial schema — accounts, loans, loan_records, transactions, exchange_rates.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False, server_default=""),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "loans",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("amount", sa.Float, nullable=False),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("account_id", UUID(as_uuid=True), sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "loan_records",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("loan_id", UUID(as_uuid=True), sa.ForeignKey("loans.id"), nullable=False),
        sa.Column("account_id", UUID(as_uuid=True), sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("amount", sa.Float, nullable=False),
        sa.Column("converted_amount", sa.Float, nullable=True),
        sa.Column("note", sa.Text, nullable=True),
        sa.Column("date_time", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "transactions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("account_id", UUID(as_uuid=True), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("amount", sa.Float, nullable=False),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("date_time", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("loan_id", UUID(as_uuid=True), sa.ForeignKey("loans.id"), nullable=True),
        sa.Column("loan_record_id", UUID(as_uuid=True), sa.ForeignKey("loan_records.id"), nullable=True),
    )
    op.create_index("ix_transactions_loan_id", "transactions", ["loan_id"])

    op.create_table(
        "exchange_rates",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("base_currency", sa.String(3), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("rate", sa.Float, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("base_currency", "currency", name="uq_exchange_rate_pair"),
    )


def downgrade() -> None:
    op.drop_table("exchange_rates")
    op.drop_index("ix_transactions_loan_id", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("loan_records")
    op.drop_table("loans")
    op.drop_table("accounts")

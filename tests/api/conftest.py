"""API test fixtures — FastAPI test client over the in-memory test database.

Invariants:
    - get_db dependency overridden to use the test session factory
    - Seed data written through its own session, so routes read it from the DB
"""

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from loansync.infrastructure.database import get_db
from loansync.main import app
from loansync.models.account import Account as AccountModel
from loansync.models.exchange_rate import ExchangeRate
from loansync.models.loan import Loan as LoanModel
from loansync.models.loan_record import LoanRecord as LoanRecordModel


@pytest.fixture
async def client(test_session_factory):
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def seed(test_session_factory):
    """USD and EUR accounts, a USD->EUR rate, and a 100 USD loan with one 40 USD record."""
    async with test_session_factory() as db:
        usd = AccountModel(name="A", currency="USD")
        eur = AccountModel(name="B", currency="EUR")
        db.add_all([usd, eur])
        db.add(ExchangeRate(base_currency="USD", currency="EUR", rate=0.9))
        await db.flush()
        loan = LoanModel(name="Car money", amount=100.0, type="lend", account_id=usd.id)
        db.add(loan)
        await db.flush()
        record = LoanRecordModel(
            loan_id=loan.id, account_id=usd.id, amount=40.0, converted_amount=None,
            date_time=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        db.add(record)
        await db.commit()
        return {"usd": usd.id, "eur": eur.id, "loan": loan.id, "record": record.id}

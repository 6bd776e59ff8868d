"""LoanUpdatePropagator — edited mirror transaction flows back onto its loan.

Invariants:
    - Unlinked (or absent) transactions: no on_start, no loan or record writes
    - on_end always fires, even on short-circuits and failures
    - Records are saved before the loan when accounts changed
    - recalculate_loan_records is a no-op when the currency doesn't change
"""

from dataclasses import replace
from uuid import uuid4

import pytest

from loansync.core.domain_types import (
    AccountId, LoanId, LoanRecordId, TransactionId, LoanType, TransactionType,
)
from loansync.core.entities import Account, Loan, LoanRecord, Transaction
from loansync.services.loan_record_recalculator import LoanRecordRecalculator
from loansync.services.loan_update_propagator import LoanUpdatePropagator

from tests.services.fakes import (
    CallLog, FakeAccounts, FakeLoanRecords, FakeLoans, RateTableConverter,
)

USD_A = Account(id=AccountId(uuid4()), currency="USD", name="A")
EUR_B = Account(id=AccountId(uuid4()), currency="EUR", name="B")
USD_C = Account(id=AccountId(uuid4()), currency="USD", name="C")
RATES = {("USD", "EUR"): 0.9}


class Hooks:
    def __init__(self, calls: CallLog):
        self.calls = calls

    async def start(self):
        self.calls.append(("on_start", None))

    async def end(self):
        self.calls.append(("on_end", None))


@pytest.fixture
def world():
    calls = CallLog()
    loan = Loan(
        id=LoanId(uuid4()), name="Car money", amount=100.0,
        type=LoanType.LEND, account_id=USD_A.id,
    )
    record = LoanRecord(
        id=LoanRecordId(uuid4()), loan_id=loan.id, amount=40.0,
        account_id=USD_A.id, converted_amount=40.0,
    )
    loans = FakeLoans([loan], calls)
    records = FakeLoanRecords([record], calls)
    accounts = FakeAccounts([USD_A, EUR_B, USD_C], calls)
    converter = RateTableConverter(RATES)
    propagator = LoanUpdatePropagator(
        accounts, loans, records,
        LoanRecordRecalculator(accounts, records, converter),
        base_currency="USD",
    )
    return {
        "calls": calls, "loan": loan, "record": record, "loans": loans,
        "records": records, "converter": converter, "propagator": propagator,
        "hooks": Hooks(calls),
    }


def _transaction(loan_id, **overrides) -> Transaction:
    fields = dict(
        id=TransactionId(uuid4()), account_id=USD_A.id, amount=100.0,
        type=TransactionType.EXPENSE, title="Car money", loan_id=loan_id,
    )
    fields.update(overrides)
    return Transaction(**fields)


# --- update_associated_loan: short-circuits ---------------------------------

@pytest.mark.parametrize("accounts_changed", [True, False])
async def test_unlinked_transaction_is_a_no_op(world, accounts_changed):
    hooks = world["hooks"]
    await world["propagator"].update_associated_loan(
        _transaction(None, account_id=EUR_B.id),
        on_start=hooks.start, on_end=hooks.end,
        accounts_changed=accounts_changed,
    )
    ops = world["calls"].ops()
    assert "on_start" not in ops
    assert "save_loan" not in ops
    assert "save_records" not in ops


async def test_end_hook_fires_even_without_loan_link(world):
    hooks = world["hooks"]
    await world["propagator"].update_associated_loan(
        None, on_start=hooks.start, on_end=hooks.end,
    )
    assert world["calls"].ops() == ["on_end"]


async def test_missing_loan_writes_nothing_but_runs_both_hooks(world):
    hooks = world["hooks"]
    await world["propagator"].update_associated_loan(
        _transaction(LoanId(uuid4())), on_start=hooks.start, on_end=hooks.end,
    )
    assert world["calls"].ops() == ["on_start", "on_end"]


async def test_hooks_are_optional(world):
    await world["propagator"].update_associated_loan(
        _transaction(world["loan"].id, amount=1.0), accounts_changed=False,
    )
    assert world["loans"].rows[world["loan"].id].amount == 1.0


# --- update_associated_loan: field propagation ------------------------------

async def test_transaction_fields_flow_onto_loan(world):
    loan = world["loan"]
    await world["propagator"].update_associated_loan(
        _transaction(
            loan.id, type=TransactionType.INCOME, amount=120.0,
            title="Paid back", account_id=USD_C.id,
        ),
        accounts_changed=False,
    )
    saved = world["loans"].rows[loan.id]
    assert saved.type == LoanType.BORROW
    assert saved.amount == 120.0
    assert saved.name == "Paid back"
    assert saved.account_id == USD_C.id


@pytest.mark.parametrize("title", ["", None])
async def test_empty_title_preserves_loan_name(world, title):
    loan = world["loan"]
    await world["propagator"].update_associated_loan(
        _transaction(loan.id, title=title), accounts_changed=False,
    )
    assert world["loans"].rows[loan.id].name == "Car money"


async def test_accounts_unchanged_skips_record_recalculation(world):
    await world["propagator"].update_associated_loan(
        _transaction(world["loan"].id), accounts_changed=False,
    )
    assert "save_records" not in world["calls"].ops()
    assert world["converter"].requests == []


async def test_records_saved_before_loan_when_accounts_changed(world):
    hooks = world["hooks"]
    await world["propagator"].update_associated_loan(
        _transaction(world["loan"].id, account_id=EUR_B.id),
        on_start=hooks.start, on_end=hooks.end, accounts_changed=True,
    )
    ops = [op for op in world["calls"].ops() if op != "get_accounts"]
    assert ops == ["on_start", "save_records", "save_loan", "on_end"]


async def test_loan_moved_to_eur_account_reconverts_records(world):
    loan, record = world["loan"], world["record"]

    await world["propagator"].update_associated_loan(
        _transaction(loan.id, account_id=EUR_B.id, amount=100.0),
        accounts_changed=True,
    )

    updated_record = world["records"].rows[record.id]
    assert updated_record.converted_amount == pytest.approx(36.0)
    assert updated_record == replace(record, converted_amount=updated_record.converted_amount)
    assert world["loans"].rows[loan.id].account_id == EUR_B.id


async def test_save_failure_propagates_and_still_ends(world):
    hooks = world["hooks"]
    world["loans"].fail_on_save = RuntimeError("db down")

    with pytest.raises(RuntimeError, match="db down"):
        await world["propagator"].update_associated_loan(
            _transaction(world["loan"].id),
            on_start=hooks.start, on_end=hooks.end, accounts_changed=False,
        )
    assert world["calls"].ops() == ["on_start", "on_end"]


# --- recalculate_loan_records ----------------------------------------------

async def test_same_account_makes_no_writes(world):
    await world["propagator"].recalculate_loan_records(
        USD_A.id, USD_A.id, world["loan"].id,
    )
    assert "save_records" not in world["calls"].ops()


async def test_both_accounts_unset_makes_no_writes(world):
    await world["propagator"].recalculate_loan_records(None, None, world["loan"].id)
    assert "save_records" not in world["calls"].ops()


async def test_same_currency_accounts_make_no_writes(world):
    await world["propagator"].recalculate_loan_records(
        USD_A.id, USD_C.id, world["loan"].id,
    )
    assert "save_records" not in world["calls"].ops()


async def test_unset_account_resolves_to_base_currency(world):
    await world["propagator"].recalculate_loan_records(
        None, USD_A.id, world["loan"].id,
    )
    assert "save_records" not in world["calls"].ops()


async def test_currency_change_saves_recalculated_records(world):
    await world["propagator"].recalculate_loan_records(
        USD_A.id, EUR_B.id, world["loan"].id,
    )
    assert world["calls"].ops().count("save_records") == 1
    saved = world["records"].rows[world["record"].id]
    assert saved.converted_amount == pytest.approx(36.0)
    assert "save_loan" not in world["calls"].ops()

"""LoanRecordRecalculator — fan-out conversion over every record of a loan.

Invariants:
    - N records in, N records out; only converted_amount changes
    - A missing rate nulls that record only
    - Other failures propagate, but only after every sibling finished
    - In-flight conversions never exceed the configured concurrency
"""

from dataclasses import replace
from uuid import uuid4

import pytest

from loansync.core.domain_types import AccountId, LoanId, LoanRecordId
from loansync.core.entities import Account, LoanRecord
from loansync.core.errors import ConversionUnavailableError
from loansync.services.loan_record_recalculator import LoanRecordRecalculator

from tests.services.fakes import (
    CallLog, FakeAccounts, FakeLoanRecords, RateTableConverter, ScriptedConverter,
)

USD = Account(id=AccountId(uuid4()), currency="USD")
EUR = Account(id=AccountId(uuid4()), currency="EUR")
LOAN_ID = LoanId(uuid4())


def _records(*amounts: float, account: Account = USD) -> list[LoanRecord]:
    return [
        LoanRecord(
            id=LoanRecordId(uuid4()), loan_id=LOAN_ID, amount=amount,
            account_id=account.id, converted_amount=amount, note=f"r{i}",
        )
        for i, amount in enumerate(amounts)
    ]


def _recalculator(records, converter, concurrency=8):
    calls = CallLog()
    return LoanRecordRecalculator(
        FakeAccounts([USD, EUR], calls),
        FakeLoanRecords(records, calls),
        converter,
        concurrency=concurrency,
    )


async def test_output_matches_input_except_converted_amount():
    records = _records(10.0, 20.0, 30.0)
    recalculator = _recalculator(records, ScriptedConverter(lambda r: r.new.amount * 2))

    result = await recalculator.recalculate(LOAN_ID, EUR.id)

    assert len(result) == 3
    for before, after in zip(records, result):
        assert after == replace(before, converted_amount=before.amount * 2)


async def test_missing_rate_nulls_only_that_record():
    records = _records(10.0, 20.0, 30.0)

    def answer(request):
        if request.new.amount == 20.0:
            raise ConversionUnavailableError("USD", "EUR")
        return request.new.amount + 1

    result = await _recalculator(records, ScriptedConverter(answer)).recalculate(
        LOAN_ID, EUR.id,
    )

    assert [r.converted_amount for r in result] == [11.0, None, 31.0]


async def test_converter_returning_none_is_kept_as_none():
    records = _records(5.0, 6.0)
    converter = ScriptedConverter(lambda r: None if r.new.amount == 5.0 else 60.0)

    result = await _recalculator(records, converter).recalculate(LOAN_ID, EUR.id)

    assert [r.converted_amount for r in result] == [None, 60.0]


async def test_unexpected_failure_propagates_after_siblings_finish():
    records = _records(1.0, 2.0, 3.0)

    def answer(request):
        if request.new.amount == 1.0:
            raise RuntimeError("rate service down")
        return request.new.amount

    converter = ScriptedConverter(answer)
    with pytest.raises(RuntimeError, match="rate service down"):
        await _recalculator(records, converter).recalculate(LOAN_ID, EUR.id)
    assert len(converter.requests) == 3
    assert converter.in_flight == 0


async def test_requests_target_new_loan_account_with_unchanged_record_basis():
    records = _records(40.0)
    converter = ScriptedConverter(lambda r: 36.0)

    await _recalculator(records, converter).recalculate(LOAN_ID, EUR.id)

    (request,) = converter.requests
    assert request.loan_account_id == EUR.id
    assert request.old.account_id == request.new.account_id == USD.id
    assert request.old.amount == request.new.amount == 40.0
    assert request.old.converted_amount == 40.0
    assert {a.id for a in request.accounts} == {USD.id, EUR.id}


async def test_concurrency_is_bounded():
    records = _records(*[float(i) for i in range(10)])
    converter = ScriptedConverter(lambda r: r.new.amount)

    await _recalculator(records, converter, concurrency=3).recalculate(LOAN_ID, EUR.id)

    assert len(converter.requests) == 10
    assert 1 < converter.max_in_flight <= 3


async def test_no_records_returns_empty_list():
    converter = ScriptedConverter(lambda r: 1.0)
    assert await _recalculator([], converter).recalculate(LOAN_ID, EUR.id) == []
    assert converter.requests == []


async def test_records_in_loan_currency_convert_to_none():
    records = _records(10.0, account=EUR)
    converter = RateTableConverter({("USD", "EUR"): 0.9})

    (result,) = await _recalculator(records, converter).recalculate(LOAN_ID, EUR.id)

    assert result.converted_amount is None

"""Loan Record Recalculator — recomputes converted amounts when a loan changes currency.

Invariants:
    - N records in -> N records out, same order, only converted_amount differs
    - One conversion task per record, all joined before returning (fan-out / fan-in)
    - A missing rate sets that record's converted_amount to None; siblings are unaffected
    - Any other failure is raised only after every sibling task has finished
    - In-flight conversions are bounded by `concurrency`

Design Decisions:
    - Accounts fetched once per pass and shared by all tasks (read-only)
    - Old and new record basis are identical here: only the loan-level target
      account moves, a record keeps its own account and amount
    - asyncio.gather(return_exceptions=True): no task cancels its siblings
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import replace

from loansync.core.domain_types import AccountId, LoanId
from loansync.core.entities import Account, LoanRecord
from loansync.core.errors import ConversionUnavailableError
from loansync.core.repository_protocols import (
    AccountRepository, ConversionRequest, CurrencyConverter,
    LoanRecordRepository, RecordBasis,
)

logger = logging.getLogger(__name__)


class LoanRecordRecalculator:
    """Re-expresses every record of a loan in a new backing-account currency."""

    def __init__(
        self,
        accounts: AccountRepository,
        loan_records: LoanRecordRepository,
        converter: CurrencyConverter,
        concurrency: int = 8,
    ):
        self.accounts = accounts
        self.loan_records = loan_records
        self.converter = converter
        self._concurrency = max(1, concurrency)

    async def recalculate(
        self, loan_id: LoanId, new_account_id: AccountId | None,
    ) -> list[LoanRecord]:
        """Return the loan's records with converted amounts for `new_account_id`."""
        records = await self.loan_records.get_by_loan(loan_id)
        if not records:
            return []
        accounts = await self.accounts.get_all()
        semaphore = asyncio.Semaphore(self._concurrency)

        async def convert(record: LoanRecord) -> LoanRecord:
            async with semaphore:
                converted = await self._converted_amount(
                    record, new_account_id, accounts,
                )
            return replace(record, converted_amount=converted)

        results = await asyncio.gather(
            *(convert(record) for record in records), return_exceptions=True,
        )
        failure = next((r for r in results if isinstance(r, BaseException)), None)
        if failure is not None:
            raise failure

        logger.info(
            "Recalculated loan records",
            extra={"loan_id": loan_id, "account_id": new_account_id,
                   "record_count": len(results)},
        )
        return list(results)

    async def _converted_amount(
        self,
        record: LoanRecord,
        new_account_id: AccountId | None,
        accounts: Sequence[Account],
    ) -> float | None:
        basis = RecordBasis(
            account_id=record.account_id,
            amount=record.amount,
            converted_amount=record.converted_amount,
        )
        try:
            return await self.converter.compute_converted_amount(
                ConversionRequest(
                    old=basis,
                    new=RecordBasis(account_id=record.account_id, amount=record.amount),
                    loan_account_id=new_account_id,
                    accounts=accounts,
                ),
            )
        except ConversionUnavailableError as e:
            logger.warning(
                "No rate for loan record %s: %s", record.id, e.message,
                extra={"loan_id": record.loan_id},
            )
            return None

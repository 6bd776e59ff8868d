"""Exchange-Rate Converter — CurrencyConverter backed by the exchange_rates table.

Invariants:
    - Rates are read at most once per converter instance
    - Concurrent first calls share one query (asyncio.Lock), so the fan-out in
      the recalculator never issues concurrent statements on the shared session
    - Missing rates surface as ConversionUnavailableError (core/exchange.py)

Design Decisions:
    - Converter lives per request: rates are as fresh as the request that reads them
    - Math stays in core/exchange.py; this module only does IO
"""

import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from loansync.core.exchange import RateTable, converted_amount_for
from loansync.core.repository_protocols import ConversionRequest
from loansync.models.exchange_rate import ExchangeRate

logger = logging.getLogger(__name__)


class ExchangeRateConverter:
    """Computes loan-record converted amounts from stored rates."""

    def __init__(self, db: AsyncSession, base_currency: str):
        self.db = db
        self.base_currency = base_currency
        self._rates: RateTable | None = None
        self._lock = asyncio.Lock()

    async def compute_converted_amount(
        self, request: ConversionRequest,
    ) -> float | None:
        rates = await self._load_rates()
        return converted_amount_for(request, rates, self.base_currency)

    async def _load_rates(self) -> RateTable:
        async with self._lock:
            if self._rates is None:
                result = await self.db.execute(select(ExchangeRate))
                self._rates = {
                    (row.base_currency, row.currency): row.rate
                    for row in result.scalars().all()
                }
                logger.debug("Loaded %d exchange rates", len(self._rates))
            return self._rates

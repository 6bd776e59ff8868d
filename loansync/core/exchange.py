"""Exchange Math — converts amounts between currencies from a table of rates.

Invariants:
    - A rate (base, currency) -> r means 1 unit of `base` buys r units of `currency`
    - Same-currency conversion never needs a rate
    - Lookup order: direct rate, inverse rate, cross rate via the base currency
    - Zero rates are treated as missing (no division by zero)

Design Decisions:
    - Rates passed in as a plain mapping: the shell decides where they come from
      (DB table, static defaults, a live provider)
"""

from collections.abc import Mapping

from loansync.core.errors import ConversionUnavailableError
from loansync.core.repository_protocols import ConversionRequest
from loansync.core.loan_mirroring import resolve_currency

RateTable = Mapping[tuple[str, str], float]


def exchange_rate(
    rates: RateTable, from_currency: str, to_currency: str, base_currency: str,
) -> float:
    """Rate turning one unit of `from_currency` into `to_currency`."""
    if from_currency == to_currency:
        return 1.0

    direct = rates.get((from_currency, to_currency))
    if direct:
        return direct

    inverse = rates.get((to_currency, from_currency))
    if inverse:
        return 1.0 / inverse

    from_rate = 1.0 if from_currency == base_currency else rates.get((base_currency, from_currency))
    to_rate = 1.0 if to_currency == base_currency else rates.get((base_currency, to_currency))
    if from_rate and to_rate:
        return to_rate / from_rate

    raise ConversionUnavailableError(from_currency, to_currency)


def exchange(
    rates: RateTable, amount: float, from_currency: str, to_currency: str,
    base_currency: str,
) -> float:
    return amount * exchange_rate(rates, from_currency, to_currency, base_currency)


def converted_amount_for(
    request: ConversionRequest, rates: RateTable, base_currency: str,
) -> float | None:
    """Loan-currency value of a record, None when the record is already in it.

    Raises ConversionUnavailableError when the currencies are not linked by any rate.
    """
    record_currency = resolve_currency(
        request.new.account_id, request.accounts, base_currency,
    )
    loan_currency = resolve_currency(
        request.loan_account_id, request.accounts, base_currency,
    )
    if record_currency == loan_currency:
        return None
    return exchange(
        rates, request.new.amount, record_currency, loan_currency, base_currency,
    )

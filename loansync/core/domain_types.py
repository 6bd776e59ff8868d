"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - AccountId, LoanId, LoanRecordId, TransactionId wrap UUIDs — never use bare UUID in domain logic
    - Currency codes are 3-letter upper-case ISO 4217 strings
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and DB columns without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

AccountId = NewType("AccountId", UUID)
LoanId = NewType("LoanId", UUID)
LoanRecordId = NewType("LoanRecordId", UUID)
TransactionId = NewType("TransactionId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

CurrencyCode = NewType("CurrencyCode", str)     # "USD", "EUR", ...


# ─── Enums ───────────────────────────────────────────────────────

class LoanType(str, Enum):
    """Direction of a loan from the user's point of view."""
    BORROW = "borrow"
    LEND = "lend"


class TransactionType(str, Enum):
    """Ledger direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


def normalize_currency(value: str) -> CurrencyCode:
    """Upper-case and validate an ISO 4217 code."""
    normalized = value.strip().upper()
    if len(normalized) != 3 or not normalized.isalpha():
        raise ValueError("Currency must be a 3-letter ISO 4217 code.")
    return CurrencyCode(normalized)

"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Loan is the aggregate root for loan records; transactions link to it by loan_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from loansync.models.account import Account  # noqa: F401
from loansync.models.loan import Loan  # noqa: F401
from loansync.models.loan_record import LoanRecord  # noqa: F401
from loansync.models.transaction import Transaction  # noqa: F401
from loansync.models.exchange_rate import ExchangeRate  # noqa: F401

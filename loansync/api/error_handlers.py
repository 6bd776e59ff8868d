"""Error Handlers — map loansync failures onto the JSON error envelope.

Invariants:
    - Every error response has the LoanSyncError.to_response() shape, unhandled
      exceptions included (code INTERNAL_ERROR, empty context)
    - Log records carry the loan/transaction/account ids from ErrorContext
    - A ConversionUnavailableError that escapes a converter → 422 naming both currencies
    - 4xx logged as warning, 5xx as error

Design Decisions:
    - Validation field paths drop the request location ("body.amount" → "amount");
      clients only ever send JSON bodies and path ids
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from loansync.core.errors import (
    ConversionUnavailableError, ErrorCategory, ErrorSeverity, LoanSyncError,
)

logger = logging.getLogger(__name__)

_REQUEST_LOCATIONS = {"body", "path", "query"}


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ConversionUnavailableError, _conversion_unavailable)
    app.add_exception_handler(LoanSyncError, _loansync_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unhandled_error)


def _log_extra(request: Request, exc: LoanSyncError) -> dict:
    extra = {"error_code": exc.code, "path": request.url.path}
    for key in ("loan_id", "transaction_id", "account_id"):
        value = getattr(exc.context, key)
        if value is not None:
            extra[key] = value
    return extra


async def _loansync_error(request: Request, exc: LoanSyncError):
    log = logger.warning if exc.http_status < 500 else logger.error
    log(exc.message, extra=_log_extra(request, exc))
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def _conversion_unavailable(request: Request, exc: ConversionUnavailableError):
    """Converters are expected to absorb this per record; reaching here means one did not."""
    logger.warning(
        "Conversion %s->%s escaped the record recalculation",
        exc.from_currency, exc.to_currency,
        extra=_log_extra(request, exc),
    )
    content = exc.to_response()
    content["error"]["currencies"] = {
        "from": exc.from_currency, "to": exc.to_currency,
    }
    return JSONResponse(status_code=exc.http_status, content=content)


async def _validation_error(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(
                str(loc) for i, loc in enumerate(e["loc"])
                if not (i == 0 and loc in _REQUEST_LOCATIONS)
            ),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.warning(
        "Rejected request: %s",
        ", ".join(d["field"] for d in details),
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    error = LoanSyncError(
        "Invalid request data", "VALIDATION_ERROR", ErrorCategory.VALIDATION,
        http_status=status.HTTP_400_BAD_REQUEST,
    )
    content = error.to_response()
    content["error"]["details"] = details
    return JSONResponse(status_code=error.http_status, content=content)


async def _unhandled_error(request: Request, exc: Exception):
    logger.error(
        "Unhandled %s", type(exc).__name__,
        exc_info=exc,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    error = LoanSyncError(
        "An unexpected error occurred", "INTERNAL_ERROR", ErrorCategory.INTERNAL,
        ErrorSeverity.CRITICAL,
    )
    return JSONResponse(status_code=error.http_status, content=error.to_response())

"""HTTP error rendering

Every error response has the body {"error": {"code": ..., "message": ...}}.
"""

import logging
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from src.domain.errors import LedgerError, PricingConfigurationError

logger = logging.getLogger(__name__)


class ClientError(Exception):
    """Request-level failure raised by a route"""

    def __init__(self, error: LedgerError, status_code: Optional[int] = None):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code or error.status_code


def _error_response(error: LedgerError, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error.to_dict()})


async def client_error_handler(request: Request, exc: ClientError):
    return _error_response(exc.error, exc.status_code)


async def ledger_error_handler(request: Request, exc: LedgerError):
    detail = f" ({exc.reason})" if exc.reason else ""
    if isinstance(exc, PricingConfigurationError):
        logger.error(f"Pricing configuration error on {request.method} {request.url.path}: {exc.message}{detail}")
    else:
        logger.info(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}{detail}")
    return _error_response(exc, exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ClientError, client_error_handler)
    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

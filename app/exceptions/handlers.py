import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import (
    BookingNotFoundError,
    InvalidStateError,
    StoreUnavailableError,
    SuggestionExpiredError,
    SuggestionNotFoundError,
)

logger = logging.getLogger(__name__)


async def not_found_error_handler(
    _request: Request, exc: BookingNotFoundError | SuggestionNotFoundError,
) -> JSONResponse:
    logger.info("Not found: %s", exc.message)
    return JSONResponse(status_code=404, content={"detail": exc.message})


async def invalid_state_error_handler(_request: Request, exc: InvalidStateError) -> JSONResponse:
    logger.info("Invalid state: %s", exc.message)
    return JSONResponse(
        status_code=409,
        content={"detail": exc.message, "status": exc.status},
    )


async def suggestion_expired_error_handler(
    _request: Request, exc: SuggestionExpiredError,
) -> JSONResponse:
    logger.info("Expired: %s", exc.message)
    return JSONResponse(
        status_code=410,
        content={"detail": exc.message, "expires_at": exc.expires_at.isoformat()},
    )


async def store_unavailable_error_handler(
    _request: Request, exc: StoreUnavailableError,
) -> JSONResponse:
    logger.error("Store error: %s (store=%s)", exc.message, exc.store)
    return JSONResponse(
        status_code=503,
        content={"detail": f"{exc.store} unavailable: {exc.message}"},
    )

"""Exception handlers mapping domain errors to HTTP responses.

Validation and authorization failures carry specific messages. Collaborator
and unexpected failures get a generic retry message; the cause is logged.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from ordering.errors import (
    AuthorizationError,
    CollaboratorError,
    PricingInvariantError,
    StaleOrderError,
)

logger = structlog.get_logger(__name__)

RETRY_MESSAGE = "Something went wrong. Please try again."


async def _validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"errors": exc.messages})


async def _authorization_error(request: Request, exc: AuthorizationError):
    return JSONResponse(status_code=403, content={"detail": str(exc)})


async def _not_found(request: Request, exc: ObjectNotFoundError):
    return JSONResponse(status_code=404, content={"detail": "Not found"})


async def _stale_order(request: Request, exc: StaleOrderError):
    return JSONResponse(
        status_code=409,
        content={"detail": "The order was changed by someone else. Reload it and try again."},
    )


async def _collaborator_error(request: Request, exc: CollaboratorError):
    logger.error("Collaborator failure", path=request.url.path, collaborator=exc.collaborator, error=str(exc))
    return JSONResponse(status_code=503, content={"detail": RETRY_MESSAGE})


async def _pricing_invariant(request: Request, exc: PricingInvariantError):
    logger.error("Refused to persist inconsistent order totals", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"detail": RETRY_MESSAGE})


async def _unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"detail": RETRY_MESSAGE})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(AuthorizationError, _authorization_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(StaleOrderError, _stale_order)
    app.add_exception_handler(CollaboratorError, _collaborator_error)
    app.add_exception_handler(PricingInvariantError, _pricing_invariant)
    app.add_exception_handler(Exception, _unexpected_error)

"""Exception handlers mapping domain errors to HTTP responses.

Domain validation failures become 400 responses carrying the
``{field: [messages]}`` dict; missing carts and orders become 404.
"""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

logger = structlog.get_logger(__name__)


async def domain_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle rejected commands and broken invariants."""
    messages = exc.messages if isinstance(exc, ValidationError) else {"_entity": [str(exc)]}
    logger.warning("Request rejected", path=request.url.path, errors=messages)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": True, "message": "Validation error", "details": messages},
    )


async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.info("Resource not found", path=request.url.path)

    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": True, "message": str(exc) or "Not found"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register the storefront's domain exception handlers on ``app``."""
    app.add_exception_handler(ValidationError, domain_validation_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)

"""Domain exceptions and their JSON rendering.

Every error response has the shape ``{"error": "<message>", ...extra}``.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def format_qty(value) -> str:
    """Render a quantity without trailing zeros (450.000 -> 450)."""
    d = value if isinstance(value, Decimal) else Decimal(str(value))
    if d == d.to_integral_value():
        return str(d.quantize(Decimal(1)))
    return f"{d.normalize():f}"


class POSError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.message = message
        self.extra = extra or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class BadRequestError(POSError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(POSError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(POSError):
    status_code = status.HTTP_409_CONFLICT


class InsufficientStockError(BadRequestError):
    """Raised when an ingredient cannot cover an aggregated requirement."""

    def __init__(self, ingredient_name: str, ingredient_id: int, available: Decimal, needed: Decimal, unit: str):
        self.ingredient_name = ingredient_name
        self.ingredient_id = ingredient_id
        self.available = available
        self.needed = needed
        self.unit = unit
        super().__init__(
            f'Insufficient inventory for ingredient "{ingredient_name}". '
            f"Required: {format_qty(needed)} {unit}, Available: {format_qty(available)} {unit}",
            extra={"ingredient_id": ingredient_id},
        )


class InvalidTransitionError(BadRequestError):
    """Raised when an order status change is not allowed from its current status."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Invalid status transition from {current} to {requested}",
            extra={"current_status": current, "requested_status": requested},
        )


# ============== Handlers ==============

async def pos_error_handler(request: Request, exc: POSError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "Validation failed", "details": jsonable_encoder(exc.errors())},
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Map database constraint violations the way the API reports them."""
    message = str(exc.orig).lower()
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    if "unique" in message or "duplicate" in message:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "A record with this data already exists"},
        )
    if "foreign key" in message:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Foreign key constraint failed - referenced record does not exist"},
        )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Database constraint violated"},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on an application."""
    app.add_exception_handler(POSError, pos_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

"""
Domain exceptions for the order engine and the DRF handler that renders them.

Every engine error subclasses ValueError so service callers can keep the
usual ``except ValueError`` contract, while the ``kind`` attribute lets the
API tell validation, state, referential and conflict failures apart.
"""
import logging

from django.db import IntegrityError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class OrderEngineError(ValueError):
    """Base exception for order, pricing, payment and KOT failures."""

    kind = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message=None):
        self.message = message or self.default_message()
        super().__init__(self.message)

    def default_message(self):
        return "Order operation failed"

    def as_dict(self):
        return {"kind": self.kind, "error": self.message}


class OrderValidationError(OrderEngineError):
    """Raised for missing fields, bad enum values or unselected required variants."""

    kind = "validation"


class OrderStateError(OrderEngineError):
    """Raised when an operation is not allowed in the order's current state."""

    kind = "state"


class NothingToPrintError(OrderStateError):
    """Raised when a KOT is requested but every item was already sent."""

    kind = "nothing_to_print"
    status_code = status.HTTP_409_CONFLICT

    def default_message(self):
        return "No new items to print"


class ReferentialError(OrderEngineError):
    """Raised when a referenced record does not exist."""

    kind = "referential"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, table, record_id=None, message=None):
        self.table = table
        self.record_id = record_id
        if message is None:
            label = table.replace("_", " ").rstrip("s").capitalize()
            message = f"{label} not found"
        super().__init__(message)


class PriceCalculationError(OrderEngineError):
    """Raised when a computed price or total is not a finite amount."""

    kind = "arithmetic"

    def default_message(self):
        return "Invalid price calculation"


class ConflictError(OrderEngineError):
    """Raised when a unique constraint rejects a write."""

    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, entity="Record", message=None):
        self.entity = entity
        super().__init__(message or f"{entity} already exists")


class DiscountPermissionError(OrderEngineError):
    """Raised when the acting user may not grant discounts."""

    kind = "permission"
    status_code = status.HTTP_403_FORBIDDEN

    def default_message(self):
        return "You do not have permission to apply discounts"


def error_response(exc: OrderEngineError) -> Response:
    return Response(exc.as_dict(), status=exc.status_code)


def custom_exception_handler(exc, context):
    """
    Renders engine errors as ``{"kind", "error"}`` and maps unique-constraint
    violations to a conflict instead of a raw 500.
    """
    if isinstance(exc, IntegrityError):
        logger.warning("Integrity error mapped to conflict: %s", exc)
        exc = ConflictError()

    if isinstance(exc, OrderEngineError):
        request = context.get("request")
        if request is not None:
            logger.info(
                "Order engine error kind=%s path=%s: %s",
                exc.kind,
                request.path,
                exc.message,
            )
        return error_response(exc)

    return exception_handler(exc, context)

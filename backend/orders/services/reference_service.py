import logging

from django.apps import apps
from django.core.exceptions import ValidationError as DjangoValidationError

from core_backend.exceptions import ReferentialError

logger = logging.getLogger(__name__)


class ReferenceService:
    """
    Existence checks for records an order points at, keyed by the table
    names used in audit entries and error messages.
    """

    MODELS = {
        "users": "users.User",
        "register_sessions": "terminals.RegisterSession",
        "tables": "terminals.DiningTable",
        "waiters": "users.Waiter",
        "riders": "users.Rider",
        "customers": "customers.Customer",
        "menu_items": "products.MenuItem",
        "deals": "products.Deal",
        "orders": "orders.Order",
        "order_items": "orders.OrderItem",
    }

    @classmethod
    def model_for(cls, table: str):
        try:
            return apps.get_model(cls.MODELS[table])
        except KeyError:
            raise ValueError(f"Unknown reference table '{table}'")

    @classmethod
    def exists(cls, table: str, record_id) -> bool:
        if record_id in (None, ""):
            return False
        model = cls.model_for(table)
        try:
            return model.objects.filter(pk=record_id).exists()
        except (DjangoValidationError, ValueError, TypeError):
            return False

    @classmethod
    def require(cls, table: str, record_id):
        """Returns the referenced instance or raises ReferentialError."""
        model = cls.model_for(table)
        try:
            return model.objects.get(pk=record_id)
        except (model.DoesNotExist, DjangoValidationError, ValueError, TypeError):
            logger.info("Missing reference %s=%s", table, record_id)
            raise ReferentialError(table, record_id)

    @classmethod
    def optional(cls, table: str, record_id):
        """Like ``require`` but a blank id resolves to None."""
        if record_id in (None, ""):
            return None
        if hasattr(record_id, "pk"):
            return record_id
        return cls.require(table, record_id)

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
import logging

from core_backend.exceptions import ConflictError
from .models import Customer

logger = logging.getLogger(__name__)


class CustomerService:
    """Service for customer bookkeeping driven by the order lifecycle."""

    @staticmethod
    def create_customer(name: str, phone: str, address: str = "") -> Customer:
        """
        Creates a customer. A duplicate phone number surfaces as a conflict
        rather than a raw integrity error.
        """
        phone = (phone or "").strip()
        try:
            with transaction.atomic():
                return Customer.objects.create(name=name, phone=phone, address=address)
        except IntegrityError as exc:
            logger.info("Duplicate customer phone rejected: %s", exc)
            raise ConflictError("Customer", "A customer with this phone already exists") from exc

    @staticmethod
    def record_completed_order(customer_id, completed_at=None) -> None:
        """Bumps the order counter and last-order timestamp in one UPDATE."""
        Customer.objects.filter(pk=customer_id).update(
            total_orders=F("total_orders") + 1,
            last_order_at=completed_at or timezone.now(),
        )

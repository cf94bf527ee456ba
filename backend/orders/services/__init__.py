"""
Orders services package - modular service layer for the order engine.

- OrderService: order lifecycle (create, details, delivery status, complete, cancel)
- OrderCalculationService: totals recalculation and repair
- OrderItemService: item management (add, update, remove)
- OrderDiscountService: order-level discounts
- KitchenService: KOT selection, station split and printing
- ReferenceService: existence checks for referenced records
- SyncNotificationService: sync broadcasts to connected terminals
"""

# Core order operations
from .order_service import OrderService

# Calculation operations
from .calculation_service import OrderCalculationService

# Item management
from .item_service import OrderItemService

# Discount operations
from .discount_service import OrderDiscountService

# Kitchen operations
from .kitchen_service import KitchenService, KOTPrintBatch, KOTTicket

# Collaborators
from .reference_service import ReferenceService
from .notification_service import SyncNotificationService

__all__ = [
    'OrderService',
    'OrderCalculationService',
    'OrderItemService',
    'OrderDiscountService',
    'KitchenService',
    'KOTPrintBatch',
    'KOTTicket',
    'ReferenceService',
    'SyncNotificationService',
]

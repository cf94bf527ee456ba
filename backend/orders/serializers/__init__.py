"""
Orders serializers package - modular serializer layer.
"""

# Order item serializers
from .order_item_serializers import (
    OrderItemSerializer,
    AddItemSerializer,
    UpdateOrderItemSerializer,
    VariantSelectionInputSerializer,
)

# Order serializers
from .order_serializers import (
    OrderSerializer,
    OrderListSerializer,
    OrderCreateSerializer,
    OrderDetailsSerializer,
    KOTPrintRecordSerializer,
)

# Discount serializers
from .discount_serializers import ApplyDiscountSerializer

# Status serializers
from .status_serializers import (
    DeliveryStatusSerializer,
    CompleteOrderSerializer,
    MarkPaidSerializer,
    CancelOrderSerializer,
    PrintKOTSerializer,
)

__all__ = [
    # Order items
    'OrderItemSerializer',
    'AddItemSerializer',
    'UpdateOrderItemSerializer',
    'VariantSelectionInputSerializer',
    # Orders
    'OrderSerializer',
    'OrderListSerializer',
    'OrderCreateSerializer',
    'OrderDetailsSerializer',
    'KOTPrintRecordSerializer',
    # Discounts
    'ApplyDiscountSerializer',
    # Status
    'DeliveryStatusSerializer',
    'CompleteOrderSerializer',
    'MarkPaidSerializer',
    'CancelOrderSerializer',
    'PrintKOTSerializer',
]

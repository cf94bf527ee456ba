from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from orders.models import KOTPrintRecord, Order
from payments.services import PaymentReconciler
from .order_item_serializers import OrderItemSerializer


class OrderSerializer(BaseModelSerializer):
    """Read representation of an order with its lines and payment position."""

    items = OrderItemSerializer(many=True, read_only=True)
    payment_summary = serializers.SerializerMethodField()
    table_number = serializers.CharField(source="table.table_number", read_only=True, default=None)
    waiter_name = serializers.CharField(source="waiter.name", read_only=True, default=None)
    rider_name = serializers.CharField(source="rider.name", read_only=True, default=None)
    created_by_name = serializers.CharField(source="created_by.username", read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "order_type",
            "status",
            "delivery_status",
            "is_paid",
            "subtotal",
            "discount_type",
            "discount_value",
            "discount_amount",
            "discount_reference",
            "delivery_charge",
            "total",
            "register_session",
            "table",
            "table_number",
            "waiter",
            "waiter_name",
            "rider",
            "rider_name",
            "customer",
            "customer_name",
            "customer_phone",
            "delivery_address",
            "notes",
            "created_by",
            "created_by_name",
            "completed_by",
            "cancellation_reason",
            "kot_print_count",
            "last_kot_printed_at",
            "created_at",
            "updated_at",
            "completed_at",
            "items",
            "payment_summary",
        ]
        read_only_fields = fields
        select_related_fields = ["table", "waiter", "rider", "customer", "created_by"]
        prefetch_related_fields = ["items"]

    def get_payment_summary(self, obj):
        summary = PaymentReconciler.get_payment_summary(obj)
        return {key: str(value) if not isinstance(value, bool) else value for key, value in summary.items()}


class OrderListSerializer(BaseModelSerializer):
    item_count = serializers.IntegerField(source="items.count", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "order_type",
            "status",
            "delivery_status",
            "is_paid",
            "subtotal",
            "discount_amount",
            "delivery_charge",
            "total",
            "customer_name",
            "customer_phone",
            "table",
            "register_session",
            "item_count",
            "created_at",
            "completed_at",
        ]
        read_only_fields = fields


class OrderCreateSerializer(serializers.Serializer):
    order_type = serializers.ChoiceField(choices=Order.OrderType.choices)
    register_session = serializers.UUIDField()
    table = serializers.IntegerField(required=False, allow_null=True)
    waiter = serializers.IntegerField(required=False, allow_null=True)
    rider = serializers.IntegerField(required=False, allow_null=True)
    customer = serializers.UUIDField(required=False, allow_null=True)
    customer_name = serializers.CharField(required=False, allow_blank=True, max_length=150, default="")
    customer_phone = serializers.CharField(required=False, allow_blank=True, max_length=20, default="")
    delivery_address = serializers.CharField(required=False, allow_blank=True, default="")
    delivery_charge = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OrderDetailsSerializer(serializers.Serializer):
    """Editable details of an open order; only the keys sent are changed."""

    customer_name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    customer_phone = serializers.CharField(required=False, allow_blank=True, max_length=20)
    delivery_address = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    customer = serializers.UUIDField(required=False, allow_null=True)
    table = serializers.IntegerField(required=False, allow_null=True)
    waiter = serializers.IntegerField(required=False, allow_null=True)
    rider = serializers.IntegerField(required=False, allow_null=True)
    delivery_charge = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True
    )


class KOTPrintRecordSerializer(BaseModelSerializer):
    printed_by_name = serializers.CharField(source="printed_by.username", read_only=True, default=None)

    class Meta:
        model = KOTPrintRecord
        fields = [
            "id",
            "order",
            "print_number",
            "major_category",
            "item_ids",
            "is_reprint",
            "printed_by",
            "printed_by_name",
            "printed_at",
        ]
        read_only_fields = fields

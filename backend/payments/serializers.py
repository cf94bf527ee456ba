from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from .models import Payment


class PaymentSerializer(BaseModelSerializer):
    received_by_name = serializers.CharField(
        source="received_by.username", read_only=True, default=None
    )

    class Meta:
        model = Payment
        fields = [
            "id",
            "order",
            "amount",
            "method",
            "reference",
            "notes",
            "received_by",
            "received_by_name",
            "paid_at",
        ]
        read_only_fields = fields
        select_related_fields = ["received_by"]


class PaymentSummarySerializer(serializers.Serializer):
    total = serializers.DecimalField(max_digits=10, decimal_places=2)
    paid = serializers.DecimalField(max_digits=10, decimal_places=2)
    outstanding = serializers.DecimalField(max_digits=10, decimal_places=2)
    is_fully_paid = serializers.BooleanField()


class SettlementSerializer(serializers.Serializer):
    """Input for marking an order paid or completing it with payment."""

    payment_method = serializers.ChoiceField(
        choices=Payment.PaymentMethod.choices, required=False, allow_null=True
    )
    payment_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True
    )
    reference = serializers.CharField(required=False, allow_blank=True, max_length=255)

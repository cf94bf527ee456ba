from rest_framework import serializers

from orders.models import Order
from payments.serializers import SettlementSerializer


class DeliveryStatusSerializer(serializers.Serializer):
    delivery_status = serializers.ChoiceField(choices=Order.DeliveryStatus.choices)


class CompleteOrderSerializer(SettlementSerializer):
    is_paid = serializers.BooleanField(default=False)


class MarkPaidSerializer(SettlementSerializer):
    pass


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True, trim_whitespace=False)


class PrintKOTSerializer(serializers.Serializer):
    split_by_station = serializers.BooleanField(required=False, allow_null=True, default=None)
    reprint_all = serializers.BooleanField(default=False)

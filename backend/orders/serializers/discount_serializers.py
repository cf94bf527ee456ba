from rest_framework import serializers

from orders.models import Order


class ApplyDiscountSerializer(serializers.Serializer):
    discount_type = serializers.ChoiceField(choices=Order.DiscountType.choices)
    discount_value = serializers.DecimalField(max_digits=10, decimal_places=2)
    discount_reference = serializers.CharField(
        required=False, allow_blank=True, max_length=255, default=""
    )

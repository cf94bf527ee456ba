from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from orders.models import OrderItem


class OrderItemSerializer(BaseModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            "id",
            "order",
            "item_type",
            "menu_item",
            "deal",
            "name",
            "quantity",
            "unit_price",
            "total_price",
            "notes",
            "selected_variants",
            "deal_breakdown",
            "added_at",
            "last_printed_at",
        ]
        read_only_fields = fields


class VariantSelectionInputSerializer(serializers.Serializer):
    """
    One variant choice from the till. ``option_id`` is used for single
    selection variants, ``option_ids`` for multiple and all.
    """

    variant_id = serializers.IntegerField()
    option_id = serializers.UUIDField(required=False, allow_null=True)
    option_ids = serializers.ListField(child=serializers.UUIDField(), required=False)


class DealBreakdownInputSerializer(serializers.Serializer):
    menu_item_id = serializers.UUIDField()
    selected_variants = VariantSelectionInputSerializer(many=True, required=False)


class AddItemSerializer(serializers.Serializer):
    item_type = serializers.ChoiceField(
        choices=OrderItem.ItemType.choices, default=OrderItem.ItemType.MENU_ITEM
    )
    menu_item_id = serializers.UUIDField(required=False, allow_null=True)
    deal_id = serializers.UUIDField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, default=1)
    selected_variants = VariantSelectionInputSerializer(many=True, required=False)
    deal_breakdown = DealBreakdownInputSerializer(many=True, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, data):
        if data["item_type"] == OrderItem.ItemType.MENU_ITEM and not data.get("menu_item_id"):
            raise serializers.ValidationError({"menu_item_id": "This field is required."})
        if data["item_type"] == OrderItem.ItemType.DEAL and not data.get("deal_id"):
            raise serializers.ValidationError({"deal_id": "This field is required."})
        return data


class UpdateOrderItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    selected_variants = VariantSelectionInputSerializer(many=True, required=False)

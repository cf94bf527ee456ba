from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import BaseViewSet
from core_backend.exceptions import OrderEngineError, error_response
from orders.models import Order, OrderItem
from orders.serializers import (
    AddItemSerializer,
    OrderItemSerializer,
    UpdateOrderItemSerializer,
)
from orders.services import OrderItemService

logger = logging.getLogger(__name__)


class OrderItemViewSet(BaseViewSet):
    """
    A ViewSet for managing a specific item within an order.
    """

    queryset = OrderItem.objects.all()
    serializer_class = OrderItemSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    ordering = ["added_at"]

    def get_serializer_class(self):
        if self.action == "create":
            return AddItemSerializer
        if self.action == "partial_update":
            return UpdateOrderItemSerializer
        return OrderItemSerializer

    def get_queryset(self):
        """
        Filter items based on the order_pk provided in the URL.
        """
        queryset = super().get_queryset()
        return queryset.filter(order__pk=self.kwargs["order_pk"])

    def get_order(self) -> Order:
        return get_object_or_404(Order, pk=self.kwargs["order_pk"])

    def create(self, request: Request, *args, **kwargs) -> Response:
        order = self.get_order()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        try:
            item = OrderItemService.add_item(
                order,
                request.user,
                item_type=data.pop("item_type"),
                menu_item_id=data.pop("menu_item_id", None),
                deal_id=data.pop("deal_id", None),
                **data,
            )
        except OrderEngineError as e:
            return error_response(e)
        return Response(OrderItemSerializer(item).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, *args, **kwargs) -> Response:
        item = self.get_object()
        serializer = self.get_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            item = OrderItemService.update_item(
                item.order, item.pk, request.user, **serializer.validated_data
            )
        except OrderEngineError as e:
            return error_response(e)
        return Response(OrderItemSerializer(item).data)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        item = self.get_object()
        try:
            OrderItemService.remove_item(item.order, item.pk, request.user)
        except OrderEngineError as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

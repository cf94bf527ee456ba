from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.exceptions import OrderEngineError, error_response
from orders.serializers import (
    CancelOrderSerializer,
    CompleteOrderSerializer,
    DeliveryStatusSerializer,
    MarkPaidSerializer,
    OrderSerializer,
)
from orders.services import OrderService

logger = logging.getLogger(__name__)


class StatusActionsMixin:
    """
    Mixin for order status transition actions

    This mixin provides action methods for OrderViewSet.
    """

    @action(detail=True, methods=["post"], url_path="complete")
    def complete(self, request: Request, pk=None) -> Response:
        """Completes the order, optionally settling the balance in the same transaction."""
        serializer = CompleteOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        def complete_order(order, user):
            order, settlement = OrderService.complete_order(
                order,
                user,
                is_paid=data["is_paid"],
                payment_method=data.get("payment_method"),
                payment_amount=data.get("payment_amount"),
                reference=data.get("reference"),
            )
            return order, settlement

        return self._handle_status_change(request, complete_order)

    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request: Request, pk=None) -> Response:
        serializer = MarkPaidSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        def mark_order_as_paid(order, user):
            settlement = OrderService.mark_order_as_paid(
                order,
                user,
                data.get("payment_method"),
                payment_amount=data.get("payment_amount"),
                reference=data.get("reference"),
            )
            return settlement.order, settlement

        return self._handle_status_change(request, mark_order_as_paid)

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request: Request, pk=None) -> Response:
        """Cancels the order. A non-blank reason is required."""
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reason = serializer.validated_data["reason"]
        return self._handle_status_change(
            request, lambda order, user: OrderService.cancel_order(order, user, reason)
        )

    @action(detail=True, methods=["post"], url_path="delivery-status")
    def delivery_status(self, request: Request, pk=None) -> Response:
        serializer = DeliveryStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = serializer.validated_data["delivery_status"]
        return self._handle_status_change(
            request,
            lambda order, user: OrderService.update_delivery_status(order, new_status, user),
        )

    def _handle_status_change(self, request: Request, service_method) -> Response:
        """Generic handler for status-changing actions."""
        order = self.get_object()
        try:
            result = service_method(order, request.user)
        except OrderEngineError as e:
            logger.info("Order %s action rejected: %s", order.order_number, e)
            return error_response(e)

        settlement = None
        if isinstance(result, tuple):
            result, settlement = result

        data = OrderSerializer(result, context={"request": request}).data
        if settlement is not None:
            data = {**data, "settlement": settlement.as_dict()}
        return Response(data, status=status.HTTP_200_OK)

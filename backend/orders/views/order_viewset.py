from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import BaseViewSet
from core_backend.exceptions import OrderEngineError, error_response
from orders.filters import OrderFilter
from orders.models import Order
from orders.serializers import (
    OrderCreateSerializer,
    OrderDetailsSerializer,
    OrderListSerializer,
    OrderSerializer,
)
from orders.services import OrderCalculationService, OrderService
from payments.serializers import PaymentSerializer
from users.permissions import CanApplyDiscounts, IsManagerOrHigher

from .discount_actions import DiscountActionsMixin
from .kitchen_actions import KitchenActionsMixin
from .status_actions import StatusActionsMixin

logger = logging.getLogger(__name__)


class OrderViewSet(
    StatusActionsMixin,
    DiscountActionsMixin,
    KitchenActionsMixin,
    BaseViewSet,
):
    """
    ViewSet for managing orders.

    Writes go through the order services; this class only parses input and
    renders the result. Orders are never deleted over the API.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = OrderFilter
    search_fields = ["order_number", "customer_name", "customer_phone"]
    ordering_fields = ["created_at", "completed_at", "total", "order_number"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_serializer_class(self):
        if self.action == "list":
            return OrderListSerializer
        if self.action == "create":
            return OrderCreateSerializer
        if self.action == "partial_update":
            return OrderDetailsSerializer
        return OrderSerializer

    def get_permissions(self):
        if self.action == "discount" and self.request.method == "POST":
            return [IsAuthenticated(), CanApplyDiscounts()]
        if self.action == "repair_totals":
            return [IsAuthenticated(), IsManagerOrHigher()]
        return super().get_permissions()

    def _detail_response(self, order, request, status_code=status.HTTP_200_OK) -> Response:
        return Response(OrderSerializer(order, context={"request": request}).data, status=status_code)

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            order = OrderService.create_order(
                order_type=data["order_type"],
                register_session=data["register_session"],
                created_by=request.user,
                table=data.get("table"),
                waiter=data.get("waiter"),
                rider=data.get("rider"),
                customer=data.get("customer"),
                customer_name=data.get("customer_name", ""),
                customer_phone=data.get("customer_phone", ""),
                delivery_address=data.get("delivery_address", ""),
                delivery_charge=data.get("delivery_charge"),
                notes=data.get("notes", ""),
            )
        except OrderEngineError as e:
            return error_response(e)
        return self._detail_response(order, request, status.HTTP_201_CREATED)

    def retrieve(self, request: Request, *args, **kwargs) -> Response:
        """Detail read. Orders whose stored totals were lost are repaired first."""
        order = self.get_object()
        if OrderCalculationService.needs_repair(order):
            OrderCalculationService.repair_order_totals(order, actor=request.user)
            order.refresh_from_db()
        return self._detail_response(order, request)

    def partial_update(self, request: Request, *args, **kwargs) -> Response:
        order = self.get_object()
        serializer = self.get_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            order = OrderService.update_details(order, request.user, **serializer.validated_data)
        except OrderEngineError as e:
            return error_response(e)
        return self._detail_response(order, request)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        return Response(
            {"error": "Orders cannot be deleted; cancel the order instead"},
            status=status.HTTP_405_METHOD_NOT_ALLOWED,
        )

    @action(detail=True, methods=["post"], url_path="repair-totals")
    def repair_totals(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        repaired = OrderCalculationService.repair_order_totals(order, actor=request.user)
        order.refresh_from_db()
        return Response(
            {
                "repaired": repaired,
                "order": OrderSerializer(order, context={"request": request}).data,
            }
        )

    @action(detail=True, methods=["get"], url_path="payments")
    def payments(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        records = order.payments.select_related("received_by")
        return Response(PaymentSerializer(records, many=True).data)

from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.exceptions import OrderEngineError, error_response
from orders.serializers import ApplyDiscountSerializer, OrderSerializer
from orders.services import OrderDiscountService


class DiscountActionsMixin:
    """
    ``POST`` applies (or replaces) the order discount, ``DELETE`` removes it.
    """

    @action(detail=True, methods=["post", "delete"], url_path="discount")
    def discount(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        try:
            if request.method == "DELETE":
                order = OrderDiscountService.remove_discount(order, request.user)
            else:
                serializer = ApplyDiscountSerializer(data=request.data)
                serializer.is_valid(raise_exception=True)
                data = serializer.validated_data
                order = OrderDiscountService.apply_discount(
                    order,
                    request.user,
                    data["discount_type"],
                    data["discount_value"],
                    reference=data.get("discount_reference", ""),
                )
        except OrderEngineError as e:
            return error_response(e)
        return Response(OrderSerializer(order, context={"request": request}).data)

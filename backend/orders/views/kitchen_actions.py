from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.exceptions import OrderEngineError, error_response
from orders.serializers import KOTPrintRecordSerializer, PrintKOTSerializer
from orders.services import KitchenService

logger = logging.getLogger(__name__)


class KitchenActionsMixin:
    """KOT printing and print history for OrderViewSet."""

    @action(detail=True, methods=["post"], url_path="print-kot")
    def print_kot(self, request: Request, pk=None) -> Response:
        """
        Prints new items, or every item with ``reprint_all``. A 409 with kind
        ``nothing_to_print`` tells the till to offer a full reprint.
        """
        order = self.get_object()
        serializer = PrintKOTSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            batch = KitchenService.print_kot(
                order,
                request.user,
                split_by_station=serializer.validated_data.get("split_by_station"),
                reprint_all=serializer.validated_data["reprint_all"],
            )
        except OrderEngineError as e:
            return error_response(e)
        return Response(batch.as_dict(), status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], url_path="kot-prints")
    def kot_prints(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        records = order.kot_prints.select_related("printed_by")
        return Response(KOTPrintRecordSerializer(records, many=True).data)

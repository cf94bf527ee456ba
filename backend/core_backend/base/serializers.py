from rest_framework import serializers


class BaseModelSerializer(serializers.ModelSerializer):
    """
    Base serializer that provides common functionality.

    Meta may declare ``select_related_fields`` and ``prefetch_related_fields``;
    BaseViewSet applies them to the queryset for the current action.
    """

    class Meta:
        select_related_fields = []
        prefetch_related_fields = []

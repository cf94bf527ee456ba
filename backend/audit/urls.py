from django.urls import path, include
from rest_framework import routers
from .views import AuditLogViewSet

app_name = "audit"

router = routers.DefaultRouter()
router.register(r"audit-logs", AuditLogViewSet, basename="audit-log")

urlpatterns = [
    path("", include(router.urls)),
]

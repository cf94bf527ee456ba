from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    """
    Records who changed what and the before/after state.
    Rows are written by AuditService and never edited.
    """

    class Action(models.TextChoices):
        CREATE = "create", "Create"
        UPDATE = "update", "Update"
        DELETE = "delete", "Delete"
        PRINT = "print", "Print"

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
    )
    action = models.CharField(max_length=10, choices=Action.choices)
    table_name = models.CharField(max_length=64, db_index=True)
    record_id = models.CharField(max_length=64, db_index=True)
    before = models.JSONField(null=True, blank=True)
    after = models.JSONField(null=True, blank=True)
    description = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["table_name", "record_id"], name="audit_table_record_idx"),
        ]

    def __str__(self):
        return f"[{self.action}] {self.table_name}:{self.record_id} {self.description}"

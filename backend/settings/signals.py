"""
Signal handlers for the settings app.
Keeps the AppSettings singleton in step with GlobalSettings edits.
"""

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
from .models import GlobalSettings
import logging

logger = logging.getLogger(__name__)


@receiver(post_save, sender=GlobalSettings)
@receiver(post_delete, sender=GlobalSettings)
def reload_app_settings(sender, instance, **kwargs):
    from .config import app_settings

    app_settings.reload()
    logger.info("Configuration reloaded after GlobalSettings change")

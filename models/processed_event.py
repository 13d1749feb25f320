"""
ProcessedEvent model for scan replay protection.

Stores one nonce per accepted scan (business, token, timestamp) so a code
scanned twice within the window is recognised on every server sharing the
database.
"""

from datetime import timedelta

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class ProcessedEvent(models.Model):
    """Tracks processed scan nonces for replay protection."""

    nonce = models.CharField(verbose_name=_("nonce"), max_length=255, unique=True, db_index=True)
    provider = models.CharField(verbose_name=_("source"), max_length=50, db_index=True)
    processed_at = models.DateTimeField(verbose_name=_("processed at"), default=timezone.now, db_index=True)

    class Meta:
        db_table = "qroyal_processed_event"
        verbose_name = _("processed event")
        verbose_name_plural = _("processed events")
        indexes = [
            models.Index(fields=["provider", "processed_at"], name="qroyal_proc_provide_8d2f4b_idx"),
        ]

    def __str__(self):
        return f"{self.provider}:{self.nonce[:20]}"

    @classmethod
    def cleanup_old_events(cls, days: int | None = None):
        """Remove events older than N days."""
        if days is None:
            from qroyal.conf import qroyal_settings
            days = qroyal_settings.EVENT_CLEANUP_DAYS
        cutoff = timezone.now() - timedelta(days=days)
        return cls.objects.filter(processed_at__lt=cutoff).delete()

"""Discount model."""

from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class DiscountQuerySet(models.QuerySet):
    def available(self):
        """Active and not expired."""
        return self.filter(active=True).filter(
            Q(expiry_date__isnull=True) | Q(expiry_date__gt=timezone.now())
        )


class Discount(models.Model):
    """
    Promotional offer, scoped to one business or global (business empty).

    Independent of memberships; customers only read them.
    """

    business = models.ForeignKey(
        "qroyal.Business",
        on_delete=models.CASCADE,
        related_name="discounts",
        null=True,
        blank=True,
        verbose_name=_("business"),
    )
    name = models.CharField(_("name"), max_length=120)
    description = models.TextField(_("description"), blank=True)
    image_url = models.URLField(_("image URL"), blank=True)
    expiry_date = models.DateTimeField(_("expires at"), null=True, blank=True)
    active = models.BooleanField(_("active"), default=True)

    percentage = models.PositiveSmallIntegerField(_("percentage"), null=True, blank=True)
    price = models.DecimalField(
        _("price"), max_digits=10, decimal_places=2, null=True, blank=True
    )
    price_cutoff = models.DecimalField(
        _("minimum spend"), max_digits=10, decimal_places=2, null=True, blank=True
    )

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)

    objects = DiscountQuerySet.as_manager()

    class Meta:
        verbose_name = _("discount")
        verbose_name_plural = _("discounts")
        ordering = ["-created_at"]

    def __str__(self):
        return self.name

    @property
    def is_expired(self) -> bool:
        return self.expiry_date is not None and self.expiry_date <= timezone.now()

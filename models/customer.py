"""Customer model.

A customer is identified everywhere by ``token`` (``cust_`` prefix). The
token is what the QR image encodes; no other field is ever dereferenced by
the scan flow.

Provisional customers are created by a business terminal from a bare scan.
They carry the placeholder name and no phone until the customer completes
the setup step on their own device.
"""

from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.utils.translation import gettext_lazy as _

from qroyal.tokens import new_customer_token


class Customer(models.Model):
    """Loyalty program customer."""

    token = models.CharField(
        _("token"),
        max_length=64,
        unique=True,
        default=new_customer_token,
        editable=False,
        help_text=_("Opaque identity token encoded in the customer's QR code"),
    )
    name = models.CharField(_("name"), max_length=120)
    phone = models.CharField(
        _("phone number"),
        max_length=32,
        unique=True,
        null=True,
        blank=True,
    )
    password = models.CharField(_("password"), max_length=128, blank=True)
    qr_data_url = models.TextField(_("QR image"), blank=True)

    is_active = models.BooleanField(_("active"), default=True, db_index=True)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("customer")
        verbose_name_plural = _("customers")
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.name} ({self.token})"

    @property
    def needs_setup(self) -> bool:
        """Provisional record still waiting for name and phone."""
        from qroyal.conf import qroyal_settings

        return not self.phone or self.name == qroyal_settings.PROVISIONAL_CUSTOMER_NAME

    def set_password(self, raw_password: str) -> None:
        self.password = make_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        if not self.password:
            return False
        return check_password(raw_password, self.password)

    def save(self, *args, **kwargs):
        if self.phone is not None:
            self.phone = normalize_phone(self.phone) or None
        super().save(*args, **kwargs)


def normalize_phone(value: str) -> str:
    """Keep a leading '+' and digits only."""
    value = (value or "").strip()
    digits = "".join(filter(str.isdigit, value))
    if not digits:
        return ""
    return f"+{digits}" if value.startswith("+") else digits

"""Business model: credentials, public profile, loyalty rules, QR style."""

from django.contrib.auth.hashers import check_password, make_password
from django.core.validators import MinValueValidator, RegexValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from qroyal.tokens import new_business_token


class CornerShape(models.TextChoices):
    SQUARE = "square", _("Square")
    ROUNDED = "rounded", _("Rounded")


class DotShape(models.TextChoices):
    SQUARE = "square", _("Square")
    DOTS = "dots", _("Dots")
    ROUNDED = "rounded", _("Rounded")


color_validator = RegexValidator(
    r"^#[0-9a-fA-F]{6}$",
    _("Use a hex color such as #1a2b3c"),
)


class Business(models.Model):
    """
    Participating business.

    One (email, password) pair identifies a business session. The password
    is stored as a Django hash, never in plain text.

    Loyalty rules:
        points_per_scan  - points added by every scan of a customer code
        reward_threshold - balance that triggers a reward; the balance is
                           then reduced by the threshold (overshoot kept)
    """

    token = models.CharField(
        _("token"),
        max_length=64,
        unique=True,
        default=new_business_token,
        editable=False,
    )
    name = models.CharField(_("name"), max_length=120)
    public_name = models.CharField(_("public name"), max_length=120, blank=True)
    email = models.EmailField(_("email"), unique=True)
    password = models.CharField(_("password"), max_length=128)

    # Loyalty rules
    points_per_scan = models.PositiveIntegerField(
        _("points per scan"),
        default=1,
        validators=[MinValueValidator(1)],
    )
    reward_threshold = models.PositiveIntegerField(
        _("reward threshold"),
        default=5,
        validators=[MinValueValidator(1)],
    )
    reward_message = models.CharField(_("reward message"), max_length=255, blank=True)

    # QR style
    qr_logo_url = models.URLField(_("QR logo URL"), blank=True)
    qr_color = models.CharField(
        _("QR color"),
        max_length=7,
        default="#000000",
        validators=[color_validator],
    )
    qr_eye_shape = models.CharField(
        _("QR corner shape"),
        max_length=20,
        choices=CornerShape.choices,
        default=CornerShape.SQUARE,
    )
    qr_dot_style = models.CharField(
        _("QR dot style"),
        max_length=20,
        choices=DotShape.choices,
        default=DotShape.SQUARE,
    )
    qr_data_url = models.TextField(_("QR image"), blank=True)

    is_active = models.BooleanField(_("active"), default=True, db_index=True)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("business")
        verbose_name_plural = _("businesses")
        ordering = ["name"]

    def __str__(self):
        return self.display_name

    @property
    def display_name(self) -> str:
        return self.public_name or self.name

    def set_password(self, raw_password: str) -> None:
        self.password = make_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return check_password(raw_password, self.password)

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.lower().strip()
        super().save(*args, **kwargs)

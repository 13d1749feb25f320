"""Business service - signup, loyalty settings, members and analytics."""

import logging
from datetime import timedelta

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, Q, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from qroyal.exceptions import QroyalError
from qroyal.gates import Gates
from qroyal.models import Business, Membership, PointTransaction, TransactionType
from qroyal.qr import QRStyle, render_identity_image, to_data_url
from qroyal.signals import business_created

logger = logging.getLogger(__name__)


def get(business_id) -> Business | None:
    """Get active business by primary key."""
    try:
        return Business.objects.get(pk=business_id, is_active=True)
    except (Business.DoesNotExist, ValueError, TypeError):
        return None


def get_by_token(token: str) -> Business | None:
    """Get active business by token."""
    if not token:
        return None
    try:
        return Business.objects.get(token=token, is_active=True)
    except Business.DoesNotExist:
        return None


def get_by_email(email: str) -> Business | None:
    """Get active business by email."""
    try:
        return Business.objects.get(email__iexact=(email or "").strip(), is_active=True)
    except Business.DoesNotExist:
        return None


def render_qr(business: Business) -> str:
    """Render and store the business login code with its own style."""
    png = render_identity_image(business.token, QRStyle.for_business(business))
    business.qr_data_url = to_data_url(png)
    business.save(update_fields=["qr_data_url", "updated_at"])
    return business.qr_data_url


def signup(name: str, email: str, password: str, public_name: str = "") -> Business:
    """
    Create a business account.

    Raises:
        QroyalError: INVALID_INPUT, DUPLICATE_EMAIL
    """
    name = (name or "").strip()
    email = (email or "").lower().strip()
    if not name or not email or not password:
        raise QroyalError("INVALID_INPUT", fields=["name", "email", "password"])

    if Business.objects.filter(email=email).exists():
        raise QroyalError("DUPLICATE_EMAIL")

    business = Business(name=name, public_name=public_name.strip(), email=email)
    business.set_password(password)
    try:
        with transaction.atomic():
            business.save()
    except IntegrityError:
        raise QroyalError("DUPLICATE_EMAIL")

    render_qr(business)
    logger.info("Business %s signed up", business.token)
    business_created.send(sender=Business, business=business)
    return business


SETTINGS_FIELDS = {
    "name",
    "public_name",
    "points_per_scan",
    "reward_threshold",
    "reward_message",
    "qr_logo_url",
    "qr_color",
    "qr_eye_shape",
    "qr_dot_style",
}

STYLE_FIELDS = {"qr_logo_url", "qr_color", "qr_eye_shape", "qr_dot_style"}


def update_settings(business: Business, **fields) -> Business:
    """
    Update profile, loyalty rules and QR style (whitelisted fields only).

    Loyalty rules pass G1 before anything is written. Changing any style
    field re-renders the stored QR image.

    Raises:
        GateError: G1_LoyaltyRules
        django.core.exceptions.ValidationError: invalid color or choice
    """
    updates = {k: v for k, v in fields.items() if k in SETTINGS_FIELDS}

    Gates.loyalty_rules(
        updates.get("points_per_scan", business.points_per_scan),
        updates.get("reward_threshold", business.reward_threshold),
    )

    for key, value in updates.items():
        setattr(business, key, value)
    business.full_clean(exclude=["password"])
    business.save()

    if STYLE_FIELDS & updates.keys():
        render_qr(business)
    return business


def members(business: Business, query: str | None = None, limit: int = 50) -> list[Membership]:
    """Memberships of a business, optionally filtered by customer phone or name."""
    qs = Membership.objects.select_related("customer").filter(
        business=business,
        customer__is_active=True,
    )
    if query:
        qs = qs.filter(Q(customer__phone__icontains=query) | Q(customer__name__icontains=query))
    return list(qs[:limit])


def search(query: str | None = None, limit: int = 20) -> list[Business]:
    """Search active businesses by name or public name."""
    qs = Business.objects.filter(is_active=True)
    if query:
        qs = qs.filter(Q(name__icontains=query) | Q(public_name__icontains=query))
    return list(qs[:limit])


def analytics(business: Business, days: int = 7) -> dict:
    """Dashboard totals plus daily earned points for the last ``days`` days."""
    totals = Membership.objects.filter(business=business).aggregate(
        total_customers=Count("id"),
        total_points=Sum("points"),
        average_points=Avg("points"),
        rewards_earned=Sum("rewards_earned"),
    )

    since = timezone.now() - timedelta(days=days)
    daily = (
        PointTransaction.objects.filter(
            membership__business=business,
            transaction_type=TransactionType.EARN,
            created_at__gte=since,
        )
        .annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(scans=Count("id"), points=Sum("points"))
        .order_by("day")
    )

    return {
        "total_customers": totals["total_customers"] or 0,
        "total_points": totals["total_points"] or 0,
        "average_points": round(float(totals["average_points"] or 0), 2),
        "rewards_earned": totals["rewards_earned"] or 0,
        "daily": [
            {"day": row["day"].isoformat(), "scans": row["scans"], "points": row["points"]}
            for row in daily
        ],
    }

"""Customer service - identity, profile, memberships and display snapshots.

All write operations that touch >1 record use transaction.atomic().
"""

import logging

from django.db import IntegrityError, transaction

from qroyal.conf import qroyal_settings
from qroyal.exceptions import QroyalError
from qroyal.models import Business, Customer, Membership
from qroyal.models.customer import normalize_phone
from qroyal.protocols import CustomerSnapshot, MembershipSnapshot
from qroyal.qr import QRStyle, render_identity_image, to_data_url
from qroyal.signals import customer_created, membership_created
from qroyal.tokens import build_customer_url

logger = logging.getLogger(__name__)


def get_by_token(token: str) -> Customer | None:
    """Get active customer by token."""
    if not token:
        return None
    try:
        return Customer.objects.get(token=token, is_active=True)
    except Customer.DoesNotExist:
        return None


def get_by_phone(phone: str) -> Customer | None:
    """Get active customer by phone (normalized)."""
    phone_normalized = normalize_phone(phone)
    if not phone_normalized:
        return None
    try:
        return Customer.objects.get(phone=phone_normalized, is_active=True)
    except Customer.DoesNotExist:
        return None


def qr_payload(customer: Customer, join: str | int | None = None) -> str:
    """
    What the customer's QR code encodes.

    The card URL when PUBLIC_BASE_URL is set (phone cameras open it
    directly), otherwise the bare token.
    """
    if qroyal_settings.PUBLIC_BASE_URL:
        return build_customer_url(customer.token, join=join)
    return customer.token


def render_qr(customer: Customer, join: str | int | None = None, style: QRStyle | None = None) -> str:
    """Render and store the customer's QR image. Returns the data URL."""
    png = render_identity_image(qr_payload(customer, join=join), style)
    customer.qr_data_url = to_data_url(png)
    customer.save(update_fields=["qr_data_url", "updated_at"])
    return customer.qr_data_url


def signup(phone: str, password: str, name: str = "") -> Customer:
    """
    Self-service customer signup.

    Raises:
        QroyalError: INVALID_INPUT when phone or password is empty,
            DUPLICATE_PHONE when the phone is already registered
    """
    phone_normalized = normalize_phone(phone)
    if not phone_normalized or not password:
        raise QroyalError("INVALID_INPUT", fields=["phone", "password"])

    if Customer.objects.filter(phone=phone_normalized).exists():
        raise QroyalError("DUPLICATE_PHONE")

    customer = Customer(
        name=name.strip() or f"User {phone_normalized[-4:]}",
        phone=phone_normalized,
    )
    customer.set_password(password)
    try:
        with transaction.atomic():
            customer.save()
    except IntegrityError:
        raise QroyalError("DUPLICATE_PHONE")

    render_qr(customer)
    logger.info("Customer %s signed up", customer.token)
    customer_created.send(sender=Customer, customer=customer)
    return customer


def create_provisional(business: Business | None = None) -> Customer:
    """
    Create a placeholder customer for a business terminal.

    The QR code carries ``join=<business id>`` so the first visit of the
    card joins that business. Name and phone are completed later by
    complete_setup().
    """
    customer = Customer.objects.create(name=qroyal_settings.PROVISIONAL_CUSTOMER_NAME)
    style = QRStyle.for_business(business) if business else None
    render_qr(customer, join=business.pk if business else None, style=style)
    logger.info(
        "Provisional customer %s created by %s",
        customer.token,
        business.token if business else "-",
    )
    customer_created.send(sender=Customer, customer=customer)
    return customer


def complete_setup(token: str, name: str, phone: str) -> Customer:
    """
    Complete a provisional customer with name and phone.

    Raises:
        QroyalError: CUSTOMER_NOT_FOUND, INVALID_INPUT, DUPLICATE_PHONE
    """
    customer = get_by_token(token)
    if not customer:
        raise QroyalError("CUSTOMER_NOT_FOUND", token=token)

    name = (name or "").strip()
    phone_normalized = normalize_phone(phone)
    if not name or not phone_normalized:
        raise QroyalError("INVALID_INPUT", fields=["name", "phone"])

    _ensure_phone_free(phone_normalized, exclude_pk=customer.pk)
    customer.name = name
    customer.phone = phone_normalized
    customer.save(update_fields=["name", "phone", "updated_at"])
    return customer


UPDATABLE_FIELDS = {"name", "phone"}


def update(token: str, /, **fields) -> Customer | None:
    """Update customer profile (only whitelisted fields are accepted)."""
    customer = get_by_token(token)
    if not customer:
        return None

    changed = []
    for key, value in fields.items():
        if key not in UPDATABLE_FIELDS:
            continue
        if key == "phone":
            value = normalize_phone(value) or None
            if value:
                _ensure_phone_free(value, exclude_pk=customer.pk)
        elif key == "name":
            value = (value or "").strip()
            if not value:
                raise QroyalError("INVALID_INPUT", fields=["name"])
        setattr(customer, key, value)
        changed.append(key)

    if changed:
        customer.save(update_fields=[*changed, "updated_at"])
    return customer


def delete(token: str) -> bool:
    """Delete the customer account and, by cascade, its memberships."""
    deleted, _ = Customer.objects.filter(token=token).delete()
    if deleted:
        logger.info("Customer %s deleted", token)
    return bool(deleted)


def _ensure_phone_free(phone: str, exclude_pk: int) -> None:
    if Customer.objects.filter(phone=phone).exclude(pk=exclude_pk).exists():
        raise QroyalError("DUPLICATE_PHONE")


# ======================================================================
# Memberships
# ======================================================================


def get_or_create_membership(customer: Customer, business: Business) -> tuple[Membership, bool]:
    """
    Find or lazily create the (customer, business) membership.

    membership_created is sent once the surrounding transaction commits.
    """
    membership, created = Membership.objects.get_or_create(
        customer=customer,
        business=business,
    )
    if created:
        transaction.on_commit(lambda: membership_created.send(sender=Membership, membership=membership))
    return membership, created


def join_business(token: str, business_id) -> tuple[Membership, bool]:
    """
    Join a business explicitly (search page or ``join`` link parameter).

    Raises:
        QroyalError: CUSTOMER_NOT_FOUND, BUSINESS_NOT_FOUND
    """
    from qroyal.services import business as business_service

    customer = get_by_token(token)
    if not customer:
        raise QroyalError("CUSTOMER_NOT_FOUND", token=token)
    business = business_service.get(business_id)
    if not business:
        raise QroyalError("BUSINESS_NOT_FOUND", business_id=business_id)
    return get_or_create_membership(customer, business)


def leave_business(token: str, business_id) -> bool:
    """Delete the membership. Returns False when there was none."""
    deleted, _ = Membership.objects.filter(
        customer__token=token,
        business_id=business_id,
    ).delete()
    return bool(deleted)


def memberships(token: str) -> list[Membership]:
    """Memberships of an active customer, most recently updated first."""
    return list(
        Membership.objects.select_related("business").filter(
            customer__token=token,
            customer__is_active=True,
            business__is_active=True,
        )
    )


def snapshot(token: str) -> CustomerSnapshot | None:
    """Current state for polling displays. None when the token is unknown."""
    customer = get_by_token(token)
    if not customer:
        return None

    return CustomerSnapshot(
        token=customer.token,
        name=customer.name,
        phone=customer.phone,
        needs_setup=customer.needs_setup,
        memberships=[
            MembershipSnapshot(
                business_id=m.business_id,
                business_name=m.business.display_name,
                points=m.points,
                reward_threshold=m.business.reward_threshold,
                rewards_earned=m.rewards_earned,
            )
            for m in memberships(token)
        ],
    )

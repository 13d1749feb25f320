"""Discount service - read-only for customers."""

from qroyal.models import Discount
from qroyal.protocols import DiscountInfo


def available(business_id=None, include_global: bool = True) -> list[Discount]:
    """
    Active, unexpired discounts, newest first.

    With ``business_id`` only that business's discounts are returned, plus
    global ones when ``include_global`` is set.
    """
    qs = Discount.objects.available()
    if business_id is not None:
        if include_global:
            qs = qs.filter(business_id=business_id) | qs.filter(business__isnull=True)
        else:
            qs = qs.filter(business_id=business_id)
    return list(qs.order_by("-created_at"))


def get(discount_id) -> Discount | None:
    """Get an available discount by id (for ``discount_id`` links)."""
    try:
        return Discount.objects.available().get(pk=discount_id)
    except (Discount.DoesNotExist, ValueError, TypeError):
        return None


def to_info(discount: Discount) -> DiscountInfo:
    return DiscountInfo(
        id=discount.pk,
        name=discount.name,
        description=discount.description,
        image_url=discount.image_url,
        expiry_date=discount.expiry_date.isoformat() if discount.expiry_date else None,
        percentage=discount.percentage,
        price=str(discount.price) if discount.price is not None else None,
        price_cutoff=str(discount.price_cutoff) if discount.price_cutoff is not None else None,
        business_id=discount.business_id,
    )

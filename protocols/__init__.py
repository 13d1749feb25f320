"""QRoyal protocols."""

from qroyal.protocols.customer import (
    CustomerSnapshot,
    DiscountInfo,
    MembershipSnapshot,
)
from qroyal.protocols.scan import ScanResult

__all__ = [
    # Customer
    "CustomerSnapshot",
    "DiscountInfo",
    "MembershipSnapshot",
    # Scan
    "ScanResult",
]

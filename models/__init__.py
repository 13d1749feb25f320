"""QRoyal models."""

from qroyal.models.business import Business, CornerShape, DotShape
from qroyal.models.customer import Customer
from qroyal.models.membership import Membership, PointTransaction, TransactionType
from qroyal.models.discount import Discount
from qroyal.models.processed_event import ProcessedEvent

__all__ = [
    "Business",
    "CornerShape",
    "DotShape",
    "Customer",
    "Membership",
    "PointTransaction",
    "TransactionType",
    "Discount",
    # Scan replay protection
    "ProcessedEvent",
]

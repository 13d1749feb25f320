"""QRoyal services.

Functional modules:
- qroyal.services.customer: identity, profile, memberships, snapshots
- qroyal.services.business: signup, settings, members, analytics
- qroyal.services.discount: available discounts
- qroyal.services.auth: credential verification

Class-based:
- qroyal.services.award: AwardService (scan -> points -> reward)
"""

from qroyal.services import customer
from qroyal.services import business
from qroyal.services import discount

__all__ = ["customer", "business", "discount"]

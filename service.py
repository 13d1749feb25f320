"""
QRoyal public API.

CORE (essential):
    LoyaltyService.resolve(raw)           - Classify a scanned string
    LoyaltyService.scan(raw, business)    - Resolve and award
    LoyaltyService.award(token, business) - Award one scan of points
    LoyaltyService.customer_state(token)  - Snapshot for polling displays

CONVENIENCE (helpers):
    LoyaltyService.action(raw, at_terminal) - What a scan should do
    LoyaltyService.adjust(...)              - Staff balance correction
"""

from qroyal.models import Business, Membership
from qroyal.protocols import CustomerSnapshot, ScanResult
from qroyal.services import customer as customer_service
from qroyal.services.award import AwardService
from qroyal.tokens import ResolvedToken, ScanAction, action_for, resolve


class LoyaltyService:
    """
    QRoyal public API.

    Uses @classmethod for extensibility. Subclass and override to plug
    in caching or a different award service.
    """

    award_service = AwardService

    # ======================================================================
    # CORE API
    # ======================================================================

    @classmethod
    def resolve(cls, raw: str) -> ResolvedToken:
        """
        Classify a scanned string.

        Accepts a bare token or a URL with a ``token`` query parameter.
        """
        return resolve(raw)

    @classmethod
    def scan(cls, raw: str, business: Business | int, created_by: str = "") -> ScanResult:
        """Resolve a scanned string at a business terminal and award points."""
        return cls.award_service.scan(raw, business, created_by=created_by)

    @classmethod
    def award(cls, customer_token: str, business: Business | int, created_by: str = "") -> ScanResult:
        """Award points to an already-resolved customer token."""
        return cls.award_service.award(customer_token, business, created_by=created_by)

    @classmethod
    def customer_state(cls, token: str) -> CustomerSnapshot | None:
        """Current balances of a customer. None when the token is unknown."""
        return customer_service.snapshot(token)

    # ======================================================================
    # CONVENIENCE API
    # ======================================================================

    @classmethod
    def action(cls, raw: str, at_terminal: bool = False) -> ScanAction:
        """
        Decide what a scan should do.

        At a terminal, customer codes award and business codes log the
        terminal in. On a customer device, a customer code opens that card
        (LOGIN) and a business code joins the business (JOIN).
        """
        return action_for(resolve(raw), at_terminal)

    @classmethod
    def adjust(cls, membership_id: int, delta: int, description: str = "", created_by: str = "") -> Membership:
        """Staff correction of a membership balance (clamped at zero)."""
        return cls.award_service.adjust_points(
            membership_id, delta, description=description, created_by=created_by
        )

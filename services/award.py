"""Award service - turns one scan into points, memberships and rewards."""

import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from qroyal.conf import qroyal_settings
from qroyal.exceptions import QroyalError
from qroyal.gates import GateError, Gates
from qroyal.i18n import translate
from qroyal.models import Business, Membership, PointTransaction, TransactionType
from qroyal.protocols import ScanResult
from qroyal.services import business as business_service
from qroyal.services import customer as customer_service
from qroyal.signals import points_awarded, reward_won
from qroyal.tokens import TokenKind, resolve

logger = logging.getLogger(__name__)


class AwardService:
    """
    Service for the scan -> award flow.

    Uses @classmethod for extensibility (consistent with other services).
    All point mutations run in transaction.atomic() with the membership
    row locked, so concurrent terminals cannot lose an update.
    """

    @classmethod
    def scan(cls, raw: str, business: Business | int, created_by: str = "") -> ScanResult:
        """
        Resolve a scanned string and award points when it is a customer code.

        Args:
            raw: Scanned text (bare token or customer URL)
            business: Scanning business or its primary key
            created_by: Operator/terminal label for the ledger

        Returns:
            ScanResult (failure for business codes, unknown codes and
            replays inside SCAN_REPLAY_WINDOW_SECONDS)
        """
        resolved = resolve(raw)

        if resolved.kind is TokenKind.BUSINESS:
            return ScanResult.failure("NOT_A_CUSTOMER_CODE", translate("not_a_customer_code"))
        if resolved.kind is not TokenKind.CUSTOMER:
            return ScanResult.failure("UNRECOGNIZED_CODE", translate("unrecognized_code"))

        return cls.award(resolved.token, business, created_by=created_by, guard_replay=True)

    @classmethod
    def award(
        cls,
        customer_token: str,
        business: Business | int,
        created_by: str = "",
        guard_replay: bool = False,
    ) -> ScanResult:
        """
        Award one scan's worth of points.

        Steps:
            1. Customer by token (missing -> CUSTOMER_NOT_FOUND, no writes)
            2. Membership found or created (new_member)
            3. With guard_replay, G2 on the locked membership
               (replay -> DUPLICATE_SCAN, no writes)
            4. points += points_per_scan
            5. If points >= reward_threshold: points -= reward_threshold,
               reward_won, rewards_earned += 1
            6. Persist and report

        Any failure rolls back everything, the replay record included, so
        a manual re-scan after an error is accepted.

        Not idempotent: every call adds points.

        Returns:
            ScanResult
        """
        business_id = business.pk if isinstance(business, Business) else business

        try:
            with transaction.atomic():
                customer = customer_service.get_by_token(customer_token)
                if customer is None:
                    return ScanResult.failure("CUSTOMER_NOT_FOUND", translate("customer_not_found"))

                biz = business_service.get(business_id)
                if biz is None:
                    return ScanResult.failure("BUSINESS_NOT_FOUND", translate("business_not_found"))

                membership, new_member = customer_service.get_or_create_membership(customer, biz)
                membership = cls._lock(membership.pk)

                if guard_replay:
                    try:
                        Gates.scan_replay_protection(customer.token, biz.pk)
                    except GateError as exc:
                        logger.warning("Scan rejected: %s", exc.message)
                        # Undo a membership created by this scan
                        transaction.set_rollback(True)
                        return ScanResult.failure("DUPLICATE_SCAN", translate("duplicate_scan"))

                per_scan = biz.points_per_scan or qroyal_settings.DEFAULT_POINTS_PER_SCAN
                threshold = biz.reward_threshold or qroyal_settings.DEFAULT_REWARD_THRESHOLD

                total = membership.points + per_scan
                won = total >= threshold

                PointTransaction.objects.create(
                    membership=membership,
                    transaction_type=TransactionType.EARN,
                    points=per_scan,
                    balance_after=total,
                    created_by=created_by,
                )

                update_fields = ["points", "updated_at"]
                if won:
                    # Overshoot carries over to the next card
                    total -= threshold
                    membership.rewards_earned += 1
                    membership.last_reward_at = timezone.now()
                    update_fields += ["rewards_earned", "last_reward_at"]
                    PointTransaction.objects.create(
                        membership=membership,
                        transaction_type=TransactionType.REWARD,
                        points=-threshold,
                        balance_after=total,
                        description=biz.reward_message[:200],
                        created_by=created_by,
                    )

                membership.points = total
                membership.save(update_fields=update_fields)
        except DatabaseError:
            logger.exception("Award failed for %s at business %s", customer_token, business_id)
            return ScanResult.failure("UNEXPECTED", translate("error_unexpected"))

        if won:
            message = translate("reward_earned", name=customer.name)
        else:
            message = translate("points_awarded", points=per_scan, name=customer.name)

        result = ScanResult(
            success=True,
            message=message,
            customer=customer,
            points_awarded=per_scan,
            new_total=total,
            new_member=new_member,
            reward_won=won,
            reward_message=(biz.reward_message or translate("default_reward_message")) if won else "",
            rewards_earned=membership.rewards_earned,
        )

        logger.info(
            "Awarded %s pts to %s at %s (total=%s, new_member=%s, reward=%s)",
            per_scan,
            customer.token,
            biz.token,
            total,
            new_member,
            won,
        )
        points_awarded.send(sender=Membership, membership=membership, result=result)
        if won:
            reward_won.send(sender=Membership, membership=membership, result=result)
        return result

    @classmethod
    def adjust_points(
        cls,
        membership_id: int,
        delta: int,
        description: str = "",
        created_by: str = "",
    ) -> Membership:
        """
        Staff correction of a balance. The balance never goes below zero.

        Raises:
            QroyalError: MEMBERSHIP_NOT_FOUND
        """
        with transaction.atomic():
            try:
                membership = cls._lock(membership_id)
            except Membership.DoesNotExist:
                raise QroyalError("MEMBERSHIP_NOT_FOUND", membership_id=membership_id)

            new_points = max(0, membership.points + delta)
            applied = new_points - membership.points
            membership.points = new_points
            membership.save(update_fields=["points", "updated_at"])

            PointTransaction.objects.create(
                membership=membership,
                transaction_type=TransactionType.ADJUST,
                points=applied,
                balance_after=new_points,
                description=description,
                created_by=created_by,
            )

        logger.info("Adjusted membership %s by %s (requested %s)", membership_id, applied, delta)
        return membership

    @classmethod
    def history(cls, membership_id: int, limit: int = 50) -> list[PointTransaction]:
        """Ledger of a membership, newest first."""
        return list(PointTransaction.objects.filter(membership_id=membership_id)[:limit])

    @classmethod
    def _lock(cls, membership_id: int) -> Membership:
        """
        Membership with a row-level lock.

        MUST be called inside transaction.atomic().
        """
        return (
            Membership.objects
            .select_for_update()
            .select_related("customer", "business")
            .get(pk=membership_id)
        )

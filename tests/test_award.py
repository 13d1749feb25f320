"""
Tests for the scan -> award flow.

Scenarios:
1. Threshold reached: 9 + 1 at threshold 10 -> 0 and reward_won
2. First scan: new membership with one scan of points
3. Unknown customer: failure, zero writes
4. Overshoot carries over to the next card
5. Database failure: UNEXPECTED, nothing persisted
6. scan(): URLs, business codes, unknown codes, replay window
   (rolled back with a failed award)
7. adjust_points(): clamped at zero, ledger row
"""

from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.utils import translation

from qroyal.models import Membership, PointTransaction, ProcessedEvent, TransactionType
from qroyal.services.award import AwardService
from qroyal.signals import membership_created, points_awarded, reward_won

pytestmark = pytest.mark.django_db


class TestAward:
    """AwardService.award()"""

    def test_threshold_reached_resets_and_rewards(self, customer, business, membership):
        """Membership at 9, threshold 10: one scan stores 0 and wins."""
        result = AwardService.award(customer.token, business.pk)

        assert result.success
        assert result.reward_won
        assert result.new_total == 0
        assert result.points_awarded == 1
        assert not result.new_member
        assert result.reward_message == "Free coffee!"
        assert result.rewards_earned == 1

        membership.refresh_from_db()
        assert membership.points == 0
        assert membership.rewards_earned == 1
        assert membership.last_reward_at is not None

    def test_first_scan_creates_membership(self, customer, business):
        """No membership yet: exactly one is created with one scan of points."""
        result = AwardService.award(customer.token, business.pk)

        assert result.success
        assert result.new_member
        assert not result.reward_won
        assert result.new_total == 1
        assert result.customer == customer

        memberships = Membership.objects.filter(customer=customer, business=business)
        assert memberships.count() == 1
        assert memberships.get().points == 1

    def test_second_scan_is_not_new_member(self, customer, business):
        AwardService.award(customer.token, business.pk)
        result = AwardService.award(customer.token, business.pk)

        assert not result.new_member
        assert result.new_total == 2

    def test_unknown_customer_fails_without_writes(self, business):
        result = AwardService.award("cust_does_not_exist", business.pk)

        assert not result.success
        assert result.error_code == "CUSTOMER_NOT_FOUND"
        assert result.message == "Customer not found."
        assert Membership.objects.count() == 0
        assert PointTransaction.objects.count() == 0
        assert ProcessedEvent.objects.count() == 0

    def test_inactive_customer_is_not_found(self, customer, business):
        customer.is_active = False
        customer.save()

        result = AwardService.award(customer.token, business.pk)
        assert result.error_code == "CUSTOMER_NOT_FOUND"

    def test_unknown_business_fails_without_writes(self, customer):
        result = AwardService.award(customer.token, 999999)

        assert not result.success
        assert result.error_code == "BUSINESS_NOT_FOUND"
        assert Membership.objects.count() == 0

    def test_accepts_business_instance(self, customer, business):
        result = AwardService.award(customer.token, business)
        assert result.success

    def test_overshoot_carries_over(self, customer, other_business):
        """3 points per scan, threshold 5: 3 -> 6-5=1 -> 4 -> 7-5=2."""
        totals = [AwardService.award(customer.token, other_business.pk) for _ in range(4)]

        assert [r.new_total for r in totals] == [3, 1, 4, 2]
        assert [r.reward_won for r in totals] == [False, True, False, True]

        membership = Membership.objects.get(customer=customer, business=other_business)
        assert membership.points == 2
        assert membership.rewards_earned == 2

    def test_multiple_thresholds_subtract_once(self, customer, business):
        """Balance already above the threshold loses one threshold per scan."""
        Membership.objects.create(customer=customer, business=business, points=25)

        result = AwardService.award(customer.token, business.pk)

        assert result.reward_won
        assert result.new_total == 16

    def test_default_reward_message(self, customer, business, membership):
        business.reward_message = ""
        business.save()

        result = AwardService.award(customer.token, business.pk)
        assert result.reward_message.startswith("You have earned a free gift!")

    def test_ledger_rows(self, customer, business, membership):
        AwardService.award(customer.token, business.pk, created_by="terminal:1")

        rows = list(PointTransaction.objects.filter(membership=membership).order_by("id"))
        assert [r.transaction_type for r in rows] == [TransactionType.EARN, TransactionType.REWARD]
        assert rows[0].points == 1
        assert rows[0].balance_after == 10
        assert rows[1].points == -10
        assert rows[1].balance_after == 0
        assert all(r.created_by == "terminal:1" for r in rows)

    def test_database_error_is_unexpected(self, customer, business, membership):
        with patch(
            "qroyal.services.award.customer_service.get_or_create_membership",
            side_effect=DatabaseError("connection lost"),
        ):
            result = AwardService.award(customer.token, business.pk)

        assert not result.success
        assert result.error_code == "UNEXPECTED"
        assert result.message == "An unexpected error occurred."
        membership.refresh_from_db()
        assert membership.points == 9

    def test_messages_follow_active_language(self, customer, business):
        with translation.override("el"):
            result = AwardService.award(customer.token, business.pk)
        assert result.message == f"+1 πόντοι για {customer.name}!"

    def test_success_message(self, customer, business):
        result = AwardService.award(customer.token, business.pk)
        assert result.message == f"+1 points for {customer.name}!"

    def test_as_dict(self, customer, business, membership):
        data = AwardService.award(customer.token, business.pk).as_dict()

        assert data["success"] is True
        assert data["customer"]["token"] == customer.token
        assert data["new_total"] == 0
        assert data["reward_won"] is True

    def test_failure_as_dict_has_no_award_fields(self, business):
        data = AwardService.award("cust_missing", business.pk).as_dict()
        assert data == {
            "success": False,
            "message": "Customer not found.",
            "error_code": "CUSTOMER_NOT_FOUND",
        }


class TestAwardSignals:
    def _record(self, received):
        receivers = {}
        for name, signal in (
            ("membership_created", membership_created),
            ("points_awarded", points_awarded),
            ("reward_won", reward_won),
        ):
            receivers[signal] = lambda sender, _name=name, **kwargs: received.append(_name)
            signal.connect(receivers[signal])
        return receivers

    def _disconnect(self, receivers):
        for signal, receiver in receivers.items():
            signal.disconnect(receiver)

    def test_signals_for_new_member_and_reward(self, customer, other_business, django_capture_on_commit_callbacks):
        received = []
        receivers = self._record(received)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                AwardService.award(customer.token, other_business.pk)
            with django_capture_on_commit_callbacks(execute=True):
                AwardService.award(customer.token, other_business.pk)
        finally:
            self._disconnect(receivers)

        assert received.count("membership_created") == 1
        assert received.count("points_awarded") == 2
        assert received[-1] == "reward_won"

    def test_rolled_back_award_announces_no_membership(
        self, customer, business, django_capture_on_commit_callbacks
    ):
        received = []
        receivers = self._record(received)
        try:
            with django_capture_on_commit_callbacks(execute=True) as callbacks:
                with patch.object(PointTransaction.objects, "create", side_effect=DatabaseError("disk full")):
                    result = AwardService.award(customer.token, business.pk)
        finally:
            self._disconnect(receivers)

        assert result.error_code == "UNEXPECTED"
        assert callbacks == []
        assert received == []
        assert Membership.objects.count() == 0


class TestScan:
    """AwardService.scan() resolves before awarding."""

    def test_bare_token(self, customer, business):
        result = AwardService.scan(customer.token, business)
        assert result.success
        assert result.new_total == 1

    def test_customer_url(self, customer, business):
        result = AwardService.scan(f"https://cards.example/customer?token={customer.token}&join=1", business)
        assert result.success

    def test_business_code_is_rejected(self, business):
        result = AwardService.scan(business.token, business)

        assert not result.success
        assert result.error_code == "NOT_A_CUSTOMER_CODE"
        assert Membership.objects.count() == 0

    def test_unrecognized_code_is_rejected(self, business):
        result = AwardService.scan("https://example.com/menu", business)

        assert not result.success
        assert result.error_code == "UNRECOGNIZED_CODE"

    def test_no_dedupe_by_default(self, customer, business):
        """Re-scanning awards again unless a replay window is configured."""
        AwardService.scan(customer.token, business)
        result = AwardService.scan(customer.token, business)

        assert result.success
        assert result.new_total == 2

    def test_replay_window_rejects_second_scan(self, customer, business, settings):
        settings.QROYAL = {"SCAN_REPLAY_WINDOW_SECONDS": 3600}

        first = AwardService.scan(customer.token, business)
        second = AwardService.scan(customer.token, business)

        assert first.success
        assert not second.success
        assert second.error_code == "DUPLICATE_SCAN"
        assert Membership.objects.get(customer=customer, business=business).points == 1

    def test_replay_window_is_per_business(self, customer, business, other_business, settings):
        settings.QROYAL = {"SCAN_REPLAY_WINDOW_SECONDS": 3600}

        assert AwardService.scan(customer.token, business).success
        assert AwardService.scan(customer.token, other_business).success

    def test_replay_window_unknown_customer_writes_nothing(self, business, settings):
        settings.QROYAL = {"SCAN_REPLAY_WINDOW_SECONDS": 3600}

        result = AwardService.scan("cust_missing", business)

        assert result.error_code == "CUSTOMER_NOT_FOUND"
        assert ProcessedEvent.objects.count() == 0
        assert Membership.objects.count() == 0

    def test_rescan_after_unexpected_error_is_accepted(self, customer, business, membership, settings):
        """A failed award does not use up the replay window."""
        settings.QROYAL = {"SCAN_REPLAY_WINDOW_SECONDS": 3600}

        with patch.object(PointTransaction.objects, "create", side_effect=DatabaseError("disk full")):
            failed = AwardService.scan(customer.token, business)

        assert failed.error_code == "UNEXPECTED"
        assert ProcessedEvent.objects.count() == 0

        retry = AwardService.scan(customer.token, business)

        assert retry.success
        assert retry.reward_won
        assert ProcessedEvent.objects.count() == 1

    def test_duplicate_scan_makes_no_writes(self, customer, business, settings):
        settings.QROYAL = {"SCAN_REPLAY_WINDOW_SECONDS": 3600}
        AwardService.scan(customer.token, business)

        AwardService.scan(customer.token, business)

        assert PointTransaction.objects.count() == 1
        assert ProcessedEvent.objects.count() == 1

    def test_plain_award_ignores_replay_window(self, customer, business, settings):
        settings.QROYAL = {"SCAN_REPLAY_WINDOW_SECONDS": 3600}

        AwardService.award(customer.token, business.pk)
        result = AwardService.award(customer.token, business.pk)

        assert result.success
        assert result.new_total == 2


class TestAdjustPoints:
    def test_adjust_adds_and_logs(self, membership):
        updated = AwardService.adjust_points(membership.pk, 3, description="birthday", created_by="admin")

        assert updated.points == 12
        row = PointTransaction.objects.get(membership=membership, transaction_type=TransactionType.ADJUST)
        assert row.points == 3
        assert row.balance_after == 12
        assert row.description == "birthday"

    def test_adjust_never_below_zero(self, membership):
        updated = AwardService.adjust_points(membership.pk, -50)

        assert updated.points == 0
        row = PointTransaction.objects.get(membership=membership, transaction_type=TransactionType.ADJUST)
        assert row.points == -9

    def test_adjust_unknown_membership(self, db):
        from qroyal.exceptions import QroyalError

        with pytest.raises(QroyalError) as exc_info:
            AwardService.adjust_points(424242, 1)
        assert exc_info.value.code == "MEMBERSHIP_NOT_FOUND"

    def test_history_newest_first(self, customer, business, membership):
        AwardService.award(customer.token, business.pk)
        AwardService.adjust_points(membership.pk, 2)

        history = AwardService.history(membership.pk)
        assert history[0].transaction_type == TransactionType.ADJUST
        assert len(history) == 3

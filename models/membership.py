"""Membership models: per (customer, business) balance and its ledger."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class TransactionType(models.TextChoices):
    """Point transaction types."""

    EARN = "earn", _("Earn")
    REWARD = "reward", _("Reward")
    ADJUST = "adjust", _("Adjustment")


class Membership(models.Model):
    """
    Customer membership in one business.

    At most one per (customer, business). Created lazily on the first scan
    or when the customer joins explicitly.

    rewards_earned only grows. Displays compare it between polls to detect
    a reward instead of inferring one from a lower balance.
    """

    customer = models.ForeignKey(
        "qroyal.Customer",
        on_delete=models.CASCADE,
        related_name="memberships",
        verbose_name=_("customer"),
    )
    business = models.ForeignKey(
        "qroyal.Business",
        on_delete=models.CASCADE,
        related_name="memberships",
        verbose_name=_("business"),
    )

    points = models.PositiveIntegerField(_("points"), default=0)
    rewards_earned = models.PositiveIntegerField(_("rewards earned"), default=0)
    last_reward_at = models.DateTimeField(_("last reward at"), null=True, blank=True)

    created_at = models.DateTimeField(_("joined at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("membership")
        verbose_name_plural = _("memberships")
        ordering = ["-updated_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["customer", "business"],
                name="qroyal_unique_membership",
            ),
        ]

    def __str__(self):
        return f"{self.customer.token} @ {self.business.token}: {self.points}pts"

    @property
    def points_to_reward(self) -> int:
        return max(0, self.business.reward_threshold - self.points)


class PointTransaction(models.Model):
    """
    Immutable record of a point change.

    Every scan, reward and manual adjustment is logged here.
    Transactions are append-only.
    """

    membership = models.ForeignKey(
        Membership,
        on_delete=models.CASCADE,
        related_name="transactions",
        verbose_name=_("membership"),
    )
    transaction_type = models.CharField(
        _("type"),
        max_length=20,
        choices=TransactionType.choices,
    )
    points = models.IntegerField(
        _("points"),
        help_text=_("Positive for earn, negative for reward or correction"),
    )
    balance_after = models.PositiveIntegerField(_("balance after"))
    description = models.CharField(_("description"), max_length=200, blank=True)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)
    created_by = models.CharField(_("created by"), max_length=100, blank=True)

    class Meta:
        verbose_name = _("point transaction")
        verbose_name_plural = _("point transactions")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["membership", "-created_at"], name="qroyal_poin_members_5c1e0a_idx"),
        ]

    def __str__(self):
        sign = "+" if self.points > 0 else ""
        return f"{sign}{self.points}pts ({self.transaction_type})"

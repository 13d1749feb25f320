"""
Polling presenter for customer displays.

Keeps a customer card eventually consistent with points awarded by a
business terminal, without a push channel:

    presenter = PollingPresenter(
        fetch=lambda: customer_service.snapshot(token),
        on_reward=show_celebration,
        is_visible=lambda: screen.visible,
    )
    presenter.run()        # loops until presenter.stop()

Rewards are detected per membership from the ``rewards_earned`` counter.
When a snapshot carries no counter, a drop in points is taken as a
reward (the balance was reset at the threshold).
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from qroyal.conf import qroyal_settings
from qroyal.protocols import CustomerSnapshot, MembershipSnapshot

logger = logging.getLogger(__name__)


def reward_detected(previous: MembershipSnapshot, current: MembershipSnapshot) -> bool:
    """Whether ``current`` shows a reward that ``previous`` did not."""
    if previous.rewards_earned is not None and current.rewards_earned is not None:
        return current.rewards_earned > previous.rewards_earned
    return current.points < previous.points


class PollingPresenter:
    """
    Fixed-interval re-fetch of one customer's snapshot.

    Single-threaded: tick() is called by run() or by an external timer.
    A tick is skipped when the display is not visible (before fetching),
    while another fetch is in flight, or after stop(). Snapshots that
    arrive after stop() are ignored.
    """

    def __init__(
        self,
        fetch: Callable[[], CustomerSnapshot | None],
        on_reward: Callable[[MembershipSnapshot], None],
        is_visible: Callable[[], bool] | None = None,
        interval: float | None = None,
        on_update: Callable[[CustomerSnapshot], None] | None = None,
    ):
        self.fetch = fetch
        self.on_reward = on_reward
        self.is_visible = is_visible or (lambda: True)
        self.interval = interval if interval is not None else qroyal_settings.POLL_INTERVAL_SECONDS
        self.on_update = on_update
        self.snapshot: CustomerSnapshot | None = None
        self._observed: dict[int, MembershipSnapshot] = {}
        self._in_flight = False
        self._stopped = False

    @classmethod
    def for_token(cls, token: str, on_reward, **kwargs) -> PollingPresenter:
        """Presenter reading straight from the customer service."""
        from qroyal.services import customer as customer_service

        return cls(fetch=lambda: customer_service.snapshot(token), on_reward=on_reward, **kwargs)

    @property
    def stopped(self) -> bool:
        return self._stopped

    def tick(self) -> bool:
        """
        Poll once.

        Returns:
            True when a snapshot was fetched and applied
        """
        if self._stopped or self._in_flight or not self.is_visible():
            return False

        self._in_flight = True
        try:
            snapshot = self.fetch()
        except Exception:
            # Keep the last good state; the next tick retries
            logger.warning("Customer snapshot fetch failed", exc_info=True)
            return False
        finally:
            self._in_flight = False

        if snapshot is None:
            return False
        return self.apply(snapshot)

    def apply(self, snapshot: CustomerSnapshot) -> bool:
        """Apply a fetched snapshot. Returns False when ignored (stopped)."""
        if self._stopped:
            return False

        rewarded = []
        for membership in snapshot.memberships:
            previous = self._observed.get(membership.business_id)
            if previous is not None and reward_detected(previous, membership):
                rewarded.append(membership)
            self._observed[membership.business_id] = membership

        self.snapshot = snapshot
        if self.on_update is not None:
            self.on_update(snapshot)
        for membership in rewarded:
            logger.info("Reward detected for %s at business %s", snapshot.token, membership.business_id)
            self.on_reward(membership)
        return True

    def run(self, sleep: Callable[[float], None] = time.sleep) -> None:
        """Tick every ``interval`` seconds until stop()."""
        while not self._stopped:
            self.tick()
            if self._stopped:
                break
            sleep(self.interval)

    def stop(self) -> None:
        """Tear down. Late snapshots are ignored from now on."""
        self._stopped = True

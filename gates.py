"""
QRoyal Gates - Validation rules.

G1: LoyaltyRules - points_per_scan and reward_threshold are positive integers
G2: ScanReplayProtection - same code at the same business within a sliding window
G3: LoginRateLimit - bounded failed login attempts per identity
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from datetime import timezone as dt_timezone

from django.core.cache import cache
from django.db import IntegrityError, transaction
from django.utils import timezone

from qroyal.conf import qroyal_settings

logger = logging.getLogger(__name__)


class GateError(Exception):
    """Gate validation error."""

    def __init__(self, gate_name: str, message: str, details: dict | None = None):
        self.gate_name = gate_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{gate_name}] {message}")


@dataclass
class GateResult:
    """Result of a gate check."""

    passed: bool
    gate_name: str
    message: str = ""


# =============================================================================
# Gates
# =============================================================================


class Gates:
    """QRoyal validation gates."""

    # =========================================================================
    # G1: Loyalty Rules
    # =========================================================================

    @classmethod
    def loyalty_rules(cls, points_per_scan, reward_threshold) -> GateResult:
        """
        G1: Loyalty rules must be positive integers.

        Args:
            points_per_scan: Points added by each scan
            reward_threshold: Balance that triggers a reward

        Raises:
            GateError: If either value is not an integer >= 1
        """
        invalid = {}
        for name, value in (
            ("points_per_scan", points_per_scan),
            ("reward_threshold", reward_threshold),
        ):
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                invalid[name] = value

        if invalid:
            raise GateError(
                "G1_LoyaltyRules",
                "Loyalty rules must be positive integers.",
                {"invalid": invalid},
            )

        return GateResult(True, "G1_LoyaltyRules")

    @classmethod
    def check_loyalty_rules(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.loyalty_rules(*args, **kwargs)
            return True
        except GateError:
            return False

    # =========================================================================
    # G2: Scan Replay Protection (persistent via DB)
    # =========================================================================

    @classmethod
    def scan_replay_protection(
        cls,
        token: str,
        business_id,
        window_seconds: int | None = None,
        now: float | None = None,
    ) -> GateResult:
        """
        G2: The same code cannot be scanned twice at one business within the window.

        Each accepted scan is stored in ProcessedEvent, so the check holds
        across servers. A scan is rejected when an earlier one for the same
        (business, token) happened less than ``window_seconds`` ago. A
        window of 0 disables the gate.

        Run it inside the award transaction, after the membership row is
        locked: concurrent scans are serialized and a failed award rolls
        the record back.

        Args:
            token: Customer token
            business_id: Scanning business primary key
            window_seconds: Override SCAN_REPLAY_WINDOW_SECONDS
            now: Unix time (for tests)

        Raises:
            GateError: If the code was already scanned within the window
        """
        from qroyal.models import ProcessedEvent

        if window_seconds is None:
            window_seconds = qroyal_settings.SCAN_REPLAY_WINDOW_SECONDS
        if not window_seconds or window_seconds <= 0:
            return GateResult(True, "G2_ScanReplayProtection", "Disabled")

        moment = datetime.fromtimestamp(now, tz=dt_timezone.utc) if now is not None else timezone.now()
        prefix = f"scan:{business_id}:{token}:"

        recent = ProcessedEvent.objects.filter(
            provider="scan",
            nonce__startswith=prefix,
            processed_at__gt=moment - timedelta(seconds=window_seconds),
        )
        if recent.exists():
            raise GateError(
                "G2_ScanReplayProtection",
                "Code already scanned within the replay window.",
                {"token": token, "business_id": business_id, "window_seconds": window_seconds},
            )

        nonce = f"{prefix}{moment.timestamp():.6f}"
        # Unique constraint on nonce rejects an identical concurrent scan
        try:
            with transaction.atomic():
                ProcessedEvent.objects.create(nonce=nonce, provider="scan", processed_at=moment)
        except IntegrityError:
            if ProcessedEvent.objects.filter(nonce=nonce).exists():
                raise GateError(
                    "G2_ScanReplayProtection",
                    "Code already scanned within the replay window.",
                    {"token": token, "business_id": business_id, "window_seconds": window_seconds},
                )
            raise

        return GateResult(True, "G2_ScanReplayProtection")

    @classmethod
    def check_scan_replay_protection(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.scan_replay_protection(*args, **kwargs)
            return True
        except GateError:
            return False

    # =========================================================================
    # G3: Login Rate Limit
    # =========================================================================

    @classmethod
    def _attempts_key(cls, identity: str) -> str:
        return f"qroyal:login-attempts:{identity.lower().strip()}"

    @classmethod
    def login_rate_limit(cls, identity: str) -> GateResult:
        """
        G3: Identity must not be locked out by failed attempts.

        Args:
            identity: Email, phone or token used to log in

        Raises:
            GateError: If LOGIN_MAX_ATTEMPTS failures happened within
                LOGIN_LOCKOUT_SECONDS
        """
        attempts = cache.get(cls._attempts_key(identity), 0)
        max_attempts = qroyal_settings.LOGIN_MAX_ATTEMPTS
        if max_attempts and attempts >= max_attempts:
            logger.warning("G3_LoginRateLimit: %s locked out (%s attempts)", identity, attempts)
            raise GateError(
                "G3_LoginRateLimit",
                "Too many failed login attempts.",
                {"attempts": attempts, "retry_after": qroyal_settings.LOGIN_LOCKOUT_SECONDS},
            )
        return GateResult(True, "G3_LoginRateLimit")

    @classmethod
    def check_login_rate_limit(cls, identity: str) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.login_rate_limit(identity)
            return True
        except GateError:
            return False

    @classmethod
    def record_login_failure(cls, identity: str) -> int:
        """Count a failed attempt. Returns the new count."""
        key = cls._attempts_key(identity)
        timeout = qroyal_settings.LOGIN_LOCKOUT_SECONDS
        if cache.add(key, 1, timeout):
            return 1
        try:
            return cache.incr(key)
        except ValueError:
            # Expired between add() and incr()
            cache.set(key, 1, timeout)
            return 1

    @classmethod
    def reset_login_failures(cls, identity: str) -> None:
        cache.delete(cls._attempts_key(identity))

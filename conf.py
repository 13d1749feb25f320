"""
QRoyal configuration.

Usage in settings.py:
    QROYAL = {
        "DEFAULT_REWARD_THRESHOLD": 10,
        "SCAN_REPLAY_WINDOW_SECONDS": 5,
        "PUBLIC_BASE_URL": "https://loyalty.example.com",
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class QroyalSettings:
    """QRoyal configuration settings."""

    # Loyalty rules used when a business has not configured its own
    DEFAULT_POINTS_PER_SCAN: int = 1
    DEFAULT_REWARD_THRESHOLD: int = 5

    # Customer display refresh
    POLL_INTERVAL_SECONDS: float = 3.0

    # Same token at the same business inside this window is rejected (0 = off)
    SCAN_REPLAY_WINDOW_SECONDS: int = 0

    # Sessions and credentials
    SESSION_TTL_SECONDS: int = 8 * 60 * 60
    LOGIN_MAX_ATTEMPTS: int = 5
    LOGIN_LOCKOUT_SECONDS: int = 300
    ALLOW_QR_LOGIN: bool = True

    # ProcessedEvent cleanup
    EVENT_CLEANUP_DAYS: int = 90

    # PostgreSQL only
    DB_STATEMENT_TIMEOUT_MS: int = 5000

    # QR rendering
    QR_BOX_SIZE: int = 10
    QR_BORDER: int = 4
    QR_LOGO_TIMEOUT_SECONDS: float = 5.0

    # Customer-facing links
    PUBLIC_BASE_URL: str = ""
    PROVISIONAL_CUSTOMER_NAME: str = "New Customer"

    # Translation fallback
    DEFAULT_LANGUAGE: str = "en"


def get_qroyal_settings() -> QroyalSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "QROYAL", {})
    return QroyalSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_qroyal_settings(), name)


qroyal_settings = _LazySettings()

"""
Loyalty sessions for business terminals and customer devices.

The session lives in the Django session under SESSION_KEY:

    {"kind": "business", "subject_id": 3, "token": "biz_...", "expires_at": 1760000000}

Middleware:
    MIDDLEWARE = [
        "django.contrib.sessions.middleware.SessionMiddleware",
        "qroyal.sessions.LoyaltySessionMiddleware",
    ]
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from functools import wraps

from django.http import JsonResponse

from qroyal.conf import qroyal_settings
from qroyal.i18n import translate

logger = logging.getLogger(__name__)

SESSION_KEY = "qroyal_session"

BUSINESS = "business"
CUSTOMER = "customer"


@dataclass(frozen=True)
class LoyaltySession:
    """Who is logged in on this device, and until when."""

    kind: str
    subject_id: int
    token: str
    expires_at: float

    @property
    def is_business(self) -> bool:
        return self.kind == BUSINESS

    @property
    def is_customer(self) -> bool:
        return self.kind == CUSTOMER

    def is_expired(self, now: float | None = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at

    @classmethod
    def open(cls, request, kind: str, subject) -> LoyaltySession:
        """Store a new session for a Business or Customer and rotate the session key."""
        session = cls(
            kind=kind,
            subject_id=subject.pk,
            token=subject.token,
            expires_at=time.time() + qroyal_settings.SESSION_TTL_SECONDS,
        )
        request.session.cycle_key()
        request.session[SESSION_KEY] = asdict(session)
        request.loyalty_session = session
        logger.info("Opened %s session for %s", kind, subject.token)
        return session

    @classmethod
    def current(cls, request) -> LoyaltySession | None:
        """The stored session, or None. Expired or malformed sessions are dropped."""
        data = request.session.get(SESSION_KEY)
        if not data:
            return None
        try:
            session = cls(**data)
        except TypeError:
            logger.warning("Dropping malformed loyalty session")
            request.session.pop(SESSION_KEY, None)
            return None
        if session.is_expired():
            request.session.pop(SESSION_KEY, None)
            return None
        return session

    @classmethod
    def close(cls, request) -> None:
        request.session.pop(SESSION_KEY, None)
        request.session.flush()
        request.loyalty_session = None


class LoyaltySessionMiddleware:
    """Sets ``request.loyalty_session`` (LoyaltySession or None)."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.loyalty_session = LoyaltySession.current(request)
        return self.get_response(request)


def _session_of(request) -> LoyaltySession | None:
    session = getattr(request, "loyalty_session", None)
    if session is None and hasattr(request, "session"):
        session = LoyaltySession.current(request)
    return session


def _session_required(kind: str):
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            session = _session_of(request)
            if session is None or session.kind != kind:
                return JsonResponse(
                    {"error_code": "LOGIN_REQUIRED", "message": translate("login_required")},
                    status=401,
                )
            request.loyalty_session = session
            return view_func(request, *args, **kwargs)

        return _wrapped

    return decorator


# Reject the request with 401 JSON unless a session of that kind is open
business_required = _session_required(BUSINESS)
customer_required = _session_required(CUSTOMER)

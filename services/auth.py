"""Credential verification.

Passwords are Django hashes. Every failed attempt counts against G3 and
all failures surface as INVALID_CREDENTIALS, whether the account is
missing or the password is wrong.
"""

import logging

from django.contrib.auth.hashers import make_password

from qroyal.conf import qroyal_settings
from qroyal.exceptions import QroyalError
from qroyal.gates import Gates
from qroyal.models import Business, Customer
from qroyal.services import business as business_service
from qroyal.services import customer as customer_service
from qroyal.tokens import TokenKind, resolve

logger = logging.getLogger(__name__)


def _reject(identity: str) -> QroyalError:
    count = Gates.record_login_failure(identity)
    logger.warning("Failed login for %s (%s attempts)", identity, count)
    return QroyalError("INVALID_CREDENTIALS")


def authenticate_business(email: str, password: str) -> Business:
    """
    Verify business email and password.

    Raises:
        GateError: G3_LoginRateLimit when locked out
        QroyalError: INVALID_CREDENTIALS
    """
    identity = (email or "").lower().strip()
    Gates.login_rate_limit(identity)

    business = business_service.get_by_email(identity) if identity else None
    if business is None:
        # Same hashing cost as a real check
        make_password(password or "")
        raise _reject(identity)
    if not password or not business.check_password(password):
        raise _reject(identity)

    Gates.reset_login_failures(identity)
    logger.info("Business %s logged in", business.token)
    return business


def authenticate_business_code(scanned: str, password: str) -> Business:
    """
    Log a terminal in with a scanned business code and the business password.

    Business codes are public (customers scan them to join), so the code
    only stands in for the email address.

    Raises:
        QroyalError: INVALID_CREDENTIALS (also when QR login is disabled)
        GateError: G3_LoginRateLimit
    """
    resolved = resolve(scanned)
    identity = resolved.token
    Gates.login_rate_limit(identity)

    if not qroyal_settings.ALLOW_QR_LOGIN or resolved.kind is not TokenKind.BUSINESS:
        raise _reject(identity)

    business = business_service.get_by_token(resolved.token)
    if business is None:
        make_password(password or "")
        raise _reject(identity)
    if not password or not business.check_password(password):
        raise _reject(identity)

    Gates.reset_login_failures(identity)
    logger.info("Business %s logged in with QR code", business.token)
    return business


def authenticate_customer(phone: str, password: str) -> Customer:
    """
    Verify customer phone and password.

    Raises:
        GateError: G3_LoginRateLimit
        QroyalError: INVALID_CREDENTIALS
    """
    identity = (phone or "").strip()
    Gates.login_rate_limit(identity)

    customer = customer_service.get_by_phone(identity)
    if customer is None:
        # Same hashing cost as a real check
        make_password(password or "")
        raise _reject(identity)
    if not password or not customer.check_password(password):
        raise _reject(identity)

    Gates.reset_login_failures(identity)
    return customer

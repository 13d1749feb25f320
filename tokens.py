"""
Identity tokens.

Tokens are opaque strings identifying a Customer (``cust_``) or a Business
(``biz_``). They are printed into QR images either bare or inside a
customer-facing URL:

    cust_k3j9x0q2m7
    https://loyalty.example.com/customer?token=cust_k3j9x0q2m7&join=42

Classification is driven by the prefix only, never by the URL path.
"""

import secrets
from dataclasses import dataclass
from enum import Enum
from urllib.parse import parse_qs, urlencode, urlsplit

CUSTOMER_PREFIX = "cust_"
BUSINESS_PREFIX = "biz_"

TOKEN_PARAM = "token"
JOIN_PARAM = "join"
DISCOUNT_PARAM = "discount_id"


class TokenKind(str, Enum):
    CUSTOMER = "customer"
    BUSINESS = "business"
    UNRECOGNIZED = "unrecognized"


class ScanAction(str, Enum):
    AWARD = "award"
    LOGIN = "login"
    JOIN = "join"
    IGNORE = "ignore"


@dataclass(frozen=True)
class ResolvedToken:
    """Classification of a scanned string."""

    kind: TokenKind
    token: str

    @property
    def is_customer(self) -> bool:
        return self.kind is TokenKind.CUSTOMER

    @property
    def is_business(self) -> bool:
        return self.kind is TokenKind.BUSINESS


@dataclass(frozen=True)
class CustomerLink:
    """Parameters carried by a customer-facing URL."""

    token: str | None
    join: str | None = None
    discount_id: str | None = None


def _query_params(raw: str) -> dict[str, list[str]] | None:
    """Query parameters of an absolute URL, or None when raw is not one."""
    try:
        parts = urlsplit(raw)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return parse_qs(parts.query, keep_blank_values=True)


def classify(candidate: str) -> TokenKind:
    if candidate.startswith(CUSTOMER_PREFIX):
        return TokenKind.CUSTOMER
    if candidate.startswith(BUSINESS_PREFIX):
        return TokenKind.BUSINESS
    return TokenKind.UNRECOGNIZED


def resolve(raw: str) -> ResolvedToken:
    """
    Classify a scanned or URL-supplied string.

    A URL carrying a ``token`` parameter contributes that value; anything
    else is taken verbatim. Never raises: malformed input comes back as
    ``TokenKind.UNRECOGNIZED``.

    Args:
        raw: Bare token or absolute URL

    Returns:
        ResolvedToken with the kind and the extracted candidate token
    """
    candidate = (raw or "").strip()

    params = _query_params(candidate)
    if params and TOKEN_PARAM in params:
        candidate = params[TOKEN_PARAM][0].strip()

    return ResolvedToken(kind=classify(candidate), token=candidate)


def action_for(resolved: ResolvedToken, at_terminal: bool) -> ScanAction:
    """
    Logical action for a resolved code.

    At a business terminal a customer code earns points and a business code
    logs the terminal in. On a customer device a business code joins that
    business and the customer's own code opens their card.
    """
    if resolved.kind is TokenKind.CUSTOMER:
        return ScanAction.AWARD if at_terminal else ScanAction.LOGIN
    if resolved.kind is TokenKind.BUSINESS:
        return ScanAction.LOGIN if at_terminal else ScanAction.JOIN
    return ScanAction.IGNORE


def parse_customer_link(url: str) -> CustomerLink:
    """Extract token, join and discount_id from a customer-facing URL."""
    params = _query_params((url or "").strip())
    if params is None:
        # Relative links such as "/customer?token=..."
        try:
            params = parse_qs(urlsplit(url or "").query, keep_blank_values=True)
        except ValueError:
            params = {}

    def first(name):
        values = params.get(name)
        return values[0] if values and values[0] else None

    return CustomerLink(
        token=first(TOKEN_PARAM),
        join=first(JOIN_PARAM),
        discount_id=first(DISCOUNT_PARAM),
    )


def build_customer_url(
    token: str,
    join: str | int | None = None,
    discount_id: str | int | None = None,
    base_url: str | None = None,
) -> str:
    """Customer card URL embedded in customer QR codes."""
    if base_url is None:
        from qroyal.conf import qroyal_settings

        base_url = qroyal_settings.PUBLIC_BASE_URL

    params = {TOKEN_PARAM: token}
    if join is not None:
        params[JOIN_PARAM] = str(join)
    if discount_id is not None:
        params[DISCOUNT_PARAM] = str(discount_id)
    return f"{base_url.rstrip('/')}/customer?{urlencode(params)}"


def _new_token(prefix: str) -> str:
    return f"{prefix}{secrets.token_urlsafe(12)}"


def new_customer_token() -> str:
    return _new_token(CUSTOMER_PREFIX)


def new_business_token() -> str:
    return _new_token(BUSINESS_PREFIX)

"""Tests for token resolution and customer links."""

import pytest

from qroyal.tokens import (
    BUSINESS_PREFIX,
    CUSTOMER_PREFIX,
    CustomerLink,
    ResolvedToken,
    ScanAction,
    TokenKind,
    action_for,
    build_customer_url,
    classify,
    new_business_token,
    new_customer_token,
    parse_customer_link,
    resolve,
)


class TestResolve:
    """resolve() classifies bare tokens and URLs by prefix."""

    @pytest.mark.parametrize(
        "raw,kind",
        [
            ("cust_abc123", TokenKind.CUSTOMER),
            ("biz_abc123", TokenKind.BUSINESS),
            ("hello", TokenKind.UNRECOGNIZED),
            ("", TokenKind.UNRECOGNIZED),
            ("CUST_abc", TokenKind.UNRECOGNIZED),
        ],
    )
    def test_bare_tokens(self, raw, kind):
        assert resolve(raw).kind is kind

    def test_bare_token_is_returned_verbatim(self):
        assert resolve("cust_abc123") == ResolvedToken(TokenKind.CUSTOMER, "cust_abc123")

    def test_surrounding_whitespace_is_stripped(self):
        assert resolve("  cust_abc123\n").token == "cust_abc123"

    def test_url_token_matches_bare_token(self):
        """A URL carrying ?token=cust_X resolves exactly like cust_X."""
        url = "https://loyalty.example.com/customer?token=cust_X9&join=4"
        assert resolve(url) == resolve("cust_X9")

    def test_classification_ignores_url_path(self):
        """Prefix decides, even when the path says /customer."""
        result = resolve("https://x/customer?token=biz_abc")
        assert result.kind is TokenKind.BUSINESS
        assert result.token == "biz_abc"

    def test_unknown_token_param_is_not_retried_against_raw(self):
        """The raw URL contains cust_ but the token parameter decides."""
        result = resolve("https://x/cust_page?token=other_123")
        assert result.kind is TokenKind.UNRECOGNIZED
        assert result.token == "other_123"

    def test_url_without_token_param_uses_raw_string(self):
        result = resolve("https://x/customer?join=3")
        assert result.kind is TokenKind.UNRECOGNIZED
        assert result.token == "https://x/customer?join=3"

    def test_malformed_url_never_raises(self):
        """Invalid IPv6 netloc makes urlsplit raise; resolve swallows it."""
        result = resolve("http://[::1/customer?token=cust_x")
        assert result.kind is TokenKind.UNRECOGNIZED

    def test_none_is_unrecognized(self):
        assert resolve(None).kind is TokenKind.UNRECOGNIZED

    def test_resolve_is_idempotent(self):
        raw = "https://x/customer?token=cust_abc"
        assert resolve(raw) == resolve(raw)
        assert resolve(resolve(raw).token) == resolve(raw)

    def test_resolved_token_helpers(self):
        assert resolve("cust_a").is_customer
        assert resolve("biz_a").is_business
        assert not resolve("nope").is_customer


class TestClassify:
    def test_prefixes(self):
        assert classify(f"{CUSTOMER_PREFIX}x") is TokenKind.CUSTOMER
        assert classify(f"{BUSINESS_PREFIX}x") is TokenKind.BUSINESS
        assert classify("x") is TokenKind.UNRECOGNIZED


class TestActionFor:
    """Scan actions depend on where the code was scanned."""

    def test_terminal_actions(self):
        assert action_for(resolve("cust_a"), at_terminal=True) is ScanAction.AWARD
        assert action_for(resolve("biz_a"), at_terminal=True) is ScanAction.LOGIN

    def test_customer_device_actions(self):
        assert action_for(resolve("biz_a"), at_terminal=False) is ScanAction.JOIN
        assert action_for(resolve("cust_a"), at_terminal=False) is ScanAction.LOGIN

    def test_unrecognized_is_ignored(self):
        assert action_for(resolve("???"), at_terminal=True) is ScanAction.IGNORE
        assert action_for(resolve("???"), at_terminal=False) is ScanAction.IGNORE


class TestCustomerLinks:
    def test_build_with_all_params(self):
        url = build_customer_url("cust_a", join=4, discount_id=7, base_url="https://l.example/")
        assert url == "https://l.example/customer?token=cust_a&join=4&discount_id=7"

    def test_build_token_only(self):
        assert build_customer_url("cust_a", base_url="") == "/customer?token=cust_a"

    def test_build_uses_public_base_url(self, settings):
        settings.QROYAL = {"PUBLIC_BASE_URL": "https://cards.example"}
        assert build_customer_url("cust_a") == "https://cards.example/customer?token=cust_a"

    def test_parse_absolute_link(self):
        link = parse_customer_link("https://l.example/customer?token=cust_a&join=4&discount_id=7")
        assert link == CustomerLink(token="cust_a", join="4", discount_id="7")

    def test_parse_relative_link(self):
        link = parse_customer_link("/customer?token=cust_a&discount_id=12")
        assert link.token == "cust_a"
        assert link.discount_id == "12"
        assert link.join is None

    def test_parse_blank_params_are_none(self):
        link = parse_customer_link("/customer?token=cust_a&join=")
        assert link.join is None


class TestNewTokens:
    def test_prefixes(self):
        assert new_customer_token().startswith("cust_")
        assert new_business_token().startswith("biz_")

    def test_tokens_are_unique(self):
        tokens = {new_customer_token() for _ in range(200)}
        assert len(tokens) == 200

    def test_new_tokens_resolve_to_their_kind(self):
        assert resolve(new_customer_token()).kind is TokenKind.CUSTOMER
        assert resolve(new_business_token()).kind is TokenKind.BUSINESS

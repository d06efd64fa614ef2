"""Integration tests for the pure claim rules."""

from decimal import Decimal

import pytest

from src.core.exceptions.base import InvalidArgumentError, ServiceErrorCode
from src.core.service.currency.models import ClaimingCheck, Currency
from src.core.service.currency.rules import (
    is_on_cooldown,
    is_within_limits,
    remaining_cooldown,
    split_claim_fee,
)
from src.core.service.tier.benefits import get_tier_benefits

NOW = 1700000000
COOLDOWN = 345600


class TestCooldown:
    def test_never_claimed(self):
        assert is_on_cooldown(0, COOLDOWN, NOW) is False
        assert remaining_cooldown(0, COOLDOWN, NOW) == 0

    def test_one_second_short_of_cooldown(self):
        assert is_on_cooldown(NOW - COOLDOWN + 1, COOLDOWN, NOW) is True
        assert remaining_cooldown(NOW - COOLDOWN + 1, COOLDOWN, NOW) == 1

    def test_exactly_at_cooldown(self):
        assert is_on_cooldown(NOW - COOLDOWN, COOLDOWN, NOW) is False
        assert remaining_cooldown(NOW - COOLDOWN, COOLDOWN, NOW) == 0

    def test_just_claimed(self):
        assert remaining_cooldown(NOW, COOLDOWN, NOW) == COOLDOWN


class TestLimits:
    benefits = get_tier_benefits("newcomer")

    @pytest.mark.parametrize("currency,amount,within", [
        (Currency.XRES, 100, True),
        (Currency.XRES, 150, True),
        (Currency.XRES, 99.99, False),
        (Currency.XRES, 151, False),
        (Currency.XREC, 10, True),
        (Currency.XREC, 15, True),
        (Currency.XREC, 100, False),
    ])
    def test_inclusive_bounds(self, currency, amount, within):
        assert is_within_limits(self.benefits, currency, amount) is within


class TestFeeSplit:
    def test_newcomer_fee(self):
        split = split_claim_fee(100, 4.5)

        assert split.fee == Decimal("4.5")
        assert split.user_share == Decimal("95.5")

    def test_shares_sum_to_amount(self):
        for amount in (100, 133.33, 150, 2000.01):
            split = split_claim_fee(amount, 4.3)
            assert split.fee + split.user_share == Decimal(str(amount))

    def test_zero_fee(self):
        split = split_claim_fee(10, 0)
        assert split.fee == 0
        assert split.user_share == Decimal("10")


class TestCurrency:
    @pytest.mark.parametrize("raw,currency", [
        ("xres", Currency.XRES),
        ("xRES", Currency.XRES),
        (" XREC ", Currency.XREC),
        (Currency.XREC, Currency.XREC),
    ])
    def test_parse(self, raw, currency):
        assert Currency.parse(raw) is currency

    def test_parse_rejects_unknown(self):
        with pytest.raises(InvalidArgumentError) as exc:
            Currency.parse("gold")
        assert exc.value.code == ServiceErrorCode.INVALID_CURRENCY

    def test_claiming_check_authorized(self):
        assert ClaimingCheck(on_cooldown=False, claimable=True, is_within_limits=True).authorized
        assert not ClaimingCheck(on_cooldown=True, claimable=True, is_within_limits=True).authorized

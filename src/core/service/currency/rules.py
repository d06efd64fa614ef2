"""Pure claim rules: cooldowns, limits and fee split."""

from decimal import Decimal, ROUND_HALF_UP

from src.core.service.currency.models import Currency, FeeSplit
from src.core.service.tier.models import TierBenefits

_FEE_QUANTUM = Decimal("0.000000000000000001")  # 18 token decimals


def is_on_cooldown(last_claim_time: int, cooldown: int, now: int) -> bool:
    """A currency never claimed (0) or claimed at least `cooldown` seconds ago is off cooldown."""
    if not last_claim_time:
        return False
    return now - last_claim_time < cooldown


def remaining_cooldown(last_claim_time: int, cooldown: int, now: int) -> int:
    """Seconds left until the next claim is allowed; 0 when it is allowed now."""
    if not is_on_cooldown(last_claim_time, cooldown, now):
        return 0
    return last_claim_time + cooldown - now


def claim_limits(benefits: TierBenefits, currency: Currency) -> tuple:
    if Currency.parse(currency) is Currency.XRES:
        return benefits.minimum_xres_claim, benefits.maximum_xres_claim
    return benefits.minimum_xrec_claim, benefits.maximum_xrec_claim


def is_within_limits(benefits: TierBenefits, currency: Currency, amount: float) -> bool:
    """Inclusive min/max check against the tier's bounds for `currency`."""
    minimum, maximum = claim_limits(benefits, currency)
    return minimum <= amount <= maximum


def split_claim_fee(amount: float, fee_percent: float) -> FeeSplit:
    """
    Split a claimed amount into the user's share and the fee share.

    Both shares are rounded to token precision and always sum to `amount`.
    """
    total = Decimal(str(amount))
    percent = Decimal(str(fee_percent))
    fee = (total * percent / Decimal(100)).quantize(_FEE_QUANTUM, rounding=ROUND_HALF_UP)
    return FeeSplit(amount=total, fee_percent=percent, fee=fee, user_share=total - fee)

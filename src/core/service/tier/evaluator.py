"""Tier evaluation rules."""

from typing import Optional

from src.core.service.tier.models import ClaimRequirement, WebAppTier

_TIER_ORDER = list(WebAppTier)


def tier_rank(tier: WebAppTier) -> int:
    """0 for newcomer up to 5 for grandee."""
    return _TIER_ORDER.index(WebAppTier(tier))


def evaluate_tier(
    owned_nfts: int,
    owned_currency: float,
    deposited_currency: float,
    monthly_volume: float
) -> WebAppTier:
    """
    Compute the web app tier from holdings and activity.

    Rules are checked from the strictest tier down and the first match wins.
    """
    if (
        (monthly_volume >= 200000 and owned_nfts >= 50 and owned_currency >= 60000)
        or deposited_currency >= 125000
    ):
        return WebAppTier.GRANDEE

    if (
        (monthly_volume >= 50000 and owned_nfts >= 20 and owned_currency >= 15000)
        or owned_currency >= 40000
        or deposited_currency >= 55000
    ):
        return WebAppTier.MAGNATE

    if (
        (monthly_volume >= 10000 and owned_nfts >= 12)
        or owned_currency >= 10000
        or deposited_currency >= 12500
    ):
        return WebAppTier.TYCOON

    if monthly_volume >= 5000 or owned_nfts >= 10 or owned_currency >= 2500 or deposited_currency >= 3000:
        return WebAppTier.MERCHANT

    if owned_nfts >= 3 or owned_currency >= 300 or deposited_currency >= 400:
        return WebAppTier.RUSTIC

    return WebAppTier.NEWCOMER


def meets_newcomer_requirements(
    requirement: ClaimRequirement,
    account_level: Optional[int],
    quests_completed: Optional[int],
    pvp_mmr: Optional[int]
) -> bool:
    """A newcomer may claim once any one in-game threshold is reached."""
    return (
        (account_level or 0) >= requirement.account_level
        or (quests_completed or 0) >= requirement.quests_completed
        or (pvp_mmr or 0) >= requirement.pvp_mmr
    )


def is_claim_allowed(
    linked: bool,
    tier: WebAppTier,
    newcomer_requirements_met: bool
) -> bool:
    """Claim gate: a linked account that is past newcomer or meets the newcomer thresholds."""
    if not linked:
        return False
    return WebAppTier(tier) is not WebAppTier.NEWCOMER or newcomer_requirements_met


def is_deposit_allowed(linked: bool) -> bool:
    return linked

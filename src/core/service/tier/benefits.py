"""
Benefits of every web app tier.

Some of these benefits MAY change in the future, depending on balancing factors.
"""

from typing import Dict, Union

from src.core.exceptions.base import InvalidArgumentError, ServiceErrorCode
from src.core.service.tier.models import ClaimingInfo, ClaimRequirement, TierBenefits, WebAppTier

TIER_BENEFITS: Dict[WebAppTier, TierBenefits] = {
    WebAppTier.NEWCOMER: TierBenefits(
        claim_fee=4.5,
        claim_requirement=ClaimRequirement(
            account_level=60,
            quests_completed=1000,
            pvp_mmr=2000,
        ),
        minimum_xrec_claim=10,
        maximum_xrec_claim=15,
        minimum_xres_claim=100,
        maximum_xres_claim=150,
        claim_cooldown=345600,  # 4 days
        breeding_discount=0,
        marketplace_fee=5,
        minting_event_tier="Iron",
        burning_event_tier="Iron",
        staking_tier="Iron",
        airdrops=0,
        referral_rewards=0,
        in_game_energy=100,
    ),
    WebAppTier.RUSTIC: TierBenefits(
        claim_fee=4.5,
        minimum_xrec_claim=15,
        maximum_xrec_claim=30,
        minimum_xres_claim=150,
        maximum_xres_claim=275,
        claim_cooldown=259200,  # 3 days
        breeding_discount=1,
        marketplace_fee=4.9,
        minting_event_tier="Bronze",
        burning_event_tier="Iron",
        staking_tier="Iron",
        airdrops=5,
        referral_rewards=2.5,
        in_game_energy=110,
    ),
    WebAppTier.MERCHANT: TierBenefits(
        claim_fee=4.4,
        minimum_xrec_claim=45,
        maximum_xrec_claim=75,
        minimum_xres_claim=350,
        maximum_xres_claim=600,
        claim_cooldown=259200,
        breeding_discount=1.5,
        marketplace_fee=4.75,
        minting_event_tier="Bronze",
        burning_event_tier="Bronze",
        staking_tier="Bronze",
        airdrops=10,
        referral_rewards=3.75,
        in_game_energy=120,
    ),
    WebAppTier.TYCOON: TierBenefits(
        claim_fee=4.3,
        minimum_xrec_claim=100,
        maximum_xrec_claim=300,
        minimum_xres_claim=750,
        maximum_xres_claim=1500,
        claim_cooldown=216000,  # 2.5 days
        breeding_discount=2.5,
        marketplace_fee=4.5,
        minting_event_tier="Silver",
        burning_event_tier="Silver",
        staking_tier="Bronze",
        airdrops=15,
        referral_rewards=5,
        in_game_energy=140,
    ),
    WebAppTier.MAGNATE: TierBenefits(
        claim_fee=4.2,
        minimum_xrec_claim=250,
        maximum_xrec_claim=600,
        minimum_xres_claim=1250,
        maximum_xres_claim=2500,
        claim_cooldown=216000,
        breeding_discount=3.75,
        marketplace_fee=4.25,
        minting_event_tier="Gold",
        burning_event_tier="Silver",
        staking_tier="Silver",
        airdrops=25,
        referral_rewards=7.5,
        in_game_energy=165,
    ),
    WebAppTier.GRANDEE: TierBenefits(
        claim_fee=4,
        minimum_xrec_claim=450,
        maximum_xrec_claim=800,
        minimum_xres_claim=2000,
        maximum_xres_claim=5000,
        claim_cooldown=172800,  # 2 days
        breeding_discount=5,
        marketplace_fee=4,
        minting_event_tier="Gold",
        burning_event_tier="Gold",
        staking_tier="Gold",
        airdrops=40,
        referral_rewards=12.5,
        in_game_energy=200,
    ),
}


def parse_tier(tier: Union[WebAppTier, str]) -> WebAppTier:
    if isinstance(tier, WebAppTier):
        return tier
    try:
        return WebAppTier(str(tier).strip().lower())
    except ValueError:
        raise InvalidArgumentError(
            f"Unknown web app tier: {tier}",
            code=ServiceErrorCode.INVALID_TIER,
            details={"valid_tiers": [t.value for t in WebAppTier]},
        )


def get_tier_benefits(tier: Union[WebAppTier, str]) -> TierBenefits:
    return TIER_BENEFITS[parse_tier(tier)]


def get_claiming_fee_and_limits(tier: Union[WebAppTier, str]) -> ClaimingInfo:
    benefits = get_tier_benefits(tier)
    return ClaimingInfo(
        claim_fee=benefits.claim_fee,
        minimum_xrec_claim=benefits.minimum_xrec_claim,
        maximum_xrec_claim=benefits.maximum_xrec_claim,
        minimum_xres_claim=benefits.minimum_xres_claim,
        maximum_xres_claim=benefits.maximum_xres_claim,
    )

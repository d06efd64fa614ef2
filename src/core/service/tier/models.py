"""Models for the web app tier system."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class WebAppTier(str, Enum):
    """Web app membership tiers, loosest to strictest"""
    NEWCOMER = "newcomer"
    RUSTIC = "rustic"
    MERCHANT = "merchant"
    TYCOON = "tycoon"
    MAGNATE = "magnate"
    GRANDEE = "grandee"


class ClaimRequirement(BaseModel):
    """In-game progress a newcomer needs (any one of) before claiming."""
    account_level: int
    quests_completed: int
    pvp_mmr: int


class TierBenefits(BaseModel):
    """Static benefits of a web app tier."""
    claim_fee: float = Field(..., description="Claim fee in %")
    claim_requirement: Optional[ClaimRequirement] = None
    minimum_xrec_claim: float
    maximum_xrec_claim: float
    minimum_xres_claim: float
    maximum_xres_claim: float
    claim_cooldown: int = Field(..., description="Claim cooldown in seconds")
    breeding_discount: float = Field(..., description="Breeding discount in %")
    marketplace_fee: float = Field(..., description="Marketplace fee in %")
    minting_event_tier: str
    burning_event_tier: str
    staking_tier: str
    airdrops: int = Field(..., description="Extra airdrop tickets")
    referral_rewards: float = Field(..., description="Extra referral rewards in %")
    in_game_energy: int

    model_config = {"frozen": True}


class ClaimingInfo(BaseModel):
    """The claim fee and limits of a tier."""
    claim_fee: float
    minimum_xrec_claim: float
    maximum_xrec_claim: float
    minimum_xres_claim: float
    maximum_xres_claim: float


class TierUpdateStatus(BaseModel):
    address: str
    previous_tier: Optional[WebAppTier] = None
    new_tier: WebAppTier


class EligibilityStatus(BaseModel):
    """Outcome of re-evaluating a claim or deposit gate."""
    address: str
    allowed: bool
    changed: bool
    additional_info: str = ""


class WebAppDataStatus(BaseModel):
    tier_status: TierUpdateStatus
    claim_status: EligibilityStatus
    deposit_status: EligibilityStatus


class TradingVolumeUpdate(BaseModel):
    address: str
    monthly_trading_volume: float
    total_trading_volume: float

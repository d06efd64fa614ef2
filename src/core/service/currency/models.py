"""Models for claiming and depositing reward currencies."""

from decimal import Decimal
from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel

from src.core.exceptions.base import InvalidArgumentError, ServiceErrorCode
from src.core.service.tier.models import ClaimingInfo, TierBenefits, WebAppTier


class Currency(str, Enum):
    """Off-chain reward currencies, each backed by an on-chain token"""
    XRES = "xres"  # Realm Shards (RES)
    XREC = "xrec"  # Realm Crystals (REC)

    @classmethod
    def parse(cls, value: Union["Currency", str]) -> "Currency":
        if isinstance(value, Currency):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidArgumentError(
                "Invalid currency. Please check if it is xREC or xRES.",
                code=ServiceErrorCode.INVALID_CURRENCY,
                details={"currency": value},
            )

    @property
    def balance_key(self) -> str:
        """Key of the balance in the player's read-only data."""
        return "xRES" if self is Currency.XRES else "xREC"

    @property
    def token_symbol(self) -> str:
        return "RES" if self is Currency.XRES else "REC"


class ClaimingCheck(BaseModel):
    """The three gates a claim has to pass."""
    on_cooldown: bool
    claimable: bool
    is_within_limits: bool

    @property
    def authorized(self) -> bool:
        return not self.on_cooldown and self.claimable and self.is_within_limits


class FeeSplit(BaseModel):
    amount: Decimal
    fee_percent: Decimal
    fee: Decimal
    user_share: Decimal


class ClaimResult(BaseModel):
    address: str
    currency: Currency
    amount: float
    fee: float
    minted_to_user: float
    user_mint_tx: str
    fee_mint_tx: Optional[str] = None
    remaining_balance: float
    claimed_at: int


class DepositResult(BaseModel):
    address: str
    currency: Currency
    amount: float
    deposit_tx: str
    new_balance: float


class ClaimCooldown(BaseModel):
    """Seconds until the next claim of each currency is allowed (0 = now)."""
    xres_cooldown: int
    xrec_cooldown: int


class CurrencyTransactions(BaseModel):
    total_xres_claimed: float
    total_xrec_claimed: float
    total_res_deposited: float
    total_rec_deposited: float


class WebAppOverview(BaseModel):
    """Everything the web app dashboard shows for a linked account."""
    address: str
    res_allowance: float
    owned_xres: float
    owned_res: float
    transactions: CurrencyTransactions
    claim_cooldown: ClaimCooldown
    web_app_tier: WebAppTier
    nfts_owned: int
    claiming_info: ClaimingInfo
    web_app_tier_benefits: TierBenefits

"""
Input DTOs for web app API endpoints.
"""

from pydantic import BaseModel, Field, validator


class CurrencyAmountDto(BaseModel):
    """Currency, amount and the game account the request acts for."""

    currency: str = Field(..., description="xres or xrec (case-insensitive)")
    amount: float = Field(..., gt=0, description="Amount of currency")
    playfab_id: str = Field(..., description="PlayFab ID of the player")

    @validator('playfab_id')
    def validate_playfab_id(cls, v):
        if not v or not v.strip():
            raise ValueError('PlayFab ID cannot be empty')
        return v.strip()


class ClaimRequestDto(CurrencyAmountDto):
    """DTO for claiming off-chain currency as on-chain tokens."""


class DepositRequestDto(CurrencyAmountDto):
    """DTO for depositing on-chain tokens into the game."""


class TradingVolumeDto(BaseModel):
    """DTO for adding marketplace trading volume."""

    amount: float = Field(..., gt=0, description="Traded amount to add")


class LinkAccountDto(BaseModel):
    """DTO for linking a game account to a wallet address."""

    playfab_id: str = Field(..., description="PlayFab ID of the player")

    @validator('playfab_id')
    def validate_playfab_id(cls, v):
        if not v or not v.strip():
            raise ValueError('PlayFab ID cannot be empty')
        return v.strip()

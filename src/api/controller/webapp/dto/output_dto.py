"""
Output DTOs for web app API endpoints.
"""

from pydantic import BaseModel, Field

from src.core.service.tier.models import WebAppTier


class WebAppTierDto(BaseModel):
    address: str
    web_app_tier: WebAppTier


class NFTsOwnedDto(BaseModel):
    address: str
    nfts_owned: int = Field(..., ge=0)


class TradingVolumeResetDto(BaseModel):
    """DTO for the monthly trading volume reset."""

    records_reset: int = Field(..., description="Number of records whose monthly volume was zeroed")

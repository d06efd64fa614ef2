"""
Input DTOs for NBMon API endpoints.
"""

from typing import Optional
from pydantic import BaseModel, Field

from src.core.service.hatching.models import HatchTraits


class HatchRequestDto(BaseModel):
    """DTO for randomizing hatch traits."""

    rarity: Optional[str] = Field(
        default=None,
        description="Force a rarity (Common ... Mythical); drawn at random when omitted"
    )


class GenesisNBMonRequestDto(BaseModel):
    """DTO for viewing a Genesis NBMon from its stored traits."""

    nbmon_id: int = Field(..., ge=1, description="Token ID of the Genesis NBMon")
    traits: Optional[HatchTraits] = Field(
        default=None,
        description="Stored traits; omitted while the NBMon is still an egg"
    )

"""
Web app and in-game account records
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.core.service.tier.models import WebAppTier


class WebAppData(BaseModel):
    """Per-address web app record: tier, counters, gates and cooldown timers"""
    id: Optional[UUID] = None
    address: str
    playfab_id: Optional[str] = None
    web_app_tier: Optional[WebAppTier] = None
    monthly_trading_volume: float = Field(default=0, ge=0)
    total_trading_volume: float = Field(default=0, ge=0)
    total_rec_deposited: float = Field(default=0, ge=0)
    total_res_deposited: float = Field(default=0, ge=0)
    total_xres_claimed: float = Field(default=0, ge=0)
    total_xrec_claimed: float = Field(default=0, ge=0)
    last_xres_claim_time: int = Field(default=0, ge=0, description="Unix seconds, 0 = never")
    last_xrec_claim_time: int = Field(default=0, ge=0, description="Unix seconds, 0 = never")
    can_claim: bool = False
    can_deposit: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_linked(self) -> bool:
        return bool(self.playfab_id)


class InGameData(BaseModel):
    """Realm Hunter progress used for newcomer claim requirements"""
    address: str
    account_level: int = 0
    quests_completed: int = 0
    pvp_mmr: int = 0

"""Web app controller: tiers, eligibility, claims and deposits."""

from src.api.controller.webapp.dto.input_dto import (
    ClaimRequestDto,
    DepositRequestDto,
    LinkAccountDto,
    TradingVolumeDto,
)
from src.api.controller.webapp.dto.output_dto import (
    NFTsOwnedDto,
    TradingVolumeResetDto,
    WebAppTierDto,
)
from src.core.logger.logger import get_logger
from src.core.service.account.models import WebAppData
from src.core.service.currency.claim_service import ClaimService
from src.core.service.currency.models import (
    ClaimCooldown,
    ClaimingCheck,
    ClaimResult,
    DepositResult,
    WebAppOverview,
)
from src.core.service.tier.models import (
    EligibilityStatus,
    TierUpdateStatus,
    TradingVolumeUpdate,
    WebAppDataStatus,
)
from src.core.service.tier.tier_service import TierService

logger = get_logger(__name__)


class WebAppController:
    """Controller for web app operations. Service errors propagate to the global handler."""

    def __init__(self, tier_service: TierService, claim_service: ClaimService):
        self.tier_service = tier_service
        self.claim_service = claim_service

    async def get_web_app_tier(self, address: str) -> WebAppTierDto:
        tier = await self.tier_service.get_web_app_tier(address)
        return WebAppTierDto(address=address.lower(), web_app_tier=tier)

    async def update_web_app_tier(self, address: str) -> TierUpdateStatus:
        logger.info("Tier update requested", extra={"address": address})
        return await self.tier_service.update_web_app_tier(address)

    async def update_web_app_data(self, address: str) -> WebAppDataStatus:
        logger.info("Web app data update requested", extra={"address": address})
        return await self.tier_service.update_web_app_data(address)

    async def update_claim_eligibility(self, address: str) -> EligibilityStatus:
        return await self.tier_service.update_claim_eligibility(address)

    async def update_deposit_eligibility(self, address: str) -> EligibilityStatus:
        return await self.tier_service.update_deposit_eligibility(address)

    async def get_nfts_owned(self, address: str) -> NFTsOwnedDto:
        nfts = await self.tier_service.get_nfts_owned(address)
        return NFTsOwnedDto(address=address.lower(), nfts_owned=nfts)

    async def add_trading_volume(self, address: str, request: TradingVolumeDto) -> TradingVolumeUpdate:
        return await self.tier_service.add_monthly_trading_volume(address, request.amount)

    async def reset_trading_volume(self) -> TradingVolumeResetDto:
        logger.info("Monthly trading volume reset requested")
        records = await self.tier_service.reset_monthly_trading_volume()
        return TradingVolumeResetDto(records_reset=records)

    async def link_account(self, address: str, request: LinkAccountDto) -> WebAppData:
        return await self.tier_service.link_account(address, request.playfab_id)

    async def unlink_account(self, address: str) -> WebAppData:
        return await self.tier_service.unlink_account(address)

    async def get_claim_cooldown(self, address: str) -> ClaimCooldown:
        return await self.claim_service.get_claim_cooldown(address)

    async def get_overview(self, address: str) -> WebAppOverview:
        return await self.claim_service.get_web_app_overview(address)

    async def claiming_check(self, request: ClaimRequestDto) -> ClaimingCheck:
        return await self.claim_service.claiming_check(request.currency, request.amount, request.playfab_id)

    async def claim(self, request: ClaimRequestDto) -> ClaimResult:
        logger.info(
            "Claim requested",
            extra={
                "playfab_id": request.playfab_id,
                "currency": request.currency,
                "amount": request.amount
            }
        )
        return await self.claim_service.claim_currency(request.currency, request.amount, request.playfab_id)

    async def deposit(self, request: DepositRequestDto) -> DepositResult:
        logger.info(
            "Deposit requested",
            extra={
                "playfab_id": request.playfab_id,
                "currency": request.currency,
                "amount": request.amount
            }
        )
        return await self.claim_service.deposit_currency(request.currency, request.amount, request.playfab_id)

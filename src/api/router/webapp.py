"""Web app router: tiers, eligibility gates, claims and deposits."""

from fastapi import APIRouter, Depends, status

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
from src.api.controller.webapp.webapp_controller import WebAppController
from src.core.dependencies import get_webapp_controller
from src.core.service.account.models import WebAppData
from src.core.service.currency.models import (
    ClaimCooldown,
    ClaimingCheck,
    ClaimResult,
    DepositResult,
    WebAppOverview,
)
from src.core.service.tier.benefits import get_claiming_fee_and_limits, get_tier_benefits
from src.core.service.tier.models import (
    ClaimingInfo,
    EligibilityStatus,
    TierBenefits,
    TierUpdateStatus,
    TradingVolumeUpdate,
    WebAppDataStatus,
)

router = APIRouter(
    prefix="/webapp",
    tags=["Web App"],
    responses={
        403: {"description": "Not eligible"},
        404: {"description": "Record not found"},
        409: {"description": "Inconsistent state"},
        422: {"description": "Invalid argument"},
        502: {"description": "Upstream failure"},
        504: {"description": "Upstream timeout"}
    }
)


@router.get("/tiers/{tier}/benefits", response_model=TierBenefits, summary="Benefits of a tier")
async def tier_benefits(tier: str) -> TierBenefits:
    return get_tier_benefits(tier)


@router.get("/tiers/{tier}/claiming-info", response_model=ClaimingInfo, summary="Claim fee and limits of a tier")
async def tier_claiming_info(tier: str) -> ClaimingInfo:
    return get_claiming_fee_and_limits(tier)


@router.post(
    "/trading-volume/reset",
    response_model=TradingVolumeResetDto,
    summary="Reset monthly trading volume",
    description="Zero the monthly trading volume of every account. Called once a month by the scheduler."
)
async def reset_trading_volume(
    controller: WebAppController = Depends(get_webapp_controller)
) -> TradingVolumeResetDto:
    return await controller.reset_trading_volume()


@router.post("/claim/check", response_model=ClaimingCheck, summary="Evaluate the claim gates")
async def claiming_check(
    request: ClaimRequestDto,
    controller: WebAppController = Depends(get_webapp_controller)
) -> ClaimingCheck:
    return await controller.claiming_check(request)


@router.post(
    "/claim",
    response_model=ClaimResult,
    status_code=status.HTTP_200_OK,
    summary="Claim currency",
    description="Mint on-chain RES/REC for off-chain xRES/xREC, minus the tier's claim fee."
)
async def claim(
    request: ClaimRequestDto,
    controller: WebAppController = Depends(get_webapp_controller)
) -> ClaimResult:
    return await controller.claim(request)


@router.post(
    "/deposit",
    response_model=DepositResult,
    summary="Deposit tokens",
    description="Pull approved RES/REC to the treasury and credit xRES/xREC in game."
)
async def deposit(
    request: DepositRequestDto,
    controller: WebAppController = Depends(get_webapp_controller)
) -> DepositResult:
    return await controller.deposit(request)


@router.get("/{address}/tier", response_model=WebAppTierDto, summary="Stored web app tier")
async def get_web_app_tier(
    address: str,
    controller: WebAppController = Depends(get_webapp_controller)
) -> WebAppTierDto:
    return await controller.get_web_app_tier(address)


@router.post("/{address}/tier", response_model=TierUpdateStatus, summary="Re-evaluate web app tier")
async def update_web_app_tier(
    address: str,
    controller: WebAppController = Depends(get_webapp_controller)
) -> TierUpdateStatus:
    return await controller.update_web_app_tier(address)


@router.post(
    "/{address}/update",
    response_model=WebAppDataStatus,
    summary="Re-evaluate tier and gates",
    description="Re-evaluate tier, then claim and deposit eligibility. Safe to call a few times a day."
)
async def update_web_app_data(
    address: str,
    controller: WebAppController = Depends(get_webapp_controller)
) -> WebAppDataStatus:
    return await controller.update_web_app_data(address)


@router.post("/{address}/claim-eligibility", response_model=EligibilityStatus, summary="Re-evaluate claim gate")
async def update_claim_eligibility(
    address: str,
    controller: WebAppController = Depends(get_webapp_controller)
) -> EligibilityStatus:
    return await controller.update_claim_eligibility(address)


@router.post("/{address}/deposit-eligibility", response_model=EligibilityStatus, summary="Re-evaluate deposit gate")
async def update_deposit_eligibility(
    address: str,
    controller: WebAppController = Depends(get_webapp_controller)
) -> EligibilityStatus:
    return await controller.update_deposit_eligibility(address)


@router.get("/{address}/nfts-owned", response_model=NFTsOwnedDto, summary="Genesis NBMons owned")
async def get_nfts_owned(
    address: str,
    controller: WebAppController = Depends(get_webapp_controller)
) -> NFTsOwnedDto:
    return await controller.get_nfts_owned(address)


@router.post("/{address}/trading-volume", response_model=TradingVolumeUpdate, summary="Add trading volume")
async def add_trading_volume(
    address: str,
    request: TradingVolumeDto,
    controller: WebAppController = Depends(get_webapp_controller)
) -> TradingVolumeUpdate:
    return await controller.add_trading_volume(address, request)


@router.post("/{address}/link", response_model=WebAppData, summary="Link a game account")
async def link_account(
    address: str,
    request: LinkAccountDto,
    controller: WebAppController = Depends(get_webapp_controller)
) -> WebAppData:
    return await controller.link_account(address, request)


@router.post("/{address}/unlink", response_model=WebAppData, summary="Unlink the game account")
async def unlink_account(
    address: str,
    controller: WebAppController = Depends(get_webapp_controller)
) -> WebAppData:
    return await controller.unlink_account(address)


@router.get("/{address}/cooldown", response_model=ClaimCooldown, summary="Remaining claim cooldowns")
async def get_claim_cooldown(
    address: str,
    controller: WebAppController = Depends(get_webapp_controller)
) -> ClaimCooldown:
    return await controller.get_claim_cooldown(address)


@router.get("/{address}/overview", response_model=WebAppOverview, summary="Web app dashboard data")
async def get_overview(
    address: str,
    controller: WebAppController = Depends(get_webapp_controller)
) -> WebAppOverview:
    return await controller.get_overview(address)

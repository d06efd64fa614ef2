"""
Web app tier service.

Keeps each address's tier and its claim/deposit gates in line with what the
address holds on-chain and what it has done in the web app. Meant to be
called after user activity and a few times a day by an external scheduler;
`reset_monthly_trading_volume` is for the monthly job.
"""

from src.core.exceptions.base import InvalidArgumentError
from src.core.logger.logger import get_logger
from src.core.service.account.models import WebAppData
from src.core.service.chain.ledger import ChainLedger, checksum
from src.core.service.currency.models import Currency
from src.core.service.tier.benefits import get_tier_benefits
from src.core.service.tier.evaluator import (
    evaluate_tier,
    is_claim_allowed,
    is_deposit_allowed,
    meets_newcomer_requirements,
)
from src.core.service.tier.models import (
    EligibilityStatus,
    TierUpdateStatus,
    TradingVolumeUpdate,
    WebAppDataStatus,
    WebAppTier,
)
from src.infra.repository.in_game_data_repository import InGameDataRepository
from src.infra.repository.web_app_data_repository import WebAppDataRepository

logger = get_logger(__name__)


def normalize_address(address: str) -> str:
    """Validate an EVM address and return its lowercase form"""
    return checksum(address).lower()


class TierService:
    def __init__(
        self,
        web_app_repository: WebAppDataRepository,
        in_game_repository: InGameDataRepository,
        ledger: ChainLedger,
    ):
        self.web_app_repository = web_app_repository
        self.in_game_repository = in_game_repository
        self.ledger = ledger

    async def get_nfts_owned(self, address: str) -> int:
        return await self.ledger.nft_balance(normalize_address(address))

    async def get_owned_reward_currency(self, address: str) -> float:
        """Realm Crystals held on-chain; 0 while the REC token is not deployed"""
        if not self.ledger.has_token(Currency.XREC):
            return 0.0
        return await self.ledger.balance_of(Currency.XREC, normalize_address(address))

    async def update_web_app_tier(self, address: str) -> TierUpdateStatus:
        """Re-evaluate and store the tier of `address`"""
        address = normalize_address(address)
        record = await self.web_app_repository.get_or_create(address)

        owned_nfts = await self.get_nfts_owned(address)
        owned_currency = await self.get_owned_reward_currency(address)
        new_tier = evaluate_tier(
            owned_nfts=owned_nfts,
            owned_currency=owned_currency,
            deposited_currency=record.total_rec_deposited,
            monthly_volume=record.monthly_trading_volume,
        )

        if new_tier != record.web_app_tier:
            await self.web_app_repository.update_fields(address, web_app_tier=new_tier)
            logger.info(
                "Web app tier changed",
                extra={
                    "address": address,
                    "previous_tier": record.web_app_tier,
                    "new_tier": new_tier
                }
            )

        return TierUpdateStatus(address=address, previous_tier=record.web_app_tier, new_tier=new_tier)

    async def get_web_app_tier(self, address: str) -> WebAppTier:
        """The stored tier; an address without one is stored as newcomer"""
        address = normalize_address(address)
        record = await self.web_app_repository.get_or_create(address)
        if record.web_app_tier is None:
            await self.web_app_repository.update_fields(address, web_app_tier=WebAppTier.NEWCOMER)
            return WebAppTier.NEWCOMER
        return record.web_app_tier

    async def _newcomer_requirements_met(self, record: WebAppData, tier: WebAppTier) -> bool:
        if tier is not WebAppTier.NEWCOMER or not record.is_linked:
            return False
        requirement = get_tier_benefits(WebAppTier.NEWCOMER).claim_requirement
        in_game = await self.in_game_repository.get_by_address(record.address)
        if in_game is None:
            # Never played: nothing to meet the requirements with
            return False
        return meets_newcomer_requirements(
            requirement,
            in_game.account_level,
            in_game.quests_completed,
            in_game.pvp_mmr,
        )

    async def update_claim_eligibility(self, address: str) -> EligibilityStatus:
        """Open or close the claim gate of `address`"""
        address = normalize_address(address)
        record = await self.web_app_repository.require_by_address(address)
        tier = record.web_app_tier or WebAppTier.NEWCOMER

        allowed = is_claim_allowed(
            record.is_linked,
            tier,
            await self._newcomer_requirements_met(record, tier),
        )
        changed = allowed != record.can_claim
        if changed:
            await self.web_app_repository.update_fields(address, can_claim=allowed)

        if not record.is_linked:
            info = "Account is not linked to a game account."
        elif not allowed:
            info = "Newcomer claim requirements are not met yet."
        else:
            info = ""

        logger.debug(
            "Claim eligibility evaluated",
            extra={
                "address": address,
                "allowed": allowed,
                "changed": changed
            }
        )
        return EligibilityStatus(address=address, allowed=allowed, changed=changed, additional_info=info)

    async def update_deposit_eligibility(self, address: str) -> EligibilityStatus:
        """Open or close the deposit gate of `address`"""
        address = normalize_address(address)
        record = await self.web_app_repository.require_by_address(address)

        allowed = is_deposit_allowed(record.is_linked)
        changed = allowed != record.can_deposit
        if changed:
            await self.web_app_repository.update_fields(address, can_deposit=allowed)

        info = "" if allowed else "Account is not linked to a game account."
        return EligibilityStatus(address=address, allowed=allowed, changed=changed, additional_info=info)

    async def update_web_app_data(self, address: str) -> WebAppDataStatus:
        """Tier first, since the claim gate depends on it"""
        tier_status = await self.update_web_app_tier(address)
        claim_status = await self.update_claim_eligibility(address)
        deposit_status = await self.update_deposit_eligibility(address)
        return WebAppDataStatus(
            tier_status=tier_status,
            claim_status=claim_status,
            deposit_status=deposit_status,
        )

    async def add_monthly_trading_volume(self, address: str, amount: float) -> TradingVolumeUpdate:
        if amount is None or amount <= 0:
            raise InvalidArgumentError("Trading volume must be a positive amount", details={"amount": amount})

        address = normalize_address(address)
        await self.web_app_repository.get_or_create(address)
        record = await self.web_app_repository.add_trading_volume(address, amount)
        return TradingVolumeUpdate(
            address=address,
            monthly_trading_volume=record.monthly_trading_volume,
            total_trading_volume=record.total_trading_volume,
        )

    async def reset_monthly_trading_volume(self) -> int:
        return await self.web_app_repository.reset_monthly_trading_volume()

    async def link_account(self, address: str, playfab_id: str) -> WebAppData:
        """Attach a game account to `address` and re-evaluate its gates"""
        if not playfab_id or not playfab_id.strip():
            raise InvalidArgumentError("PlayFab ID is required")

        address = normalize_address(address)
        await self.web_app_repository.get_or_create(address)
        await self.web_app_repository.update_fields(address, playfab_id=playfab_id.strip())
        logger.info("Account linked", extra={"address": address, "playfab_id": playfab_id})
        return await self._reevaluate_gates(address)

    async def unlink_account(self, address: str) -> WebAppData:
        address = normalize_address(address)
        await self.web_app_repository.require_by_address(address)
        await self.web_app_repository.update_fields(address, playfab_id=None)
        logger.info("Account unlinked", extra={"address": address})
        return await self._reevaluate_gates(address)

    async def _reevaluate_gates(self, address: str) -> WebAppData:
        # Deposit first: it depends on the linkage alone
        await self.update_deposit_eligibility(address)
        await self.update_claim_eligibility(address)
        return await self.web_app_repository.require_by_address(address)

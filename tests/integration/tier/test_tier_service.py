"""Integration tests for the tier service."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.core.exceptions.base import InvalidArgumentError
from src.core.service.account.models import InGameData, WebAppData
from src.core.service.currency.models import Currency
from src.core.service.tier.models import WebAppTier
from src.core.service.tier.tier_service import TierService

ADDRESS = "0x742d35cc6634c0532925a3b844bc9e7595f0beb0"
UPPERCASE_ADDRESS = "0x742D35CC6634C0532925A3B844BC9E7595F0BEB0"


def web_app_record(**fields) -> WebAppData:
    data = {"address": ADDRESS, "web_app_tier": WebAppTier.NEWCOMER}
    data.update(fields)
    return WebAppData(**data)


@pytest.mark.asyncio
class TestTierService:
    """Tier service over mocked repositories and ledger."""

    @pytest.fixture
    def web_app_repository(self):
        repository = MagicMock()
        repository.get_or_create = AsyncMock(return_value=web_app_record())
        repository.require_by_address = AsyncMock(return_value=web_app_record())
        repository.update_fields = AsyncMock(return_value=web_app_record())
        repository.add_trading_volume = AsyncMock(
            return_value=web_app_record(monthly_trading_volume=150, total_trading_volume=900)
        )
        repository.reset_monthly_trading_volume = AsyncMock(return_value=3)
        return repository

    @pytest.fixture
    def in_game_repository(self):
        repository = MagicMock()
        repository.get_by_address = AsyncMock(
            return_value=InGameData(address=ADDRESS, account_level=5, quests_completed=10, pvp_mmr=100)
        )
        return repository

    @pytest.fixture
    def ledger(self):
        ledger = MagicMock()
        ledger.nft_balance = AsyncMock(return_value=0)
        ledger.balance_of = AsyncMock(return_value=0.0)
        ledger.has_token = MagicMock(return_value=True)
        return ledger

    @pytest.fixture
    def service(self, web_app_repository, in_game_repository, ledger):
        return TierService(web_app_repository, in_game_repository, ledger)

    async def test_update_tier_from_nfts(self, service, web_app_repository, ledger):
        ledger.nft_balance.return_value = 12
        web_app_repository.get_or_create.return_value = web_app_record(monthly_trading_volume=10000)

        status = await service.update_web_app_tier(UPPERCASE_ADDRESS)

        assert status.previous_tier is WebAppTier.NEWCOMER
        assert status.new_tier is WebAppTier.TYCOON
        assert status.address == ADDRESS
        web_app_repository.update_fields.assert_awaited_once_with(ADDRESS, web_app_tier=WebAppTier.TYCOON)

    async def test_update_tier_uses_rec_balance_and_deposits(self, service, web_app_repository, ledger):
        ledger.balance_of.return_value = 40000.0
        web_app_repository.get_or_create.return_value = web_app_record(total_rec_deposited=10)

        status = await service.update_web_app_tier(ADDRESS)

        assert status.new_tier is WebAppTier.MAGNATE
        ledger.balance_of.assert_awaited_once_with(Currency.XREC, ADDRESS)

    async def test_owned_currency_is_zero_without_rec_token(self, service, ledger):
        ledger.has_token.return_value = False

        assert await service.get_owned_reward_currency(ADDRESS) == 0.0
        ledger.balance_of.assert_not_awaited()

    async def test_unchanged_tier_is_not_written(self, service, web_app_repository):
        await service.update_web_app_tier(ADDRESS)

        web_app_repository.update_fields.assert_not_awaited()

    async def test_invalid_address(self, service):
        with pytest.raises(InvalidArgumentError):
            await service.update_web_app_tier("not-an-address")

    async def test_get_tier_defaults_to_newcomer(self, service, web_app_repository):
        web_app_repository.get_or_create.return_value = web_app_record(web_app_tier=None)

        assert await service.get_web_app_tier(ADDRESS) is WebAppTier.NEWCOMER
        web_app_repository.update_fields.assert_awaited_once_with(ADDRESS, web_app_tier=WebAppTier.NEWCOMER)

    async def test_unlinked_account_cannot_claim(self, service, web_app_repository, in_game_repository):
        web_app_repository.require_by_address.return_value = web_app_record(can_claim=True)

        status = await service.update_claim_eligibility(ADDRESS)

        assert status.allowed is False
        assert status.changed is True
        web_app_repository.update_fields.assert_awaited_once_with(ADDRESS, can_claim=False)
        in_game_repository.get_by_address.assert_not_awaited()

    async def test_newcomer_below_requirements(self, service, web_app_repository):
        web_app_repository.require_by_address.return_value = web_app_record(playfab_id="PF1")

        status = await service.update_claim_eligibility(ADDRESS)

        assert status.allowed is False
        assert status.changed is False
        web_app_repository.update_fields.assert_not_awaited()

    async def test_newcomer_meeting_one_requirement(self, service, web_app_repository, in_game_repository):
        web_app_repository.require_by_address.return_value = web_app_record(playfab_id="PF1")
        in_game_repository.get_by_address.return_value = InGameData(address=ADDRESS, pvp_mmr=2000)

        status = await service.update_claim_eligibility(ADDRESS)

        assert status.allowed is True
        web_app_repository.update_fields.assert_awaited_once_with(ADDRESS, can_claim=True)

    async def test_newcomer_without_in_game_data(self, service, web_app_repository, in_game_repository):
        web_app_repository.require_by_address.return_value = web_app_record(playfab_id="PF1")
        in_game_repository.get_by_address.return_value = None

        status = await service.update_claim_eligibility(ADDRESS)

        assert status.allowed is False
        assert status.additional_info == "Newcomer claim requirements are not met yet."

    async def test_linked_rustic_can_claim(self, service, web_app_repository, in_game_repository):
        web_app_repository.require_by_address.return_value = web_app_record(
            playfab_id="PF1", web_app_tier=WebAppTier.RUSTIC
        )

        status = await service.update_claim_eligibility(ADDRESS)

        assert status.allowed is True
        in_game_repository.get_by_address.assert_not_awaited()

    async def test_deposit_eligibility(self, service, web_app_repository):
        web_app_repository.require_by_address.return_value = web_app_record(playfab_id="PF1")

        status = await service.update_deposit_eligibility(ADDRESS)

        assert status.allowed is True
        assert status.changed is True
        web_app_repository.update_fields.assert_awaited_once_with(ADDRESS, can_deposit=True)

    async def test_update_web_app_data_runs_all_steps(self, service):
        status = await service.update_web_app_data(ADDRESS)

        assert status.tier_status.new_tier is WebAppTier.NEWCOMER
        assert status.claim_status.allowed is False
        assert status.deposit_status.allowed is False

    async def test_add_trading_volume(self, service, web_app_repository):
        update = await service.add_monthly_trading_volume(ADDRESS, 150)

        assert update.monthly_trading_volume == 150
        assert update.total_trading_volume == 900
        web_app_repository.add_trading_volume.assert_awaited_once_with(ADDRESS, 150)

    @pytest.mark.parametrize("amount", [0, -10])
    async def test_trading_volume_must_be_positive(self, service, amount):
        with pytest.raises(InvalidArgumentError):
            await service.add_monthly_trading_volume(ADDRESS, amount)

    async def test_reset_trading_volume(self, service):
        assert await service.reset_monthly_trading_volume() == 3

    async def test_link_account(self, service, web_app_repository):
        await service.link_account(ADDRESS, " PF1 ")

        web_app_repository.update_fields.assert_any_await(ADDRESS, playfab_id="PF1")

    async def test_link_requires_playfab_id(self, service):
        with pytest.raises(InvalidArgumentError):
            await service.link_account(ADDRESS, "")

    async def test_unlink_closes_gates(self, service, web_app_repository):
        web_app_repository.require_by_address.return_value = web_app_record(can_claim=True, can_deposit=True)

        await service.unlink_account(ADDRESS)

        web_app_repository.update_fields.assert_any_await(ADDRESS, playfab_id=None)
        web_app_repository.update_fields.assert_any_await(ADDRESS, can_claim=False)
        web_app_repository.update_fields.assert_any_await(ADDRESS, can_deposit=False)


class StoredWebAppRepository:
    """Keeps one record in memory so the writes of a whole flow can be inspected."""

    def __init__(self, record: WebAppData):
        self.record = record

    async def get_or_create(self, address):
        return self.record

    async def require_by_address(self, address):
        return self.record

    async def update_fields(self, address, **values):
        self.record = self.record.model_copy(update=values)
        return self.record


@pytest.mark.asyncio
class TestLinkAccountFlow:
    @pytest.fixture
    def repository(self):
        return StoredWebAppRepository(web_app_record())

    @pytest.fixture
    def service(self, repository):
        in_game_repository = MagicMock()
        in_game_repository.get_by_address = AsyncMock(return_value=None)
        ledger = MagicMock()
        return TierService(repository, in_game_repository, ledger)

    async def test_link_without_in_game_data_opens_deposits(self, service, repository):
        record = await service.link_account(ADDRESS, "PF1")

        assert record.playfab_id == "PF1"
        assert record.can_deposit is True
        assert record.can_claim is False
        assert repository.record.can_deposit is True

    async def test_unlink_after_link_closes_deposits(self, service, repository):
        await service.link_account(ADDRESS, "PF1")

        record = await service.unlink_account(ADDRESS)

        assert record.playfab_id is None
        assert record.can_deposit is False

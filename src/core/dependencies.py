"""
FastAPI dependency injection functions.
Clean, maintainable dependency resolution using FastAPI's native DI system.
"""

from functools import lru_cache
from fastapi import Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from src.infra.config.redis import get_lazy_redis
from src.infra.database import get_async_session
from src.infra.repository.in_game_data_repository import InGameDataRepository
from src.infra.repository.web_app_data_repository import WebAppDataRepository
from src.core.service.account.playfab_client import PlayFabClient
from src.core.service.catalog.notion_client import NotionCatalogClient
from src.core.service.chain.ledger import ChainLedger
from src.core.service.currency.account_lock import AccountLock, RedisAccountLock
from src.core.service.currency.claim_service import ClaimService
from src.core.service.effectiveness.effectiveness_service import EffectivenessService
from src.core.service.hatching.genesis_service import GenesisNBMonService
from src.core.service.hatching.hatching_service import HatchingService
from src.core.service.tier.tier_service import TierService
from src.api.controller.nbmon.nbmon_controller import NBMonController
from src.api.controller.webapp.webapp_controller import WebAppController
from src.core.logger.logger import get_logger

logger = get_logger(__name__)


def get_redis_client() -> Redis:
    """Get a Redis client dependency; it connects on first use, not here."""
    return get_lazy_redis()


# Long-lived clients: one per process. The ledger must be shared so that
# transactions from the one signer are sent with ordered nonces.

@lru_cache()
def get_chain_ledger() -> ChainLedger:
    return ChainLedger()


@lru_cache()
def get_catalog_client() -> NotionCatalogClient:
    return NotionCatalogClient()


@lru_cache()
def get_playfab_client() -> PlayFabClient:
    return PlayFabClient()


async def get_web_app_repository(session: AsyncSession = Depends(get_async_session)) -> WebAppDataRepository:
    """Get web app repository with SQLAlchemy session dependency."""
    return WebAppDataRepository(session)


async def get_in_game_repository(session: AsyncSession = Depends(get_async_session)) -> InGameDataRepository:
    """Get in-game data repository with SQLAlchemy session dependency."""
    return InGameDataRepository(session)


async def get_account_lock(redis_client: Redis = Depends(get_redis_client)) -> AccountLock:
    """Get the per-account claim lock, shared across workers through Redis."""
    return RedisAccountLock(redis_client)


async def get_tier_service(
    web_app_repository: WebAppDataRepository = Depends(get_web_app_repository),
    in_game_repository: InGameDataRepository = Depends(get_in_game_repository),
    ledger: ChainLedger = Depends(get_chain_ledger)
) -> TierService:
    return TierService(web_app_repository, in_game_repository, ledger)


async def get_claim_service(
    web_app_repository: WebAppDataRepository = Depends(get_web_app_repository),
    playfab: PlayFabClient = Depends(get_playfab_client),
    ledger: ChainLedger = Depends(get_chain_ledger),
    tier_service: TierService = Depends(get_tier_service),
    account_lock: AccountLock = Depends(get_account_lock)
) -> ClaimService:
    return ClaimService(web_app_repository, playfab, ledger, tier_service, account_lock)


async def get_effectiveness_service(
    catalog: NotionCatalogClient = Depends(get_catalog_client)
) -> EffectivenessService:
    return EffectivenessService(catalog)


async def get_hatching_service(
    catalog: NotionCatalogClient = Depends(get_catalog_client)
) -> HatchingService:
    return HatchingService(catalog)


async def get_webapp_controller(
    tier_service: TierService = Depends(get_tier_service),
    claim_service: ClaimService = Depends(get_claim_service)
) -> WebAppController:
    """Get web app controller with its service dependencies."""
    return WebAppController(tier_service, claim_service)


async def get_genesis_service(
    effectiveness_service: EffectivenessService = Depends(get_effectiveness_service)
) -> GenesisNBMonService:
    return GenesisNBMonService(effectiveness_service)


async def get_nbmon_controller(
    effectiveness_service: EffectivenessService = Depends(get_effectiveness_service),
    hatching_service: HatchingService = Depends(get_hatching_service),
    catalog: NotionCatalogClient = Depends(get_catalog_client),
    genesis_service: GenesisNBMonService = Depends(get_genesis_service)
) -> NBMonController:
    """Get NBMon controller with its service dependencies."""
    return NBMonController(effectiveness_service, hatching_service, catalog, genesis_service)


async def close_shared_clients() -> None:
    """Close the cached HTTP clients on shutdown."""
    for factory in (get_catalog_client, get_playfab_client):
        if factory.cache_info().currsize:
            try:
                await factory().close()
            except Exception as e:
                logger.error(f"Failed to close client: {e}")
            factory.cache_clear()

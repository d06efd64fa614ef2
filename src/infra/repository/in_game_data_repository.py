"""
Realm Hunter in-game data repository using SQLAlchemy ORM
"""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions.base import NotFoundError, ServiceErrorCode, UpstreamFailureError
from src.core.service.account.models import InGameData
from src.infra.models import RealmHunterDataModel
from src.core.logger.logger import get_logger

logger = get_logger(__name__)


class InGameDataRepository:
    """Read access to Realm Hunter progress records"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_address(self, address: str) -> Optional[InGameData]:
        try:
            stmt = select(RealmHunterDataModel).where(RealmHunterDataModel.address == address.lower())
            result = await self.session.execute(stmt)
            model = result.scalar_one_or_none()
        except Exception as e:
            await self.session.rollback()
            logger.error(
                "Failed to get in-game data",
                extra={
                    "address": address,
                    "error": str(e)
                }
            )
            raise UpstreamFailureError(
                "Record store failed to get in-game data",
                code=ServiceErrorCode.DATABASE_ERROR,
            ) from e

        if model is None:
            return None

        return InGameData(
            address=model.address,
            account_level=model.account_level or 0,
            quests_completed=model.quests_completed or 0,
            pvp_mmr=model.pvp_mmr or 0
        )

    async def require_by_address(self, address: str) -> InGameData:
        record = await self.get_by_address(address)
        if record is None:
            raise NotFoundError(
                "User with given address not found in RealmHunterData",
                details={"address": address},
            )
        return record

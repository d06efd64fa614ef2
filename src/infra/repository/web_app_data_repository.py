"""
Web app data repository using SQLAlchemy ORM
"""

from typing import Any, Dict, Optional
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from src.core.exceptions.base import (
    InconsistentStateError,
    NotFoundError,
    ServiceError,
    ServiceErrorCode,
    UpstreamFailureError,
)
from src.core.service.account.models import WebAppData
from src.core.service.currency.models import Currency
from src.core.service.tier.models import WebAppTier
from src.infra.models import WebAppDataModel
from src.core.logger.logger import get_logger

logger = get_logger(__name__)

_LAST_CLAIM_COLUMN = {
    Currency.XRES: "last_xres_claim_time",
    Currency.XREC: "last_xrec_claim_time",
}
_TOTAL_CLAIMED_COLUMN = {
    Currency.XRES: "total_xres_claimed",
    Currency.XREC: "total_xrec_claimed",
}
_TOTAL_DEPOSITED_COLUMN = {
    Currency.XRES: "total_res_deposited",
    Currency.XREC: "total_rec_deposited",
}


class WebAppDataRepository:
    """Repository for web app records using SQLAlchemy ORM"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _model_to_entity(self, model: WebAppDataModel) -> WebAppData:
        """Convert SQLAlchemy model to Pydantic entity"""
        return WebAppData(
            id=model.id,
            address=model.address,
            playfab_id=model.playfab_id,
            web_app_tier=WebAppTier(model.web_app_tier) if model.web_app_tier else None,
            monthly_trading_volume=model.monthly_trading_volume or 0,
            total_trading_volume=model.total_trading_volume or 0,
            total_rec_deposited=model.total_rec_deposited or 0,
            total_res_deposited=model.total_res_deposited or 0,
            total_xres_claimed=model.total_xres_claimed or 0,
            total_xrec_claimed=model.total_xrec_claimed or 0,
            last_xres_claim_time=model.last_xres_claim_time or 0,
            last_xrec_claim_time=model.last_xrec_claim_time or 0,
            can_claim=bool(model.can_claim),
            can_deposit=bool(model.can_deposit),
            created_at=model.created_at,
            updated_at=model.updated_at
        )

    async def _fail(self, operation: str, address: Optional[str], error: Exception) -> None:
        await self.session.rollback()
        if isinstance(error, ServiceError):
            raise error
        logger.error(
            f"Failed to {operation}",
            extra={
                "address": address,
                "error": str(error)
            }
        )
        raise UpstreamFailureError(
            f"Record store failed to {operation}",
            code=ServiceErrorCode.DATABASE_ERROR,
        ) from error

    async def _select_by_address(self, address: str) -> Optional[WebAppDataModel]:
        stmt = select(WebAppDataModel).where(WebAppDataModel.address == address.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_address(self, address: str) -> Optional[WebAppData]:
        """
        Get web app record by address

        Returns:
            WebAppData or None when the address has no record yet
        """
        try:
            model = await self._select_by_address(address)
            return self._model_to_entity(model) if model else None
        except Exception as e:
            await self._fail("get web app data", address, e)

    async def require_by_address(self, address: str) -> WebAppData:
        """Like `get_by_address`, raising NotFoundError when absent."""
        record = await self.get_by_address(address)
        if record is None:
            raise NotFoundError(
                "User with given address not found in WebAppData",
                details={"address": address},
            )
        return record

    async def get_or_create(self, address: str) -> WebAppData:
        """
        Get existing record or create an empty one (first web app interaction)
        """
        try:
            model = await self._select_by_address(address)
            if model:
                return self._model_to_entity(model)

            new_record = WebAppDataModel(
                address=address.lower(),
                web_app_tier=WebAppTier.NEWCOMER.value,
                monthly_trading_volume=0,
                total_trading_volume=0,
                total_rec_deposited=0,
                total_res_deposited=0,
                total_xres_claimed=0,
                total_xrec_claimed=0,
                last_xres_claim_time=0,
                last_xrec_claim_time=0,
                can_claim=False,
                can_deposit=False
            )
            self.session.add(new_record)
            await self.session.commit()
            await self.session.refresh(new_record)

            logger.info(
                "New web app record created",
                extra={
                    "address": address,
                    "record_id": str(new_record.id)
                }
            )
            return self._model_to_entity(new_record)

        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(
                f"Web app record already exists (race condition): {e}",
                extra={"address": address}
            )
            return await self.require_by_address(address)

        except Exception as e:
            await self._fail("get or create web app data", address, e)

    async def _update(self, address: str, values: Dict[str, Any], *conditions: Any) -> Optional[WebAppDataModel]:
        """Run a single-row UPDATE ... RETURNING; None when no row matched"""
        stmt = (
            update(WebAppDataModel)
            .where(WebAppDataModel.address == address.lower(), *conditions)
            .values(**values)
            .returning(WebAppDataModel)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_fields(self, address: str, **values: Any) -> WebAppData:
        """
        Set columns on the record of `address` and return the updated record

        Raises:
            NotFoundError: no record for the address
        """
        if "web_app_tier" in values and isinstance(values["web_app_tier"], WebAppTier):
            values["web_app_tier"] = values["web_app_tier"].value

        try:
            model = await self._update(address, values)
            if model is None:
                await self.session.rollback()
                raise NotFoundError(
                    "User with given address not found in WebAppData",
                    details={"address": address},
                )
            await self.session.commit()

            logger.debug(
                "Web app record updated",
                extra={
                    "address": address,
                    "fields": sorted(values)
                }
            )
            return self._model_to_entity(model)

        except Exception as e:
            await self._fail("update web app data", address, e)

    async def record_claim(
        self,
        address: str,
        currency: Currency,
        amount: float,
        claimed_at: int,
        previous_claim_time: int,
    ) -> WebAppData:
        """
        Stamp the claim time and add `amount` to the claimed total.

        The write only lands while the stored claim time still equals
        `previous_claim_time`, the value the claim was authorized against.

        Raises:
            NotFoundError: no record for the address
            InconsistentStateError: CLAIM_RECORD_CONFLICT, another claim was recorded in between
        """
        last_column_name = _LAST_CLAIM_COLUMN[currency]
        last_column = getattr(WebAppDataModel, last_column_name)
        total_column = getattr(WebAppDataModel, _TOTAL_CLAIMED_COLUMN[currency])
        values = {
            last_column_name: claimed_at,
            _TOTAL_CLAIMED_COLUMN[currency]: total_column + amount,
        }

        try:
            model = await self._update(address, values, last_column == previous_claim_time)
            if model is None:
                current = await self._select_by_address(address)
                await self.session.rollback()
                if current is None:
                    raise NotFoundError(
                        "User with given address not found in WebAppData",
                        details={"address": address},
                    )
                raise InconsistentStateError(
                    "Another claim was recorded for this account in the meantime",
                    code=ServiceErrorCode.CLAIM_RECORD_CONFLICT,
                    details={
                        "address": address,
                        "currency": currency.value,
                        "expected_claim_time": previous_claim_time,
                        "stored_claim_time": getattr(current, last_column_name) or 0,
                    },
                )
            await self.session.commit()

            logger.debug(
                "Claim recorded",
                extra={
                    "address": address,
                    "currency": currency.value,
                    "amount": amount
                }
            )
            return self._model_to_entity(model)

        except Exception as e:
            await self._fail("record claim", address, e)

    async def record_deposit(self, address: str, currency: Currency, amount: float) -> WebAppData:
        """Add `amount` to the deposited total"""
        total_column = getattr(WebAppDataModel, _TOTAL_DEPOSITED_COLUMN[currency])
        return await self.update_fields(
            address,
            **{_TOTAL_DEPOSITED_COLUMN[currency]: total_column + amount}
        )

    async def add_trading_volume(self, address: str, amount: float) -> WebAppData:
        return await self.update_fields(
            address,
            monthly_trading_volume=WebAppDataModel.monthly_trading_volume + amount,
            total_trading_volume=WebAppDataModel.total_trading_volume + amount
        )

    async def reset_monthly_trading_volume(self) -> int:
        """Zero the monthly volume of every record; returns the number of records touched"""
        try:
            stmt = update(WebAppDataModel).values(monthly_trading_volume=0)
            result = await self.session.execute(stmt)
            await self.session.commit()
            logger.info("Monthly trading volume reset", extra={"records": result.rowcount})
            return result.rowcount
        except Exception as e:
            await self._fail("reset monthly trading volume", None, e)

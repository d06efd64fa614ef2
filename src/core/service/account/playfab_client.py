"""
PlayFab Admin API client for player accounts.

The EVM address a player linked in-game lives in the player's internal data
under `ethAddress`. Off-chain currency balances live in read-only data under
`xRES` / `xREC` as numeric strings.
"""

import httpx
from typing import Any, Dict, List, Optional

from src.core.exceptions.base import (
    InvalidArgumentError,
    NotEligibleError,
    ServiceErrorCode,
    UpstreamFailureError,
)
from src.core.http_client import create_client
from src.core.logger.logger import get_logger
from src.core.service.currency.models import Currency
from src.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()

ETH_ADDRESS_KEY = "ethAddress"


def _format_amount(amount: float) -> str:
    """Balances are stored as plain numeric strings; whole numbers without a trailing .0"""
    if float(amount).is_integer():
        return str(int(amount))
    return repr(float(amount))


class PlayFabClient:
    """Client for the PlayFab Admin endpoints used by the web app"""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        title_id: Optional[str] = None,
        secret_key: Optional[str] = None,
    ):
        self.http_client = http_client or create_client("playfab")
        self.title_id = title_id or settings.PLAYFAB_TITLE_ID
        self.secret_key = secret_key or settings.PLAYFAB_SECRET_KEY

    async def close(self) -> None:
        await self.http_client.aclose()

    def _url(self, endpoint: str) -> str:
        return f"https://{self.title_id}.playfabapi.com/Admin/{endpoint}"

    async def _post(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Call an Admin endpoint and return its `data` object

        Raises:
            UpstreamFailureError: on timeout, connection failure or an error reply;
                the provider's `errorMessage` is passed through
        """
        if not self.title_id or not self.secret_key:
            raise UpstreamFailureError(
                "PlayFab is not configured",
                code=ServiceErrorCode.SERVICE_UNAVAILABLE,
            )

        try:
            response = await self.http_client.post(
                self._url(endpoint),
                json=body,
                headers={"X-SecretKey": self.secret_key, "Content-Type": "application/json"},
            )
        except httpx.TimeoutException as e:
            logger.error(f"PlayFab request timed out: {e}", extra={"endpoint": endpoint})
            raise UpstreamFailureError("PlayFab request timed out", code=ServiceErrorCode.TIMEOUT) from e
        except httpx.RequestError as e:
            logger.error(f"PlayFab connection error: {e}", extra={"endpoint": endpoint})
            raise UpstreamFailureError(
                f"PlayFab connection failed: {e}",
                code=ServiceErrorCode.PLAYFAB_ERROR,
            ) from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code != 200:
            message = payload.get("errorMessage") or response.text[:500]
            logger.error(
                "PlayFab request failed",
                extra={
                    "endpoint": endpoint,
                    "status_code": response.status_code,
                    "error": message
                }
            )
            raise UpstreamFailureError(
                message,
                code=ServiceErrorCode.PLAYFAB_ERROR,
                details={
                    "status_code": response.status_code,
                    "playfab_error": payload.get("error"),
                },
            )

        return payload.get("data") or {}

    async def _get_user_data(self, endpoint: str, playfab_id: str, keys: List[str]) -> Dict[str, Any]:
        if not playfab_id:
            raise InvalidArgumentError("PlayFab ID is required")
        data = await self._post(endpoint, {"PlayFabId": playfab_id, "Keys": keys})
        return data.get("Data") or {}

    async def get_evm_address(self, playfab_id: str) -> str:
        """
        The EVM address linked to a PlayFab account, lowercased

        Raises:
            NotEligibleError: the player has not linked a wallet yet
        """
        data = await self._get_user_data("GetUserInternalData", playfab_id, [ETH_ADDRESS_KEY])
        address = (data.get(ETH_ADDRESS_KEY) or {}).get("Value")
        if not address:
            raise NotEligibleError(
                "No wallet address is linked to this PlayFab account",
                code=ServiceErrorCode.ACCOUNT_NOT_LINKED,
                details={"playfab_id": playfab_id},
            )
        return address.lower()

    async def get_currency_balance(self, playfab_id: str, currency: Currency) -> float:
        """Off-chain balance of `currency`; a missing entry means 0"""
        currency = Currency.parse(currency)
        data = await self._get_user_data("GetUserReadOnlyData", playfab_id, [currency.balance_key])
        raw = (data.get(currency.balance_key) or {}).get("Value")
        if raw in (None, ""):
            return 0.0
        try:
            return float(raw)
        except (TypeError, ValueError):
            logger.error(
                "Unparseable currency balance in PlayFab",
                extra={
                    "playfab_id": playfab_id,
                    "currency": currency.value,
                    "raw": raw
                }
            )
            raise UpstreamFailureError(
                f"PlayFab returned an invalid {currency.balance_key} balance",
                code=ServiceErrorCode.PLAYFAB_ERROR,
            )

    async def set_currency_balance(self, playfab_id: str, currency: Currency, amount: float) -> None:
        currency = Currency.parse(currency)
        if amount < 0:
            raise InvalidArgumentError(
                "Currency balance cannot be negative",
                code=ServiceErrorCode.INSUFFICIENT_BALANCE,
            )
        await self._post(
            "UpdateUserReadOnlyData",
            {"PlayFabId": playfab_id, "Data": {currency.balance_key: _format_amount(amount)}},
        )
        logger.info(
            "PlayFab currency balance updated",
            extra={
                "playfab_id": playfab_id,
                "currency": currency.value,
                "balance": amount
            }
        )

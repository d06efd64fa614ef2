"""Integration tests for the PlayFab Admin client against a mocked PlayFab API."""

import json

import httpx
import pytest

from src.core.exceptions.base import (
    InvalidArgumentError,
    NotEligibleError,
    ServiceErrorCode,
    UpstreamFailureError,
)
from src.core.service.account.playfab_client import PlayFabClient
from src.core.service.currency.models import Currency


def make_client(handler, title_id="ABCD", secret_key="secret") -> PlayFabClient:
    return PlayFabClient(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        title_id=title_id,
        secret_key=secret_key,
    )


def data_reply(data):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": 200, "status": "OK", "data": {"Data": data}})
    return handler


@pytest.mark.asyncio
class TestPlayFabClient:
    async def test_get_evm_address(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["secret"] = request.headers.get("X-SecretKey")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": {"Data": {
                "ethAddress": {"Value": "0x742D35CC6634C0532925A3B844BC9E7595F0BEB0"}
            }}})

        address = await make_client(handler).get_evm_address("PF1")

        assert address == "0x742d35cc6634c0532925a3b844bc9e7595f0beb0"
        assert seen["url"] == "https://ABCD.playfabapi.com/Admin/GetUserInternalData"
        assert seen["secret"] == "secret"
        assert seen["body"] == {"PlayFabId": "PF1", "Keys": ["ethAddress"]}

    async def test_missing_address(self):
        with pytest.raises(NotEligibleError) as exc:
            await make_client(data_reply({})).get_evm_address("PF1")

        assert exc.value.code == ServiceErrorCode.ACCOUNT_NOT_LINKED

    async def test_currency_balance(self):
        client = make_client(data_reply({"xRES": {"Value": "512.5"}}))

        assert await client.get_currency_balance("PF1", Currency.XRES) == 512.5

    async def test_missing_balance_is_zero(self):
        client = make_client(data_reply({}))

        assert await client.get_currency_balance("PF1", "xREC") == 0.0

    async def test_unparseable_balance(self):
        client = make_client(data_reply({"xREC": {"Value": "lots"}}))

        with pytest.raises(UpstreamFailureError) as exc:
            await client.get_currency_balance("PF1", Currency.XREC)

        assert exc.value.code == ServiceErrorCode.PLAYFAB_ERROR

    async def test_set_currency_balance(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append((request.url.path, json.loads(request.content)))
            return httpx.Response(200, json={"data": {"DataVersion": 3}})

        client = make_client(handler)
        await client.set_currency_balance("PF1", Currency.XRES, 400.0)
        await client.set_currency_balance("PF1", Currency.XREC, 2.5)

        assert bodies == [
            ("/Admin/UpdateUserReadOnlyData", {"PlayFabId": "PF1", "Data": {"xRES": "400"}}),
            ("/Admin/UpdateUserReadOnlyData", {"PlayFabId": "PF1", "Data": {"xREC": "2.5"}}),
        ]

    async def test_negative_balance_is_rejected(self):
        with pytest.raises(InvalidArgumentError):
            await make_client(data_reply({})).set_currency_balance("PF1", Currency.XRES, -1)

    async def test_error_message_is_passed_through(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={
                "code": 400,
                "error": "AccountNotFound",
                "errorMessage": "User not found",
            })

        with pytest.raises(UpstreamFailureError) as exc:
            await make_client(handler).get_evm_address("PF404")

        assert exc.value.message == "User not found"
        assert exc.value.code == ServiceErrorCode.PLAYFAB_ERROR
        assert exc.value.details["playfab_error"] == "AccountNotFound"

    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(UpstreamFailureError) as exc:
            await make_client(handler).get_currency_balance("PF1", Currency.XRES)

        assert exc.value.code == ServiceErrorCode.TIMEOUT

    async def test_unconfigured(self):
        client = make_client(data_reply({}))
        client.title_id = None
        client.secret_key = None

        with pytest.raises(UpstreamFailureError) as exc:
            await client.get_evm_address("PF1")

        assert exc.value.code == ServiceErrorCode.SERVICE_UNAVAILABLE

    async def test_missing_playfab_id(self):
        with pytest.raises(InvalidArgumentError):
            await make_client(data_reply({})).get_evm_address("")

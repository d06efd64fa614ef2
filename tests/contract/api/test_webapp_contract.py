"""
Contract tests for the web app API endpoints.
Tests routing, request/response schemas and error mapping with a mocked controller.
"""

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError
from unittest.mock import AsyncMock, MagicMock

from src.app import create_app
from src.api.controller.webapp.dto.input_dto import ClaimRequestDto, LinkAccountDto
from src.core.dependencies import get_webapp_controller
from src.core.exceptions.base import (
    InconsistentStateError,
    InvalidArgumentError,
    NotEligibleError,
    NotFoundError,
    ServiceErrorCode,
    UpstreamFailureError,
)
from src.core.service.currency.models import ClaimingCheck, ClaimResult, Currency
from src.core.service.tier.models import EligibilityStatus, TierUpdateStatus, WebAppTier

ADDRESS = "0x742d35cc6634c0532925a3b844bc9e7595f0beb0"
BASE = "/api/v1/webapp"


@pytest.fixture
def controller():
    return MagicMock()


@pytest.fixture
def client(controller):
    app = create_app()
    app.dependency_overrides[get_webapp_controller] = lambda: controller
    return TestClient(app)


class TestWebAppDtos:
    def test_claim_request_strips_playfab_id(self):
        request = ClaimRequestDto(currency="xRES", amount=100, playfab_id="  PF1 ")
        assert request.playfab_id == "PF1"

    def test_claim_request_rejects_non_positive_amount(self):
        with pytest.raises(ValidationError):
            ClaimRequestDto(currency="xres", amount=0, playfab_id="PF1")

    def test_link_request_rejects_blank_id(self):
        with pytest.raises(ValidationError):
            LinkAccountDto(playfab_id="   ")


class TestTierEndpoints:
    def test_tier_benefits(self, client):
        response = client.get(f"{BASE}/tiers/Grandee/benefits")

        assert response.status_code == 200
        data = response.json()
        assert data["claim_fee"] == 4
        assert data["claim_cooldown"] == 172800
        assert data["claim_requirement"] is None

    def test_newcomer_benefits_carry_claim_requirement(self, client):
        data = client.get(f"{BASE}/tiers/newcomer/benefits").json()

        assert data["claim_requirement"] == {
            "account_level": 60,
            "quests_completed": 1000,
            "pvp_mmr": 2000,
        }

    def test_claiming_info(self, client):
        data = client.get(f"{BASE}/tiers/merchant/claiming-info").json()

        assert data == {
            "claim_fee": 4.4,
            "minimum_xrec_claim": 45,
            "maximum_xrec_claim": 75,
            "minimum_xres_claim": 350,
            "maximum_xres_claim": 600,
        }

    def test_unknown_tier(self, client):
        response = client.get(f"{BASE}/tiers/emperor/benefits")

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == ServiceErrorCode.INVALID_TIER

    def test_update_tier(self, client, controller):
        controller.update_web_app_tier = AsyncMock(return_value=TierUpdateStatus(
            address=ADDRESS,
            previous_tier=WebAppTier.NEWCOMER,
            new_tier=WebAppTier.RUSTIC,
        ))

        response = client.post(f"{BASE}/{ADDRESS}/tier")

        assert response.status_code == 200
        assert response.json()["new_tier"] == "rustic"
        controller.update_web_app_tier.assert_awaited_once_with(ADDRESS)

    def test_claim_eligibility(self, client, controller):
        controller.update_claim_eligibility = AsyncMock(return_value=EligibilityStatus(
            address=ADDRESS,
            allowed=False,
            changed=True,
            additional_info="Account is not linked to a game account.",
        ))

        data = client.post(f"{BASE}/{ADDRESS}/claim-eligibility").json()

        assert data["allowed"] is False
        assert data["changed"] is True

    def test_unknown_address(self, client, controller):
        controller.update_deposit_eligibility = AsyncMock(
            side_effect=NotFoundError("User with given address not found in WebAppData")
        )

        response = client.post(f"{BASE}/{ADDRESS}/deposit-eligibility")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == ServiceErrorCode.RECORD_NOT_FOUND

    def test_invalid_address(self, client, controller):
        controller.get_nfts_owned = AsyncMock(side_effect=InvalidArgumentError(
            "Invalid EVM address", code=ServiceErrorCode.INVALID_ADDRESS
        ))

        response = client.get(f"{BASE}/0x123/nfts-owned")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == ServiceErrorCode.INVALID_ADDRESS

    def test_trading_volume_requires_positive_amount(self, client, controller):
        controller.add_trading_volume = AsyncMock()

        response = client.post(f"{BASE}/{ADDRESS}/trading-volume", json={"amount": -3})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == ServiceErrorCode.INVALID_INPUT
        controller.add_trading_volume.assert_not_awaited()


class TestClaimEndpoints:
    def test_claim_check(self, client, controller):
        controller.claiming_check = AsyncMock(return_value=ClaimingCheck(
            on_cooldown=False,
            claimable=True,
            is_within_limits=False,
        ))

        response = client.post(f"{BASE}/claim/check", json={
            "currency": "xres",
            "amount": 500,
            "playfab_id": "PF1",
        })

        assert response.status_code == 200
        assert response.json() == {"on_cooldown": False, "claimable": True, "is_within_limits": False}

    def test_claim(self, client, controller):
        controller.claim = AsyncMock(return_value=ClaimResult(
            address=ADDRESS,
            currency=Currency.XRES,
            amount=100,
            fee=4.5,
            minted_to_user=95.5,
            user_mint_tx="0xuser",
            fee_mint_tx="0xfee",
            remaining_balance=400,
            claimed_at=1700000000,
        ))

        response = client.post(f"{BASE}/claim", json={
            "currency": "xRES",
            "amount": 100,
            "playfab_id": "PF1",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["currency"] == "xres"
        assert data["minted_to_user"] == 95.5
        request = controller.claim.call_args[0][0]
        assert request.amount == 100

    @pytest.mark.parametrize("error, status_code", [
        (NotEligibleError("On cooldown", code=ServiceErrorCode.CLAIM_ON_COOLDOWN), 403),
        (InvalidArgumentError("Too much", code=ServiceErrorCode.AMOUNT_OUT_OF_LIMITS), 422),
        (InconsistentStateError("Not reflected", code=ServiceErrorCode.MINT_NOT_REFLECTED), 409),
        (UpstreamFailureError("RPC down", code=ServiceErrorCode.RPC_ERROR), 502),
        (UpstreamFailureError("Slow", code=ServiceErrorCode.TIMEOUT), 504),
    ])
    def test_claim_error_mapping(self, client, controller, error, status_code):
        controller.claim = AsyncMock(side_effect=error)

        response = client.post(f"{BASE}/claim", json={
            "currency": "xres",
            "amount": 100,
            "playfab_id": "PF1",
        })

        assert response.status_code == status_code
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == error.code
        assert body["error"]["message"] == error.message

    def test_inconsistent_state_carries_tx_hash(self, client, controller):
        controller.claim = AsyncMock(side_effect=InconsistentStateError(
            "Game balance could not be updated",
            code=ServiceErrorCode.OFFCHAIN_UPDATE_FAILED,
            details={"tx_hash": "0xuser"},
        ))

        response = client.post(f"{BASE}/claim", json={
            "currency": "xres",
            "amount": 100,
            "playfab_id": "PF1",
        })

        assert response.json()["error"]["details"] == {"tx_hash": "0xuser"}

    def test_claim_missing_fields(self, client, controller):
        controller.claim = AsyncMock()

        response = client.post(f"{BASE}/claim", json={"currency": "xres"})

        assert response.status_code == 422
        fields = {e["field"] for e in response.json()["error"]["details"]["validation_errors"]}
        assert "body.amount" in fields
        assert "body.playfab_id" in fields

    def test_deposit_not_allowed(self, client, controller):
        controller.deposit = AsyncMock(side_effect=NotEligibleError(
            "User is not allowed to deposit.",
            code=ServiceErrorCode.DEPOSIT_NOT_ALLOWED,
        ))

        response = client.post(f"{BASE}/deposit", json={
            "currency": "xrec",
            "amount": 10,
            "playfab_id": "PF1",
        })

        assert response.status_code == 403
        assert response.json()["error"]["code"] == ServiceErrorCode.DEPOSIT_NOT_ALLOWED

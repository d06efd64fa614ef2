"""Integration tests for the effectiveness service."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.core.exceptions.base import InvalidArgumentError, UpstreamFailureError
from src.core.service.effectiveness.effectiveness_service import EffectivenessService
from src.core.service.effectiveness.types import TypeMatrix


@pytest.mark.asyncio
class TestEffectivenessService:
    """Effectiveness service over a mocked catalog."""

    @pytest.fixture
    def catalog(self):
        catalog = MagicMock()
        catalog.get_type_matrix = AsyncMock(return_value=TypeMatrix({
            ("Water", "Fire"): 2.0,
            ("Water", "Nature"): 0.5,
        }))
        return catalog

    async def test_attack_effectiveness(self, catalog):
        service = EffectivenessService(catalog)

        result = await service.get_attack_effectiveness("water")

        assert result.strong_against == ["Fire"]
        assert result.weak_against == ["Nature"]

    async def test_matrix_fetched_on_every_query(self, catalog):
        service = EffectivenessService(catalog)

        await service.get_attack_effectiveness("Water")
        await service.get_defense_effectiveness("Fire")

        assert catalog.get_type_matrix.await_count == 2

    async def test_invalid_type_skips_catalog(self, catalog):
        service = EffectivenessService(catalog)

        with pytest.raises(InvalidArgumentError):
            await service.get_defense_effectiveness("Water", "Lava")

        catalog.get_type_matrix.assert_not_awaited()

    async def test_catalog_failure_propagates(self, catalog):
        catalog.get_type_matrix.side_effect = UpstreamFailureError("Notion down")
        service = EffectivenessService(catalog)

        with pytest.raises(UpstreamFailureError):
            await service.get_attack_effectiveness("Water")

    async def test_type_profile_uses_one_matrix_fetch(self, catalog):
        service = EffectivenessService(catalog)

        attack, defense = await service.get_type_profile("Fire")

        assert attack.strong_against == []
        assert defense.vulnerable_to == ["Water"]
        catalog.get_type_matrix.assert_awaited_once()

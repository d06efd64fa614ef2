"""NBMon controller: type effectiveness, hatch randomization and the Genesis NBMon view."""

from typing import Optional

from src.api.controller.nbmon.dto.input_dto import GenesisNBMonRequestDto, HatchRequestDto
from src.core.service.catalog.models import NBMonData
from src.core.service.catalog.notion_client import NotionCatalogClient
from src.core.service.effectiveness.effectiveness_service import EffectivenessService
from src.core.service.effectiveness.models import AttackEffectiveness, DefenseEffectiveness
from src.core.service.hatching.genesis_service import GenesisNBMonService
from src.core.service.hatching.hatching_service import HatchingService
from src.core.service.hatching.models import GenesisNBMon, HatchTraits, Passives
from src.core.service.hatching.randomizer import parse_rarity


class NBMonController:
    def __init__(
        self,
        effectiveness_service: EffectivenessService,
        hatching_service: HatchingService,
        catalog: NotionCatalogClient,
        genesis_service: GenesisNBMonService,
    ):
        self.effectiveness_service = effectiveness_service
        self.hatching_service = hatching_service
        self.catalog = catalog
        self.genesis_service = genesis_service

    async def get_attack_effectiveness(self, first_type: str, second_type: Optional[str]) -> AttackEffectiveness:
        return await self.effectiveness_service.get_attack_effectiveness(first_type, second_type)

    async def get_defense_effectiveness(self, first_type: str, second_type: Optional[str]) -> DefenseEffectiveness:
        return await self.effectiveness_service.get_defense_effectiveness(first_type, second_type)

    async def randomize_hatch_traits(self, request: HatchRequestDto) -> HatchTraits:
        rarity = parse_rarity(request.rarity) if request.rarity else None
        return await self.hatching_service.randomize_hatch_traits(rarity)

    async def randomize_mutation(self, genus: str) -> str:
        return await self.hatching_service.randomize_mutation(genus)

    async def randomize_passives(self) -> Passives:
        return await self.hatching_service.randomize_passives()

    async def get_genus_data(self, genus: str) -> NBMonData:
        return await self.catalog.get_genus_data(genus)

    async def get_genesis_nbmon(self, request: GenesisNBMonRequestDto) -> GenesisNBMon:
        return await self.genesis_service.get_genesis_nbmon(request.nbmon_id, request.traits)

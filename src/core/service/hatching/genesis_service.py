"""Read side of Genesis NBMons: stored traits joined with type effectiveness."""

from typing import Optional

from src.core.logger.logger import get_logger
from src.core.service.effectiveness.effectiveness_service import EffectivenessService
from src.core.service.hatching.models import GenesisNBMon, HatchTraits
from src.core.service.hatching.randomizer import NOT_MUTATED

logger = get_logger(__name__)


class GenesisNBMonService:
    def __init__(self, effectiveness_service: EffectivenessService):
        self.effectiveness_service = effectiveness_service

    async def get_genesis_nbmon(self, nbmon_id: int, traits: Optional[HatchTraits] = None) -> GenesisNBMon:
        """
        Build the player-facing view of an NBMon from its stored traits.

        `traits` is None while the NBMon is still an egg.

        Raises:
            InvalidArgumentError: a stored type is not a known type
        """
        if traits is None:
            return GenesisNBMon(nbmon_id=nbmon_id, is_egg=True)

        nbmon = GenesisNBMon(
            nbmon_id=nbmon_id,
            is_egg=False,
            types=[traits.first_type, traits.second_type],
            passives=[traits.passives.first, traits.passives.second],
            gender=traits.gender,
            rarity=traits.rarity,
            species=traits.species,
            genus=traits.genus,
            mutation=NOT_MUTATED if traits.mutation == NOT_MUTATED else "Mutated",
            mutation_type=None if traits.mutation == NOT_MUTATED else traits.mutation,
            potentials=traits.potentials,
            fertility=traits.fertility,
        )

        if traits.first_type:
            attack, defense = await self.effectiveness_service.get_type_profile(
                traits.first_type, traits.second_type
            )
            nbmon.types = [attack.first_type, attack.second_type]
            nbmon.strong_against = attack.strong_against
            nbmon.weak_against = attack.weak_against
            nbmon.resistant_to = defense.resistant_to
            nbmon.vulnerable_to = defense.vulnerable_to
        else:
            logger.warning("Hatched NBMon has no types", extra={"nbmon_id": nbmon_id, "genus": traits.genus})

        return nbmon

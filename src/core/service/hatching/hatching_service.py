"""Hatching service: composes the randomized traits of a Genesis NBMon."""

from typing import Optional

from src.core.logger.logger import get_logger
from src.core.service.catalog.notion_client import NotionCatalogClient
from src.core.service.hatching.models import HatchTraits, Passives, Potentials, Rarity
from src.core.service.hatching.randomizer import (
    NOT_MUTATED,
    TraitRandomizer,
    genesis_fertility_deduction,
)

logger = get_logger(__name__)

GENESIS_SPECIES = "Origin"
GENESIS_FERTILITY = 3000


class HatchingService:
    """Randomizes hatch traits, reading genus metadata from the catalog."""

    def __init__(self, catalog: NotionCatalogClient, randomizer: Optional[TraitRandomizer] = None):
        self.catalog = catalog
        self.randomizer = randomizer or TraitRandomizer()

    async def randomize_mutation(self, genus: str) -> str:
        """
        "Not mutated" 99.5% of the time, otherwise one of the genus' mutations.

        Missing mutation metadata never costs the user the mutation: a
        sentinel asking them to contact support is returned instead.
        """
        if not self.randomizer.roll_mutation():
            return NOT_MUTATED

        options = await self.catalog.get_genus_mutations(genus)
        mutation = self.randomizer.pick_mutation(options)
        logger.info(
            "NBMon mutated at hatch",
            extra={"genus": genus, "mutation": mutation, "options": len(options)}
        )
        return mutation

    async def randomize_passives(self) -> Passives:
        names = await self.catalog.get_passive_names()
        return self.randomizer.pick_passives(names)

    async def randomize_hatch_traits(self, rarity: Optional[Rarity] = None) -> HatchTraits:
        """
        Draw every trait of a hatching Genesis NBMon.

        Args:
            rarity: force a rarity band instead of drawing one

        Returns:
            HatchTraits ready to be stored as immutable NBMon attributes
        """
        gender = self.randomizer.randomize_gender()
        rarity = rarity or self.randomizer.randomize_rarity()
        genus = self.randomizer.randomize_genus()
        mutation = await self.randomize_mutation(genus)
        types = await self.catalog.get_genus_types(genus)
        potentials = self.randomizer.randomize_potentials(rarity)
        passives = await self.randomize_passives()

        traits = HatchTraits(
            gender=gender,
            rarity=rarity,
            genus=genus,
            mutation=mutation,
            species=GENESIS_SPECIES,
            first_type=types[0],
            second_type=types[1] if len(types) > 1 else None,
            potentials=Potentials.from_list(potentials),
            passives=passives,
            fertility=GENESIS_FERTILITY,
            fertility_deduction=genesis_fertility_deduction(rarity),
        )

        logger.info(
            "Hatch traits randomized",
            extra={
                "genus": genus,
                "rarity": traits.rarity.value,
                "mutation": mutation,
                "types": types
            }
        )
        return traits

"""
Trait randomization for Genesis NBMons.

All draws go through one injectable `random.Random`, so tests can seed it.
"""

import random
from typing import Dict, List, Optional, Sequence, Tuple, Union

from src.core.exceptions.base import InvalidArgumentError, NotFoundError, ServiceErrorCode
from src.core.service.hatching.models import Gender, Passives, Rarity

POTENTIAL_STAT_COUNT = 7

# Upper bound (inclusive) of a uniform draw over 1..1000
RARITY_BREAKPOINTS: List[Tuple[int, Rarity]] = [
    (500, Rarity.COMMON),      # 50%
    (750, Rarity.UNCOMMON),    # 25%
    (875, Rarity.RARE),        # 12.5%
    (945, Rarity.EPIC),        # 7%
    (985, Rarity.LEGENDARY),   # 4%
    (1000, Rarity.MYTHICAL),   # 1.5%
]

# Inclusive potential range per stat
POTENTIAL_RANGES: Dict[Rarity, Tuple[int, int]] = {
    Rarity.COMMON: (0, 24),
    Rarity.UNCOMMON: (10, 30),
    Rarity.RARE: (20, 40),
    Rarity.EPIC: (30, 50),
    Rarity.LEGENDARY: (40, 55),
    Rarity.MYTHICAL: (50, 65),
}

GENESIS_FERTILITY_DEDUCTION: Dict[Rarity, int] = {
    Rarity.COMMON: 1000,
    Rarity.UNCOMMON: 750,
    Rarity.RARE: 600,
    Rarity.EPIC: 500,
    Rarity.LEGENDARY: 375,
    Rarity.MYTHICAL: 300,
}

GENESIS_GENERA: List[str] = [
    "Lamox",
    "Licorine",
    "Unicorn",
    "Dranexx",
    "Milnas",
    "Todillo",
    "Birvo",
    "Pongu",
    "Darrakan",
    "Kirin",
    "Heree",
    "Spherno",
]

# 0.5% chance: rolls of 996..1000 out of 1..1000
MUTATION_THRESHOLD = 996

NOT_MUTATED = "Not mutated"
MUTATION_UNSPECIFIED = (
    "NBMon mutated, but no available mutations specified for that genus yet. "
    "Please contact the developers."
)
PASSIVE_UNAVAILABLE = "Passive name unavailable. Please contact us about this."


def parse_rarity(rarity: Union[Rarity, str]) -> Rarity:
    if isinstance(rarity, Rarity):
        return rarity
    for band in Rarity:
        if isinstance(rarity, str) and band.value.lower() == rarity.strip().lower():
            return band
    raise InvalidArgumentError(
        f"Invalid rarity specified: {rarity}",
        code=ServiceErrorCode.INVALID_RARITY,
        details={"valid_rarities": [band.value for band in Rarity]},
    )


def genesis_fertility_deduction(rarity: Union[Rarity, str]) -> int:
    """Fertility points a Genesis NBMon of `rarity` loses each time it breeds."""
    return GENESIS_FERTILITY_DEDUCTION[parse_rarity(rarity)]


class TraitRandomizer:
    """Random draws used when a Genesis NBMon hatches."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def randomize_gender(self) -> Gender:
        return Gender.MALE if self.rng.randint(1, 2) == 1 else Gender.FEMALE

    def randomize_rarity(self) -> Rarity:
        roll = self.rng.randint(1, 1000)
        for upper_bound, rarity in RARITY_BREAKPOINTS:
            if roll <= upper_bound:
                return rarity
        # randint is inclusive of 1000, the last breakpoint
        raise AssertionError(f"Rarity roll out of range: {roll}")

    def randomize_genus(self) -> str:
        return self.rng.choice(GENESIS_GENERA)

    def randomize_potentials(self, rarity: Union[Rarity, str]) -> List[int]:
        """
        7 potential stats drawn uniformly from the rarity's inclusive range.

        Mythical NBMons always have at least one stat at the band maximum.

        Raises:
            InvalidArgumentError: unrecognized rarity
        """
        band = parse_rarity(rarity)
        low, high = POTENTIAL_RANGES[band]
        potentials = [self.rng.randint(low, high) for _ in range(POTENTIAL_STAT_COUNT)]

        if band is Rarity.MYTHICAL and high not in potentials:
            potentials[self.rng.randrange(POTENTIAL_STAT_COUNT)] = high

        return potentials

    def roll_mutation(self) -> bool:
        return self.rng.randint(1, 1000) >= MUTATION_THRESHOLD

    def pick_mutation(self, options: Sequence[Optional[str]]) -> str:
        """A mutation name from `options`; the sentinel when there is nothing usable."""
        if not options:
            return MUTATION_UNSPECIFIED
        picked = options[self.rng.randrange(len(options))]
        return picked if picked else MUTATION_UNSPECIFIED

    def pick_passives(self, names: Sequence[Optional[str]]) -> Passives:
        """
        Two passives at distinct positions of `names`.

        Raises:
            NotFoundError: fewer than two passives to choose from
        """
        if len(names) < 2:
            raise NotFoundError(
                "At least two passives are required in the catalog",
                code=ServiceErrorCode.CATALOG_ENTRY_NOT_FOUND,
                details={"available": len(names)},
            )

        first_index = self.rng.randrange(len(names))
        second_index = self.rng.randrange(len(names))
        while second_index == first_index:
            second_index = self.rng.randrange(len(names))

        return Passives(
            first=names[first_index] or PASSIVE_UNAVAILABLE,
            second=names[second_index] or PASSIVE_UNAVAILABLE,
        )

"""Models for NBMon hatching traits."""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class Rarity(str, Enum):
    """Genesis rarity bands, most to least common"""
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"
    MYTHICAL = "Mythical"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class Potentials(BaseModel):
    """The 7 potential stats, in on-chain metadata order."""
    health: int
    energy: int
    attack: int
    defense: int
    special_attack: int
    special_defense: int
    speed: int

    @classmethod
    def from_list(cls, values: List[int]) -> "Potentials":
        keys = list(cls.model_fields.keys())
        return cls(**dict(zip(keys, values)))

    def as_list(self) -> List[int]:
        return [getattr(self, key) for key in type(self).model_fields.keys()]


class Passives(BaseModel):
    first: str
    second: str


class HatchTraits(BaseModel):
    """Randomized attributes of a Genesis NBMon at hatch time."""
    gender: Gender
    rarity: Rarity
    genus: str
    mutation: str
    species: str = "Origin"
    first_type: Optional[str] = None
    second_type: Optional[str] = None
    potentials: Potentials
    passives: Passives
    fertility: int = 3000
    fertility_deduction: int = Field(..., description="Fertility points lost per breeding")


class GenesisNBMon(BaseModel):
    """
    A Genesis NBMon as shown to players: its stored traits joined with the
    type effectiveness of its types. An egg has no traits yet, so everything
    but the id is empty.
    """
    nbmon_id: int
    is_egg: bool
    types: List[Optional[str]] = Field(default_factory=lambda: [None, None])
    strong_against: List[str] = Field(default_factory=list)
    weak_against: List[str] = Field(default_factory=list)
    resistant_to: List[str] = Field(default_factory=list)
    vulnerable_to: List[str] = Field(default_factory=list)
    passives: List[Optional[str]] = Field(default_factory=lambda: [None, None])
    gender: Optional[Gender] = None
    rarity: Optional[Rarity] = None
    species: Optional[str] = None
    genus: Optional[str] = None
    mutation: str = "Not mutated"
    mutation_type: Optional[str] = None
    potentials: Optional[Potentials] = None
    fertility: Optional[int] = None

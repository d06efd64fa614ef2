"""Models for type effectiveness."""

from typing import List, Optional
from pydantic import BaseModel, Field


class AttackEffectiveness(BaseModel):
    """What a type combination hits hard or poorly."""
    first_type: str
    second_type: Optional[str] = None
    strong_against: List[str] = Field(default_factory=list)
    weak_against: List[str] = Field(default_factory=list)


class DefenseEffectiveness(BaseModel):
    """What a type combination shrugs off or suffers from."""
    first_type: str
    second_type: Optional[str] = None
    resistant_to: List[str] = Field(default_factory=list)
    vulnerable_to: List[str] = Field(default_factory=list)


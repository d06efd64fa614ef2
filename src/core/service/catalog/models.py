"""Models for the NBMon content catalog (NBPedia, passives and types tables)."""

from typing import List, Optional
from pydantic import BaseModel, Field


class GenusEntry(BaseModel):
    """One NBPedia row, reduced to the fields the backend reads."""
    genus: str
    types: List[str] = Field(default_factory=list)
    mutations: List[Optional[str]] = Field(default_factory=list)
    summary: Optional[str] = None
    species: Optional[str] = None
    behavior: Optional[str] = None
    habitat: List[str] = Field(default_factory=list)
    intended_playstyle: Optional[str] = None
    base_stats: Optional[str] = None


class NBMonData(BaseModel):
    """Descriptive data of a genus as served to the web app."""
    genus: Optional[str] = None
    types: Optional[List[str]] = None
    summary: Optional[str] = None
    species: Optional[str] = None
    behavior: Optional[str] = None
    habitat: Optional[List[str]] = None
    intended_playstyle: Optional[str] = None
    base_stats: Optional[str] = None

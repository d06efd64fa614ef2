"""Attack/defense effectiveness over a type multiplier matrix."""

from typing import List, Optional, Tuple

from src.core.service.effectiveness.models import AttackEffectiveness, DefenseEffectiveness
from src.core.service.effectiveness.types import (
    ALL_TYPES,
    NEUTRAL_MULTIPLIER,
    TypeMatrix,
    normalize_optional_type,
    normalize_type,
)


def attack_multiplier(
    matrix: TypeMatrix,
    first_type: str,
    second_type: Optional[str],
    candidate: str
) -> float:
    """Combined multiplier of an attacker with one or two types against `candidate`."""
    combined = matrix.multiplier(first_type, candidate)
    if second_type is not None:
        combined *= matrix.multiplier(second_type, candidate)
    return combined


def defense_multiplier(
    matrix: TypeMatrix,
    first_type: str,
    second_type: Optional[str],
    candidate: str
) -> float:
    """Combined multiplier of `candidate` attacking a defender with one or two types."""
    combined = matrix.multiplier(candidate, first_type)
    if second_type is not None:
        combined *= matrix.multiplier(candidate, second_type)
    return combined


def _classify(multipliers: List[Tuple[str, float]]) -> Tuple[List[str], List[str]]:
    # Exactly neutral lands in neither bucket, for one type and for two.
    above = [name for name, value in multipliers if value > NEUTRAL_MULTIPLIER]
    below = [name for name, value in multipliers if value < NEUTRAL_MULTIPLIER]
    return above, below


def attack_effectiveness(
    matrix: TypeMatrix,
    first_type: str,
    second_type: Optional[str] = None
) -> AttackEffectiveness:
    """
    Types that `first_type`/`second_type` are strong or weak against, attack-wise.

    Raises:
        InvalidArgumentError: unknown or empty first type, or unknown second type
    """
    first = normalize_type(first_type)
    second = normalize_optional_type(second_type)

    strong, weak = _classify(
        [(candidate, attack_multiplier(matrix, first, second, candidate)) for candidate in ALL_TYPES]
    )
    return AttackEffectiveness(
        first_type=first,
        second_type=second,
        strong_against=strong,
        weak_against=weak,
    )


def defense_effectiveness(
    matrix: TypeMatrix,
    first_type: str,
    second_type: Optional[str] = None
) -> DefenseEffectiveness:
    """
    Types that `first_type`/`second_type` resist or are vulnerable to, defense-wise.

    Raises:
        InvalidArgumentError: unknown or empty first type, or unknown second type
    """
    first = normalize_type(first_type)
    second = normalize_optional_type(second_type)

    vulnerable, resistant = _classify(
        [(candidate, defense_multiplier(matrix, first, second, candidate)) for candidate in ALL_TYPES]
    )
    return DefenseEffectiveness(
        first_type=first,
        second_type=second,
        resistant_to=resistant,
        vulnerable_to=vulnerable,
    )

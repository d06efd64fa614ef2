"""NBMon elemental types and the damage multiplier matrix."""

from typing import Dict, List, Optional, Tuple

from src.core.exceptions.base import InvalidArgumentError, ServiceErrorCode


# Catalog order of the Types table (row 0 is Reptile, row 14 is Water).
ALL_TYPES: List[str] = [
    "Reptile",
    "Toxic",
    "Magic",
    "Psychic",
    "Brawler",
    "Crystal",
    "Frost",
    "Spirit",
    "Nature",
    "Wind",
    "Ordinary",
    "Fire",
    "Earth",
    "Electric",
    "Water",
]

_TYPES_BY_KEY: Dict[str, str] = {name.lower(): name for name in ALL_TYPES}

NEUTRAL_MULTIPLIER = 1.0


def normalize_type(name: Optional[str]) -> str:
    """Resolve a type name case-insensitively to its canonical spelling."""
    if name is None or not str(name).strip():
        raise InvalidArgumentError(
            "Please specify at least the first type.",
            code=ServiceErrorCode.INVALID_TYPE,
        )

    canonical = _TYPES_BY_KEY.get(str(name).strip().lower())
    if canonical is None:
        raise InvalidArgumentError(
            f"Unknown type: {name}",
            code=ServiceErrorCode.INVALID_TYPE,
            details={"type": name, "valid_types": ALL_TYPES},
        )
    return canonical


def normalize_optional_type(name: Optional[str]) -> Optional[str]:
    """Like `normalize_type`, but empty or missing means "no type"."""
    if name is None or not str(name).strip():
        return None
    return normalize_type(name)


class TypeMatrix:
    """
    Attack multipliers between types.

    `multiplier(attacker, defender)` is how hard `attacker` hits `defender`.
    Cells that were never filled in are neutral.
    """

    def __init__(self, cells: Optional[Dict[Tuple[str, str], float]] = None):
        self._cells: Dict[Tuple[str, str], float] = {}
        for (attacker, defender), value in (cells or {}).items():
            self.set(attacker, defender, value)

    def set(self, attacker: str, defender: str, value: float) -> None:
        self._cells[(normalize_type(attacker), normalize_type(defender))] = float(value)

    def multiplier(self, attacker: str, defender: str) -> float:
        return self._cells.get((attacker, defender), NEUTRAL_MULTIPLIER)

    def __len__(self) -> int:
        return len(self._cells)

    @classmethod
    def from_percentages(cls, rows: Dict[str, Dict[str, Optional[str]]]) -> "TypeMatrix":
        """
        Build a matrix from catalog rows of percentage strings.

        `rows[attacker][defender]` is the raw cell text, e.g. "150" for 1.5x.
        Blank or malformed cells, and unknown type names, are neutral.
        """
        matrix = cls()
        for attacker, cells in rows.items():
            if (attacker or "").strip().lower() not in _TYPES_BY_KEY:
                continue
            for defender, raw in cells.items():
                if (defender or "").strip().lower() not in _TYPES_BY_KEY:
                    continue
                value = parse_percentage(raw)
                if value is not None:
                    matrix.set(attacker, defender, value)
        return matrix


def parse_percentage(raw: Optional[str]) -> Optional[float]:
    """Parse "150" or "150%" into 1.5; None when blank or not a number."""
    if raw is None:
        return None
    text = str(raw).strip().rstrip("%").strip()
    if not text:
        return None
    try:
        return float(text) / 100
    except ValueError:
        return None

"""Type effectiveness service backed by the content catalog."""

from typing import Optional, Tuple

from src.core.logger.logger import get_logger
from src.core.service.catalog.notion_client import NotionCatalogClient
from src.core.service.effectiveness.calculator import attack_effectiveness, defense_effectiveness
from src.core.service.effectiveness.models import AttackEffectiveness, DefenseEffectiveness
from src.core.service.effectiveness.types import normalize_optional_type, normalize_type

logger = get_logger(__name__)


class EffectivenessService:
    """Fetches the multiplier matrix on every query and classifies types against it."""

    def __init__(self, catalog: NotionCatalogClient):
        self.catalog = catalog

    async def get_attack_effectiveness(
        self,
        first_type: str,
        second_type: Optional[str] = None
    ) -> AttackEffectiveness:
        # Validate before paying for the catalog round trip
        normalize_type(first_type)
        normalize_optional_type(second_type)

        matrix = await self.catalog.get_type_matrix()
        result = attack_effectiveness(matrix, first_type, second_type)
        logger.debug(
            "Attack effectiveness computed",
            extra={
                "first_type": result.first_type,
                "second_type": result.second_type,
                "strong": len(result.strong_against),
                "weak": len(result.weak_against)
            }
        )
        return result

    async def get_defense_effectiveness(
        self,
        first_type: str,
        second_type: Optional[str] = None
    ) -> DefenseEffectiveness:
        normalize_type(first_type)
        normalize_optional_type(second_type)

        matrix = await self.catalog.get_type_matrix()
        result = defense_effectiveness(matrix, first_type, second_type)
        logger.debug(
            "Defense effectiveness computed",
            extra={
                "first_type": result.first_type,
                "second_type": result.second_type,
                "resistant": len(result.resistant_to),
                "vulnerable": len(result.vulnerable_to)
            }
        )
        return result

    async def get_type_profile(
        self,
        first_type: str,
        second_type: Optional[str] = None
    ) -> Tuple[AttackEffectiveness, DefenseEffectiveness]:
        """Attack and defense effectiveness of one combination, from a single matrix fetch"""
        normalize_type(first_type)
        normalize_optional_type(second_type)

        matrix = await self.catalog.get_type_matrix()
        return (
            attack_effectiveness(matrix, first_type, second_type),
            defense_effectiveness(matrix, first_type, second_type),
        )

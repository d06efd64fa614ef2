"""NBMon router: type effectiveness, genus data, hatch randomization and the Genesis NBMon view."""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from src.api.controller.nbmon.dto.input_dto import GenesisNBMonRequestDto, HatchRequestDto
from src.api.controller.nbmon.nbmon_controller import NBMonController
from src.core.dependencies import get_nbmon_controller
from src.core.service.catalog.models import NBMonData
from src.core.service.effectiveness.models import AttackEffectiveness, DefenseEffectiveness
from src.core.service.hatching.models import GenesisNBMon, HatchTraits, Passives

router = APIRouter(
    prefix="/nbmon",
    tags=["NBMon"],
    responses={
        404: {"description": "Catalog entry not found"},
        409: {"description": "Catalog inconsistent"},
        422: {"description": "Invalid argument"},
        502: {"description": "Catalog unavailable"}
    }
)


@router.get(
    "/effectiveness/attack",
    response_model=AttackEffectiveness,
    summary="Attack effectiveness",
    description="Types a combination of one or two types deals more (strong) or less (weak) damage to."
)
async def attack_effectiveness(
    first_type: str = Query(..., description="First type (case-insensitive)"),
    second_type: Optional[str] = Query(None, description="Optional second type"),
    controller: NBMonController = Depends(get_nbmon_controller)
) -> AttackEffectiveness:
    return await controller.get_attack_effectiveness(first_type, second_type)


@router.get(
    "/effectiveness/defense",
    response_model=DefenseEffectiveness,
    summary="Defense effectiveness",
    description="Types a combination of one or two types takes less (resistant) or more (vulnerable) damage from."
)
async def defense_effectiveness(
    first_type: str = Query(..., description="First type (case-insensitive)"),
    second_type: Optional[str] = Query(None, description="Optional second type"),
    controller: NBMonController = Depends(get_nbmon_controller)
) -> DefenseEffectiveness:
    return await controller.get_defense_effectiveness(first_type, second_type)


@router.post("/hatch", response_model=HatchTraits, summary="Randomize hatch traits")
async def randomize_hatch_traits(
    request: HatchRequestDto,
    controller: NBMonController = Depends(get_nbmon_controller)
) -> HatchTraits:
    return await controller.randomize_hatch_traits(request)


@router.get("/passives/random", response_model=Passives, summary="Draw two distinct passives")
async def randomize_passives(
    controller: NBMonController = Depends(get_nbmon_controller)
) -> Passives:
    return await controller.randomize_passives()


@router.get("/genus/{genus}", response_model=NBMonData, summary="Genus data")
async def get_genus_data(
    genus: str,
    controller: NBMonController = Depends(get_nbmon_controller)
) -> NBMonData:
    return await controller.get_genus_data(genus)


@router.get("/genus/{genus}/mutation", summary="Roll a mutation for a genus")
async def randomize_mutation(
    genus: str,
    controller: NBMonController = Depends(get_nbmon_controller)
) -> dict:
    return {"genus": genus, "mutation": await controller.randomize_mutation(genus)}


@router.post(
    "/genesis",
    response_model=GenesisNBMon,
    summary="Genesis NBMon view",
    description="Stored traits of a Genesis NBMon with the strong/weak/resistant/vulnerable sets of its types."
)
async def get_genesis_nbmon(
    request: GenesisNBMonRequestDto,
    controller: NBMonController = Depends(get_nbmon_controller)
) -> GenesisNBMon:
    return await controller.get_genesis_nbmon(request)

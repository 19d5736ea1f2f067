"""Fluency level endpoints."""
from fastapi import APIRouter, Depends

from dependencies import get_current_caller, get_fluency_manager
from schemas.fluency import FluencyHistoryEntry, FluencyRead, FluencyUpdate, FluencyUpdateResult
from services.auth import Caller
from services.fluency import FluencyLevelManager

router = APIRouter(prefix="/fluency", tags=["fluency"])


@router.get("/history/{user_id}", response_model=list[FluencyHistoryEntry])
async def get_fluency_history(
    user_id: str,
    caller: Caller = Depends(get_current_caller),
    manager: FluencyLevelManager = Depends(get_fluency_manager),
):
    return await manager.get_history(user_id)


@router.get("/{user_id}", response_model=FluencyRead)
async def get_fluency_level(
    user_id: str,
    caller: Caller = Depends(get_current_caller),
    manager: FluencyLevelManager = Depends(get_fluency_manager),
):
    return await manager.get_level(user_id)


@router.patch("/{user_id}", response_model=FluencyUpdateResult)
async def update_fluency_level(
    user_id: str,
    data: FluencyUpdate,
    caller: Caller = Depends(get_current_caller),
    manager: FluencyLevelManager = Depends(get_fluency_manager),
):
    return await manager.set_level(caller.user_id, user_id, data.level)

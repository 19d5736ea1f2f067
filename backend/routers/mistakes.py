"""The caller's mistake bank."""
from fastapi import APIRouter, Depends

from dependencies import get_current_caller, get_mistake_bank
from schemas.base import CreatedResponse, SuccessResponse
from schemas.study import Mistake, MistakeCreate, MistakeUpdate
from services.auth import Caller
from services.study import MistakeBank

router = APIRouter(prefix="/mistakes", tags=["mistakes"])


@router.get("", response_model=list[Mistake])
async def list_mistakes(
    caller: Caller = Depends(get_current_caller),
    bank: MistakeBank = Depends(get_mistake_bank),
):
    return await bank.list_for_user(caller.user_id)


@router.post("", response_model=CreatedResponse)
async def create_mistake(
    data: MistakeCreate,
    caller: Caller = Depends(get_current_caller),
    bank: MistakeBank = Depends(get_mistake_bank),
):
    mistake = await bank.create(caller.user_id, data.to_store())
    return CreatedResponse(id=mistake.id)


@router.patch("/{mistake_id}", response_model=SuccessResponse)
async def update_mistake(
    mistake_id: str,
    data: MistakeUpdate,
    caller: Caller = Depends(get_current_caller),
    bank: MistakeBank = Depends(get_mistake_bank),
):
    await bank.update(caller.user_id, mistake_id, data.changes())
    return SuccessResponse()


@router.delete("/{mistake_id}", response_model=SuccessResponse)
async def delete_mistake(
    mistake_id: str,
    caller: Caller = Depends(get_current_caller),
    bank: MistakeBank = Depends(get_mistake_bank),
):
    await bank.delete(caller.user_id, mistake_id)
    return SuccessResponse()

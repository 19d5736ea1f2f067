"""The caller's spaced-repetition cards."""
from fastapi import APIRouter, Depends

from dependencies import get_current_caller, get_review_deck
from schemas.base import CreatedResponse, SuccessResponse
from schemas.study import ReviewCardCreate, ReviewCardList, ReviewCardUpdate
from services.auth import Caller
from services.study import ReviewDeck

router = APIRouter(prefix="/spaced-repetition", tags=["spaced-repetition"])


@router.get("", response_model=ReviewCardList)
async def list_cards(
    due: bool = False,
    caller: Caller = Depends(get_current_caller),
    deck: ReviewDeck = Depends(get_review_deck),
):
    if due:
        return ReviewCardList(cards=await deck.due(caller.user_id))
    return ReviewCardList(cards=await deck.list_for_user(caller.user_id))


@router.post("", response_model=CreatedResponse)
async def create_card(
    data: ReviewCardCreate,
    caller: Caller = Depends(get_current_caller),
    deck: ReviewDeck = Depends(get_review_deck),
):
    card = await deck.create(caller.user_id, data.to_store())
    return CreatedResponse(id=card.id)


@router.patch("/{card_id}", response_model=SuccessResponse)
async def update_card(
    card_id: str,
    data: ReviewCardUpdate,
    caller: Caller = Depends(get_current_caller),
    deck: ReviewDeck = Depends(get_review_deck),
):
    await deck.update(caller.user_id, card_id, data.changes())
    return SuccessResponse()

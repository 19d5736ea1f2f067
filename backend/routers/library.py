"""Shared vocabulary and grammar. Reads are public, writes need a teacher."""
from fastapi import APIRouter, Depends

from dependencies import get_current_teacher, get_grammar_library, get_vocabulary_library
from schemas.base import CreatedResponse, SuccessResponse
from schemas.library import GrammarRule, GrammarRuleCreate, VocabularyCreate, VocabularyItem, VocabularyUpdate
from services.auth import Caller
from services.library import GrammarLibrary, VocabularyLibrary

router = APIRouter(tags=["library"])


@router.get("/vocabulary", response_model=list[VocabularyItem])
async def list_vocabulary(library: VocabularyLibrary = Depends(get_vocabulary_library)):
    return await library.list_all()


@router.post("/vocabulary", response_model=CreatedResponse)
async def create_vocabulary(
    data: VocabularyCreate,
    caller: Caller = Depends(get_current_teacher),
    library: VocabularyLibrary = Depends(get_vocabulary_library),
):
    item = await library.create(caller, data.to_store())
    return CreatedResponse(id=item.id)


@router.patch("/vocabulary/{item_id}", response_model=SuccessResponse)
async def update_vocabulary(
    item_id: str,
    data: VocabularyUpdate,
    caller: Caller = Depends(get_current_teacher),
    library: VocabularyLibrary = Depends(get_vocabulary_library),
):
    await library.update(caller, item_id, data.changes())
    return SuccessResponse()


@router.delete("/vocabulary/{item_id}", response_model=SuccessResponse)
async def delete_vocabulary(
    item_id: str,
    caller: Caller = Depends(get_current_teacher),
    library: VocabularyLibrary = Depends(get_vocabulary_library),
):
    await library.delete(caller, item_id)
    return SuccessResponse()


@router.get("/grammar", response_model=list[GrammarRule])
async def list_grammar(library: GrammarLibrary = Depends(get_grammar_library)):
    return await library.list_all()


@router.post("/grammar", response_model=CreatedResponse)
async def create_grammar_rule(
    data: GrammarRuleCreate,
    caller: Caller = Depends(get_current_teacher),
    library: GrammarLibrary = Depends(get_grammar_library),
):
    rule = await library.create(caller, data.to_store())
    return CreatedResponse(id=rule.id)


@router.delete("/grammar/{rule_id}", response_model=SuccessResponse)
async def delete_grammar_rule(
    rule_id: str,
    caller: Caller = Depends(get_current_teacher),
    library: GrammarLibrary = Depends(get_grammar_library),
):
    await library.delete(caller, rule_id)
    return SuccessResponse()

"""The caller's own lesson progress and progress summary."""
from fastapi import APIRouter, Depends

from dependencies import get_current_caller, get_progress_tracker
from schemas.base import SuccessResponse
from schemas.progress import ProgressOverview, ProgressRecord, ProgressSummaryUpdate
from services.auth import Caller
from services.progress import ProgressTracker

router = APIRouter(prefix="/progress", tags=["progress"])


@router.post("", response_model=SuccessResponse)
async def save_progress(
    data: ProgressRecord,
    caller: Caller = Depends(get_current_caller),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    await tracker.record(caller.user_id, data.class_id, data.completed, data.score)
    return SuccessResponse()


@router.get("", response_model=ProgressOverview)
async def get_progress(
    caller: Caller = Depends(get_current_caller),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    return await tracker.get_overview(caller.user_id)


@router.post("/update", response_model=SuccessResponse)
async def update_progress(
    data: ProgressSummaryUpdate,
    caller: Caller = Depends(get_current_caller),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    await tracker.update_summary(caller.user_id, data.changes())
    return SuccessResponse()

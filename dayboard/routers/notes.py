"""
Daily note endpoints. The note is stored on the day itself.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..days import DayService
from ..deps import get_day_service, get_user_id, require_id
from ..errors import BackendUnavailable, DayboardException, NotFound
from ..schemas import NoteResponse, NoteSaveRequest

router = APIRouter(prefix="/api/notes", tags=["notes"])


@router.get("", response_model=NoteResponse)
async def get_note(
    day_id: Optional[str] = Query(None, description="Day id"),
    user_id: str = Depends(get_user_id),
    service: DayService = Depends(get_day_service)
):
    """Get the note of a day."""
    require_id("day_id", day_id)
    try:
        day = service.get_by_id(day_id, user_id)
    except NotFound:
        raise DayboardException.day_not_found(day_id=day_id)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))
    return NoteResponse(day_id=day.id, content=day.daily_note or "")


@router.post("", response_model=NoteResponse)
async def save_note(
    request: NoteSaveRequest,
    user_id: str = Depends(get_user_id),
    service: DayService = Depends(get_day_service)
):
    """
    Save the note of a day.

    On 404 or 503 the note was not saved; clients keep the text and retry.
    """
    require_id("day_id", request.day_id)
    try:
        day = service.update_day(request.day_id, {"daily_note": request.content}, user_id)
    except NotFound:
        raise DayboardException.day_not_found(day_id=request.day_id)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))
    return NoteResponse(day_id=day.id, content=day.daily_note or "")

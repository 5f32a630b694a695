"""
Day endpoints: look up, resolve, edit, list and delete days.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from ..dates import format_date_for_display, shift_date, today
from ..days import DayService
from ..deps import get_day_service, get_summary_service, get_user_id, require_id
from ..errors import BackendUnavailable, DayboardException, InvalidArgument, NotFound
from ..schemas import (
    DayListResponse,
    DayResponse,
    DayUpdateRequest,
    ResolvedDayResponse,
    SuccessResponse,
    SummaryResponse,
)
from ..summary import SummaryService

router = APIRouter(prefix="/api/days", tags=["days"])


@router.get("", response_model=DayListResponse)
async def list_days(
    start_date: Optional[str] = Query(None, description="First day (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, description="Last day (YYYY-MM-DD)"),
    user_id: str = Depends(get_user_id),
    service: DayService = Depends(get_day_service)
):
    """List the caller's days in a date range, newest first."""
    if not start_date or not end_date:
        raise DayboardException.missing_field("start_date and end_date")
    try:
        days = service.list_days(user_id, start_date, end_date)
    except InvalidArgument:
        raise DayboardException.invalid_date_range(start_date, end_date)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))

    return DayListResponse(days=[DayResponse.from_record(d) for d in days])


@router.patch("/by-id/{day_id}", response_model=DayResponse)
async def update_day(
    day_id: str,
    request: DayUpdateRequest,
    user_id: str = Depends(get_user_id),
    service: DayService = Depends(get_day_service)
):
    """
    Apply a partial edit to one of the caller's days by id.

    Only fields present in the body are changed.
    """
    require_id("day_id", day_id)
    try:
        day = service.update_day(day_id, request.model_dump(exclude_unset=True), user_id)
    except NotFound:
        raise DayboardException.day_not_found(day_id=day_id)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))

    return DayResponse.from_record(day)


@router.get("/{date}", response_model=DayResponse)
async def get_day(
    date: str,
    user_id: str = Depends(get_user_id),
    service: DayService = Depends(get_day_service)
):
    """
    Get the day for a date.

    Returns 404 when the day has not been created yet; POST to create it.
    """
    try:
        day = service.get_day(date, user_id)
    except InvalidArgument:
        raise DayboardException.invalid_date(date)

    if day is None:
        raise DayboardException.day_not_found(date=date)
    return DayResponse.from_record(day)


@router.post("/{date}", response_model=DayResponse)
async def upsert_day(
    date: str,
    request: Optional[DayUpdateRequest] = Body(None),
    user_id: str = Depends(get_user_id),
    service: DayService = Depends(get_day_service)
):
    """
    Create the day for a date if needed, then apply any fields in the body.
    """
    patch = request.model_dump(exclude_unset=True) if request else {}
    try:
        day = service.upsert_day(date, user_id, patch)
    except InvalidArgument:
        raise DayboardException.invalid_date(date)
    except NotFound:
        raise DayboardException.day_not_found(date=date)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))

    return DayResponse.from_record(day)


@router.delete("/{date}", response_model=SuccessResponse)
async def delete_day(
    date: str,
    user_id: str = Depends(get_user_id),
    service: DayService = Depends(get_day_service)
):
    """Delete the day for a date along with its to-dos and emails."""
    try:
        deleted = service.delete_day(date, user_id)
    except InvalidArgument:
        raise DayboardException.invalid_date(date)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))

    if not deleted:
        raise DayboardException.day_not_found(date=date)
    return SuccessResponse(success=True)


@router.get("/{date}/resolve", response_model=ResolvedDayResponse)
async def resolve_day(
    date: str,
    user_id: str = Depends(get_user_id),
    service: DayService = Depends(get_day_service)
):
    """
    Get or create the day for a date. Always answers with a day.

    While the database is unreachable the day is transient: edits to it are
    kept in memory only.
    """
    try:
        day = service.resolve_day(date, user_id)
    except InvalidArgument:
        raise DayboardException.invalid_date(date)

    return ResolvedDayResponse(
        day=DayResponse.from_record(day),
        display_date=format_date_for_display(date),
        previous_date=shift_date(date, -1),
        next_date=shift_date(date, 1),
        is_today=date == today()
    )


@router.post("/{date}/summary", response_model=SummaryResponse)
async def summarize_day(
    date: str,
    user_id: str = Depends(get_user_id),
    service: SummaryService = Depends(get_summary_service)
):
    """Generate and save a summary for the day, creating the day if needed."""
    try:
        day, result = service.summarize_date(date, user_id)
    except InvalidArgument:
        raise DayboardException.invalid_date(date)
    except NotFound:
        raise DayboardException.day_not_found(date=date)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))

    return SummaryResponse(id=day.id, summary=day.summary or "", generated_by=result.generated_by)

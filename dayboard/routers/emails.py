"""
Email endpoints. Emails are filed under a day and addressed by day_id.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..days import DayService
from ..deps import (
    get_day_service,
    get_email_store,
    get_user_id,
    require_id,
    require_owned_day,
    require_owned_record,
)
from ..errors import BackendUnavailable, DayboardException, NotFound
from ..schemas import EmailCreateRequest, EmailResponse, EmailUpdateRequest, SuccessResponse
from ..stores import ChildStore, EmailRecord

router = APIRouter(prefix="/api/emails", tags=["emails"])


@router.get("", response_model=List[EmailResponse])
async def list_emails(
    day_id: Optional[str] = Query(None, description="Day id"),
    user_id: str = Depends(get_user_id),
    days: DayService = Depends(get_day_service),
    store: ChildStore[EmailRecord] = Depends(get_email_store)
):
    """Get the emails filed under a day."""
    require_id("day_id", day_id)
    require_owned_day(days, day_id, user_id)
    try:
        emails = store.list(day_id)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))
    return [EmailResponse.from_record(e) for e in emails]


@router.post("", response_model=EmailResponse)
async def create_email(
    request: EmailCreateRequest,
    user_id: str = Depends(get_user_id),
    days: DayService = Depends(get_day_service),
    store: ChildStore[EmailRecord] = Depends(get_email_store)
):
    """File an email under a day. New emails are unread and not archived."""
    require_id("day_id", request.day_id)
    require_owned_day(days, request.day_id, user_id)
    try:
        email = store.create(request.day_id, {
            "subject": request.subject or None,
            "sender": request.sender or None,
            "recipient": request.recipient or None,
            "content": request.content or None,
            "received_at": request.received_at or datetime.utcnow(),
            "is_read": False,
            "is_archived": False
        })
    except NotFound:
        raise DayboardException.day_not_found(day_id=request.day_id)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))
    return EmailResponse.from_record(email)


@router.patch("", response_model=EmailResponse)
async def update_email(
    request: EmailUpdateRequest,
    user_id: str = Depends(get_user_id),
    days: DayService = Depends(get_day_service),
    store: ChildStore[EmailRecord] = Depends(get_email_store)
):
    """Mark an email read/unread or archive it."""
    require_id("id", request.id)
    values = {
        k: v for k, v in request.model_dump(exclude_unset=True, exclude={"id"}).items()
        if v is not None
    }
    require_owned_record(store, days, "email", request.id, user_id)
    try:
        email = store.update(request.id, values)
    except NotFound:
        raise DayboardException.record_not_found("email", request.id)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))
    return EmailResponse.from_record(email)


@router.delete("", response_model=SuccessResponse)
async def delete_email(
    id: Optional[str] = Query(None, description="Email id"),
    user_id: str = Depends(get_user_id),
    days: DayService = Depends(get_day_service),
    store: ChildStore[EmailRecord] = Depends(get_email_store)
):
    """Delete an email."""
    require_id("id", id)
    require_owned_record(store, days, "email", id, user_id)
    try:
        deleted = store.delete(id)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))

    if not deleted:
        raise DayboardException.record_not_found("email", id)
    return SuccessResponse(success=True)

"""
FastAPI dependencies shared by the routers.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .ai import DayboardAI, get_ai
from .config import settings
from .database import get_db
from .days import DayService
from .errors import BackendUnavailable, DayboardException, NotFound
from .models import USER_ID_MAX_LENGTH
from .stores import (
    ChildStore,
    DayRecord,
    EmailRecord,
    RoutedChildStore,
    SqlDayStore,
    TodoRecord,
    email_store,
    is_valid_record_id,
    todo_store,
)
from .summary import SummaryService


def get_user_id(request: Request) -> str:
    """
    Caller identity from the upstream identity provider.

    Falls back to the development placeholder when no identity was sent
    and ALLOW_DEV_IDENTITY is on; otherwise the request is rejected.
    """
    user_id = request.headers.get(settings.user_id_header, "").strip()
    if user_id:
        if len(user_id) > USER_ID_MAX_LENGTH:
            raise DayboardException.invalid_identity(settings.user_id_header, USER_ID_MAX_LENGTH)
        return user_id
    if settings.allow_dev_identity:
        return settings.dev_user_id
    raise DayboardException.identity_required(settings.user_id_header)


def get_day_service(request: Request, db: Session = Depends(get_db)) -> DayService:
    state = request.app.state
    return DayService(
        SqlDayStore(db),
        state.transient_days,
        transient_children=[state.memory_todos, state.memory_emails]
    )


def get_todo_store(request: Request, db: Session = Depends(get_db)) -> ChildStore[TodoRecord]:
    return RoutedChildStore(todo_store(db), request.app.state.memory_todos)


def get_email_store(request: Request, db: Session = Depends(get_db)) -> ChildStore[EmailRecord]:
    return RoutedChildStore(email_store(db), request.app.state.memory_emails)


def get_ai_engine() -> DayboardAI:
    return get_ai()


def get_summary_service(
    days: DayService = Depends(get_day_service),
    todos: ChildStore[TodoRecord] = Depends(get_todo_store),
    ai: DayboardAI = Depends(get_ai_engine)
) -> SummaryService:
    return SummaryService(days, todos, ai)


def require_id(field: str, value) -> str:
    """Reject missing or malformed ids with a 400."""
    if not value:
        raise DayboardException.missing_field(field)
    if not is_valid_record_id(value):
        raise DayboardException.invalid_id(field, value)
    return value


def require_owned_day(days: DayService, day_id: str, user_id: str) -> DayRecord:
    """The caller's day with this id; 404 for missing days and days of other users."""
    try:
        return days.get_by_id(day_id, user_id)
    except NotFound:
        raise DayboardException.day_not_found(day_id=day_id)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))


def require_owned_record(store: ChildStore, days: DayService, kind: str, record_id: str, user_id: str):
    """A to-do or email on one of the caller's days; 404 otherwise."""
    try:
        record = store.get(record_id)
        if record is None or not days.owns(record.day_id, user_id):
            raise DayboardException.record_not_found(kind, record_id)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))
    return record

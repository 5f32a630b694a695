"""
To-do endpoints. To-dos belong to a day and are addressed by day_id.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..days import DayService
from ..deps import (
    get_day_service,
    get_todo_store,
    get_user_id,
    require_id,
    require_owned_day,
    require_owned_record,
)
from ..errors import BackendUnavailable, DayboardException, NotFound
from ..schemas import SuccessResponse, TodoCreateRequest, TodoResponse, TodoUpdateRequest
from ..stores import ChildStore, TodoRecord

router = APIRouter(prefix="/api/todos", tags=["todos"])


@router.get("", response_model=List[TodoResponse])
async def list_todos(
    day_id: Optional[str] = Query(None, description="Day id"),
    user_id: str = Depends(get_user_id),
    days: DayService = Depends(get_day_service),
    store: ChildStore[TodoRecord] = Depends(get_todo_store)
):
    """Get the to-dos of a day, oldest first."""
    require_id("day_id", day_id)
    require_owned_day(days, day_id, user_id)
    try:
        todos = store.list(day_id)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))
    return [TodoResponse.from_record(t) for t in todos]


@router.post("", response_model=TodoResponse)
async def create_todo(
    request: TodoCreateRequest,
    user_id: str = Depends(get_user_id),
    days: DayService = Depends(get_day_service),
    store: ChildStore[TodoRecord] = Depends(get_todo_store)
):
    """Add a to-do to a day."""
    require_id("day_id", request.day_id)
    if not request.title or not request.title.strip():
        raise DayboardException.missing_field("title")
    require_owned_day(days, request.day_id, user_id)

    try:
        todo = store.create(request.day_id, {
            "title": request.title.strip(),
            "is_completed": request.is_completed
        })
    except NotFound:
        raise DayboardException.day_not_found(day_id=request.day_id)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))
    return TodoResponse.from_record(todo)


@router.patch("", response_model=TodoResponse)
async def update_todo(
    request: TodoUpdateRequest,
    user_id: str = Depends(get_user_id),
    days: DayService = Depends(get_day_service),
    store: ChildStore[TodoRecord] = Depends(get_todo_store)
):
    """Tick off, reopen or rename a to-do."""
    require_id("id", request.id)
    values = {
        k: v for k, v in request.model_dump(exclude_unset=True, exclude={"id"}).items()
        if v is not None
    }
    if "title" in values:
        if not values["title"].strip():
            raise DayboardException.missing_field("title")
        values["title"] = values["title"].strip()
    require_owned_record(store, days, "todo", request.id, user_id)

    try:
        todo = store.update(request.id, values)
    except NotFound:
        raise DayboardException.record_not_found("todo", request.id)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))
    return TodoResponse.from_record(todo)


@router.delete("", response_model=SuccessResponse)
async def delete_todo(
    id: Optional[str] = Query(None, description="To-do id"),
    user_id: str = Depends(get_user_id),
    days: DayService = Depends(get_day_service),
    store: ChildStore[TodoRecord] = Depends(get_todo_store)
):
    """Delete a to-do."""
    require_id("id", id)
    require_owned_record(store, days, "todo", id, user_id)
    try:
        deleted = store.delete(id)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))

    if not deleted:
        raise DayboardException.record_not_found("todo", id)
    return SuccessResponse(success=True)

"""
Summary and chat endpoints.
"""

from fastapi import APIRouter, Depends

from ..ai import DayboardAI
from ..deps import get_ai_engine, get_summary_service, get_user_id, require_id
from ..errors import (
    AIError,
    AINotConfigured,
    AIQuotaExceeded,
    AIRateLimited,
    AITimeout,
    BackendUnavailable,
    DayboardException,
    NotFound,
)
from ..health import get_health_monitor
from ..schemas import ChatRequest, ChatResponse, SummaryRequest, SummaryResponse
from ..summary import SummaryService

router = APIRouter(prefix="/api", tags=["summary"])


@router.post("/summary", response_model=SummaryResponse)
async def generate_summary(
    request: SummaryRequest,
    user_id: str = Depends(get_user_id),
    service: SummaryService = Depends(get_summary_service)
):
    """
    Generate a summary for a day and save it on the day.

    Uses the configured model; without one a plain template summary is used.
    """
    require_id("day_id", request.day_id)
    try:
        day, result = service.summarize_day(request.day_id, user_id)
    except NotFound:
        raise DayboardException.day_not_found(day_id=request.day_id)
    except BackendUnavailable as e:
        raise DayboardException.store_unavailable(str(e))

    return SummaryResponse(id=day.id, summary=day.summary or "", generated_by=result.generated_by)


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    ai: DayboardAI = Depends(get_ai_engine)
):
    """Send the conversation so far and get the assistant's reply."""
    messages = [{"role": m.role, "content": m.content} for m in request.messages]
    try:
        reply = ai.chat(messages)
    except AINotConfigured:
        raise DayboardException.ai_not_configured()
    except AIError as e:
        get_health_monitor().record_error("ai", str(e), {"kind": type(e).__name__})
        if isinstance(e, AITimeout):
            raise DayboardException.ai_timeout()
        if isinstance(e, AIRateLimited):
            raise DayboardException.ai_rate_limited(ai.model)
        if isinstance(e, AIQuotaExceeded):
            raise DayboardException.ai_quota_exceeded()
        raise DayboardException.ai_failed(str(e)[:200])

    return ChatResponse(message=reply)

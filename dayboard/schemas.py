"""
Dayboard API Schemas

Pydantic models for API request/response validation.
Includes OpenAPI documentation via Field descriptions and examples.
"""

from datetime import datetime
from typing import Optional, List, Dict, Any, Literal

from pydantic import BaseModel, Field

from .models import TITLE_MAX_LENGTH
from .stores import DayRecord, TodoRecord, EmailRecord


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# === Health Schemas ===

class ServiceCheckResponse(BaseModel):
    """Health check result for a single service."""
    name: str = Field(..., description="Service name", examples=["database"])
    status: str = Field(..., description="Status: healthy, degraded, unhealthy, unknown")
    message: str = Field(..., description="Human-readable status message")
    latency_ms: Optional[float] = Field(None, description="Response latency in milliseconds")


class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str = Field(..., description="Overall system status")
    version: str = Field(..., description="API version", examples=["0.1.0"])
    timestamp: str = Field(..., description="ISO 8601 timestamp")


class DetailedHealthResponse(BaseModel):
    """Detailed health report with all service statuses."""
    status: str = Field(..., description="Overall system status")
    version: str = Field(..., description="API version")
    uptime_seconds: float = Field(..., description="Server uptime in seconds")
    started_at: str = Field(..., description="Server start time (ISO 8601)")
    timestamp: str = Field(..., description="Report timestamp (ISO 8601)")
    services: Dict[str, ServiceCheckResponse] = Field(..., description="Individual service statuses")
    recent_errors: List[Dict[str, Any]] = Field(..., description="Recent error logs")


# === Day Schemas ===

class DayResponse(BaseModel):
    """A day record. Transient days were served while the database was unreachable."""
    id: str = Field(..., description="Day id (UUID, or 'transient-...' when not persisted)")
    user_id: str = Field(..., description="Owner id")
    date: str = Field(..., description="Date (YYYY-MM-DD)")
    daily_note: Optional[str] = Field("", description="Free-text note for the day")
    summary: Optional[str] = Field("", description="Generated summary of the day")
    created_at: str = Field(..., description="Creation timestamp (ISO 8601)")
    updated_at: str = Field(..., description="Last update timestamp (ISO 8601)")
    transient: bool = Field(False, description="True if this day is held in memory only")

    class Config:
        json_schema_extra = {
            "example": {
                "id": "0b8e3c5e-4f52-4a43-9d35-2f1c9f1f6a10",
                "user_id": "29a03cc5-4c65-4ef8-a48b-f5cfe83a4c79",
                "date": "2025-01-15",
                "daily_note": "Bought milk",
                "summary": "",
                "created_at": "2025-01-15T07:00:00",
                "updated_at": "2025-01-15T09:30:00",
                "transient": False
            }
        }

    @classmethod
    def from_record(cls, day: DayRecord) -> "DayResponse":
        return cls(
            id=day.id,
            user_id=day.user_id,
            date=day.date,
            daily_note=day.daily_note,
            summary=day.summary,
            created_at=_iso(day.created_at),
            updated_at=_iso(day.updated_at),
            transient=day.transient
        )


class DayUpdateRequest(BaseModel):
    """Fields of a day that may be edited. Omitted fields are left unchanged."""
    daily_note: Optional[str] = Field(None, max_length=100_000, description="New note text")
    summary: Optional[str] = Field(None, max_length=100_000, description="New summary text")


class DayListResponse(BaseModel):
    days: List[DayResponse]


class ResolvedDayResponse(BaseModel):
    """A resolved day plus what the day page needs to navigate."""
    day: DayResponse
    display_date: str = Field(..., description="Human-readable date", examples=["Wednesday, January 15, 2025"])
    previous_date: str = Field(..., description="Day before (YYYY-MM-DD)")
    next_date: str = Field(..., description="Day after (YYYY-MM-DD)")
    is_today: bool


# === Todo Schemas ===

class TodoCreateRequest(BaseModel):
    day_id: Optional[str] = Field(None, description="Day the to-do belongs to")
    title: Optional[str] = Field(None, max_length=TITLE_MAX_LENGTH, description="To-do text")
    is_completed: bool = Field(False, description="Initial completion state")


class TodoUpdateRequest(BaseModel):
    id: Optional[str] = Field(None, description="To-do id")
    is_completed: Optional[bool] = None
    title: Optional[str] = Field(None, max_length=TITLE_MAX_LENGTH)


class TodoResponse(BaseModel):
    id: str
    day_id: str
    title: str
    is_completed: bool
    created_at: str
    updated_at: str

    @classmethod
    def from_record(cls, todo: TodoRecord) -> "TodoResponse":
        return cls(
            id=todo.id,
            day_id=todo.day_id,
            title=todo.title,
            is_completed=todo.is_completed,
            created_at=_iso(todo.created_at),
            updated_at=_iso(todo.updated_at)
        )


# === Email Schemas ===

class EmailCreateRequest(BaseModel):
    day_id: Optional[str] = Field(None, description="Day the email is filed under")
    subject: Optional[str] = Field(None, max_length=TITLE_MAX_LENGTH)
    sender: Optional[str] = Field(None, max_length=320)
    recipient: Optional[str] = Field(None, max_length=320)
    content: Optional[str] = None
    received_at: Optional[datetime] = Field(None, description="Defaults to now")


class EmailUpdateRequest(BaseModel):
    id: Optional[str] = Field(None, description="Email id")
    is_read: Optional[bool] = None
    is_archived: Optional[bool] = None


class EmailResponse(BaseModel):
    id: str
    day_id: str
    subject: Optional[str]
    sender: Optional[str]
    recipient: Optional[str]
    content: Optional[str]
    received_at: Optional[str]
    is_read: bool
    is_archived: bool
    created_at: str
    updated_at: str

    @classmethod
    def from_record(cls, email: EmailRecord) -> "EmailResponse":
        return cls(
            id=email.id,
            day_id=email.day_id,
            subject=email.subject,
            sender=email.sender,
            recipient=email.recipient,
            content=email.content,
            received_at=_iso(email.received_at),
            is_read=email.is_read,
            is_archived=email.is_archived,
            created_at=_iso(email.created_at),
            updated_at=_iso(email.updated_at)
        )


# === Note / Summary Schemas ===

class NoteSaveRequest(BaseModel):
    day_id: Optional[str] = Field(None, description="Day to save the note on")
    content: str = Field("", max_length=100_000, description="Note text")


class NoteResponse(BaseModel):
    day_id: str
    content: str


class SummaryRequest(BaseModel):
    day_id: Optional[str] = Field(None, description="Day to summarise")


class SummaryResponse(BaseModel):
    id: str = Field(..., description="Day id")
    summary: str
    generated_by: str = Field(..., description="Model name, or 'template' when generated without AI")


# === Chat Schemas ===

class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., max_length=20_000)


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)


class ChatResponse(BaseModel):
    message: str


class SuccessResponse(BaseModel):
    success: bool

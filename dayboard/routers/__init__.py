"""
Dayboard API Routers

FastAPI routers split by domain.
"""

from .health import router as health_router
from .days import router as days_router
from .todos import router as todos_router
from .emails import router as emails_router
from .notes import router as notes_router
from .summary import router as summary_router

__all__ = [
    "health_router",
    "days_router",
    "todos_router",
    "emails_router",
    "notes_router",
    "summary_router",
]

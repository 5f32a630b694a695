"""
Dayboard API Server

FastAPI application: a day-centred dashboard backend with notes, to-dos,
emails and AI summaries.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import OperationalError

from .config import settings
from .database import init_db
from .days import TransientDayCache
from .health import get_health_monitor
from .routers import (
    health_router,
    days_router,
    todos_router,
    emails_router,
    notes_router,
    summary_router,
)
from .stores import EmailRecord, MemoryChildStore, TodoRecord

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


# === FastAPI App ===

app = FastAPI(
    title="Dayboard",
    description="Personal dashboard organised around calendar days.",
    version="0.1.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# Days and children served while the database is unreachable
app.state.transient_days = TransientDayCache()
app.state.memory_todos = MemoryChildStore(TodoRecord)
app.state.memory_emails = MemoryChildStore(EmailRecord)

app.include_router(health_router)
app.include_router(days_router)
app.include_router(todos_router)
app.include_router(emails_router)
app.include_router(notes_router)
app.include_router(summary_router)


# === Startup ===

@app.on_event("startup")
async def startup():
    """
    Initialize database on startup.

    An unreachable database does not stop the server: days are then served
    as transient records until it comes back.
    """
    try:
        init_db()
    except OperationalError as e:
        logger.error("Could not initialize database, serving transient days: %s", e)
        get_health_monitor().record_error("store", str(e))
    else:
        logger.info("Database initialized")


# === Run Server ===

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)

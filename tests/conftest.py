"""
Shared pytest fixtures for the Dayboard test suite.

Provides database sessions, in-memory and failing stores, and test data
factories.
"""

import os

# Settings refuse to load without a database URL
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from datetime import date, datetime, timedelta
from typing import Generator, List, Optional

from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from dayboard.database import Base, make_engine
from dayboard.days import DayService, TransientDayCache
from dayboard.errors import BackendUnavailable
from dayboard.health import HealthMonitor
from dayboard.models import Day, Todo, Email
from dayboard.stores import ChildStore, DayRecord, DayStore, MemoryDayStore


USER_ID = "U1"
OTHER_USER_ID = "U2"


# === Fake Stores ===

class UnavailableDayStore(DayStore):
    """A day store whose backend is always unreachable."""

    def __init__(self):
        self.calls: List[str] = []

    def _fail(self, operation: str):
        self.calls.append(operation)
        raise BackendUnavailable(f"{operation}: connection refused")

    def find(self, user_id, date):
        self._fail("find")

    def get(self, day_id):
        self._fail("get")

    def insert(self, user_id, date, daily_note="", summary=""):
        self._fail("insert")

    def update(self, day_id, patch):
        self._fail("update")

    def delete(self, user_id, date):
        self._fail("delete")

    def list_range(self, user_id, start_date, end_date):
        self._fail("list_range")


class UnavailableChildStore(ChildStore):
    """A child store whose backend is always unreachable."""

    def list(self, day_id):
        raise BackendUnavailable("list: connection refused")

    def get(self, record_id):
        raise BackendUnavailable("get: connection refused")

    def create(self, day_id, values):
        raise BackendUnavailable("create: connection refused")

    def update(self, record_id, values):
        raise BackendUnavailable("update: connection refused")

    def delete(self, record_id):
        raise BackendUnavailable("delete: connection refused")


class LateFindDayStore(DayStore):
    """
    Wraps a store and hides existing rows from the first find, the way a
    concurrent creator that commits between our find and insert would.
    """

    def __init__(self, inner: DayStore):
        self.inner = inner
        self.finds = 0
        self.inserts = 0

    def find(self, user_id, date):
        self.finds += 1
        if self.finds == 1:
            return None
        return self.inner.find(user_id, date)

    def get(self, day_id):
        return self.inner.get(day_id)

    def insert(self, user_id, date, daily_note="", summary=""):
        self.inserts += 1
        return self.inner.insert(user_id, date, daily_note, summary)

    def update(self, day_id, patch):
        return self.inner.update(day_id, patch)

    def delete(self, user_id, date):
        return self.inner.delete(user_id, date)

    def list_range(self, user_id, start_date, end_date):
        return self.inner.list_range(user_id, start_date, end_date)


class FlakyDayStore(DayStore):
    """Wraps a store and fails every call while `down` is set."""

    def __init__(self, inner: DayStore):
        self.inner = inner
        self.down = False

    def _check(self, operation: str):
        if self.down:
            raise BackendUnavailable(f"{operation}: connection refused")

    def find(self, user_id, date):
        self._check("find")
        return self.inner.find(user_id, date)

    def get(self, day_id):
        self._check("get")
        return self.inner.get(day_id)

    def insert(self, user_id, date, daily_note="", summary=""):
        self._check("insert")
        return self.inner.insert(user_id, date, daily_note, summary)

    def update(self, day_id, patch):
        self._check("update")
        return self.inner.update(day_id, patch)

    def delete(self, user_id, date):
        self._check("delete")
        return self.inner.delete(user_id, date)

    def list_range(self, user_id, start_date, end_date):
        self._check("list_range")
        return self.inner.list_range(user_id, start_date, end_date)


# === Database Fixtures ===

@pytest.fixture(scope="function")
def test_engine():
    """Create an in-memory SQLite engine shared across threads."""
    engine = make_engine("sqlite://", 10, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(test_engine) -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine
    )
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# === Service Fixtures ===

@pytest.fixture
def monitor() -> HealthMonitor:
    """A private health monitor so recorded errors don't leak between tests."""
    return HealthMonitor()


@pytest.fixture
def memory_store() -> MemoryDayStore:
    return MemoryDayStore()


@pytest.fixture
def transient_days() -> TransientDayCache:
    return TransientDayCache()


@pytest.fixture
def day_service(memory_store, transient_days, monitor) -> DayService:
    """Day service over an in-memory store."""
    return DayService(memory_store, transient_days, monitor)


@pytest.fixture
def offline_day_service(transient_days, monitor) -> DayService:
    """Day service whose store is unreachable."""
    return DayService(UnavailableDayStore(), transient_days, monitor)


# === Test Data Factories ===

@pytest.fixture
def create_day(db: Session):
    """Factory fixture to create day rows."""
    def _create(
        date: str = "2025-01-15",
        user_id: str = USER_ID,
        daily_note: str = "",
        summary: str = ""
    ) -> Day:
        now = datetime.utcnow()
        day = Day(
            user_id=user_id,
            date=date,
            daily_note=daily_note,
            summary=summary,
            created_at=now,
            updated_at=now
        )
        db.add(day)
        db.commit()
        db.refresh(day)
        return day
    return _create


@pytest.fixture
def create_todo(db: Session):
    """Factory fixture to create to-dos."""
    def _create(
        day_id: str,
        title: str = "Buy milk",
        is_completed: bool = False
    ) -> Todo:
        todo = Todo(day_id=day_id, title=title, is_completed=is_completed)
        db.add(todo)
        db.commit()
        db.refresh(todo)
        return todo
    return _create


@pytest.fixture
def create_email(db: Session):
    """Factory fixture to create emails."""
    def _create(
        day_id: str,
        subject: str = "Standup notes",
        sender: str = "alice@example.com",
        is_read: bool = False
    ) -> Email:
        email = Email(
            day_id=day_id,
            subject=subject,
            sender=sender,
            recipient="me@example.com",
            content="See you at ten.",
            received_at=datetime(2025, 1, 15, 8, 30),
            is_read=is_read
        )
        db.add(email)
        db.commit()
        db.refresh(email)
        return email
    return _create


@pytest.fixture
def day_record():
    """Factory for detached day records."""
    def _create(date: str = "2025-01-15", daily_note: str = "", day_id: Optional[str] = None) -> DayRecord:
        return DayRecord(
            id=day_id or "0b8e3c5e-4f52-4a43-9d35-2f1c9f1f6a10",
            user_id=USER_ID,
            date=date,
            daily_note=daily_note,
            summary=""
        )
    return _create


# === Mock Service Fixtures ===

@pytest.fixture
def offline_ai():
    """AI engine with no key: summaries use the template, chat is refused."""
    from dayboard.ai import DayboardAI
    return DayboardAI(model="test-model", api_key="", timeout=1)


@pytest.fixture
def mock_completion_response():
    """Build a LiteLLM-shaped completion response."""
    from unittest.mock import MagicMock

    def _build(content: str = "A productive day.", total_tokens: int = 42):
        response = MagicMock()
        response.choices = [MagicMock(message=MagicMock(content=content))]
        response.usage = MagicMock(total_tokens=total_tokens)
        return response
    return _build


# === API Testing Fixtures ===

@pytest.fixture
def test_client(test_engine, offline_ai):
    """Create a FastAPI test client with test database."""
    from fastapi.testclient import TestClient
    from dayboard.api import app
    from dayboard.database import get_db
    from dayboard.deps import get_ai_engine
    from dayboard.health import get_health_monitor
    from dayboard.stores import EmailRecord, MemoryChildStore, TodoRecord

    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine
    )

    def override_get_db():
        db = TestSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_engine] = lambda: offline_ai

    app.state.transient_days.clear()
    app.state.memory_todos = MemoryChildStore(TodoRecord)
    app.state.memory_emails = MemoryChildStore(EmailRecord)
    get_health_monitor().clear_errors()

    with TestClient(app) as client:
        client.headers["X-User-Id"] = USER_ID
        yield client

    app.dependency_overrides.clear()
    app.state.transient_days.clear()


@pytest.fixture
def offline_client(test_client):
    """Test client whose day and child stores are unreachable."""
    from dayboard.api import app
    from dayboard.deps import get_day_service, get_email_store, get_todo_store
    from dayboard.stores import RoutedChildStore

    def offline_days():
        return DayService(
            UnavailableDayStore(),
            app.state.transient_days,
            transient_children=[app.state.memory_todos, app.state.memory_emails]
        )

    app.dependency_overrides[get_day_service] = offline_days
    app.dependency_overrides[get_todo_store] = lambda: RoutedChildStore(
        UnavailableChildStore(), app.state.memory_todos
    )
    app.dependency_overrides[get_email_store] = lambda: RoutedChildStore(
        UnavailableChildStore(), app.state.memory_emails
    )
    return test_client


# === Time Helpers ===

@pytest.fixture
def today() -> str:
    """Return today's date as string."""
    return date.today().isoformat()


@pytest.fixture
def yesterday() -> str:
    """Return yesterday's date as string."""
    return (date.today() - timedelta(days=1)).isoformat()

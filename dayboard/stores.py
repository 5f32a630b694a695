"""
Dayboard Stores

Record types and the storage interfaces services are built on.

SQL-backed stores translate SQLAlchemy failures into domain errors:
uniqueness violations become Conflict and every other driver failure
(lost connections, timeouts, missing tables, rejected values) becomes
BackendUnavailable. In-memory stores hold children of transient days and double
as test fakes.
"""

import logging
import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timedelta
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy import text
from sqlalchemy.orm import Session

from .errors import BackendUnavailable, Conflict, NotFound
from .models import Day, Todo, Email

logger = logging.getLogger(__name__)

TRANSIENT_PREFIX = "transient-"


def new_transient_id() -> str:
    return f"{TRANSIENT_PREFIX}{uuid.uuid4().hex}"


def is_transient_id(record_id: str) -> bool:
    return isinstance(record_id, str) and record_id.startswith(TRANSIENT_PREFIX)


def is_valid_record_id(record_id: str) -> bool:
    """Accept UUIDs and transient ids, reject anything else."""
    if is_transient_id(record_id):
        return len(record_id) > len(TRANSIENT_PREFIX)
    try:
        uuid.UUID(str(record_id))
    except ValueError:
        return False
    return True


def touch(previous: Optional[datetime]) -> datetime:
    """A fresh updated_at that is strictly after the previous one."""
    now = datetime.utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


# === Records ===

@dataclass
class DayRecord:
    """A day as handed to callers, persisted or transient."""
    id: str
    user_id: str
    date: str
    daily_note: Optional[str] = ""
    summary: Optional[str] = ""
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def transient(self) -> bool:
        return is_transient_id(self.id)


@dataclass
class TodoRecord:
    id: str
    day_id: str
    title: str = ""
    is_completed: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class EmailRecord:
    id: str
    day_id: str
    subject: Optional[str] = None
    sender: Optional[str] = None
    recipient: Optional[str] = None
    content: Optional[str] = None
    received_at: Optional[datetime] = None
    is_read: bool = False
    is_archived: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


R = TypeVar("R")

DAY_PATCH_FIELDS = ("daily_note", "summary")


def _writable(record_type: Type[Any], values: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys callers may not set: identity, parent and timestamps."""
    allowed = {f.name for f in fields(record_type)} - {"id", "day_id", "created_at", "updated_at"}
    return {k: v for k, v in values.items() if k in allowed}


def _to_record(record_type: Type[R], row: Any) -> R:
    return record_type(**{f.name: getattr(row, f.name) for f in fields(record_type)})


class _StoreErrors:
    """Context manager mapping SQLAlchemy failures onto domain errors."""

    def __init__(self, db: Session, operation: str):
        self.db = db
        self.operation = operation

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc is None:
            return False
        if isinstance(exc, (DBAPIError, DisconnectionError, PoolTimeoutError)):
            try:
                self.db.rollback()
            except DBAPIError:
                logger.debug("Rollback after failed %s also failed", self.operation)
        if isinstance(exc, IntegrityError):
            raise Conflict(f"{self.operation}: {exc.orig}") from exc
        if isinstance(exc, (DBAPIError, DisconnectionError, PoolTimeoutError)):
            raise BackendUnavailable(f"{self.operation}: {exc}") from exc
        return False


# === Day Store ===

class DayStore:
    """Storage interface for day rows."""

    def find(self, user_id: str, date: str) -> Optional[DayRecord]:
        raise NotImplementedError

    def get(self, day_id: str) -> Optional[DayRecord]:
        raise NotImplementedError

    def insert(self, user_id: str, date: str, daily_note: str = "", summary: str = "") -> DayRecord:
        raise NotImplementedError

    def update(self, day_id: str, patch: Dict[str, Any]) -> DayRecord:
        raise NotImplementedError

    def delete(self, user_id: str, date: str) -> bool:
        raise NotImplementedError

    def list_range(self, user_id: str, start_date: str, end_date: str) -> List[DayRecord]:
        raise NotImplementedError


class SqlDayStore(DayStore):
    """Day rows in the relational store via a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def find(self, user_id: str, date: str) -> Optional[DayRecord]:
        with _StoreErrors(self.db, "find day"):
            row = self.db.query(Day).filter(Day.user_id == user_id, Day.date == date).first()
            return _to_record(DayRecord, row) if row else None

    def get(self, day_id: str) -> Optional[DayRecord]:
        with _StoreErrors(self.db, "get day"):
            row = self.db.get(Day, day_id)
            return _to_record(DayRecord, row) if row else None

    def insert(self, user_id: str, date: str, daily_note: str = "", summary: str = "") -> DayRecord:
        with _StoreErrors(self.db, "insert day"):
            now = datetime.utcnow()
            row = Day(
                user_id=user_id,
                date=date,
                daily_note=daily_note,
                summary=summary,
                created_at=now,
                updated_at=now
            )
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            return _to_record(DayRecord, row)

    def update(self, day_id: str, patch: Dict[str, Any]) -> DayRecord:
        with _StoreErrors(self.db, "update day"):
            row = self.db.get(Day, day_id)
            if row is None:
                raise NotFound(f"Day {day_id} not found")
            for key in DAY_PATCH_FIELDS:
                if key in patch:
                    setattr(row, key, patch[key])
            row.updated_at = touch(row.updated_at)
            self.db.commit()
            self.db.refresh(row)
            return _to_record(DayRecord, row)

    def delete(self, user_id: str, date: str) -> bool:
        with _StoreErrors(self.db, "delete day"):
            row = self.db.query(Day).filter(Day.user_id == user_id, Day.date == date).first()
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
            return True

    def list_range(self, user_id: str, start_date: str, end_date: str) -> List[DayRecord]:
        with _StoreErrors(self.db, "list days"):
            rows = (
                self.db.query(Day)
                .filter(Day.user_id == user_id, Day.date >= start_date, Day.date <= end_date)
                .order_by(Day.date.desc())
                .all()
            )
            return [_to_record(DayRecord, r) for r in rows]

    def ping(self) -> None:
        with _StoreErrors(self.db, "ping"):
            self.db.execute(text("SELECT 1")).fetchone()


class MemoryDayStore(DayStore):
    """
    Day rows held in a dict. Enforces the (user_id, date) uniqueness rule
    like the real table does, so it can stand in for it in tests.
    """

    def __init__(self):
        self.rows: Dict[str, DayRecord] = {}

    def find(self, user_id: str, date: str) -> Optional[DayRecord]:
        for row in self.rows.values():
            if row.user_id == user_id and row.date == date:
                return replace(row)
        return None

    def get(self, day_id: str) -> Optional[DayRecord]:
        row = self.rows.get(day_id)
        return replace(row) if row else None

    def insert(self, user_id: str, date: str, daily_note: str = "", summary: str = "") -> DayRecord:
        if any(r.user_id == user_id and r.date == date for r in self.rows.values()):
            raise Conflict(f"Day {date} already exists for {user_id}")
        now = datetime.utcnow()
        row = DayRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            date=date,
            daily_note=daily_note,
            summary=summary,
            created_at=now,
            updated_at=now
        )
        self.rows[row.id] = row
        return replace(row)

    def update(self, day_id: str, patch: Dict[str, Any]) -> DayRecord:
        row = self.rows.get(day_id)
        if row is None:
            raise NotFound(f"Day {day_id} not found")
        changes = {k: patch[k] for k in DAY_PATCH_FIELDS if k in patch}
        row = replace(row, updated_at=touch(row.updated_at), **changes)
        self.rows[day_id] = row
        return replace(row)

    def delete(self, user_id: str, date: str) -> bool:
        row = self.find(user_id, date)
        if row is None:
            return False
        del self.rows[row.id]
        return True

    def list_range(self, user_id: str, start_date: str, end_date: str) -> List[DayRecord]:
        found = [
            replace(r) for r in self.rows.values()
            if r.user_id == user_id and start_date <= r.date <= end_date
        ]
        return sorted(found, key=lambda r: r.date, reverse=True)


# === Child Stores (todos, emails) ===

class ChildStore(Generic[R]):
    """Storage interface for records keyed by a parent day id."""

    def list(self, day_id: str) -> List[R]:
        raise NotImplementedError

    def get(self, record_id: str) -> Optional[R]:
        raise NotImplementedError

    def create(self, day_id: str, values: Dict[str, Any]) -> R:
        raise NotImplementedError

    def update(self, record_id: str, values: Dict[str, Any]) -> R:
        raise NotImplementedError

    def delete(self, record_id: str) -> bool:
        raise NotImplementedError


class SqlChildStore(ChildStore[R]):
    """Child rows of a given model in the relational store."""

    def __init__(self, db: Session, model: Type[Any], record_type: Type[R]):
        self.db = db
        self.model = model
        self.record_type = record_type
        self.name = model.__tablename__

    def list(self, day_id: str) -> List[R]:
        with _StoreErrors(self.db, f"list {self.name}"):
            rows = (
                self.db.query(self.model)
                .filter(self.model.day_id == day_id)
                .order_by(self.model.created_at.asc())
                .all()
            )
            return [_to_record(self.record_type, r) for r in rows]

    def get(self, record_id: str) -> Optional[R]:
        with _StoreErrors(self.db, f"get {self.name}"):
            row = self.db.get(self.model, record_id)
            return _to_record(self.record_type, row) if row else None

    def create(self, day_id: str, values: Dict[str, Any]) -> R:
        with _StoreErrors(self.db, f"create {self.name}"):
            if self.db.get(Day, day_id) is None:
                raise NotFound(f"Day {day_id} not found")
            now = datetime.utcnow()
            row = self.model(day_id=day_id, created_at=now, updated_at=now, **_writable(self.record_type, values))
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            return _to_record(self.record_type, row)

    def update(self, record_id: str, values: Dict[str, Any]) -> R:
        with _StoreErrors(self.db, f"update {self.name}"):
            row = self.db.get(self.model, record_id)
            if row is None:
                raise NotFound(f"{self.name} {record_id} not found")
            for key, value in _writable(self.record_type, values).items():
                setattr(row, key, value)
            row.updated_at = touch(row.updated_at)
            self.db.commit()
            self.db.refresh(row)
            return _to_record(self.record_type, row)

    def delete(self, record_id: str) -> bool:
        with _StoreErrors(self.db, f"delete {self.name}"):
            row = self.db.get(self.model, record_id)
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
            return True


class MemoryChildStore(ChildStore[R]):
    """Child records held in memory, grouped by day id."""

    def __init__(self, record_type: Type[R]):
        self.record_type = record_type
        self.by_day: Dict[str, List[R]] = {}

    def _find(self, record_id: str):
        for day_id, records in self.by_day.items():
            for index, record in enumerate(records):
                if record.id == record_id:
                    return day_id, index
        return None

    def list(self, day_id: str) -> List[R]:
        return [replace(r) for r in self.by_day.get(day_id, [])]

    def get(self, record_id: str) -> Optional[R]:
        location = self._find(record_id)
        if location is None:
            return None
        day_id, index = location
        return replace(self.by_day[day_id][index])

    def create(self, day_id: str, values: Dict[str, Any]) -> R:
        now = datetime.utcnow()
        record = self.record_type(
            id=new_transient_id(),
            day_id=day_id,
            created_at=now,
            updated_at=now,
            **_writable(self.record_type, values)
        )
        self.by_day.setdefault(day_id, []).append(record)
        return replace(record)

    def update(self, record_id: str, values: Dict[str, Any]) -> R:
        location = self._find(record_id)
        if location is None:
            raise NotFound(f"{record_id} not found")
        day_id, index = location
        current = self.by_day[day_id][index]
        changes = _writable(self.record_type, values)
        updated = replace(current, updated_at=touch(current.updated_at), **changes)
        self.by_day[day_id][index] = updated
        return replace(updated)

    def delete(self, record_id: str) -> bool:
        location = self._find(record_id)
        if location is None:
            return False
        day_id, index = location
        del self.by_day[day_id][index]
        return True

    def drop_day(self, day_id: str) -> int:
        """Forget every record of a day. Returns how many were dropped."""
        return len(self.by_day.pop(day_id, []))


def todo_store(db: Session) -> SqlChildStore[TodoRecord]:
    return SqlChildStore(db, Todo, TodoRecord)


def email_store(db: Session) -> SqlChildStore[EmailRecord]:
    return SqlChildStore(db, Email, EmailRecord)


class RoutedChildStore(ChildStore[R]):
    """
    Sends transient ids to the in-memory store and everything else to the
    persistent one, so children of a transient day never touch the database.
    """

    def __init__(self, persistent: ChildStore[R], memory: ChildStore[R]):
        self.persistent = persistent
        self.memory = memory

    def _pick(self, record_id: str) -> ChildStore[R]:
        return self.memory if is_transient_id(record_id) else self.persistent

    def list(self, day_id: str) -> List[R]:
        return self._pick(day_id).list(day_id)

    def get(self, record_id: str) -> Optional[R]:
        return self._pick(record_id).get(record_id)

    def create(self, day_id: str, values: Dict[str, Any]) -> R:
        return self._pick(day_id).create(day_id, values)

    def update(self, record_id: str, values: Dict[str, Any]) -> R:
        return self._pick(record_id).update(record_id, values)

    def delete(self, record_id: str) -> bool:
        return self._pick(record_id).delete(record_id)

"""
Dayboard Data Models

SQLAlchemy models for days and the collections hanging off them.
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, Text, Boolean, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from .database import Base


USER_ID_MAX_LENGTH = 64
TITLE_MAX_LENGTH = 500


def new_id() -> str:
    return str(uuid.uuid4())


class Day(Base):
    """
    One calendar day for one user.

    At most one row exists per (user_id, date); the unique constraint is
    what makes concurrent get-or-create safe.
    """
    __tablename__ = "days"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(USER_ID_MAX_LENGTH), nullable=False)
    date = Column(String(10), nullable=False)    # YYYY-MM-DD
    daily_note = Column(Text, default="")
    summary = Column(Text, default="")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)

    todos = relationship("Todo", back_populates="day", cascade="all, delete-orphan")
    emails = relationship("Email", back_populates="day", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_days_user_date"),
    )


class Todo(Base):
    """To-do item attached to a day."""
    __tablename__ = "todos"

    id = Column(String(36), primary_key=True, default=new_id)
    day_id = Column(String(36), ForeignKey("days.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)

    day = relationship("Day", back_populates="todos")

    __table_args__ = (
        Index("idx_todo_day", "day_id"),
    )


class Email(Base):
    """Email filed under a day."""
    __tablename__ = "emails"

    id = Column(String(36), primary_key=True, default=new_id)
    day_id = Column(String(36), ForeignKey("days.id", ondelete="CASCADE"), nullable=False)
    subject = Column(String(TITLE_MAX_LENGTH))
    sender = Column(String(320))
    recipient = Column(String(320))
    content = Column(Text)
    received_at = Column(DateTime, default=datetime.utcnow)
    is_read = Column(Boolean, default=False, nullable=False)
    is_archived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)

    day = relationship("Day", back_populates="emails")

    __table_args__ = (
        Index("idx_email_day", "day_id"),
    )

"""Database models for the Calendar Events API.

This module defines SQLAlchemy ORM models used by the application.
Table and column names follow the calendar schema: ``user``, ``event``,
``countdown``, ``event_summary`` and ``event_update``.
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from .database import Base
from .timeutils import utcnow


class User(Base):
    """
    SQLAlchemy model representing a registered user.

    Username and email are unique. The ``password`` column only ever
    holds a salted hash.
    """

    __tablename__ = "user"

    user_id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    middle_initial = Column(String(2), nullable=False, default="")
    username = Column(String(100), unique=True, index=True, nullable=False)
    user_email = Column(String(255), unique=True, index=True, nullable=False)
    phone_number = Column(String(50), nullable=False)
    hashed_password = Column("password", String(255), nullable=False)


class Event(Base):
    """
    SQLAlchemy model representing a calendar event.

    Each event belongs to exactly one user and has one countdown row
    mirroring its start time.
    """

    __tablename__ = "event"

    event_id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("user.user_id"),
        nullable=False,
        index=True,
    )
    event_type = Column(String(20), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    location = Column(String(255), nullable=True)
    category = Column(String(100), nullable=False)
    priority = Column(String(50), nullable=False)
    color_code = Column(String(20), nullable=True)
    tags = Column(String(500), nullable=True)
    event_status = Column(String(20), nullable=False, default="active")

    #: Derived countdown row, ``None`` when it is missing
    countdown_record = relationship("Countdown", uselist=False, back_populates="event")

    @property
    def countdown(self):
        """Countdown value for the event, or ``None`` without a countdown row."""
        if self.countdown_record is None:
            return None
        return self.countdown_record.time_remaining


class Countdown(Base):
    """Countdown for an event; ``time_remaining`` mirrors ``event.start_time``."""

    __tablename__ = "countdown"

    countdown_id = Column(Integer, primary_key=True, index=True)
    event_id = Column(
        Integer,
        ForeignKey("event.event_id"),
        unique=True,
        nullable=False,
    )
    time_remaining = Column(DateTime, nullable=False)

    event = relationship("Event", back_populates="countdown_record")


class EventSummary(Base):
    """Free-text summary attached to an event. At most one per event."""

    __tablename__ = "event_summary"

    summary_id = Column(Integer, primary_key=True, index=True)
    event_id = Column(
        Integer,
        ForeignKey("event.event_id"),
        unique=True,
        nullable=False,
    )
    summary_text = Column(Text, nullable=False)


class EventUpdate(Base):
    """Audit row written after each successful event update."""

    __tablename__ = "event_update"

    update_id = Column(Integer, primary_key=True, index=True)
    event_id = Column(
        Integer,
        ForeignKey("event.event_id"),
        nullable=False,
        index=True,
    )
    updated_at = Column(DateTime, nullable=False, default=utcnow)
    updated_by = Column(Integer, ForeignKey("user.user_id"), nullable=False)

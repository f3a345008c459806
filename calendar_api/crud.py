"""CRUD operations for users, events and their dependent records.

This module contains database interaction logic, isolated from FastAPI
route handlers. Every function takes the session it works with; nothing
here keeps state between calls.

Multi-statement operations commit once. On a storage failure the whole
unit is rolled back and :class:`TransientError` is raised.
"""

from contextlib import contextmanager
from datetime import datetime

import structlog
from sqlalchemy import select, delete, or_, and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager

from . import models, schemas
from .exceptions import (
    ConflictError,
    InputValidationError,
    NotFoundOrForbiddenError,
    TransientError,
)
from .timeutils import utcnow

logger = structlog.get_logger()


@contextmanager
def unit_of_work(db: Session, operation: str):
    """
    Commit the work done in the block, or roll all of it back.

    Args:
        db (Session): Database session.
        operation (str): Name used in the failure log line.

    Raises:
        TransientError: If the store fails while the block runs or commits.
    """
    try:
        yield
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("storage_failure", operation=operation, error=str(exc))
        raise TransientError() from exc


def create_user(
    db: Session, user_in: schemas.UserCreate, hashed_password: str
) -> models.User:
    """
    Create and persist a new user.

    Usernames and emails are compared exactly (case-sensitive).

    Args:
        db (Session): SQLAlchemy database session.
        user_in (UserCreate): Validated user data.
        hashed_password (str): Securely hashed password.

    Raises:
        ConflictError: If the username or email is already registered.

    Returns:
        User: Newly created user instance.
    """
    existing = db.execute(
        select(models.User).where(
            or_(
                models.User.username == user_in.username,
                models.User.user_email == user_in.user_email,
            )
        )
    ).first()
    if existing:
        raise ConflictError()

    user = models.User(
        first_name=user_in.first_name,
        last_name=user_in.last_name,
        middle_initial=user_in.middle_initial,
        username=user_in.username,
        user_email=user_in.user_email,
        phone_number=user_in.phone_number,
        hashed_password=hashed_password,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # A concurrent registration won the unique constraint.
        db.rollback()
        raise ConflictError() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("storage_failure", operation="create_user", error=str(exc))
        raise TransientError() from exc
    db.refresh(user)
    logger.info("user_created", user_id=user.user_id)
    return user


def get_user_by_login(db: Session, identifier: str) -> models.User | None:
    """
    Retrieve a user by username or email address.

    Args:
        db (Session): Database session.
        identifier (str): Username or email.

    Returns:
        User | None: User if found, otherwise ``None``.
    """
    return db.scalars(
        select(models.User).where(
            or_(
                models.User.username == identifier,
                models.User.user_email == identifier,
            )
        )
    ).first()


def get_user_by_id(db: Session, user_id: int) -> models.User | None:
    """
    Retrieve a user by primary key.

    Args:
        db (Session): Database session.
        user_id (int): User identifier.

    Returns:
        User | None: User if found, otherwise ``None``.
    """
    return db.get(models.User, user_id)


def create_event(db: Session, event_in: schemas.EventCreate) -> models.Event:
    """
    Create an event together with its countdown row.

    Both rows are written in the same transaction.

    Args:
        db (Session): Database session.
        event_in (EventCreate): Validated event data.

    Raises:
        NotFoundOrForbiddenError: If the owning user does not exist.

    Returns:
        Event: Newly created event.
    """
    if get_user_by_id(db, event_in.user_id) is None:
        raise NotFoundOrForbiddenError("User not found")

    event = models.Event(**event_in.model_dump())
    event.countdown_record = models.Countdown(time_remaining=event.start_time)
    with unit_of_work(db, "create_event"):
        db.add(event)
    db.refresh(event)
    logger.info("event_created", event_id=event.event_id, user_id=event.user_id)
    return event


def _events_with_countdown(user_id: int):
    return (
        select(models.Event)
        .outerjoin(models.Event.countdown_record)
        .options(contains_eager(models.Event.countdown_record))
        .where(models.Event.user_id == user_id)
        .order_by(models.Event.start_time.asc(), models.Event.event_id.asc())
    )


def get_user_events(db: Session, user_id: int) -> list[models.Event]:
    """
    Retrieve all events of a user, earliest start first.

    Events without a countdown row are still returned; their
    ``countdown`` is ``None``.

    Args:
        db (Session): Database session.
        user_id (int): Owner identifier.

    Returns:
        list[Event]: Events of the user.
    """
    return list(db.scalars(_events_with_countdown(user_id)).unique().all())


def get_user_events_by_date_range(
    db: Session, user_id: int, start: datetime, end: datetime
) -> list[models.Event]:
    """
    Retrieve events of a user whose interval overlaps ``[start, end]``.

    An event overlaps when it starts inside the range, ends inside the
    range, or spans the whole range.

    Args:
        db (Session): Database session.
        user_id (int): Owner identifier.
        start (datetime): Range start (inclusive, naive UTC).
        end (datetime): Range end (inclusive, naive UTC).

    Returns:
        list[Event]: Overlapping events, earliest start first.
    """
    event = models.Event
    overlaps = or_(
        and_(event.start_time >= start, event.start_time <= end),
        and_(event.end_time >= start, event.end_time <= end),
        and_(event.start_time <= start, event.end_time >= end),
    )
    stmt = _events_with_countdown(user_id).where(overlaps)
    return list(db.scalars(stmt).unique().all())


def get_owned_event(db: Session, event_id: int, user_id: int) -> models.Event:
    """
    Retrieve an event only if it belongs to the given user.

    Raises:
        NotFoundOrForbiddenError: If the event is missing or owned by
            another user. Both cases are reported identically.
    """
    event = db.execute(
        select(models.Event).where(
            models.Event.event_id == event_id,
            models.Event.user_id == user_id,
        )
    ).scalar_one_or_none()
    if event is None:
        raise NotFoundOrForbiddenError()
    return event


def update_event(
    db: Session, event_id: int, changes: schemas.EventPatch, user_id: int
) -> models.Event:
    """
    Apply a partial update to an owned event.

    Writes an audit row and, when ``start_time`` changed, resyncs the
    countdown. Everything commits together.

    Args:
        db (Session): Database session.
        event_id (int): Event identifier.
        changes (EventPatch): Fields to update.
        user_id (int): Acting user.

    Raises:
        NotFoundOrForbiddenError: If the user does not own the event.
        InputValidationError: If the patch carries no fields.

    Returns:
        Event: Updated event.
    """
    event = get_owned_event(db, event_id, user_id)
    fields = changes.changes()
    if not fields:
        raise InputValidationError("No fields to update")

    with unit_of_work(db, "update_event"):
        for key, value in fields.items():
            setattr(event, key, value)

        if "start_time" in fields:
            if event.countdown_record is None:
                event.countdown_record = models.Countdown(
                    time_remaining=event.start_time
                )
            else:
                event.countdown_record.time_remaining = event.start_time

        db.add(
            models.EventUpdate(
                event_id=event.event_id, updated_at=utcnow(), updated_by=user_id
            )
        )
    db.refresh(event)
    logger.info(
        "event_updated", event_id=event_id, user_id=user_id, fields=sorted(fields)
    )
    return event


def delete_event(db: Session, event_id: int, user_id: int) -> None:
    """
    Delete an owned event and every row that depends on it.

    Countdown, summary and audit rows go first, then the event itself,
    all in one transaction.

    Raises:
        NotFoundOrForbiddenError: If the user does not own the event.
    """
    get_owned_event(db, event_id, user_id)
    with unit_of_work(db, "delete_event"):
        for dependent in (models.Countdown, models.EventSummary, models.EventUpdate):
            db.execute(delete(dependent).where(dependent.event_id == event_id))
        db.execute(
            delete(models.Event).where(
                models.Event.event_id == event_id,
                models.Event.user_id == user_id,
            )
        )
    logger.info("event_deleted", event_id=event_id, user_id=user_id)
    return None


def save_event_summary(
    db: Session, event_id: int, user_id: int, summary_text: str
) -> models.EventSummary:
    """
    Insert or replace the summary of an owned event.

    Args:
        db (Session): Database session.
        event_id (int): Event identifier.
        user_id (int): Acting user.
        summary_text (str): New summary text.

    Raises:
        NotFoundOrForbiddenError: If the user does not own the event.

    Returns:
        EventSummary: The single summary row of the event.
    """
    get_owned_event(db, event_id, user_id)
    summary = db.execute(
        select(models.EventSummary).where(models.EventSummary.event_id == event_id)
    ).scalar_one_or_none()
    with unit_of_work(db, "save_event_summary"):
        if summary is None:
            summary = models.EventSummary(event_id=event_id, summary_text=summary_text)
            db.add(summary)
        else:
            summary.summary_text = summary_text
    db.refresh(summary)
    logger.info("event_summary_saved", event_id=event_id, user_id=user_id)
    return summary


def get_event_summary(
    db: Session, event_id: int, user_id: int
) -> models.EventSummary | None:
    """
    Retrieve the summary of an owned event.

    Raises:
        NotFoundOrForbiddenError: If the user does not own the event.

    Returns:
        EventSummary | None: Summary if one was saved, otherwise ``None``.
    """
    get_owned_event(db, event_id, user_id)
    return db.execute(
        select(models.EventSummary).where(models.EventSummary.event_id == event_id)
    ).scalar_one_or_none()

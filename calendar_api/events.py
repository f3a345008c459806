"""Event management routes for the Calendar Events API."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from . import schemas, crud
from .database import get_db
from .timeutils import parse_range

router = APIRouter(prefix="/api/events", tags=["events"])


@router.post(
    "",
    response_model=schemas.EventCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_event(event_in: schemas.EventCreate, db: Session = Depends(get_db)):
    """
    Create a new event and its countdown.

    Args:
        event_in (EventCreate): Event input data.
        db (Session): Database session.

    Returns:
        EventCreatedResponse: Identifier of the created event.
    """
    event = crud.create_event(db, event_in)
    return schemas.EventCreatedResponse(
        message="Event created successfully", event_id=event.event_id
    )


@router.get("/{user_id}", response_model=schemas.EventListResponse)
def list_events(user_id: int, db: Session = Depends(get_db)):
    """
    Retrieve all events of a user, earliest start first.

    Args:
        user_id (int): Owner identifier.
        db (Session): Database session.

    Returns:
        EventListResponse: Events annotated with their countdown.
    """
    events = crud.get_user_events(db, user_id)
    return schemas.EventListResponse(
        events=[schemas.EventOut.model_validate(e) for e in events]
    )


@router.get("/{user_id}/range", response_model=schemas.EventListResponse)
def list_events_in_range(
    user_id: int,
    start: str = Query(...),
    end: str = Query(...),
    db: Session = Depends(get_db),
):
    """
    Retrieve events of a user that overlap a date range.

    Bounds are ISO dates or datetimes. A bare ``end`` date covers that
    whole day.

    Args:
        user_id (int): Owner identifier.
        start (str): Range start.
        end (str): Range end.
        db (Session): Database session.

    Raises:
        InputValidationError: If a bound is invalid.

    Returns:
        EventListResponse: Overlapping events.
    """
    range_start, range_end = parse_range(start, end)
    events = crud.get_user_events_by_date_range(db, user_id, range_start, range_end)
    return schemas.EventListResponse(
        events=[schemas.EventOut.model_validate(e) for e in events]
    )


@router.put("/{event_id}", response_model=schemas.MessageResponse)
def update_event(
    event_id: int,
    payload: schemas.EventUpdateRequest,
    db: Session = Depends(get_db),
):
    """
    Partially update an event owned by ``userId``.

    Only fields provided in the request are updated.

    Raises:
        NotFoundOrForbiddenError: If the event is not owned by the user.
        InputValidationError: If no updatable field was sent.
    """
    crud.update_event(db, event_id, payload, payload.acting_user_id)
    return schemas.MessageResponse(message="Event updated successfully")


@router.delete("/{event_id}", response_model=schemas.MessageResponse)
def remove_event(
    event_id: int,
    user_id: int = Query(..., alias="userId"),
    db: Session = Depends(get_db),
):
    """
    Delete an event owned by ``userId`` along with its dependent rows.

    Raises:
        NotFoundOrForbiddenError: If the event is not owned by the user.
    """
    crud.delete_event(db, event_id, user_id)
    return schemas.MessageResponse(message="Event deleted successfully")


@router.post("/{event_id}/summary", response_model=schemas.MessageResponse)
def save_summary(
    event_id: int,
    payload: schemas.SummaryCreate,
    db: Session = Depends(get_db),
):
    """Create or replace the summary of an event owned by ``userId``."""
    crud.save_event_summary(db, event_id, payload.user_id, payload.summary_text)
    return schemas.MessageResponse(message="Event summary saved successfully")


@router.get("/{event_id}/summary", response_model=schemas.SummaryResponse)
def read_summary(
    event_id: int,
    user_id: int = Query(..., alias="userId"),
    db: Session = Depends(get_db),
):
    """Return the summary of an event owned by ``userId``."""
    summary = crud.get_event_summary(db, event_id, user_id)
    return schemas.SummaryResponse(
        summary=summary.summary_text if summary is not None else None
    )

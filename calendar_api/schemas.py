from datetime import datetime
from enum import Enum
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from .exceptions import FIELD_ERROR
from .timeutils import to_naive_utc


def _field_error(message: str) -> PydanticCustomError:
    return PydanticCustomError(FIELD_ERROR, message)


def _required_text(value: str | None, message: str) -> str | None:
    if value is not None and not value.strip():
        raise _field_error(message)
    return value


def _utc(value: datetime | None) -> datetime | None:
    return to_naive_utc(value) if value is not None else None


class EventType(str, Enum):
    """Kinds of calendar events."""

    PERSONAL = "personal"
    HOLIDAY = "holiday"
    SCHOOL = "school"


class Priority(str, Enum):
    """Eisenhower-matrix priority labels."""

    URGENT_IMPORTANT = "Urgent & Important"
    NOT_URGENT_IMPORTANT = "Not Urgent but Important"
    URGENT_NOT_IMPORTANT = "Urgent but Not Important"
    NOT_URGENT_NOT_IMPORTANT = "Not Urgent & Not Important"


class MessageResponse(BaseModel):
    """Generic success envelope."""

    success: bool = True
    message: str


class UserCreate(BaseModel):
    """Payload for registering a new user.

    Rules are checked in field order so the first violated rule is the
    one reported.
    """

    first_name: str
    last_name: str
    middle_initial: Optional[str] = ""
    username: str
    user_email: str
    phone_number: str
    password: str

    @field_validator("first_name")
    @classmethod
    def first_name_required(cls, value: str) -> str:
        return _required_text(value, "First name is required")

    @field_validator("last_name")
    @classmethod
    def last_name_required(cls, value: str) -> str:
        return _required_text(value, "Last name is required")

    @field_validator("middle_initial")
    @classmethod
    def middle_initial_length(cls, value: str | None) -> str:
        if value and len(value) > 2:
            raise _field_error("Middle initial must be at most 2 characters")
        return value or ""

    @field_validator("username")
    @classmethod
    def username_length(cls, value: str) -> str:
        if len(value) < 4:
            raise _field_error("Username must be at least 4 characters")
        return value

    @field_validator("user_email")
    @classmethod
    def email_shape(cls, value: str) -> str:
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            raise _field_error("Invalid email format")
        # Stored as typed; logins match it exactly.
        return value

    @field_validator("phone_number")
    @classmethod
    def phone_length(cls, value: str) -> str:
        if len(value) < 10:
            raise _field_error("Invalid phone number")
        return value

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        if len(value) < 8:
            raise _field_error("Password must be at least 8 characters")
        return value


class UserPublic(BaseModel):
    """Public projection of a user. Never carries the password hash."""

    user_id: int
    username: str
    first_name: str
    last_name: str
    user_email: str

    model_config = ConfigDict(from_attributes=True)


class LoginRequest(BaseModel):
    """Credentials; ``username`` may also be the account email."""

    username: str
    password: str


class LoginResponse(MessageResponse):
    """Successful login with the public user projection."""

    user: UserPublic


class EventCreate(BaseModel):
    """Payload for creating an event."""

    user_id: int
    event_type: EventType
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    category: str
    priority: Priority
    color_code: Optional[str] = None
    tags: Optional[str] = None
    event_status: str = "active"

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("title")
    @classmethod
    def title_required(cls, value: str) -> str:
        return _required_text(value, "Title is required")

    @field_validator("category")
    @classmethod
    def category_required(cls, value: str) -> str:
        return _required_text(value, "Category is required")

    @field_validator("start_time", "end_time")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        return _utc(value)


# Columns that may not be set to null through a patch.
NON_NULLABLE_FIELDS = frozenset(
    {
        "event_type",
        "title",
        "start_time",
        "end_time",
        "category",
        "priority",
        "event_status",
    }
)


class EventPatch(BaseModel):
    """Partial update of an event (all fields optional).

    Only the fields explicitly present in the payload are applied.
    Identity fields (``event_id``, ``user_id``) are not part of the
    model, so they can never be overwritten.
    """

    event_type: Optional[EventType] = None
    title: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[Priority] = None
    color_code: Optional[str] = None
    tags: Optional[str] = None
    event_status: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str | None) -> str | None:
        return _required_text(value, "Title is required")

    @field_validator("category")
    @classmethod
    def category_not_blank(cls, value: str | None) -> str | None:
        return _required_text(value, "Category is required")

    @field_validator("start_time", "end_time")
    @classmethod
    def as_utc(cls, value: datetime | None) -> datetime | None:
        return _utc(value)

    @model_validator(mode="after")
    def reject_null_required(self):
        for name in sorted(self.model_fields_set & NON_NULLABLE_FIELDS):
            if getattr(self, name) is None:
                raise _field_error(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Return the explicitly provided event columns and their values."""
        return self.model_dump(
            exclude_unset=True, include=set(EventPatch.model_fields)
        )


class EventUpdateRequest(EventPatch):
    """Body of ``PUT /api/events/{event_id}``: patch fields plus the acting user."""

    acting_user_id: int = Field(alias="userId")

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class EventOut(BaseModel):
    """Event as returned to clients, annotated with its countdown."""

    event_id: int
    user_id: int
    event_type: str
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    category: str
    priority: str
    color_code: Optional[str] = None
    tags: Optional[str] = None
    event_status: str
    countdown: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EventListResponse(BaseModel):
    """List of events for a user."""

    success: bool = True
    events: List[EventOut]


class EventCreatedResponse(MessageResponse):
    """Result of creating an event."""

    event_id: int = Field(alias="eventId")

    model_config = ConfigDict(populate_by_name=True)


class SummaryCreate(BaseModel):
    """Body of ``POST /api/events/{event_id}/summary``."""

    user_id: int = Field(alias="userId")
    summary_text: str = Field(alias="summaryText")

    model_config = ConfigDict(populate_by_name=True)


class SummaryResponse(BaseModel):
    """Summary text of an event, ``None`` when none has been written."""

    success: bool = True
    summary: Optional[str] = None

from datetime import datetime, timezone
from typing import List, Literal, Optional

from fastapi_users import schemas
from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator
from pydantic.alias_generators import to_camel


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Store and compare every timestamp as naive UTC."""
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# =========================
# USER SCHEMAS
# =========================
class UserRead(schemas.BaseUser[int]):
    username: str
    name: str
    calendar_connected: bool = False


class UserCreate(schemas.BaseUserCreate):
    username: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=128)


class UserUpdate(schemas.BaseUserUpdate):
    name: Optional[str] = None


# =========================
# API BASE
# =========================
class APIModel(BaseModel):
    """JSON bodies use camelCase keys; Python code uses the snake_case names."""
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class UserSummary(APIModel):
    id: int
    username: str
    name: str
    email: str


class VisibilityUpdate(APIModel):
    is_public: StrictBool


class ShareableRead(APIModel):
    id: int
    owner_user_id: int
    family_id: Optional[int] = None
    is_public: bool
    created_at: datetime
    updated_at: datetime


class ShareableCreate(APIModel):
    family_id: Optional[int] = None
    is_public: StrictBool = False


class ShareableUpdate(APIModel):
    """Partial content edit; only fields present in the body are applied."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    family_id: Optional[int] = None

    @field_validator("title")
    @classmethod
    def title_not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("title must not be null")
        return v


# =========================
# FAMILY SCHEMAS
# =========================
class FamilyCreate(APIModel):
    name: str = Field(min_length=1, max_length=128)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class FamilyRead(APIModel):
    id: int
    name: str
    created_by: int
    created_at: datetime


class MemberAdd(APIModel):
    user_id: Optional[int] = None
    username: Optional[str] = None
    role: Literal["admin", "member"] = "member"

    @model_validator(mode="after")
    def needs_target(self):
        if self.user_id is None and not (self.username or "").strip():
            raise ValueError("userId or username is required")
        return self


class MembershipRead(APIModel):
    id: int
    family_id: int
    user_id: int
    role: str
    added_at: datetime


class MemberRead(MembershipRead):
    user: UserSummary


# =========================
# WISHLIST SCHEMAS
# =========================
class WishlistCreate(ShareableCreate):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None


class WishlistUpdate(ShareableUpdate):
    description: Optional[str] = None


class WishlistRead(ShareableRead):
    title: str
    description: Optional[str] = None


class WishlistItemCreate(APIModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    url: Optional[str] = None
    price: Optional[str] = None
    priority: int = 1


class WishlistItemRead(APIModel):
    id: int
    wishlist_id: int
    title: str
    description: Optional[str] = None
    url: Optional[str] = None
    price: Optional[str] = None
    priority: int
    purchased: bool
    purchased_by: Optional[int] = None
    created_at: datetime


# =========================
# LIST SCHEMAS
# =========================
class ListCreate(ShareableCreate):
    title: str = Field(min_length=1, max_length=200)
    icon: str = "list-ul"
    color: str = "primary"


class ListUpdate(ShareableUpdate):
    icon: Optional[str] = None
    color: Optional[str] = None


class ListRead(ShareableRead):
    title: str
    icon: str
    color: str


class ListItemCreate(APIModel):
    content: str = Field(min_length=1)


class ListItemUpdate(APIModel):
    completed: StrictBool


class ListItemRead(APIModel):
    id: int
    list_id: int
    content: str
    completed: bool
    created_at: datetime
    updated_at: datetime


# =========================
# NOTE SCHEMAS
# =========================
class NoteCreate(ShareableCreate):
    title: str = Field(min_length=1, max_length=200)
    content: Optional[str] = None


class NoteUpdate(ShareableUpdate):
    content: Optional[str] = None


class NoteRead(ShareableRead):
    title: str
    content: Optional[str] = None


# =========================
# EVENT SCHEMAS
# =========================
class EventCreate(ShareableCreate):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    location: Optional[str] = None
    notify_user_ids: List[int] = []

    @field_validator("start_date", "end_date")
    @classmethod
    def to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(v)

    @model_validator(mode="after")
    def check_order(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class EventUpdate(ShareableUpdate):
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[str] = None
    notify_user_ids: Optional[List[int]] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(v)

    @field_validator("start_date")
    @classmethod
    def start_not_null(cls, v: Optional[datetime]) -> datetime:
        if v is None:
            raise ValueError("startDate must not be null")
        return v


class EventRead(ShareableRead):
    title: str
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    location: Optional[str] = None
    google_event_id: Optional[str] = None
    notify_user_ids: List[int] = []


class CalendarEventCreate(APIModel):
    """Body of ``POST /api/calendar/events``; mirrors the Google field names."""
    title: str = Field(min_length=1, max_length=200)
    start: datetime
    end: Optional[datetime] = None
    description: Optional[str] = None
    location: Optional[str] = None
    family_id: Optional[int] = None
    is_public: StrictBool = False
    notify_user_ids: List[int] = []

    @field_validator("start", "end")
    @classmethod
    def to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(v)

    @model_validator(mode="after")
    def check_order(self):
        if self.end is not None and self.end < self.start:
            raise ValueError("end must not be before start")
        return self

    def to_event(self) -> EventCreate:
        return EventCreate(
            title=self.title,
            description=self.description,
            start_date=self.start,
            end_date=self.end,
            location=self.location,
            family_id=self.family_id,
            is_public=self.is_public,
            notify_user_ids=self.notify_user_ids,
        )

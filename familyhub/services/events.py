# services/events.py
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.models import Event, User
from familyhub.schemas import EventCreate
from familyhub.services.calendar_sync import GoogleCalendarClient, MirrorEvent, mirror_event
from familyhub.services.families import require_member
from familyhub.services.store import ItemStore


def events(db: AsyncSession) -> ItemStore[Event]:
    return ItemStore(db, Event)


def in_range(start: datetime, end: datetime):
    """Starts on/after ``start`` and, when it has an end, ends on/before ``end``."""
    return and_(
        Event.start_date >= start,
        or_(Event.end_date.is_(None), Event.end_date <= end),
    )


async def events_for_user(db: AsyncSession, user_id: int, *criteria: Any) -> list[Event]:
    """Events the user owns or was explicitly notified on."""
    rows = await events(db).scan_where(*criteria, order_by=Event.start_date)
    return [e for e in rows if e.owner_user_id == user_id or user_id in (e.notify_user_ids or [])]


async def create_event(
    db: AsyncSession,
    user: User,
    payload: EventCreate,
    calendar: Optional[GoogleCalendarClient] = None,
) -> Event:
    """Store a new event, mirroring it to Google first when the user linked a calendar.

    A failed mirror raises before anything is written locally.
    """
    if payload.family_id is not None:
        await require_member(db, user.id, payload.family_id)

    google_event_id = None
    if user.google_refresh_token and calendar is not None:
        google_event_id = await mirror_event(
            calendar,
            user,
            MirrorEvent(
                title=payload.title,
                start=payload.start_date,
                end=payload.end_date,
                description=payload.description,
                location=payload.location,
            ),
        )

    values = payload.model_dump()
    values["notify_user_ids"] = sorted(set(values.get("notify_user_ids") or []))
    return await events(db).insert(owner_user_id=user.id, google_event_id=google_event_id, **values)

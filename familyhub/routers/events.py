from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.database import get_db
from familyhub.errors import ValidationError
from familyhub.schemas import EventCreate, EventRead, EventUpdate, VisibilityUpdate
from familyhub.services.calendar_sync import GoogleCalendarClient, get_calendar_client
from familyhub.services.events import create_event, events, events_for_user, in_range
from familyhub.services.families import require_member
from familyhub.services.visibility import ensure_can_mutate, ensure_can_view
from familyhub.utils import parse_range, require_authenticated_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=List[EventRead])
async def my_events(
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await events_for_user(db, user.id)


# Declared before /{event_id} so "range" is not read as an id.
@router.get("/range", response_model=List[EventRead])
async def my_events_in_range(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    lo, hi = parse_range(start, end)
    return await events_for_user(db, user.id, in_range(lo, hi))


@router.post("", response_model=EventRead, status_code=201)
async def add_event(
    payload: EventCreate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
    calendar: GoogleCalendarClient = Depends(get_calendar_client),
):
    ev = await create_event(db, user, payload, calendar)
    await db.commit()
    return ev


@router.get("/{event_id}", response_model=EventRead)
async def get_event(
    event_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    ev = await events(db).require(event_id)
    await ensure_can_view(db, user.id, ev, "event")
    return ev


@router.patch("/{event_id}", response_model=EventRead)
async def edit_event(
    event_id: int,
    payload: EventUpdate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    ev = await events(db).require(event_id)
    ensure_can_mutate(user.id, ev, "event")
    fields = payload.model_dump(exclude_unset=True)
    if fields.get("family_id") is not None:
        await require_member(db, user.id, fields["family_id"])
    if "notify_user_ids" in fields:
        fields["notify_user_ids"] = sorted(set(fields["notify_user_ids"] or []))

    start = fields.get("start_date", ev.start_date)
    end = fields.get("end_date", ev.end_date)
    if end is not None and end < start:
        raise ValidationError("endDate must not be before startDate")

    ev = await events(db).update(event_id, **fields)
    await db.commit()
    return ev


@router.patch("/{event_id}/visibility", response_model=EventRead)
async def set_event_visibility(
    event_id: int,
    payload: VisibilityUpdate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    ev = await events(db).require(event_id)
    ensure_can_mutate(user.id, ev, "event")
    ev = await events(db).update(event_id, is_public=payload.is_public)
    await db.commit()
    logger.info("Event %s visibility set to public=%s", event_id, payload.is_public)
    return ev

"""Google Calendar link and passthrough endpoints."""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.database import get_db
from familyhub.errors import ValidationError
from familyhub.models import User
from familyhub.schemas import CalendarEventCreate, EventRead
from familyhub.services.calendar_sync import GoogleCalendarClient, get_calendar_client, upcoming_events
from familyhub.services.events import create_event
from familyhub.settings.config import settings
from familyhub.utils import get_current_user, require_authenticated_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["calendar"])


def _redirect_uri(request: Request) -> str:
    if settings.GOOGLE_REDIRECT_URI:
        return settings.GOOGLE_REDIRECT_URI
    # Honour reverse proxies so the callback matches the URL the browser used
    scheme = request.headers.get("x-forwarded-proto") or request.url.scheme
    host = request.headers.get("host", request.url.netloc)
    return f"{scheme}://{host}/api/auth/google/callback"


def _require_connected(user: User) -> None:
    if not user.google_refresh_token:
        raise ValidationError("Google Calendar not connected")


@router.get("/api/auth/google")
async def google_auth_url(
    request: Request,
    user=Depends(require_authenticated_user),
    calendar: GoogleCalendarClient = Depends(get_calendar_client),
):
    return {"authUrl": calendar.authorization_url(_redirect_uri(request))}


@router.get("/api/auth/google/callback", name="google_callback")
async def google_callback(
    request: Request,
    code: Optional[str] = Query(None),
    user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    calendar: GoogleCalendarClient = Depends(get_calendar_client),
):
    if not user:
        return RedirectResponse(url="/auth?error=Not%20authenticated", status_code=303)
    if not code:
        return RedirectResponse(url="/settings?error=Authorization%20failed", status_code=303)

    try:
        refresh_token = await run_in_threadpool(calendar.exchange_code, code, _redirect_uri(request))
    except Exception:
        logger.exception("Google OAuth code exchange failed for user %s", user.id)
        return RedirectResponse(url="/settings?error=Authorization%20failed", status_code=303)

    if not refresh_token:
        return RedirectResponse(url="/settings?error=No%20refresh%20token%20received", status_code=303)

    # The user object comes from the auth session; update the row in ours.
    row = await db.get(User, user.id)
    row.google_refresh_token = refresh_token
    await db.commit()
    logger.info("User %s linked a Google calendar", user.id)
    return RedirectResponse(url="/settings?success=Calendar%20connected", status_code=303)


@router.get("/api/calendar/events")
async def google_upcoming_events(
    user=Depends(require_authenticated_user),
    calendar: GoogleCalendarClient = Depends(get_calendar_client),
) -> list[dict[str, Any]]:
    _require_connected(user)
    return await upcoming_events(calendar, user)


@router.post("/api/calendar/events", response_model=EventRead, status_code=201)
async def google_create_event(
    payload: CalendarEventCreate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
    calendar: GoogleCalendarClient = Depends(get_calendar_client),
):
    _require_connected(user)
    ev = await create_event(db, user, payload.to_event(), calendar)
    await db.commit()
    return ev

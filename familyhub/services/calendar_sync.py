# services/calendar_sync.py
"""One-way mirror of local events into the user's Google Calendar.

Google's SDK owns the token exchange and refresh; the only thing we
keep is the refresh token on the user row. There is no retry and no
reconciliation: a failed call is reported to the caller as-is.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Optional

from fastapi.concurrency import run_in_threadpool
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build

from familyhub.errors import UpstreamFailure
from familyhub.models import User
from familyhub.settings.config import settings

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]
AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"
DEFAULT_DURATION = timedelta(hours=1)


@dataclass(slots=True)
class MirrorEvent:
    title: str
    start: datetime
    end: Optional[datetime] = None
    description: Optional[str] = None
    location: Optional[str] = None

    def to_google(self) -> dict[str, Any]:
        end = self.end or (self.start + DEFAULT_DURATION)
        return {
            "summary": self.title,
            "description": self.description,
            "location": self.location,
            "start": {"dateTime": self.start.isoformat(), "timeZone": "UTC"},
            "end": {"dateTime": end.isoformat(), "timeZone": "UTC"},
        }


class GoogleCalendarClient:
    """Blocking wrapper around google-auth-oauthlib and the Calendar v3 API."""

    def __init__(self, client_id: Optional[str], client_secret: Optional[str], calendar_id: str = "primary"):
        self.client_id = client_id or ""
        self.client_secret = client_secret or ""
        self.calendar_id = calendar_id

    def _flow(self, redirect_uri: str) -> Flow:
        config = {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": AUTH_URI,
                "token_uri": TOKEN_URI,
            }
        }
        # The callback is a separate request, so no PKCE verifier can be carried over.
        return Flow.from_client_config(
            config, scopes=SCOPES, redirect_uri=redirect_uri, autogenerate_code_verifier=False
        )

    def authorization_url(self, redirect_uri: str) -> str:
        url, _state = self._flow(redirect_uri).authorization_url(access_type="offline", prompt="consent")
        return url

    def exchange_code(self, code: str, redirect_uri: str) -> Optional[str]:
        flow = self._flow(redirect_uri)
        flow.fetch_token(code=code)
        return flow.credentials.refresh_token

    def _service(self, refresh_token: str):
        creds = Credentials(
            token=None,
            refresh_token=refresh_token,
            token_uri=TOKEN_URI,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=SCOPES,
        )
        return build("calendar", "v3", credentials=creds, cache_discovery=False)

    def list_upcoming(self, refresh_token: str, limit: int = 10) -> list[dict[str, Any]]:
        now = datetime.now(timezone.utc).isoformat()
        resp = self._service(refresh_token).events().list(
            calendarId=self.calendar_id,
            timeMin=now,
            maxResults=limit,
            singleEvents=True,
            orderBy="startTime",
        ).execute()
        return list(resp.get("items") or [])

    def insert_event(self, refresh_token: str, event: MirrorEvent) -> Optional[str]:
        resp = self._service(refresh_token).events().insert(
            calendarId=self.calendar_id,
            body=event.to_google(),
        ).execute()
        return resp.get("id")


@lru_cache
def get_calendar_client() -> GoogleCalendarClient:
    return GoogleCalendarClient(
        settings.GOOGLE_CLIENT_ID,
        settings.GOOGLE_CLIENT_SECRET,
        settings.GOOGLE_CALENDAR_ID,
    )


async def mirror_event(client: GoogleCalendarClient, user: User, event: MirrorEvent) -> Optional[str]:
    """Insert ``event`` into the user's external calendar and return its external id."""
    try:
        external_id = await run_in_threadpool(client.insert_event, user.google_refresh_token, event)
    except Exception as exc:
        logger.exception("Calendar mirror failed for user %s", user.id)
        raise UpstreamFailure("Failed to create calendar event") from exc
    logger.info("Mirrored event %r for user %s as %s", event.title, user.id, external_id)
    return external_id


async def upcoming_events(client: GoogleCalendarClient, user: User, limit: int = 10) -> list[dict[str, Any]]:
    try:
        return await run_in_threadpool(client.list_upcoming, user.google_refresh_token, limit)
    except Exception as exc:
        logger.exception("Fetching calendar events failed for user %s", user.id)
        raise UpstreamFailure("Failed to fetch calendar events") from exc

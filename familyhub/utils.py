from datetime import datetime
from typing import Optional

from fastapi import Depends
from fastapi_users import models

from .errors import Unauthenticated, ValidationError
from .schemas import naive_utc
from .users import fastapi_users


# Dependency to get the currently authenticated user (None when anonymous)
async def get_current_user(
    user: models.UP = Depends(fastapi_users.current_user(optional=True)),
):
    return user


# Dependency to enforce authentication
async def require_authenticated_user(
    user: models.UP = Depends(fastapi_users.current_user(optional=True)),
):
    if not user or not user.is_active:
        raise Unauthenticated()
    return user


def parse_range(start: Optional[datetime], end: Optional[datetime]) -> tuple[datetime, datetime]:
    """Both bounds of ``?start=&end=`` are required; returned as naive UTC."""
    if start is None or end is None:
        raise ValidationError("Invalid date range")
    return naive_utc(start), naive_utc(end)

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.database import get_db
from familyhub.errors import NotFound, Unauthorized
from familyhub.models import Event, Note, SharedList, User, Wishlist
from familyhub.schemas import (
    EventRead,
    FamilyCreate,
    FamilyRead,
    ListRead,
    MemberAdd,
    MemberRead,
    MembershipRead,
    NoteRead,
    UserSummary,
    WishlistRead,
)
from familyhub.services import families as fam
from familyhub.services.events import in_range
from familyhub.services.store import ItemStore
from familyhub.services.visibility import visible_only
from familyhub.utils import parse_range, require_authenticated_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/families", tags=["families"])


@router.post("", response_model=FamilyRead, status_code=201)
async def create_family(
    payload: FamilyCreate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    f = await fam.create_family(db, payload.name, user.id)
    await db.commit()
    return f


@router.get("", response_model=List[FamilyRead])
async def list_families(
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await fam.families_for_user(db, user.id)


@router.get("/{family_id}", response_model=FamilyRead)
async def get_family(
    family_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await fam.require_member(db, user.id, family_id)


@router.get("/{family_id}/members", response_model=List[MemberRead])
async def list_members(
    family_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    await fam.require_member(db, user.id, family_id)
    rows = await fam.members_with_users(db, family_id)
    return [
        MemberRead(
            **MembershipRead.model_validate(m).model_dump(),
            user=UserSummary.model_validate(u),
        )
        for m, u in rows
    ]


@router.post("/{family_id}/members", response_model=MembershipRead, status_code=201)
async def add_member(
    family_id: int,
    payload: MemberAdd,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    await fam.families(db).require(family_id)
    if not await fam.is_admin(db, user.id, family_id):
        raise Unauthorized("Only family admins can add members")

    if payload.user_id is not None:
        target = await db.get(User, payload.user_id)
    else:
        target = (await db.execute(
            select(User).where(User.username == payload.username.strip())
        )).scalars().first()
    if not target:
        raise NotFound("User not found")

    m = await fam.add_member(db, family_id, target.id, payload.role)
    await db.commit()
    return m


# ---------------------------
# Family feeds
# ---------------------------
async def _family_feed(db: AsyncSession, user_id: int, family_id: int, model, *criteria):
    await fam.require_member(db, user_id, family_id)
    rows = await ItemStore(db, model).scan_where(model.family_id == family_id, *criteria)
    return await visible_only(db, user_id, rows)


@router.get("/{family_id}/wishlists", response_model=List[WishlistRead])
async def family_wishlists(
    family_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await _family_feed(db, user.id, family_id, Wishlist)


@router.get("/{family_id}/lists", response_model=List[ListRead])
async def family_lists(
    family_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await _family_feed(db, user.id, family_id, SharedList)


@router.get("/{family_id}/notes", response_model=List[NoteRead])
async def family_notes(
    family_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await _family_feed(db, user.id, family_id, Note)


@router.get("/{family_id}/events", response_model=List[EventRead])
async def family_events(
    family_id: int,
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    criteria = []
    if start is not None and end is not None:
        criteria.append(in_range(*parse_range(start, end)))
    return await _family_feed(db, user.id, family_id, Event, *criteria)

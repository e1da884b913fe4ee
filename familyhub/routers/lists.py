from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.database import get_db
from familyhub.errors import NotFound
from familyhub.models import ListItem, SharedList
from familyhub.schemas import (
    ListCreate,
    ListItemCreate,
    ListItemRead,
    ListItemUpdate,
    ListRead,
    ListUpdate,
    VisibilityUpdate,
)
from familyhub.services.families import require_member
from familyhub.services.store import ItemStore
from familyhub.services.visibility import ensure_can_mutate, ensure_can_view
from familyhub.utils import require_authenticated_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["lists"])


def _lists(db: AsyncSession) -> ItemStore[SharedList]:
    return ItemStore(db, SharedList, label="List")


def _items(db: AsyncSession) -> ItemStore[ListItem]:
    return ItemStore(db, ListItem, label="List item")


@router.get("/api/lists", response_model=List[ListRead])
async def my_lists(
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await _lists(db).scan_where(SharedList.owner_user_id == user.id)


@router.post("/api/lists", response_model=ListRead, status_code=201)
async def create_list(
    payload: ListCreate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    if payload.family_id is not None:
        await require_member(db, user.id, payload.family_id)
    lst = await _lists(db).insert(owner_user_id=user.id, **payload.model_dump())
    await db.commit()
    return lst


@router.get("/api/lists/{list_id}", response_model=ListRead)
async def get_list(
    list_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    lst = await _lists(db).require(list_id)
    await ensure_can_view(db, user.id, lst, "list")
    return lst


@router.patch("/api/lists/{list_id}", response_model=ListRead)
async def edit_list(
    list_id: int,
    payload: ListUpdate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    lst = await _lists(db).require(list_id)
    ensure_can_mutate(user.id, lst, "list")
    fields = payload.model_dump(exclude_unset=True)
    if fields.get("family_id") is not None:
        await require_member(db, user.id, fields["family_id"])
    # icon/color are NOT NULL; an explicit null leaves them as they are
    for key in ("icon", "color"):
        if key in fields and fields[key] is None:
            fields.pop(key)
    lst = await _lists(db).update(list_id, **fields)
    await db.commit()
    return lst


@router.patch("/api/lists/{list_id}/visibility", response_model=ListRead)
async def set_list_visibility(
    list_id: int,
    payload: VisibilityUpdate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    lst = await _lists(db).require(list_id)
    ensure_can_mutate(user.id, lst, "list")
    lst = await _lists(db).update(list_id, is_public=payload.is_public)
    await db.commit()
    logger.info("List %s visibility set to public=%s", list_id, payload.is_public)
    return lst


@router.get("/api/lists/{list_id}/items", response_model=List[ListItemRead])
async def list_items(
    list_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    lst = await _lists(db).require(list_id)
    await ensure_can_view(db, user.id, lst, "list")
    return await _items(db).scan_where(ListItem.list_id == list_id)


@router.post("/api/lists/{list_id}/items", response_model=ListItemRead, status_code=201)
async def add_list_item(
    list_id: int,
    payload: ListItemCreate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    lst = await _lists(db).require(list_id)
    ensure_can_mutate(user.id, lst, "list")
    item = await _items(db).insert(list_id=list_id, content=payload.content)
    await db.commit()
    return item


@router.patch("/api/list-items/{item_id}", response_model=ListItemRead)
async def toggle_list_item(
    item_id: int,
    payload: ListItemUpdate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    item = await _items(db).require(item_id)
    lst = await _lists(db).get_by_id(item.list_id)
    if not lst:
        raise NotFound("Associated list not found")
    ensure_can_mutate(user.id, lst, "list item")
    item = await _items(db).update(item_id, completed=payload.completed)
    await db.commit()
    return item

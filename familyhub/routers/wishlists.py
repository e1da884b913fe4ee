from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.database import get_db
from familyhub.models import Wishlist, WishlistItem
from familyhub.schemas import (
    VisibilityUpdate,
    WishlistCreate,
    WishlistItemCreate,
    WishlistItemRead,
    WishlistRead,
    WishlistUpdate,
)
from familyhub.services.families import require_member
from familyhub.services.store import ItemStore
from familyhub.services.visibility import ensure_can_mutate, ensure_can_view
from familyhub.utils import require_authenticated_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/wishlists", tags=["wishlists"])


def _wishlists(db: AsyncSession) -> ItemStore[Wishlist]:
    return ItemStore(db, Wishlist)


def _items(db: AsyncSession) -> ItemStore[WishlistItem]:
    return ItemStore(db, WishlistItem, label="Wishlist item")


@router.get("", response_model=List[WishlistRead])
async def my_wishlists(
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await _wishlists(db).scan_where(Wishlist.owner_user_id == user.id)


@router.post("", response_model=WishlistRead, status_code=201)
async def create_wishlist(
    payload: WishlistCreate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    if payload.family_id is not None:
        await require_member(db, user.id, payload.family_id)
    w = await _wishlists(db).insert(owner_user_id=user.id, **payload.model_dump())
    await db.commit()
    return w


@router.get("/{wishlist_id}", response_model=WishlistRead)
async def get_wishlist(
    wishlist_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    w = await _wishlists(db).require(wishlist_id)
    await ensure_can_view(db, user.id, w, "wishlist")
    return w


@router.patch("/{wishlist_id}", response_model=WishlistRead)
async def edit_wishlist(
    wishlist_id: int,
    payload: WishlistUpdate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    w = await _wishlists(db).require(wishlist_id)
    ensure_can_mutate(user.id, w, "wishlist")
    fields = payload.model_dump(exclude_unset=True)
    if fields.get("family_id") is not None:
        await require_member(db, user.id, fields["family_id"])
    w = await _wishlists(db).update(wishlist_id, **fields)
    await db.commit()
    return w


@router.patch("/{wishlist_id}/visibility", response_model=WishlistRead)
async def set_wishlist_visibility(
    wishlist_id: int,
    payload: VisibilityUpdate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    w = await _wishlists(db).require(wishlist_id)
    ensure_can_mutate(user.id, w, "wishlist")
    w = await _wishlists(db).update(wishlist_id, is_public=payload.is_public)
    await db.commit()
    logger.info("Wishlist %s visibility set to public=%s", wishlist_id, payload.is_public)
    return w


@router.get("/{wishlist_id}/items", response_model=List[WishlistItemRead])
async def wishlist_items(
    wishlist_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    w = await _wishlists(db).require(wishlist_id)
    await ensure_can_view(db, user.id, w, "wishlist")
    return await _items(db).scan_where(WishlistItem.wishlist_id == wishlist_id)


@router.post("/{wishlist_id}/items", response_model=WishlistItemRead, status_code=201)
async def add_wishlist_item(
    wishlist_id: int,
    payload: WishlistItemCreate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    w = await _wishlists(db).require(wishlist_id)
    ensure_can_mutate(user.id, w, "wishlist")
    item = await _items(db).insert(wishlist_id=wishlist_id, **payload.model_dump())
    await db.commit()
    return item

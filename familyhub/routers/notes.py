from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.database import get_db
from familyhub.models import Note
from familyhub.schemas import NoteCreate, NoteRead, NoteUpdate, VisibilityUpdate
from familyhub.services.families import require_member
from familyhub.services.store import ItemStore
from familyhub.services.visibility import ensure_can_mutate, ensure_can_view
from familyhub.utils import require_authenticated_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notes", tags=["notes"])


def _notes(db: AsyncSession) -> ItemStore[Note]:
    return ItemStore(db, Note)


@router.get("", response_model=List[NoteRead])
async def my_notes(
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await _notes(db).scan_where(Note.owner_user_id == user.id, order_by=Note.updated_at.desc())


@router.post("", response_model=NoteRead, status_code=201)
async def create_note(
    payload: NoteCreate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    if payload.family_id is not None:
        await require_member(db, user.id, payload.family_id)
    note = await _notes(db).insert(owner_user_id=user.id, **payload.model_dump())
    await db.commit()
    return note


@router.get("/{note_id}", response_model=NoteRead)
async def get_note(
    note_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    note = await _notes(db).require(note_id)
    await ensure_can_view(db, user.id, note, "note")
    return note


@router.patch("/{note_id}", response_model=NoteRead)
async def edit_note(
    note_id: int,
    payload: NoteUpdate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    note = await _notes(db).require(note_id)
    ensure_can_mutate(user.id, note, "note")
    fields = payload.model_dump(exclude_unset=True)
    if fields.get("family_id") is not None:
        await require_member(db, user.id, fields["family_id"])
    note = await _notes(db).update(note_id, **fields)
    await db.commit()
    return note


@router.patch("/{note_id}/visibility", response_model=NoteRead)
async def set_note_visibility(
    note_id: int,
    payload: VisibilityUpdate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    note = await _notes(db).require(note_id)
    ensure_can_mutate(user.id, note, "note")
    note = await _notes(db).update(note_id, is_public=payload.is_public)
    await db.commit()
    logger.info("Note %s visibility set to public=%s", note_id, payload.is_public)
    return note

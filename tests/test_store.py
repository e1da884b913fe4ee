from datetime import datetime

import pytest

from familyhub.errors import NotFound
from familyhub.models import Event, Note, User
from familyhub.services.events import in_range
from familyhub.services.store import ItemStore


async def _user(session, name):
    return await ItemStore(session, User).insert(
        email=f"{name}@example.com", username=name, name=name.title(), hashed_password="x"
    )


async def test_insert_assigns_increasing_ids(session):
    owner = await _user(session, "alice")
    notes = ItemStore(session, Note)
    ids = [(await notes.insert(title=f"n{i}", owner_user_id=owner.id)).id for i in range(5)]
    assert ids == sorted(ids)
    assert len(set(ids)) == 5


async def test_insert_stamps_timestamps_and_defaults(session):
    owner = await _user(session, "alice")
    note = await ItemStore(session, Note).insert(title="Groceries", owner_user_id=owner.id)
    assert note.created_at == note.updated_at
    assert note.is_public is False
    assert note.family_id is None


async def test_get_and_require(session):
    owner = await _user(session, "alice")
    notes = ItemStore(session, Note)
    note = await notes.insert(title="a", owner_user_id=owner.id)
    assert (await notes.get_by_id(note.id)) is note
    assert await notes.get_by_id(9999) is None
    with pytest.raises(NotFound) as exc:
        await notes.require(9999)
    assert exc.value.status_code == 404
    assert exc.value.detail == "Note not found"


async def test_scan_where_filters_in_id_order(session):
    alice = await _user(session, "alice")
    bob = await _user(session, "bob")
    notes = ItemStore(session, Note)
    await notes.insert(title="a1", owner_user_id=alice.id)
    await notes.insert(title="b1", owner_user_id=bob.id)
    await notes.insert(title="a2", owner_user_id=alice.id)

    mine = await notes.scan_where(Note.owner_user_id == alice.id)
    assert [n.title for n in mine] == ["a1", "a2"]
    assert len(await notes.scan_where()) == 3


async def test_update_refreshes_updated_at_only(session):
    owner = await _user(session, "alice")
    notes = ItemStore(session, Note)
    note = await notes.insert(title="draft", owner_user_id=owner.id)
    created = note.created_at

    updated = await notes.update(note.id, title="final", is_public=True)
    assert updated.title == "final"
    assert updated.is_public is True
    assert updated.created_at == created
    assert updated.updated_at >= created


async def test_update_rejects_unknown_fields_and_ids(session):
    owner = await _user(session, "alice")
    notes = ItemStore(session, Note)
    note = await notes.insert(title="x", owner_user_id=owner.id)
    with pytest.raises(AttributeError):
        await notes.update(note.id, colour="red")
    with pytest.raises(NotFound):
        await notes.update(note.id + 100, title="y")


async def test_range_criterion(session):
    owner = await _user(session, "alice")
    events = ItemStore(session, Event)

    def d(day, month=3):
        return datetime(2025, month, day, 12)

    await events.insert(title="open-ended", start_date=d(5), owner_user_id=owner.id)
    await events.insert(title="inside", start_date=d(15), end_date=d(16), owner_user_id=owner.id)
    await events.insert(title="runs past", start_date=d(10), end_date=d(2, month=4), owner_user_id=owner.id)
    await events.insert(title="starts before", start_date=d(20, month=2), end_date=d(2), owner_user_id=owner.id)

    lo, hi = datetime(2025, 3, 1), datetime(2025, 3, 31, 23, 59)
    hits = await events.scan_where(in_range(lo, hi), order_by=Event.start_date)
    assert [e.title for e in hits] == ["open-ended", "inside"]

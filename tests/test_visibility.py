import itertools
from types import SimpleNamespace

import pytest

from familyhub.models import Event, Note, SharedList, Wishlist
from familyhub.services.visibility import DEFAULT_RULE, EVENT_RULE, can_mutate, can_view, rule_for

OWNER, MEMBER, OUTSIDER = 1, 2, 3
F1, F2 = 10, 20

SHAREABLES = [Wishlist, SharedList, Note, Event]


def make(model, *, family_id=None, is_public=False, **extra):
    return model(id=1, owner_user_id=OWNER, family_id=family_id, is_public=is_public, **extra)


@pytest.mark.parametrize("model", SHAREABLES)
@pytest.mark.parametrize("family_id", [None, F1])
@pytest.mark.parametrize("is_public", [False, True])
def test_owner_always_sees_and_mutates(model, family_id, is_public):
    item = make(model, family_id=family_id, is_public=is_public)
    assert can_view(OWNER, item, set())
    assert can_mutate(OWNER, item)


@pytest.mark.parametrize("model", SHAREABLES)
def test_public_family_item_visible_to_members_only(model):
    item = make(model, family_id=F1, is_public=True)
    assert can_view(MEMBER, item, {F1})
    assert can_view(MEMBER, item, {F2, F1})
    assert not can_view(OUTSIDER, item, {F2})
    assert not can_view(OUTSIDER, item, set())


@pytest.mark.parametrize("model", SHAREABLES)
def test_private_family_item_hidden_from_members(model):
    item = make(model, family_id=F1, is_public=False)
    assert not can_view(MEMBER, item, {F1})


@pytest.mark.parametrize("model", SHAREABLES)
@pytest.mark.parametrize("family_ids", [set(), {F1}, {F1, F2}])
def test_public_without_family_is_owner_only(model, family_ids):
    item = make(model, family_id=None, is_public=True)
    assert not can_view(MEMBER, item, family_ids)


@pytest.mark.parametrize("model", SHAREABLES)
def test_only_owner_mutates(model):
    item = make(model, family_id=F1, is_public=True)
    assert not can_mutate(MEMBER, item)
    assert not can_mutate(OUTSIDER, item)


def test_membership_order_does_not_matter():
    item = make(Note, family_id=F1, is_public=True)
    memberships = [F2, F1, 30]
    results = {can_view(MEMBER, item, list(p)) for p in itertools.permutations(memberships)}
    assert results == {True}


def test_notified_users_see_private_event():
    ev = make(Event, notify_user_ids=[OUTSIDER])
    assert can_view(OUTSIDER, ev, set())
    assert not can_view(MEMBER, ev, {F1})


def test_event_with_no_notify_list():
    ev = make(Event, family_id=F1, is_public=False)
    ev.notify_user_ids = None
    assert not can_view(MEMBER, ev, {F1})


def test_notify_list_ignored_for_non_events():
    item = SimpleNamespace(owner_user_id=OWNER, family_id=None, is_public=False, notify_user_ids=[MEMBER])
    assert not can_view(MEMBER, item, set(), DEFAULT_RULE)
    assert can_view(MEMBER, item, set(), EVENT_RULE)


def test_rule_lookup():
    assert rule_for(make(Event)) is EVENT_RULE
    for model in (Wishlist, SharedList, Note):
        assert rule_for(make(model)) is DEFAULT_RULE

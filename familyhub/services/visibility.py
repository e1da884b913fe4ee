# services/visibility.py
"""Who may see or change a shareable item (wishlist, list, note, event).

One predicate serves every type. A ``ShareRule`` tells it how to read
owner, family, public flag and, for events, the extra viewer set off a
given record.
"""
from __future__ import annotations

from dataclasses import dataclass
from operator import attrgetter
from typing import Any, Callable, Collection, Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.errors import Unauthorized
from familyhub.models import Event, Note, SharedList, Wishlist
from familyhub.services.families import user_family_ids


@dataclass(frozen=True)
class ShareRule:
    owner: Callable[[Any], int] = attrgetter("owner_user_id")
    family: Callable[[Any], Optional[int]] = attrgetter("family_id")
    public: Callable[[Any], bool] = attrgetter("is_public")
    # Extra viewers that bypass the family check; only events have one.
    notified: Optional[Callable[[Any], Optional[Iterable[int]]]] = None


DEFAULT_RULE = ShareRule()
EVENT_RULE = ShareRule(notified=attrgetter("notify_user_ids"))

RULES: dict[type, ShareRule] = {
    Wishlist: DEFAULT_RULE,
    SharedList: DEFAULT_RULE,
    Note: DEFAULT_RULE,
    Event: EVENT_RULE,
}


def rule_for(item: Any) -> ShareRule:
    return RULES.get(type(item), DEFAULT_RULE)


def can_view(requester_id: int, item: Any, family_ids: Collection[int],
             rule: Optional[ShareRule] = None) -> bool:
    """``family_ids`` is the requester's membership set at the time of the call."""
    rule = rule or rule_for(item)

    # Owner can always view
    if rule.owner(item) == requester_id:
        return True

    # Public items without a family stay owner-only
    family_id = rule.family(item)
    if rule.public(item) and family_id is not None and family_id in family_ids:
        return True

    if rule.notified is not None:
        return requester_id in set(rule.notified(item) or ())
    return False


def can_mutate(requester_id: int, item: Any, rule: Optional[ShareRule] = None) -> bool:
    rule = rule or rule_for(item)
    return rule.owner(item) == requester_id


async def ensure_can_view(db: AsyncSession, requester_id: int, item: Any, label: str = "item") -> None:
    family_ids = await user_family_ids(db, requester_id)
    if not can_view(requester_id, item, family_ids):
        raise Unauthorized(f"Not authorized to view this {label}")


def ensure_can_mutate(requester_id: int, item: Any, label: str = "item") -> None:
    if not can_mutate(requester_id, item):
        raise Unauthorized(f"Not authorized to update this {label}")


async def visible_only(db: AsyncSession, requester_id: int, items: Iterable[Any]) -> list[Any]:
    family_ids = await user_family_ids(db, requester_id)
    return [it for it in items if can_view(requester_id, it, family_ids)]

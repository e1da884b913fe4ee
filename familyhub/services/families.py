# services/families.py
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.errors import Unauthorized
from familyhub.models import Family, FamilyMembership, User
from familyhub.services.store import ItemStore

logger = logging.getLogger(__name__)


def families(db: AsyncSession) -> ItemStore[Family]:
    return ItemStore(db, Family)


def memberships(db: AsyncSession) -> ItemStore[FamilyMembership]:
    return ItemStore(db, FamilyMembership, label="Membership")


async def create_family(db: AsyncSession, name: str, created_by_user_id: int) -> Family:
    f = await families(db).insert(name=(name or "").strip(), created_by=created_by_user_id)
    await memberships(db).insert(family_id=f.id, user_id=created_by_user_id, role="admin")
    logger.info("Family %s created by user %s", f.id, created_by_user_id)
    return f


async def add_member(db: AsyncSession, family_id: int, user_id: int, role: str = "member") -> FamilyMembership:
    """Add ``user_id`` to the family; an existing membership is returned unchanged."""
    existing = await memberships(db).scan_where(
        FamilyMembership.family_id == family_id, FamilyMembership.user_id == user_id
    )
    if existing:
        return existing[0]
    m = await memberships(db).insert(family_id=family_id, user_id=user_id, role=role)
    logger.info("User %s joined family %s as %s", user_id, family_id, role)
    return m


async def members_of(db: AsyncSession, family_id: int) -> set[int]:
    rows = await memberships(db).scan_where(FamilyMembership.family_id == family_id)
    return {m.user_id for m in rows}


async def user_family_ids(db: AsyncSession, user_id: int) -> set[int]:
    rows = (await db.execute(
        select(FamilyMembership.family_id).where(FamilyMembership.user_id == user_id)
    )).scalars().all()
    return set(rows or [])


async def is_member(db: AsyncSession, user_id: int, family_id: int) -> bool:
    return user_id in await members_of(db, family_id)


async def require_member(db: AsyncSession, user_id: int, family_id: int) -> Family:
    """404 for an unknown family, 403 when the user does not belong to it."""
    f = await families(db).require(family_id)
    if not await is_member(db, user_id, family_id):
        raise Unauthorized("Not a member of this family")
    return f


async def is_admin(db: AsyncSession, user_id: int, family_id: int) -> bool:
    rows = await memberships(db).scan_where(
        FamilyMembership.family_id == family_id,
        FamilyMembership.user_id == user_id,
        FamilyMembership.role == "admin",
    )
    return bool(rows)


async def families_for_user(db: AsyncSession, user_id: int) -> list[Family]:
    return await families(db).scan_where(Family.id.in_(sorted(await user_family_ids(db, user_id))))


async def members_with_users(db: AsyncSession, family_id: int) -> list[tuple[FamilyMembership, User]]:
    q = (
        select(FamilyMembership, User)
        .join(User, User.id == FamilyMembership.user_id)
        .where(FamilyMembership.family_id == family_id)
        .order_by(FamilyMembership.id)
    )
    return [(m, u) for m, u in (await db.execute(q)).all()]

from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey, Text, DateTime, JSON, UniqueConstraint
)

from .database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp; the store keeps every datetime in naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# sqlite_autoincrement keeps ids monotonic per table; they are never handed out twice.
_TABLE_ARGS = {"sqlite_autoincrement": True}


# ---------------------------
# USER MODEL
# ---------------------------
class User(Base):
    __tablename__ = "user"
    __table_args__ = _TABLE_ARGS

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), unique=True, index=True, nullable=False)
    username = Column(String(64), unique=True, index=True, nullable=False)
    name = Column(String(128), nullable=False)
    hashed_password = Column(String(1024), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    # Opaque token handed out by Google; nothing else about the linked account is kept.
    google_refresh_token = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    @property
    def calendar_connected(self) -> bool:
        return bool(self.google_refresh_token)

    def __repr__(self):
        return f"<User {self.username}>"


# ---------------------------
# FAMILIES
# ---------------------------
class Family(Base):
    __tablename__ = "family"
    __table_args__ = _TABLE_ARGS

    id = Column(Integer, primary_key=True)
    name = Column(String(128), nullable=False)          # e.g., "The Gomez Family"
    created_by = Column(ForeignKey("user.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class FamilyMembership(Base):
    __tablename__ = "family_membership"

    id = Column(Integer, primary_key=True)
    family_id = Column(ForeignKey("family.id"), index=True, nullable=False)
    user_id = Column(ForeignKey("user.id"), index=True, nullable=False)
    role = Column(String(32), default="member", nullable=False)     # member|admin
    added_at = Column(DateTime, default=utcnow, nullable=False)
    __table_args__ = (
        UniqueConstraint("family_id", "user_id", name="uq_family_user"),
        _TABLE_ARGS,
    )


# ---------------------------
# WISHLISTS
# ---------------------------
class Wishlist(Base):
    __tablename__ = "wishlist"
    __table_args__ = _TABLE_ARGS

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    owner_user_id = Column(ForeignKey("user.id"), index=True, nullable=False)
    family_id = Column(ForeignKey("family.id"), index=True, nullable=True)
    is_public = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class WishlistItem(Base):
    __tablename__ = "wishlist_item"
    __table_args__ = _TABLE_ARGS

    id = Column(Integer, primary_key=True)
    wishlist_id = Column(ForeignKey("wishlist.id"), index=True, nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    url = Column(String(2048), nullable=True)
    price = Column(String(64), nullable=True)           # free text, e.g. "~$20"
    priority = Column(Integer, default=1, nullable=False)
    purchased = Column(Boolean, default=False, nullable=False)
    purchased_by = Column(ForeignKey("user.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


# ---------------------------
# LISTS
# ---------------------------
class SharedList(Base):
    __tablename__ = "list"
    __table_args__ = _TABLE_ARGS

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    icon = Column(String(64), default="list-ul", nullable=False)
    color = Column(String(32), default="primary", nullable=False)
    owner_user_id = Column(ForeignKey("user.id"), index=True, nullable=False)
    family_id = Column(ForeignKey("family.id"), index=True, nullable=True)
    is_public = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class ListItem(Base):
    __tablename__ = "list_item"
    __table_args__ = _TABLE_ARGS

    id = Column(Integer, primary_key=True)
    list_id = Column(ForeignKey("list.id"), index=True, nullable=False)
    content = Column(Text, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


# ---------------------------
# NOTES
# ---------------------------
class Note(Base):
    __tablename__ = "note"
    __table_args__ = _TABLE_ARGS

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=True)
    owner_user_id = Column(ForeignKey("user.id"), index=True, nullable=False)
    family_id = Column(ForeignKey("family.id"), index=True, nullable=True)
    is_public = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


# ---------------------------
# EVENTS
# ---------------------------
class Event(Base):
    __tablename__ = "event"
    __table_args__ = _TABLE_ARGS

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime, index=True, nullable=False)
    end_date = Column(DateTime, nullable=True)
    location = Column(String(255), nullable=True)
    owner_user_id = Column(ForeignKey("user.id"), index=True, nullable=False)
    family_id = Column(ForeignKey("family.id"), index=True, nullable=True)
    is_public = Column(Boolean, default=False, nullable=False)
    google_event_id = Column(String(255), nullable=True)
    notify_user_ids = Column(JSON, default=list, nullable=False)   # list[int]
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

"""User model definitions."""

import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, Text
from showcase.database import Base


DEFAULT_UNIVERSITY = "VIT Vellore"
DEFAULT_BRANCH = "Computer Science"
DEFAULT_YEAR = 2
MIN_YEAR = 1
MAX_YEAR = 4


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, enum.Enum):
    """Closed set of account roles."""

    USER = "user"
    ADMIN = "admin"
    MODERATOR = "moderator"


def is_admin(role: Role) -> bool:
    match role:
        case Role.ADMIN:
            return True
        case Role.USER | Role.MODERATOR:
            return False


class User(Base):
    """Represents a registered account."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(f"year BETWEEN {MIN_YEAR} AND {MAX_YEAR}", name="ck_users_year_range"),
        # Ids are token subjects and must never be handed out twice.
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    university = Column(String, nullable=False, default=DEFAULT_UNIVERSITY)
    branch = Column(String, nullable=False, default=DEFAULT_BRANCH)
    year = Column(Integer, nullable=False, default=DEFAULT_YEAR)
    role = Column(String, nullable=False, default=Role.USER.value)
    avatar = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

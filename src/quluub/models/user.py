"""SQLAlchemy models for user accounts and profile data."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from quluub.db.session import Base
from quluub.db.time import utcnow

from .types import string_enum


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"

    @property
    def opposite(self) -> Gender:
        return Gender.FEMALE if self is Gender.MALE else Gender.MALE


class Plan(str, Enum):
    FREEMIUM = "freemium"
    PREMIUM = "premium"
    PRO = "pro"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class User(Base):
    """Registered member with credentials and matrimonial profile fields."""

    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    fname: Mapped[str] = mapped_column(String(100), nullable=False)
    lname: Mapped[str] = mapped_column(String(100), nullable=False)
    kunya: Mapped[str | None] = mapped_column(String(100), nullable=True)
    gender: Mapped[Gender] = mapped_column(string_enum(Gender), nullable=False)
    dob: Mapped[date | None] = mapped_column(Date, nullable=True)
    plan: Mapped[Plan] = mapped_column(string_enum(Plan), nullable=False, default=Plan.FREEMIUM)
    status: Mapped[UserStatus] = mapped_column(
        string_enum(UserStatus), nullable=False, default=UserStatus.ACTIVE
    )
    hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Free-form profile attributes shown on the browse and match cards.
    nationality: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    ethnicity: Mapped[str | None] = mapped_column(String(100), nullable=True)
    build: Mapped[str | None] = mapped_column(String(100), nullable=True)
    appearance: Mapped[str | None] = mapped_column(String(100), nullable=True)
    marital_status: Mapped[str | None] = mapped_column(String(100), nullable=True)
    pattern_of_salaah: Mapped[str | None] = mapped_column(String(100), nullable=True)
    genotype: Mapped[str | None] = mapped_column(String(20), nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    work_education: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_pic: Mapped[str | None] = mapped_column(Text, nullable=True)

    last_seen: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class Favorite(Base):
    """Join table of users a member has bookmarked."""

    __tablename__ = "user_favorite"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    favorite_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

"""User-related Pydantic schemas."""

import re
from datetime import date

from pydantic import Field, field_validator

from quluub.models import Gender, Plan, UserStatus

from .common import CamelModel, UtcDatetime

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,64}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class SignupRequest(CamelModel):
    """Schema for registering a new account."""

    username: str = Field(..., description="Unique handle (3-64 letters, digits, _ . -)")
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    fname: str = Field(..., min_length=1, max_length=100)
    lname: str = Field(..., min_length=1, max_length=100)
    gender: Gender

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username may only contain letters, digits, '_', '.' and '-'")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Email address is not valid")
        return v


class LoginRequest(CamelModel):
    """Schema for login submissions."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class PublicUser(CamelModel):
    """Profile fields any signed-in member may see. Never includes credentials."""

    id: int
    username: str
    fname: str
    lname: str
    kunya: str | None = None
    gender: Gender
    dob: date | None = None
    nationality: str | None = None
    country: str | None = None
    ethnicity: str | None = None
    build: str | None = None
    appearance: str | None = None
    marital_status: str | None = None
    pattern_of_salaah: str | None = None
    genotype: str | None = None
    summary: str | None = None
    work_education: str | None = None
    profile_pic: str | None = None
    last_seen: UtcDatetime | None = None


class UserProfile(PublicUser):
    """The account owner's own view of their profile."""

    email: str
    plan: Plan
    status: UserStatus
    hidden: bool
    created_at: UtcDatetime | None = None


class AuthResponse(CamelModel):
    """Returned by signup and login."""

    user: UserProfile
    token: str


class ProfileUpdateRequest(CamelModel):
    """Partial profile update; only fields present in the body are applied."""

    fname: str | None = Field(None, min_length=1, max_length=100)
    lname: str | None = Field(None, min_length=1, max_length=100)
    kunya: str | None = Field(None, max_length=100)
    dob: date | None = None
    nationality: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    ethnicity: str | None = Field(None, max_length=100)
    build: str | None = Field(None, max_length=100)
    appearance: str | None = Field(None, max_length=100)
    marital_status: str | None = Field(None, max_length=100)
    pattern_of_salaah: str | None = Field(None, max_length=100)
    genotype: str | None = Field(None, max_length=20)
    summary: str | None = None
    work_education: str | None = None
    hidden: bool | None = None
    profile_pic: str | None = None

    @field_validator("fname", "lname", "hidden")
    @classmethod
    def reject_explicit_null(cls, v: object) -> object:
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class PlanUpgradeRequest(CamelModel):
    """Billing webhook payload moving an account to a paid plan."""

    email: str = Field(..., max_length=255)
    plan: Plan = Plan.PREMIUM

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class FavoritesResponse(CamelModel):
    """Current favourites list of the signed-in user."""

    message: str | None = None
    favorites: list[PublicUser]

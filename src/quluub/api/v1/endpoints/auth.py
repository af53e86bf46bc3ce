"""Authentication endpoints for the Quluub API."""

from __future__ import annotations

from fastapi import APIRouter, status

from quluub.core.security import create_access_token
from quluub.models import User
from quluub.schemas.user import AuthResponse, LoginRequest, SignupRequest, UserProfile
from quluub.services import user_service

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/auth", tags=["authentication"])


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        user=UserProfile.model_validate(user),
        token=create_access_token(user.id),
    )


@router.post(
    "/signup",
    summary="Register a new account",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
)
async def signup(payload: SignupRequest, db: SessionDep) -> AuthResponse:
    """Create an account and return it with an access token."""
    user = user_service.create_user(db, payload)
    return _auth_response(user)


@router.post("/login", summary="Authenticate with username and password", response_model=AuthResponse)
async def login(payload: LoginRequest, db: SessionDep) -> AuthResponse:
    """Exchange credentials for an access token."""
    user = user_service.authenticate(db, payload.username, payload.password)
    return _auth_response(user)


@router.get("/profile", response_model=UserProfile)
async def get_profile(current_user: CurrentUserDep) -> User:
    """Return the signed-in user's own profile."""
    return current_user

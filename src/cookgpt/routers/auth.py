"""API routes for registration, sign in and sign out."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cookgpt.auth import (
    AuthError,
    authenticate,
    create_session,
    get_current_token,
    get_current_user,
    register_user,
    revoke_session,
)
from cookgpt.database import get_db
from cookgpt.logging_config import get_logger
from cookgpt.models import User, UserPreferences
from cookgpt.onboarding import redirect_for

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


# Request/Response schemas
class RegisterRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str
    display_name: str | None = None
    phone: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    """Signed-in user profile."""

    id: str
    email: str
    display_name: str | None = None
    phone: str | None = None
    subscription_tier: str
    created_at: datetime

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    """Issued bearer token and where the client should go next."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse
    redirect_to: str


def _next_page(prefs: UserPreferences | None) -> str:
    return redirect_for(True, bool(prefs and prefs.onboarding_completed)) or "/onboarding"


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    """Create an account and sign it in. New accounts start onboarding."""
    try:
        user = await register_user(
            db, request.email, request.password, request.display_name, request.phone
        )
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    session = await create_session(db, user)
    return SessionResponse(
        access_token=session.token,
        expires_at=session.expires_at,
        user=UserResponse.model_validate(user),
        redirect_to="/onboarding",
    )


@router.post("/login", response_model=SessionResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    try:
        user = await authenticate(db, request.email, request.password)
    except AuthError as e:
        logger.info(f"Failed sign in for {request.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e

    session = await create_session(db, user)
    prefs = await db.get(UserPreferences, user.id)
    return SessionResponse(
        access_token=session.token,
        expires_at=session.expires_at,
        user=UserResponse.model_validate(user),
        redirect_to=_next_page(prefs),
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token: str = Depends(get_current_token),
    db: AsyncSession = Depends(get_db),
) -> None:
    await revoke_session(db, token)


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user)

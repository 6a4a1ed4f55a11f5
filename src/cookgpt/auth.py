"""Password accounts and bearer-token sessions."""

import secrets
import uuid
from datetime import datetime, timedelta

import bcrypt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgpt.config import get_settings
from cookgpt.database import get_db
from cookgpt.logging_config import get_logger, set_context
from cookgpt.models import AuthSession, User, UserPreferences

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class AuthError(Exception):
    """Raised for failed registration or sign in."""


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


async def register_user(
    db: AsyncSession,
    email: str,
    password: str,
    display_name: str | None = None,
    phone: str | None = None,
) -> User:
    """
    Create an account with default preferences.

    Raises:
        AuthError: The password is too short or the email is taken.
    """
    settings = get_settings()
    email = email.strip().lower()

    if len(password) < settings.min_password_length:
        raise AuthError(
            f"Password must be at least {settings.min_password_length} characters"
        )

    existing = await db.execute(select(User).where(User.email == email))
    if existing.scalar_one_or_none():
        raise AuthError("An account with this email already exists")

    user = User(
        id=uuid.uuid4().hex,
        email=email,
        hashed_password=hash_password(password),
        display_name=display_name,
        phone=phone,
    )
    db.add(user)
    db.add(UserPreferences(user_id=user.id))
    await db.commit()
    await db.refresh(user)

    logger.info(f"Registered user {user.id}")
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(password, user.hashed_password):
        raise AuthError("Invalid email or password")
    return user


async def create_session(db: AsyncSession, user: User) -> AuthSession:
    now = datetime.utcnow()
    session = AuthSession(
        token=secrets.token_urlsafe(32),
        user_id=user.id,
        created_at=now,
        expires_at=now + timedelta(hours=get_settings().session_ttl_hours),
    )
    db.add(session)
    await db.commit()
    return session


async def revoke_session(db: AsyncSession, token: str) -> None:
    await db.execute(delete(AuthSession).where(AuthSession.token == token))
    await db.commit()


async def _user_for_token(db: AsyncSession, token: str) -> User | None:
    session = await db.get(AuthSession, token)
    if session is None:
        return None
    if session.expires_at < datetime.utcnow():
        await db.delete(session)
        await db.commit()
        return None
    return await db.get(User, session.user_id)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Resolve the signed-in user, or None for anonymous requests."""
    if credentials is None:
        return None
    user = await _user_for_token(db, credentials.credentials)
    if user is not None:
        set_context(user_id=user.id)
    return user


async def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


async def get_current_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return credentials.credentials

"""API routes for the signed-in user's cooking preferences."""

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cookgpt.auth import get_current_user
from cookgpt.database import get_db
from cookgpt.logging_config import get_logger
from cookgpt.models import User, UserPreferences
from cookgpt.schemas import UserPreferencesData, UserPreferencesResponse, UserPreferencesUpdate

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/preferences", tags=["preferences"])


async def load_preferences(db: AsyncSession, user_id: str) -> UserPreferences:
    """Fetch the user's preferences, creating the default document if missing."""
    prefs = await db.get(UserPreferences, user_id)
    if prefs is None:
        prefs = UserPreferences(user_id=user_id)
        db.add(prefs)
        await db.commit()
        await db.refresh(prefs)
    return prefs


@router.get("", response_model=UserPreferencesResponse)
async def get_preferences(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserPreferencesResponse:
    prefs = await load_preferences(db, user.id)
    return UserPreferencesResponse.model_validate(prefs)


@router.put("", response_model=UserPreferencesResponse)
async def replace_preferences(
    request: UserPreferencesData,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserPreferencesResponse:
    """Overwrite every preference field."""
    prefs = await load_preferences(db, user.id)
    for key, value in request.model_dump().items():
        setattr(prefs, key, value)
    prefs.updated_at = datetime.utcnow()
    await db.commit()
    await db.refresh(prefs)

    logger.info(f"Preferences replaced for user {user.id}")
    return UserPreferencesResponse.model_validate(prefs)


@router.patch("", response_model=UserPreferencesResponse)
async def update_preferences(
    request: UserPreferencesUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserPreferencesResponse:
    """Update only the fields present in the request."""
    prefs = await load_preferences(db, user.id)
    for key, value in request.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(prefs, key, value)
    prefs.updated_at = datetime.utcnow()
    await db.commit()
    await db.refresh(prefs)

    return UserPreferencesResponse.model_validate(prefs)

"""API routes for a user's saved (favorite) recipes."""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgpt.auth import get_current_user
from cookgpt.database import get_db
from cookgpt.logging_config import get_logger
from cookgpt.models import SavedRecipe, User
from cookgpt.schemas import Difficulty
from cookgpt.storage import delete_recipe_image, is_storage_url, process_recipe_image_url
from cookgpt.subscription.plans import can_save_favorites, get_upgrade_message

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/saved-recipes", tags=["saved-recipes"])


class SaveRecipeRequest(BaseModel):
    """Recipe to save; ``image_url`` may be a base64 data URL."""

    recipe_id: str | None = None
    title: str = Field(min_length=1)
    description: str = ""
    cooking_time: str = ""
    servings: int = Field(default=1, ge=1)
    difficulty: Difficulty = "Medium"
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    calories: int | None = None
    image_url: str | None = None


class SavedRecipeResponse(BaseModel):
    id: str
    recipe_id: str | None = None
    title: str
    description: str
    cooking_time: str
    servings: int
    difficulty: str
    ingredients: list[str]
    instructions: list[str]
    tags: list[str]
    calories: int | None = None
    image_url: str
    saved_at: datetime

    class Config:
        from_attributes = True


class SavedRecipeListResponse(BaseModel):
    recipes: list[SavedRecipeResponse]
    total: int


@router.get("", response_model=SavedRecipeListResponse)
async def list_saved_recipes(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SavedRecipeListResponse:
    result = await db.execute(
        select(SavedRecipe)
        .where(SavedRecipe.user_id == user.id)
        .order_by(SavedRecipe.saved_at.desc())
    )
    recipes = result.scalars().all()
    return SavedRecipeListResponse(
        recipes=[SavedRecipeResponse.model_validate(r) for r in recipes],
        total=len(recipes),
    )


@router.post("", response_model=SavedRecipeResponse, status_code=status.HTTP_201_CREATED)
async def save_recipe(
    request: SaveRecipeRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SavedRecipeResponse:
    """
    Save a recipe to favorites.

    Inline base64 images are uploaded to storage first; the saved record
    keeps only the resulting URL.
    """
    if not can_save_favorites(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=get_upgrade_message(user),
        )

    image_url = process_recipe_image_url(request.image_url, user.id, request.title)
    saved = SavedRecipe(
        id=uuid.uuid4().hex,
        user_id=user.id,
        **request.model_dump(exclude={"image_url"}),
        image_url=image_url,
        saved_at=datetime.utcnow(),
    )
    db.add(saved)
    await db.commit()
    await db.refresh(saved)

    logger.info(f"Saved recipe '{saved.title}' for user {user.id}")
    return SavedRecipeResponse.model_validate(saved)


@router.delete("/{saved_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_saved_recipe(
    saved_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    saved = await db.get(SavedRecipe, saved_id)
    if not saved or saved.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Saved recipe {saved_id} not found",
        )

    if saved.image_url and is_storage_url(saved.image_url):
        delete_recipe_image(saved.image_url)

    await db.delete(saved)
    await db.commit()

"""API routes for the recipe explorer."""

from dataclasses import asdict
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgpt.database import get_db
from cookgpt.explore import filters as explore_filters
from cookgpt.explore.filters import (
    QUICK_PRESETS,
    RECIPES_PER_PAGE,
    RecipeFilters,
    apply_preset,
    filter_recipes,
    paginate,
)
from cookgpt.explore.quality import ProcessingSummary, load_explorer_recipes
from cookgpt.logging_config import get_logger
from cookgpt.models import Recipe
from cookgpt.schemas import RecipeData, normalize_difficulty

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])

# Documents read per explorer load
RECIPE_FETCH_LIMIT = 100


# Request/Response schemas
class RecipeListResponse(BaseModel):
    """One page of explorer results."""

    recipes: list[RecipeData]
    page: int
    per_page: int
    total: int
    has_more: bool
    filters: RecipeFilters
    summary: dict[str, int]


class PresetResponse(BaseModel):
    label: str
    filters: RecipeFilters


class FilterOptionsResponse(BaseModel):
    difficulty: list[str]
    cooking_time: list[str]
    cuisine: list[str]
    dietary: list[str]
    meal_type: list[str]
    goals: list[str]
    calories: list[str]


def _recipe_doc(recipe: Recipe) -> dict[str, Any]:
    return {
        "id": recipe.id,
        "title": recipe.title,
        "description": recipe.description,
        "cooking_time": recipe.cooking_time,
        "servings": recipe.servings,
        "difficulty": normalize_difficulty(recipe.difficulty),
        "ingredients": recipe.ingredients,
        "instructions": recipe.instructions,
        "tags": recipe.tags,
        "calories": recipe.calories,
        "image_url": recipe.image_url,
    }


async def load_recipes(db: AsyncSession) -> tuple[list[RecipeData], ProcessingSummary]:
    result = await db.execute(select(Recipe).limit(RECIPE_FETCH_LIMIT))
    return load_explorer_recipes([_recipe_doc(r) for r in result.scalars().all()])


@router.get("", response_model=RecipeListResponse)
async def list_recipes(
    search: Annotated[str, Query(description="Match title, description, ingredients or tags")] = "",
    difficulty: Annotated[list[str] | None, Query()] = None,
    cooking_time: Annotated[list[str] | None, Query()] = None,
    cuisine: Annotated[list[str] | None, Query()] = None,
    dietary: Annotated[list[str] | None, Query()] = None,
    meal_type: Annotated[list[str] | None, Query()] = None,
    goals: Annotated[list[str] | None, Query()] = None,
    calories: Annotated[list[str] | None, Query()] = None,
    preset: Annotated[list[str] | None, Query(description="Quick preset labels to apply")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = RECIPES_PER_PAGE,
    db: AsyncSession = Depends(get_db),
) -> RecipeListResponse:
    """
    Browse screened recipes.

    Each filter group accepts repeated values; a recipe must match at least
    one value in every non-empty group.
    """
    filters = RecipeFilters(
        difficulty=difficulty or [],
        cooking_time=cooking_time or [],
        cuisine=cuisine or [],
        dietary=dietary or [],
        meal_type=meal_type or [],
        goals=goals or [],
        calories=calories or [],
    )
    for label in preset or []:
        try:
            filters = apply_preset(filters, label)
        except KeyError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown preset: {label}",
            ) from e

    recipes, summary = await load_recipes(db)
    matched = filter_recipes(recipes, search, filters)
    result = paginate(matched, page, per_page)

    logger.info(f"Explorer: {result.total} of {len(recipes)} recipes match, page {page}")
    return RecipeListResponse(
        recipes=result.items,
        page=result.page,
        per_page=result.per_page,
        total=result.total,
        has_more=result.has_more,
        filters=filters,
        summary=asdict(summary),
    )


@router.get("/presets", response_model=list[PresetResponse])
async def list_presets() -> list[PresetResponse]:
    return [PresetResponse(label=p.label, filters=p.filters) for p in QUICK_PRESETS]


@router.get("/filters", response_model=FilterOptionsResponse)
async def list_filter_options() -> FilterOptionsResponse:
    return FilterOptionsResponse(
        difficulty=explore_filters.DIFFICULTY_OPTIONS,
        cooking_time=explore_filters.COOKING_TIME_OPTIONS,
        cuisine=explore_filters.CUISINE_OPTIONS,
        dietary=explore_filters.DIETARY_OPTIONS,
        meal_type=explore_filters.MEAL_TYPE_OPTIONS,
        goals=explore_filters.GOAL_OPTIONS,
        calories=explore_filters.CALORIES_OPTIONS,
    )


@router.get("/{recipe_id}", response_model=RecipeData)
async def get_recipe(
    recipe_id: str,
    db: AsyncSession = Depends(get_db),
) -> RecipeData:
    recipe = await db.get(Recipe, recipe_id)
    if not recipe:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Recipe {recipe_id} not found",
        )
    return RecipeData(**_recipe_doc(recipe))

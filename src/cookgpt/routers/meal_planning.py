"""API routes for generating preference-compliant meal plans."""

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cookgpt.auth import get_current_user
from cookgpt.database import get_db
from cookgpt.generation import GeminiRecipeGenerator, get_recipe_generator
from cookgpt.logging_config import get_logger
from cookgpt.models import User
from cookgpt.prompt.conversation import (
    ConversationContext,
    RecipeGenerationFailed,
    generate_compliant_recipes,
)
from cookgpt.prompt.validator import validate_recipe_request
from cookgpt.routers.preferences import load_preferences
from cookgpt.schemas import RecipeData, UserPreferencesData
from cookgpt.subscription.plans import (
    UNLIMITED,
    can_access_meal_planning,
    get_plan,
    get_upgrade_message,
)
from cookgpt.usage import record_usage

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/meal-plans", tags=["meal-plans"])

DEFAULT_PLAN_DAYS = 7


class MealPlanRequest(BaseModel):
    request: str = Field(min_length=1)
    days: int = Field(default=DEFAULT_PLAN_DAYS, ge=1, le=30)


class MealPlanValidationResponse(BaseModel):
    request: str
    validation: dict[str, Any]


class MealPlanResponse(BaseModel):
    request: str
    days: int
    validation: dict[str, Any]
    recipes: list[RecipeData]


async def _user_preferences(db: AsyncSession, user: User) -> UserPreferencesData:
    return UserPreferencesData.model_validate(await load_preferences(db, user.id))


@router.post("/validate", response_model=MealPlanValidationResponse)
async def validate_meal_plan(
    request: MealPlanRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MealPlanValidationResponse:
    prefs = await _user_preferences(db, user)
    validation = validate_recipe_request(request.request, prefs)
    return MealPlanValidationResponse(request=request.request, validation=asdict(validation))


@router.post("/generate", response_model=MealPlanResponse)
async def generate_meal_plan(
    request: MealPlanRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    generator: GeminiRecipeGenerator = Depends(get_recipe_generator),
) -> MealPlanResponse:
    """
    Generate one recipe per day of the plan.

    The plan length is capped by the user's tier. Requests that conflict
    with a dietary restriction are rejected with the suggested alternative.
    """
    if not can_access_meal_planning(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=get_upgrade_message(user))

    prefs = await _user_preferences(db, user)
    validation = validate_recipe_request(request.request, prefs)
    if not validation.should_generate_recipe:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": f"{validation.suggestion} {validation.alternative_prompt}",
                "conflicting_items": validation.conflicting_items,
            },
        )

    max_days = get_plan(user).limits.meal_plan_days
    days = request.days if max_days == UNLIMITED else min(request.days, max_days)

    context = ConversationContext(user_preferences=prefs)
    try:
        recipes = await generate_compliant_recipes(request.request, context, generator, days)
    except RecipeGenerationFailed as e:
        logger.error(f"Meal plan generation failed for user {user.id}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    await record_usage(db, user.id, "recipe", len(recipes))
    logger.info(f"Generated {len(recipes)}-day meal plan for user {user.id}")

    return MealPlanResponse(
        request=request.request,
        days=days,
        validation=asdict(validation),
        recipes=recipes,
    )

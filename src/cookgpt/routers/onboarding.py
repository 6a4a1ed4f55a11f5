"""API routes backing the onboarding wizard."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from cookgpt.auth import get_current_user, get_optional_user
from cookgpt.database import get_db
from cookgpt.logging_config import get_logger
from cookgpt.models import User, UserPreferences
from cookgpt.onboarding import (
    OPTION_CATALOGS,
    STEP_TITLES,
    OnboardingIncompleteError,
    can_proceed,
    complete_onboarding,
    filter_options,
    missing_steps,
    redirect_for,
)
from cookgpt.schemas import UserPreferencesData, UserPreferencesResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/onboarding", tags=["onboarding"])


class StepInfo(BaseModel):
    id: int
    title: str


class OnboardingOptionsResponse(BaseModel):
    steps: list[StepInfo]
    options: dict[str, list[dict[str, str]]]


class StepCheckRequest(BaseModel):
    step: int
    data: UserPreferencesData


class StepCheckResponse(BaseModel):
    step: int
    can_proceed: bool
    missing_steps: list[int]


class OnboardingStatusResponse(BaseModel):
    onboarding_completed: bool
    redirect_to: str | None = None


@router.get("/options", response_model=OnboardingOptionsResponse)
async def get_options(
    q: Annotated[str | None, Query(description="Search option labels and descriptions")] = None,
) -> OnboardingOptionsResponse:
    return OnboardingOptionsResponse(
        steps=[StepInfo(id=step, title=title) for step, title in STEP_TITLES.items()],
        options={
            name: [option.to_dict() for option in filter_options(options, q)]
            for name, options in OPTION_CATALOGS.items()
        },
    )


@router.get("/status", response_model=OnboardingStatusResponse)
async def get_status(
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> OnboardingStatusResponse:
    """Tell the wizard page whether to render or redirect."""
    completed = False
    if user is not None:
        prefs = await db.get(UserPreferences, user.id)
        completed = bool(prefs and prefs.onboarding_completed)
    return OnboardingStatusResponse(
        onboarding_completed=completed,
        redirect_to=redirect_for(user is not None, completed),
    )


@router.post("/check", response_model=StepCheckResponse)
async def check_step(request: StepCheckRequest) -> StepCheckResponse:
    return StepCheckResponse(
        step=request.step,
        can_proceed=can_proceed(request.step, request.data),
        missing_steps=missing_steps(request.data),
    )


@router.post("/complete", response_model=UserPreferencesResponse)
async def complete(
    request: UserPreferencesData,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserPreferencesResponse:
    try:
        prefs = await complete_onboarding(db, user.id, request)
    except OnboardingIncompleteError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return UserPreferencesResponse.model_validate(prefs)

"""API routes for plans, checkout and the payment webhook."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cookgpt.auth import get_optional_user
from cookgpt.database import get_db
from cookgpt.logging_config import get_logger
from cookgpt.models import User
from cookgpt.subscription.plans import (
    SUBSCRIPTION_PLANS,
    SubscriptionPlan,
    can_access_meal_planning,
    can_export_grocery_list,
    can_save_favorites,
    get_user_tier,
)
from cookgpt.subscription.service import (
    SubscriptionError,
    create_subscription,
    handle_webhook,
    success_banner_state,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/subscription", tags=["subscription"])


class CreateSubscriptionData(BaseModel):
    user_id: str | None = Field(default=None, alias="userId")
    plan_id: str | None = Field(default=None, alias="planId")
    email: str | None = None
    phone: str | None = None


class CreateSubscriptionRequest(BaseModel):
    data: CreateSubscriptionData = Field(default_factory=CreateSubscriptionData)


class PlansResponse(BaseModel):
    plans: list[SubscriptionPlan]
    current_tier: str
    entitlements: dict[str, bool]


class BannerResponse(BaseModel):
    visible: bool
    auto_hide_seconds: int | None = None


def _error(e: SubscriptionError) -> HTTPException:
    detail: dict[str, Any] = {"message": e.message}
    if e.details is not None:
        detail["details"] = e.details
    return HTTPException(status_code=e.status_code, detail=detail)


@router.get("/plans", response_model=PlansResponse)
async def list_plans(user: User | None = Depends(get_optional_user)) -> PlansResponse:
    return PlansResponse(
        plans=list(SUBSCRIPTION_PLANS.values()),
        current_tier=get_user_tier(user),
        entitlements={
            "save_favorites": can_save_favorites(user),
            "meal_planning": can_access_meal_planning(user),
            "grocery_list_export": can_export_grocery_list(user),
        },
    )


@router.post("/create")
async def create(
    request: CreateSubscriptionRequest,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Start checkout; the body is ``{"data": {userId, planId, email, phone}}``."""
    data = request.data
    try:
        return await create_subscription(db, data.user_id, data.plan_id, data.email, data.phone)
    except SubscriptionError as e:
        logger.error(f"Subscription creation failed: {e.message}")
        raise _error(e) from e


@router.post("/webhook")
async def webhook(
    payload: Annotated[dict[str, Any], Body()],
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    try:
        return await handle_webhook(db, payload)
    except SubscriptionError as e:
        logger.warning(f"Rejected webhook: {e.message}")
        raise _error(e) from e


@router.get("/banner", response_model=BannerResponse)
async def banner(
    status_param: Annotated[str | None, Query(alias="status")] = None,
) -> BannerResponse:
    state = success_banner_state(status_param)
    return BannerResponse(visible=state.visible, auto_hide_seconds=state.auto_hide_seconds)

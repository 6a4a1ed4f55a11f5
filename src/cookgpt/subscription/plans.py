"""Subscription tiers, their feature flags and daily limits."""

from typing import Literal, Protocol

from pydantic import BaseModel

SubscriptionTier = Literal["free", "basic", "pro"]

UNLIMITED = -1


class PlanFeatures(BaseModel):
    ai_recipes_per_day: int
    max_recipes: int
    images_per_day: int
    meal_plans: int
    calorie_tracker: bool
    grocery_list_export: bool
    priority_support: bool
    save_favorites: bool


class PlanLimits(BaseModel):
    recipe_generations: int
    image_generations: int
    meal_plan_days: int


class SubscriptionPlan(BaseModel):
    """A subscription tier; prices are monthly, in INR. -1 means unlimited."""

    tier: SubscriptionTier
    name: str
    price: int
    features: PlanFeatures
    limits: PlanLimits


SUBSCRIPTION_PLANS: dict[str, SubscriptionPlan] = {
    "free": SubscriptionPlan(
        tier="free",
        name="Free Trial (7 Days)",
        price=0,
        features=PlanFeatures(
            ai_recipes_per_day=3,
            max_recipes=21,
            images_per_day=2,
            meal_plans=1,
            calorie_tracker=False,
            grocery_list_export=False,
            priority_support=False,
            save_favorites=False,
        ),
        limits=PlanLimits(recipe_generations=3, image_generations=2, meal_plan_days=7),
    ),
    "basic": SubscriptionPlan(
        tier="basic",
        name="Basic Plan",
        price=499,
        features=PlanFeatures(
            ai_recipes_per_day=20,
            max_recipes=UNLIMITED,
            images_per_day=UNLIMITED,
            meal_plans=UNLIMITED,
            calorie_tracker=False,
            grocery_list_export=False,
            priority_support=False,
            save_favorites=True,
        ),
        limits=PlanLimits(
            recipe_generations=20,
            image_generations=UNLIMITED,
            meal_plan_days=UNLIMITED,
        ),
    ),
    "pro": SubscriptionPlan(
        tier="pro",
        name="Pro Plan",
        price=799,
        features=PlanFeatures(
            ai_recipes_per_day=UNLIMITED,
            max_recipes=UNLIMITED,
            images_per_day=UNLIMITED,
            meal_plans=UNLIMITED,
            calorie_tracker=True,
            grocery_list_export=True,
            priority_support=True,
            save_favorites=True,
        ),
        limits=PlanLimits(
            recipe_generations=UNLIMITED,
            image_generations=UNLIMITED,
            meal_plan_days=30,
        ),
    ),
}


class HasTier(Protocol):
    subscription_tier: str


def get_user_tier(user: HasTier | None) -> SubscriptionTier:
    """The user's tier, defaulting to free for anonymous or unknown tiers."""
    tier = getattr(user, "subscription_tier", None)
    return tier if tier in SUBSCRIPTION_PLANS else "free"


def get_plan(user: HasTier | None) -> SubscriptionPlan:
    return SUBSCRIPTION_PLANS[get_user_tier(user)]


def _within_limit(limit: int, current_count: int) -> bool:
    return limit == UNLIMITED or current_count < limit


def can_generate_recipes(user: HasTier | None, current_count: int = 0) -> bool:
    return _within_limit(get_plan(user).limits.recipe_generations, current_count)


def can_generate_images(user: HasTier | None, current_count: int = 0) -> bool:
    return _within_limit(get_plan(user).limits.image_generations, current_count)


def can_save_favorites(user: HasTier | None) -> bool:
    return get_plan(user).features.save_favorites


def can_access_meal_planning(user: HasTier | None) -> bool:
    return get_plan(user).features.meal_plans != 0


def can_export_grocery_list(user: HasTier | None) -> bool:
    return get_plan(user).features.grocery_list_export


def get_upgrade_message(user: HasTier | None) -> str:
    """Upsell text shown when a user hits a limit."""
    tier = get_user_tier(user)
    if tier == "free":
        limit = SUBSCRIPTION_PLANS["free"].limits.recipe_generations
        return (
            f"You've reached your {limit} recipe limit for today. Upgrade to Basic for "
            f"₹{SUBSCRIPTION_PLANS['basic'].price}/month to get 20 recipes/day!"
        )
    if tier == "basic":
        return (
            "Unlock unlimited recipes, 30-day meal planning, and more with Pro for "
            f"₹{SUBSCRIPTION_PLANS['pro'].price}/month!"
        )
    return "Enjoy all features with your current plan!"

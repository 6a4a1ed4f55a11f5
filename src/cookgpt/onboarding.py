"""Onboarding wizard: option catalogs, step gating, and completion."""

from dataclasses import asdict, dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from cookgpt.logging_config import get_logger
from cookgpt.models import UserPreferences
from cookgpt.schemas import UserPreferencesData

logger = get_logger(__name__)

DASHBOARD_PATH = "/dashboard"
HOME_PATH = "/"


class OnboardingIncompleteError(Exception):
    """Raised when onboarding is submitted with required steps left empty."""

    def __init__(self, missing_steps: list[int]):
        self.missing_steps = missing_steps
        titles = ", ".join(STEP_TITLES[step] for step in missing_steps)
        super().__init__(f"Please complete all required steps: {titles}")


@dataclass(frozen=True)
class Option:
    id: str
    label: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


STEP_TITLES = {
    1: "Dietary Preferences",
    2: "Cuisine Preferences",
    3: "Meal Focus",
    4: "Skill & Time",
    5: "Goals",
}

DIETARY_OPTIONS = [
    Option("vegetarian", "Vegetarian", "Plant-based diet excluding meat"),
    Option("vegan", "Vegan", "Completely plant-based diet"),
    Option("gluten-free", "Gluten-Free", "No wheat, barley, or rye"),
    Option("dairy-free", "Dairy-Free", "No milk or dairy products"),
    Option("keto", "Keto", "Low-carb, high-fat diet"),
    Option("low-carb", "Low-Carb", "Reduced carbohydrate intake"),
    Option("paleo", "Paleo", "Whole foods, no processed items"),
    Option("none", "No Restrictions", "All foods welcome"),
]

CUISINE_OPTIONS = [
    Option("italian", "Italian", "Pasta, pizza, Mediterranean flavors"),
    Option("asian", "Asian", "Diverse Asian cooking styles"),
    Option("mexican", "Mexican", "Spicy, vibrant Latin flavors"),
    Option("indian", "Indian", "Rich spices and aromatic dishes"),
    Option("mediterranean", "Mediterranean", "Healthy, olive oil-based cuisine"),
    Option("american", "American", "Classic comfort food favorites"),
    Option("french", "French", "Sophisticated culinary techniques"),
    Option("chinese", "Chinese", "Traditional and modern Chinese dishes"),
]

MEAL_TYPE_OPTIONS = [
    Option("breakfast", "Breakfast", "Start your day right"),
    Option("lunch", "Lunch", "Midday fuel"),
    Option("dinner", "Dinner", "Evening satisfaction"),
    Option("snacks", "Snacks", "Quick bites"),
    Option("desserts", "Desserts", "Sweet treats"),
]

SKILL_LEVEL_OPTIONS = [
    Option("beginner", "Beginner", "I'm just starting out"),
    Option("intermediate", "Intermediate", "I know the basics"),
    Option("expert", "Expert", "I'm a seasoned cook"),
]

COOKING_TIME_OPTIONS = [
    Option("15min", "15 minutes or less", "Quick and easy"),
    Option("30min", "30 minutes or less", "Moderate prep time"),
    Option("1hr+", "1 hour or more", "Detailed cooking"),
]

GOAL_OPTIONS = [
    Option("weight-loss", "Weight Loss", "Healthy portion control"),
    Option("muscle-gain", "Muscle Gain", "Protein-rich meals"),
    Option("healthy-eating", "Healthy Eating", "Nutritious choices"),
    Option("quick-meals", "Quick Meals", "Fast preparation"),
    Option("family-cooking", "Family Cooking", "Meals for everyone"),
    Option("meal-prep", "Meal Prep", "Batch cooking"),
]

OPTION_CATALOGS = {
    "dietary_restrictions": DIETARY_OPTIONS,
    "cuisine_preferences": CUISINE_OPTIONS,
    "meal_type_focus": MEAL_TYPE_OPTIONS,
    "skill_level": SKILL_LEVEL_OPTIONS,
    "cooking_time": COOKING_TIME_OPTIONS,
    "goals": GOAL_OPTIONS,
}

# Steps whose selection must be non-empty; skill/time have defaults and goals are optional
REQUIRED_STEP_FIELDS = {
    1: "dietary_restrictions",
    2: "cuisine_preferences",
    3: "meal_type_focus",
}


def can_proceed(step: int, data: UserPreferencesData) -> bool:
    """Check whether the wizard may advance past a step."""
    if step in REQUIRED_STEP_FIELDS:
        return len(getattr(data, REQUIRED_STEP_FIELDS[step])) > 0
    return step in (4, 5)


def missing_steps(data: UserPreferencesData) -> list[int]:
    """Required steps that still have an empty selection."""
    return [step for step in REQUIRED_STEP_FIELDS if not can_proceed(step, data)]


def filter_options(options: list[Option], query: str | None) -> list[Option]:
    """Case-insensitive search over option labels and descriptions."""
    if not query or not query.strip():
        return options

    needle = query.lower()
    return [
        option
        for option in options
        if needle in option.label.lower() or needle in option.description.lower()
    ]


def redirect_for(is_authenticated: bool, onboarding_completed: bool) -> str | None:
    """Where the onboarding page sends a visitor, or None to show the wizard."""
    if not is_authenticated:
        return HOME_PATH
    if onboarding_completed:
        return DASHBOARD_PATH
    return None


async def complete_onboarding(
    db: AsyncSession,
    user_id: str,
    data: UserPreferencesData,
) -> UserPreferences:
    """
    Persist the wizard selections and mark onboarding as completed.

    Raises:
        OnboardingIncompleteError: A required step has an empty selection.
    """
    missing = missing_steps(data)
    if missing:
        raise OnboardingIncompleteError(missing)

    prefs = await db.get(UserPreferences, user_id)
    if prefs is None:
        prefs = UserPreferences(user_id=user_id, created_at=datetime.utcnow())
        db.add(prefs)

    values = data.model_dump(exclude={"onboarding_completed"})
    for key, value in values.items():
        setattr(prefs, key, value)
    prefs.onboarding_completed = True
    prefs.updated_at = datetime.utcnow()

    await db.commit()
    await db.refresh(prefs)

    logger.info(f"Onboarding completed for user {user_id}")
    return prefs

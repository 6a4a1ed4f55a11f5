"""Common data schemas shared by services and routers."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SkillLevel = Literal["beginner", "intermediate", "expert"]
CookingTime = Literal["15min", "30min", "1hr+"]
Difficulty = Literal["Easy", "Medium", "Hard"]

SKILL_TO_DIFFICULTY: dict[str, Difficulty] = {"beginner": "Easy", "intermediate": "Medium", "expert": "Hard"}


def normalize_difficulty(value: object, default: Difficulty = "Medium") -> Difficulty:
    """Map free-text difficulty (any case, or a skill level name) onto Easy/Medium/Hard."""
    text = str(value or "").strip().lower()
    if text in ("easy", "medium", "hard"):
        return text.capitalize()
    return SKILL_TO_DIFFICULTY.get(text, default)


class UserPreferencesData(BaseModel):
    """User cooking preferences."""

    model_config = ConfigDict(from_attributes=True)

    dietary_restrictions: list[str] = Field(default_factory=list)
    cuisine_preferences: list[str] = Field(default_factory=list)
    meal_type_focus: list[str] = Field(default_factory=list)
    skill_level: SkillLevel = "beginner"
    cooking_time: CookingTime = "30min"
    goals: list[str] = Field(default_factory=list)
    onboarding_completed: bool = False


class UserPreferencesResponse(UserPreferencesData):
    """Stored preferences with timestamps."""

    user_id: str
    created_at: datetime
    updated_at: datetime


class UserPreferencesUpdate(BaseModel):
    """Partial update of preferences; unset fields are left unchanged."""

    dietary_restrictions: list[str] | None = None
    cuisine_preferences: list[str] | None = None
    meal_type_focus: list[str] | None = None
    skill_level: SkillLevel | None = None
    cooking_time: CookingTime | None = None
    goals: list[str] | None = None
    onboarding_completed: bool | None = None


class RecipeData(BaseModel):
    """Recipe with ingredients and instructions."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str = ""
    cooking_time: str = ""
    servings: int = 1
    difficulty: Difficulty = "Medium"
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    calories: int | None = None
    image_url: str | None = None

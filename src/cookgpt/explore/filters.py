"""Search, filtering and pagination over explorer recipes."""

from dataclasses import dataclass
from typing import Callable

from pydantic import BaseModel, Field

from cookgpt.schemas import RecipeData

RECIPES_PER_PAGE = 18

DIFFICULTY_OPTIONS = ["Easy", "Medium", "Hard"]
COOKING_TIME_OPTIONS = ["15 minutes", "30 minutes", "1 hour", "1+ hours"]
CUISINE_OPTIONS = [
    "Italian",
    "Asian",
    "Mexican",
    "Indian",
    "Mediterranean",
    "American",
    "French",
    "Chinese",
    "Thai",
    "Greek",
]
DIETARY_OPTIONS = ["Vegetarian", "Vegan", "Gluten-Free", "Dairy-Free", "Keto", "Low-Carb", "Paleo"]
MEAL_TYPE_OPTIONS = ["Breakfast", "Lunch", "Dinner", "Snacks", "Desserts"]
GOAL_OPTIONS = [
    "Weight Loss",
    "Muscle Gain",
    "Healthy Eating",
    "Quick Meals",
    "Family Cooking",
    "Meal Prep",
]
CALORIES_OPTIONS = ["Under 300", "300-500", "500-700", "700-900", "900+"]

CALORIE_RANGES: dict[str, Callable[[int], bool]] = {
    "Under 300": lambda c: c < 300,
    "300-500": lambda c: 300 <= c <= 500,
    "500-700": lambda c: 500 <= c <= 700,
    "700-900": lambda c: 700 <= c <= 900,
    "900+": lambda c: c >= 900,
}


class RecipeFilters(BaseModel):
    """Explorer filter selections; an empty list disables that filter."""

    difficulty: list[str] = Field(default_factory=list)
    cooking_time: list[str] = Field(default_factory=list)
    cuisine: list[str] = Field(default_factory=list)
    dietary: list[str] = Field(default_factory=list)
    meal_type: list[str] = Field(default_factory=list)
    goals: list[str] = Field(default_factory=list)
    calories: list[str] = Field(default_factory=list)

    def merged(self, other: "RecipeFilters") -> "RecipeFilters":
        """Union of two selections, keeping first-seen order."""
        return RecipeFilters(
            **{
                name: list(dict.fromkeys(getattr(self, name) + getattr(other, name)))
                for name in RecipeFilters.model_fields
            }
        )


@dataclass(frozen=True)
class QuickPreset:
    label: str
    filters: RecipeFilters


QUICK_PRESETS = [
    QuickPreset("Vegan • ≤30m", RecipeFilters(dietary=["Vegan"], cooking_time=["30 minutes"])),
    QuickPreset("< 500 kcal", RecipeFilters(calories=["Under 300", "300-500"])),
    QuickPreset("Breakfast Quick", RecipeFilters(meal_type=["Breakfast"], cooking_time=["15 minutes"])),
]


@dataclass
class RecipePage:
    items: list[RecipeData]
    page: int
    per_page: int
    total: int
    has_more: bool


def apply_preset(filters: RecipeFilters, label: str) -> RecipeFilters:
    """Add a quick preset's selections to the current filters."""
    for preset in QUICK_PRESETS:
        if preset.label == label:
            return filters.merged(preset.filters)
    raise KeyError(f"Unknown preset: {label}")


def matches_search(recipe: RecipeData, query: str) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    return (
        needle in recipe.title.lower()
        or needle in recipe.description.lower()
        or any(needle in ingredient.lower() for ingredient in recipe.ingredients)
        or any(needle in tag.lower() for tag in recipe.tags)
    )


def _tags_match(recipe: RecipeData, selected: list[str]) -> bool:
    return any(value.lower() in tag.lower() for tag in recipe.tags for value in selected)


def _calories_match(recipe: RecipeData, selected: list[str]) -> bool:
    if not recipe.calories:
        return False
    return any(CALORIE_RANGES[r](recipe.calories) for r in selected if r in CALORIE_RANGES)


def filter_recipes(
    recipes: list[RecipeData],
    search: str = "",
    filters: RecipeFilters | None = None,
) -> list[RecipeData]:
    """Apply the search query and every non-empty filter group, keeping order."""
    filters = filters or RecipeFilters()
    result = [r for r in recipes if matches_search(r, search)]

    if filters.difficulty:
        result = [r for r in result if r.difficulty in filters.difficulty]

    if filters.cooking_time:
        result = [
            r
            for r in result
            if any(t.lower() in r.cooking_time.lower() for t in filters.cooking_time)
        ]

    for selected in (filters.cuisine, filters.dietary, filters.meal_type, filters.goals):
        if selected:
            result = [r for r in result if _tags_match(r, selected)]

    if filters.calories:
        result = [r for r in result if _calories_match(r, filters.calories)]

    return result


def paginate(recipes: list[RecipeData], page: int = 1, per_page: int = RECIPES_PER_PAGE) -> RecipePage:
    """Slice one page of results; pages start at 1."""
    page = max(page, 1)
    start = (page - 1) * per_page
    end = start + per_page
    return RecipePage(
        items=recipes[start:end],
        page=page,
        per_page=per_page,
        total=len(recipes),
        has_more=end < len(recipes),
    )

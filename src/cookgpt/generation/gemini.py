"""Gemini API client for personalized recipe generation."""

import json
import re
import time
from collections.abc import AsyncIterator
from typing import Any

from cookgpt.config import get_settings
from cookgpt.connectors.base import ConnectorError, HTTPConnector
from cookgpt.logging_config import get_logger
from cookgpt.schemas import SKILL_TO_DIFFICULTY, RecipeData, UserPreferencesData, normalize_difficulty

logger = get_logger(__name__)

FALLBACK_TEXT_MODEL = "gemini-2.0-flash"

# Retired model names mapped to a model that still serves generateContent
DEPRECATED_MODELS = {
    "gemini-1.5-flash": FALLBACK_TEXT_MODEL,
    "gemini-1.5-flash-001": FALLBACK_TEXT_MODEL,
    "gemini-1.0-pro": FALLBACK_TEXT_MODEL,
    "gemini-pro": FALLBACK_TEXT_MODEL,
}

GENERATION_CONFIG = {
    "temperature": 0.7,
    "topP": 0.8,
    "topK": 40,
    "maxOutputTokens": 4096,
}

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


class GenerationError(Exception):
    """Raised when recipes could not be generated."""


class GenerationUnavailableError(GenerationError):
    """Raised when no generation backend is configured."""


def resolve_model_name(model_name: str) -> str:
    """Map deprecated model names to a supported one."""
    normalized = (model_name or "").strip().lower()
    if normalized in DEPRECATED_MODELS:
        replacement = DEPRECATED_MODELS[normalized]
        logger.warning(f"Model '{model_name}' is deprecated, using '{replacement}'")
        return replacement
    return model_name or FALLBACK_TEXT_MODEL


def build_recipe_prompt(
    preferences: UserPreferencesData,
    count: int,
    specific_request: str | None = None,
    requested_type: str | None = None,
) -> str:
    """Build the generation prompt from the user's preferences and request."""
    restrictions = ", ".join(preferences.dietary_restrictions) or "None"
    goals = ", ".join(preferences.goals) or "General cooking"

    return f"""
You are an expert chef and nutritionist. Generate {count} personalized recipes based on these user preferences and their specific request:

**USER'S SPECIFIC REQUEST**: "{(specific_request or '').strip() or 'General recipe recommendations'}"
**REQUESTED RECIPE TYPE**: {(requested_type or '').strip() or 'Any type'}

**Dietary Restrictions**: {restrictions}
**Cuisine Preferences**: {", ".join(preferences.cuisine_preferences)}
**Meal Types**: {", ".join(preferences.meal_type_focus)}
**Skill Level**: {preferences.skill_level}
**Cooking Time Preference**: {preferences.cooking_time}
**Goals**: {goals}

IMPORTANT: Pay special attention to the user's specific request. If they asked for a specific type of dish, focus primarily on that type.

Please return ONLY a valid JSON array of recipes with this exact structure:
[
  {{
    "id": "unique_recipe_id",
    "title": "Recipe Name",
    "description": "Brief appetizing description (2-3 sentences)",
    "cookingTime": "actual time in minutes (e.g., '25 minutes')",
    "servings": number,
    "difficulty": "Easy|Medium|Hard",
    "ingredients": ["ingredient 1", "ingredient 2"],
    "instructions": ["step 1", "step 2"],
    "tags": ["tag1", "tag2"],
    "calories": estimated_calories_per_serving
  }}
]

Requirements:
- Respect ALL dietary restrictions strictly
- Focus on the preferred cuisines and meal types
- Match the cooking time preference ({preferences.cooking_time})
- Adjust complexity based on skill level ({preferences.skill_level})
- Include nutritional considerations for the stated goals
- Ensure ingredients are commonly available
- Include relevant tags (cuisine type, dietary info, cooking method, etc.)

Return only the JSON array, no additional text or formatting.
"""


def _ingredient_to_text(ingredient: Any) -> str:
    if isinstance(ingredient, dict):
        parts = [ingredient.get("amount"), ingredient.get("unit"), ingredient.get("name")]
        return " ".join(str(p).strip() for p in parts if p).strip()
    return str(ingredient).strip()


def _instruction_to_text(instruction: Any) -> str:
    if isinstance(instruction, dict):
        return str(instruction.get("instruction", "")).strip()
    return str(instruction).strip()


def normalize_recipe(
    raw: dict[str, Any],
    preferences: UserPreferencesData,
    index: int = 0,
) -> RecipeData:
    """Fill defaults and coerce a generated recipe into RecipeData."""
    difficulty = normalize_difficulty(
        raw.get("difficulty"), SKILL_TO_DIFFICULTY.get(preferences.skill_level, "Medium")
    )

    try:
        servings = max(int(raw.get("servings") or 4), 1)
    except (TypeError, ValueError):
        servings = 4

    calories = raw.get("calories")
    try:
        calories = int(round(float(calories))) if calories is not None else None
    except (TypeError, ValueError):
        calories = None

    return RecipeData(
        id=str(raw.get("id") or f"recipe_{int(time.time() * 1000)}_{index}"),
        title=raw.get("title") or "Delicious Recipe",
        description=raw.get("description") or "A wonderful dish to try",
        cooking_time=raw.get("cookingTime") or raw.get("cooking_time") or preferences.cooking_time,
        servings=servings,
        difficulty=difficulty,
        ingredients=[t for i in raw.get("ingredients") or [] if (t := _ingredient_to_text(i))],
        instructions=[t for i in raw.get("instructions") or [] if (t := _instruction_to_text(i))],
        tags=[str(t) for t in raw.get("tags") or []],
        calories=calories,
        image_url=raw.get("imageUrl") or raw.get("image_url"),
    )


def parse_recipes(text: str, preferences: UserPreferencesData) -> list[RecipeData]:
    """Parse the model's JSON array reply, tolerating markdown code fences."""
    json_text = _FENCE_RE.sub("", text.strip())
    try:
        payload = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise GenerationError(f"Model returned invalid JSON: {e}") from e

    if isinstance(payload, dict):
        payload = payload.get("recipes", [payload])
    if not isinstance(payload, list):
        raise GenerationError("Model reply is not a list of recipes")

    return [
        normalize_recipe(raw, preferences, index)
        for index, raw in enumerate(payload)
        if isinstance(raw, dict)
    ]


def fallback_recipes(count: int) -> list[RecipeData]:
    """Static recipes served when the model is unavailable."""
    recipes = [
        RecipeData(
            id="fallback_1",
            title="Quick Pasta Primavera",
            description="A colorful and healthy pasta dish loaded with fresh vegetables.",
            cooking_time="25 minutes",
            servings=4,
            difficulty="Easy",
            ingredients=["pasta", "mixed vegetables", "olive oil", "garlic", "parmesan"],
            instructions=["Cook pasta", "Sauté vegetables", "Combine and serve"],
            tags=["pasta", "vegetarian", "quick"],
            calories=350,
        ),
        RecipeData(
            id="fallback_2",
            title="Healthy Grilled Chicken",
            description="Perfectly seasoned grilled chicken with herbs and spices.",
            cooking_time="30 minutes",
            servings=4,
            difficulty="Medium",
            ingredients=["chicken breast", "herbs", "olive oil", "lemon", "garlic"],
            instructions=["Marinate chicken", "Grill until cooked", "Rest and serve"],
            tags=["chicken", "grilled", "healthy"],
            calories=280,
        ),
        RecipeData(
            id="fallback_3",
            title="Fresh Garden Salad",
            description="A refreshing mix of fresh greens and seasonal vegetables.",
            cooking_time="15 minutes",
            servings=2,
            difficulty="Easy",
            ingredients=["mixed greens", "tomatoes", "cucumber", "dressing", "nuts"],
            instructions=["Wash vegetables", "Chop ingredients", "Toss with dressing"],
            tags=["salad", "healthy", "vegetarian"],
            calories=150,
        ),
    ]
    return recipes[:count]


class GeminiRecipeGenerator(HTTPConnector):
    """Generates recipes with the Gemini generateContent REST API."""

    DEFAULT_TIMEOUT = 60.0

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        settings = get_settings()
        super().__init__(
            base_url=base_url or settings.gemini_base_url,
            timeout=timeout or settings.gemini_timeout,
        )
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = resolve_model_name(model or settings.gemini_text_model)

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def is_available(self) -> bool:
        """Check if an API key is configured."""
        return bool(self.api_key)

    async def _generate_content(self, model: str, prompt: str) -> str:
        response = await self._request(
            "POST",
            f"models/{model}:generateContent",
            params={"key": self.api_key},
            json={
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": GENERATION_CONFIG,
            },
        )
        try:
            parts = response.data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError("Model reply has no content") from e
        return "".join(part.get("text", "") for part in parts)

    async def generate_text(self, prompt: str) -> str:
        """Run a prompt, retrying once with the fallback model if the model is unknown."""
        try:
            return await self._generate_content(self.model, prompt)
        except ConnectorError as e:
            if e.status_code == 404 and self.model != FALLBACK_TEXT_MODEL:
                logger.warning(
                    f"Model '{self.model}' failed for generateContent, "
                    f"retrying with '{FALLBACK_TEXT_MODEL}'"
                )
                return await self._generate_content(FALLBACK_TEXT_MODEL, prompt)
            raise

    async def generate_recipes(
        self,
        preferences: UserPreferencesData,
        count: int = 5,
        specific_request: str | None = None,
        requested_type: str | None = None,
    ) -> list[RecipeData]:
        """
        Generate personalized recipes.

        Args:
            preferences: The user's stored preferences.
            count: Number of recipes to ask for.
            specific_request: The user's free-text request, if any.
            requested_type: Dish type the user asked for, if any.

        Returns:
            Recipes parsed from the model reply, at most ``count``.

        Raises:
            GenerationUnavailableError: No API key is configured.
            GenerationError: The API call failed or the reply was unusable.
        """
        if not self.is_available:
            raise GenerationUnavailableError("Gemini API key is not configured")

        prompt = build_recipe_prompt(preferences, count, specific_request, requested_type)
        logger.info(f"Generating {count} recipes with model {self.model}")

        try:
            text = await self.generate_text(prompt)
        except ConnectorError as e:
            raise GenerationError(f"Recipe generation request failed: {e}") from e

        recipes = parse_recipes(text, preferences)
        logger.info(f"Generated {len(recipes)} recipes")
        return recipes[:count]


async def get_recipe_generator() -> AsyncIterator[GeminiRecipeGenerator]:
    """FastAPI dependency yielding a generator built from settings, closed after the request."""
    async with GeminiRecipeGenerator() as generator:
        yield generator

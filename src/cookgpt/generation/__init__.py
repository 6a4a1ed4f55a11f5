"""Recipe generation backed by an external language model."""

from cookgpt.generation.gemini import (
    GeminiRecipeGenerator,
    GenerationError,
    GenerationUnavailableError,
    fallback_recipes,
    get_recipe_generator,
)

__all__ = [
    "GeminiRecipeGenerator",
    "GenerationError",
    "GenerationUnavailableError",
    "fallback_recipes",
    "get_recipe_generator",
]

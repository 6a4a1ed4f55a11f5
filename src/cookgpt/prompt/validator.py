"""Validation of free-text cooking requests against stored user preferences."""

import re
from dataclasses import dataclass, field
from typing import Literal

from cookgpt.logging_config import get_logger
from cookgpt.prompt.rules import (
    COMPLEX_INGREDIENTS,
    CUISINE_KEYWORDS,
    DIETARY_ALTERNATIVES,
    DIETARY_CONFLICTS,
    NO_RESTRICTION,
)
from cookgpt.schemas import UserPreferencesData

logger = get_logger(__name__)

ConflictType = Literal["dietary", "cuisine", "ingredient", "none"]

MAX_SUGGESTED_ALTERNATIVES = 5


@dataclass
class DietaryConflict:
    """A requested food term that a dietary restriction rules out."""

    requested_item: str
    restriction: str
    alternatives: list[str]
    explanation: str


@dataclass
class PromptValidationResult:
    """Outcome of checking a request against the user's preferences."""

    is_valid: bool
    should_generate_recipe: bool
    conflict_type: ConflictType = "none"
    conflicting_items: list[str] = field(default_factory=list)
    suggestion: str | None = None
    alternative_prompt: str | None = None


def _active_restrictions(restrictions: list[str]) -> list[str]:
    return [r for r in restrictions if r != NO_RESTRICTION]


def find_dietary_conflicts(prompt: str, restrictions: list[str]) -> list[DietaryConflict]:
    """Return every restricted term contained in the prompt, in discovery order."""
    prompt = prompt.lower()
    conflicts: list[DietaryConflict] = []

    for restriction in _active_restrictions(restrictions):
        for ingredient in DIETARY_CONFLICTS.get(restriction, []):
            if ingredient in prompt:
                conflicts.append(
                    DietaryConflict(
                        requested_item=ingredient,
                        restriction=restriction,
                        alternatives=DIETARY_ALTERNATIVES.get(restriction, {}).get(ingredient, []),
                        explanation=(
                            f"You've selected {restriction} as a dietary restriction, "
                            f"but you're asking for {ingredient}."
                        ),
                    )
                )

    return conflicts


def detect_cuisine(prompt: str) -> str | None:
    """Detect the cuisine a request asks for, if any keyword names one."""
    prompt = prompt.lower()
    for cuisine, keywords in CUISINE_KEYWORDS.items():
        if any(keyword in prompt for keyword in keywords):
            return cuisine
    return None


def find_complex_ingredient(prompt: str, skill_level: str) -> str | None:
    """Return the first item in the prompt that is too demanding for the skill level."""
    prompt = prompt.lower()
    for ingredient in COMPLEX_INGREDIENTS.get(skill_level, []):
        if ingredient in prompt:
            return ingredient
    return None


def validate_recipe_request(
    user_prompt: str,
    preferences: UserPreferencesData,
) -> PromptValidationResult:
    """
    Validate a recipe request against the user's preferences.

    Dietary conflicts block generation. Cuisine and skill mismatches are
    reported but generation is still allowed.
    """
    prompt = user_prompt.lower()

    conflicts = find_dietary_conflicts(prompt, preferences.dietary_restrictions)
    if conflicts:
        primary = conflicts[0]
        alternatives = ", ".join(primary.alternatives[:3])
        logger.info(
            f"Dietary conflict: {[c.requested_item for c in conflicts]} "
            f"vs restriction '{primary.restriction}'"
        )
        return PromptValidationResult(
            is_valid=False,
            conflict_type="dietary",
            conflicting_items=[c.requested_item for c in conflicts],
            suggestion=(
                f"I notice you've selected {primary.restriction} as a dietary preference, "
                f"but you're asking for {primary.requested_item}."
            ),
            alternative_prompt=(
                f"Would you like me to suggest a delicious {primary.restriction} "
                f"alternative using {alternatives} instead?"
            ),
            should_generate_recipe=False,
        )

    if preferences.cuisine_preferences:
        requested_cuisine = detect_cuisine(prompt)
        if requested_cuisine and requested_cuisine not in preferences.cuisine_preferences:
            preferred = ", ".join(preferences.cuisine_preferences)
            return PromptValidationResult(
                is_valid=False,
                conflict_type="cuisine",
                conflicting_items=[requested_cuisine],
                suggestion=(
                    f"I see you're asking for {requested_cuisine} cuisine, "
                    f"but your preferences include {preferred}."
                ),
                alternative_prompt=(
                    "Would you like me to suggest a recipe from your preferred cuisines, "
                    f"or would you like to explore {requested_cuisine} cuisine?"
                ),
                should_generate_recipe=True,
            )

    complex_ingredient = find_complex_ingredient(prompt, preferences.skill_level)
    if complex_ingredient:
        skill = preferences.skill_level
        return PromptValidationResult(
            is_valid=False,
            conflict_type="ingredient",
            conflicting_items=[complex_ingredient],
            suggestion=(
                f"I notice you're asking for a recipe with {complex_ingredient}, "
                f"which might be challenging for {skill} cooks."
            ),
            alternative_prompt=(
                f"Would you like me to suggest a {skill}-friendly version, "
                "or would you like to try the original recipe?"
            ),
            should_generate_recipe=True,
        )

    return PromptValidationResult(is_valid=True, conflict_type="none", should_generate_recipe=True)


def generate_conflict_response(result: PromptValidationResult) -> str:
    """Render a validation result as a single chat message."""
    if result.is_valid:
        return "Great! I'll generate a recipe that perfectly matches your preferences."

    if result.conflict_type in ("dietary", "cuisine", "ingredient"):
        return f"{result.suggestion} {result.alternative_prompt}"

    return "I'd be happy to help you with that recipe!"


def suggest_alternatives(requested_ingredient: str, dietary_restrictions: list[str]) -> list[str]:
    """Substitutes for an ingredient across all of the user's restrictions, deduplicated."""
    alternatives: list[str] = []
    for restriction in _active_restrictions(dietary_restrictions):
        alternatives.extend(
            DIETARY_ALTERNATIVES.get(restriction, {}).get(requested_ingredient, [])
        )

    return list(dict.fromkeys(alternatives))[:MAX_SUGGESTED_ALTERNATIVES]


def create_dietary_compliant_prompt(
    original_prompt: str,
    preferences: UserPreferencesData,
) -> str:
    """Rewrite a request, swapping each restricted term for its first substitute."""
    modified_prompt = original_prompt

    for restriction in _active_restrictions(preferences.dietary_restrictions):
        substitutes = DIETARY_ALTERNATIVES.get(restriction, {})
        for ingredient in DIETARY_CONFLICTS.get(restriction, []):
            if ingredient not in modified_prompt.lower():
                continue
            alternatives = substitutes.get(ingredient, [])
            if alternatives:
                modified_prompt = re.sub(
                    re.escape(ingredient), alternatives[0], modified_prompt, flags=re.IGNORECASE
                )

    return modified_prompt

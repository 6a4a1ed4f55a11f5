"""Chat-level handling of recipe requests on top of the prompt validator."""

import re
from dataclasses import dataclass, field
from typing import Literal, Protocol

from cookgpt.logging_config import get_logger
from cookgpt.prompt.validator import (
    PromptValidationResult,
    create_dietary_compliant_prompt,
    suggest_alternatives,
    validate_recipe_request,
)
from cookgpt.schemas import RecipeData, UserPreferencesData

logger = get_logger(__name__)

UserIntent = Literal["recipe_request", "question", "clarification", "general"]

MAX_RECIPE_COUNT = 7

FOLLOW_UP_KEYWORDS = ["yes", "no", "sure", "okay", "that sounds good", "i would like", "please"]

_EXPLICIT_COUNT_RE = re.compile(r"\b(\d+)\s*(recipe|option|idea|suggestion)s?\b", re.IGNORECASE)

# Checked in order; the first matching pattern wins
_QUANTITY_WORDS: list[tuple[re.Pattern[str], int]] = [
    (re.compile(r"\b(a|one|single)\b", re.IGNORECASE), 1),
    (re.compile(r"\b(couple|two|pair)\b", re.IGNORECASE), 2),
    (re.compile(r"\b(few|several|some)\b", re.IGNORECASE), 3),
    (re.compile(r"\b(many|lots|bunch|variety)\b", re.IGNORECASE), 5),
    (re.compile(r"\b(all|everything|comprehensive|extensive)\b", re.IGNORECASE), 7),
]


class RecipeGenerator(Protocol):
    async def generate_recipes(
        self,
        preferences: UserPreferencesData,
        count: int = 5,
        specific_request: str | None = None,
        requested_type: str | None = None,
    ) -> list[RecipeData]: ...


class RecipeGenerationFailed(Exception):
    """Raised when compliant recipes could not be produced."""


@dataclass
class ConversationContext:
    user_preferences: UserPreferencesData
    chat_history: list[str] = field(default_factory=list)
    current_topic: str | None = None
    last_recipe_generated: RecipeData | None = None


@dataclass
class ConversationResponse:
    message: str
    should_generate_recipe: bool
    modified_prompt: str | None = None
    alternatives: list[str] | None = None
    conflict_type: str | None = None
    is_educational: bool = False


@dataclass
class ConversationAnalysis:
    is_follow_up: bool
    topic_continuity: bool
    user_intent: UserIntent


def handle_recipe_request(user_prompt: str, context: ConversationContext) -> ConversationResponse:
    """Validate a chat request and decide how the assistant answers it."""
    validation = validate_recipe_request(user_prompt, context.user_preferences)

    if validation.is_valid:
        return ConversationResponse(
            message="Perfect! I'll create a personalized recipe that matches your preferences perfectly.",
            should_generate_recipe=True,
        )

    if validation.conflict_type == "dietary":
        return _handle_dietary_conflict(validation, context)

    if validation.conflict_type in ("cuisine", "ingredient"):
        return ConversationResponse(
            message=f"{validation.suggestion} {validation.alternative_prompt}",
            should_generate_recipe=validation.should_generate_recipe,
            conflict_type=validation.conflict_type,
            is_educational=True,
        )

    return ConversationResponse(
        message="I'd be happy to help you with that recipe!",
        should_generate_recipe=True,
    )


def _handle_dietary_conflict(
    validation: PromptValidationResult,
    context: ConversationContext,
) -> ConversationResponse:
    if not validation.conflicting_items:
        return ConversationResponse(
            message=(
                "I notice there might be a dietary preference conflict. "
                "Could you clarify what you'd like to cook?"
            ),
            should_generate_recipe=False,
            is_educational=True,
        )

    alternatives = suggest_alternatives(
        validation.conflicting_items[0],
        context.user_preferences.dietary_restrictions,
    )
    return ConversationResponse(
        message=f"{validation.suggestion} {validation.alternative_prompt}",
        should_generate_recipe=False,
        alternatives=alternatives,
        conflict_type="dietary",
        is_educational=True,
    )


def provide_dietary_education(requested_ingredient: str, dietary_restrictions: list[str]) -> str:
    """Explain substitutes for an ingredient the user's diet rules out."""
    alternatives = suggest_alternatives(requested_ingredient, dietary_restrictions)

    if not alternatives:
        return (
            f"I understand you're interested in {requested_ingredient}. While this ingredient "
            "doesn't align with your current dietary preferences, I'd be happy to suggest some "
            "delicious alternatives that would work perfectly for you."
        )

    return (
        f"Great question! While {requested_ingredient} doesn't fit your dietary preferences, "
        f"here are some excellent alternatives: {', '.join(alternatives[:3])}. These ingredients "
        "can create similar flavors and textures while respecting your dietary choices. "
        "Would you like me to suggest a recipe using one of these alternatives?"
    )


def create_dietary_conflict_flow(
    user_prompt: str,
    validation: PromptValidationResult,
    context: ConversationContext,
) -> list[ConversationResponse]:
    """
    Build the multi-message reply for a conflicting request.

    The flow is the conflict notice, then the alternatives when there is a
    conflicting item, then an offer to cook with them.
    """
    responses = [
        ConversationResponse(
            message=validation.suggestion or "I notice there's a dietary preference conflict.",
            should_generate_recipe=False,
            conflict_type=validation.conflict_type,
            is_educational=True,
        )
    ]

    if validation.conflicting_items:
        primary = validation.conflicting_items[0]
        alternatives = suggest_alternatives(primary, context.user_preferences.dietary_restrictions)
        responses.append(
            ConversationResponse(
                message=f"Here are some great alternatives to {primary}: {', '.join(alternatives[:3])}.",
                should_generate_recipe=False,
                alternatives=alternatives,
                conflict_type=validation.conflict_type,
                is_educational=True,
            )
        )

    responses.append(
        ConversationResponse(
            message=(
                validation.alternative_prompt
                or "Would you like me to create a recipe using these alternatives instead?"
            ),
            should_generate_recipe=False,
            conflict_type=validation.conflict_type,
            modified_prompt=create_dietary_compliant_prompt(user_prompt, context.user_preferences),
        )
    )

    return responses


def analyze_conversation_context(user_prompt: str, context: ConversationContext) -> ConversationAnalysis:
    """Classify a message as a follow-up, a question, a recipe request, or general chat."""
    prompt = user_prompt.lower()
    is_follow_up = any(keyword in prompt for keyword in FOLLOW_UP_KEYWORDS)

    # Split on single spaces: a blank prompt contains "" and so continues any topic
    first_word = prompt.split(" ")[0]
    topic_continuity = any(
        first_word in message.lower() or message.lower().split(" ")[0] in prompt
        for message in context.chat_history
    )

    intent: UserIntent = "general"
    if "recipe" in prompt or "cook" in prompt or "make" in prompt:
        intent = "recipe_request"
    elif "?" in prompt or "what" in prompt or "how" in prompt:
        intent = "question"
    elif is_follow_up:
        intent = "clarification"

    return ConversationAnalysis(
        is_follow_up=is_follow_up,
        topic_continuity=topic_continuity,
        user_intent=intent,
    )


def extract_recipe_count(message: str) -> int:
    """
    Read how many recipes a message asks for.

    An explicit "N recipes" (or options, ideas, suggestions) is clamped to
    1..7. Otherwise quantity words decide. Returns 0 when the message
    expresses no preference.
    """
    match = _EXPLICIT_COUNT_RE.search(message)
    if match:
        return min(max(int(match.group(1)), 1), MAX_RECIPE_COUNT)

    for pattern, count in _QUANTITY_WORDS:
        if pattern.search(message):
            return count

    return 0


async def generate_compliant_recipes(
    user_prompt: str,
    context: ConversationContext,
    generator: RecipeGenerator,
    count: int = 1,
) -> list[RecipeData]:
    """Generate recipes for a request rewritten to respect the user's diet."""
    modified_prompt = create_dietary_compliant_prompt(user_prompt, context.user_preferences)

    try:
        return await generator.generate_recipes(
            context.user_preferences,
            count=count,
            specific_request=modified_prompt,
        )
    except Exception as e:
        logger.error(f"Error generating compliant recipes: {e}")
        raise RecipeGenerationFailed("Failed to generate recipes. Please try again.") from e

"""Validation of cooking requests against user preferences."""

from cookgpt.prompt.conversation import (
    ConversationContext,
    ConversationResponse,
    handle_recipe_request,
)
from cookgpt.prompt.validator import PromptValidationResult, validate_recipe_request

__all__ = [
    "ConversationContext",
    "ConversationResponse",
    "PromptValidationResult",
    "handle_recipe_request",
    "validate_recipe_request",
]

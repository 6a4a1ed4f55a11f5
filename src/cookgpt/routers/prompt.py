"""API routes for checking cooking requests against preferences."""

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cookgpt.auth import get_optional_user
from cookgpt.database import get_db
from cookgpt.models import User
from cookgpt.prompt.conversation import (
    ConversationContext,
    analyze_conversation_context,
    create_dietary_conflict_flow,
    extract_recipe_count,
    handle_recipe_request,
    provide_dietary_education,
)
from cookgpt.prompt.validator import (
    create_dietary_compliant_prompt,
    generate_conflict_response,
    validate_recipe_request,
)
from cookgpt.routers.preferences import load_preferences
from cookgpt.schemas import UserPreferencesData

router = APIRouter(prefix="/api/v1/prompt", tags=["prompt"])


class ValidatePromptRequest(BaseModel):
    """
    A request to check.

    Signed-in callers are checked against their stored preferences;
    ``preferences`` is used for anonymous calls.
    """

    prompt: str = Field(min_length=1)
    preferences: UserPreferencesData | None = None
    chat_history: list[str] = Field(default_factory=list)


class ValidatePromptResponse(BaseModel):
    validation: dict[str, Any]
    response_message: str
    conversation: dict[str, Any]
    conflict_flow: list[dict[str, Any]]
    compliant_prompt: str
    education: str | None = None
    analysis: dict[str, Any]
    recipe_count: int


@router.post("/validate", response_model=ValidatePromptResponse)
async def validate_prompt(
    request: ValidatePromptRequest,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> ValidatePromptResponse:
    if user is not None:
        prefs = UserPreferencesData.model_validate(await load_preferences(db, user.id))
    else:
        prefs = request.preferences or UserPreferencesData()

    context = ConversationContext(user_preferences=prefs, chat_history=request.chat_history)
    validation = validate_recipe_request(request.prompt, prefs)
    flow = (
        create_dietary_conflict_flow(request.prompt, validation, context)
        if not validation.is_valid
        else []
    )
    education = (
        provide_dietary_education(validation.conflicting_items[0], prefs.dietary_restrictions)
        if validation.conflict_type == "dietary" and validation.conflicting_items
        else None
    )

    return ValidatePromptResponse(
        validation=asdict(validation),
        response_message=generate_conflict_response(validation),
        conversation=asdict(handle_recipe_request(request.prompt, context)),
        conflict_flow=[asdict(step) for step in flow],
        compliant_prompt=create_dietary_compliant_prompt(request.prompt, prefs),
        education=education,
        analysis=asdict(analyze_conversation_context(request.prompt, context)),
        recipe_count=extract_recipe_count(request.prompt),
    )

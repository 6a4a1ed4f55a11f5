"""API routes for dashboard chats with the recipe assistant."""

import uuid
from dataclasses import asdict
from datetime import datetime
from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgpt.auth import get_current_user
from cookgpt.database import get_db
from cookgpt.generation import GeminiRecipeGenerator, fallback_recipes, get_recipe_generator
from cookgpt.logging_config import get_logger
from cookgpt.models import Chat, User
from cookgpt.prompt.conversation import (
    ConversationContext,
    RecipeGenerationFailed,
    analyze_conversation_context,
    extract_recipe_count,
    generate_compliant_recipes,
    handle_recipe_request,
)
from cookgpt.routers.preferences import load_preferences
from cookgpt.schemas import RecipeData, UserPreferencesData
from cookgpt.subscription.plans import UNLIMITED, get_plan
from cookgpt.usage import QuotaExceededError, check_recipe_quota, record_usage

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/chats", tags=["chats"])

DEFAULT_RECIPE_COUNT = 3
TITLE_MAX_LENGTH = 50


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime
    recipes: list[RecipeData] | None = None


class ChatResponse(BaseModel):
    id: str
    title: str
    messages: list[ChatMessage]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ChatSummary(BaseModel):
    id: str
    title: str
    updated_at: datetime


class CreateChatRequest(BaseModel):
    title: str | None = None


class SendMessageRequest(BaseModel):
    content: str = Field(min_length=1)


class AssistantReply(BaseModel):
    message: str
    should_generate_recipe: bool
    conflict_type: str | None = None
    alternatives: list[str] | None = None
    is_educational: bool = False
    user_intent: str
    used_fallback: bool = False


class SendMessageResponse(BaseModel):
    chat: ChatResponse
    reply: AssistantReply


async def _get_owned_chat(db: AsyncSession, chat_id: str, user: User) -> Chat:
    chat = await db.get(Chat, chat_id)
    if not chat or chat.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Chat {chat_id} not found",
        )
    return chat


def _message(role: str, content: str, recipes: list[RecipeData] | None = None) -> dict[str, Any]:
    message: dict[str, Any] = {
        "role": role,
        "content": content,
        "timestamp": datetime.utcnow().isoformat(),
    }
    if recipes:
        message["recipes"] = [r.model_dump() for r in recipes]
    return message


@router.get("", response_model=list[ChatSummary])
async def list_chats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[ChatSummary]:
    result = await db.execute(
        select(Chat).where(Chat.user_id == user.id).order_by(Chat.updated_at.desc())
    )
    return [ChatSummary(id=c.id, title=c.title, updated_at=c.updated_at) for c in result.scalars()]


@router.post("", response_model=ChatResponse, status_code=status.HTTP_201_CREATED)
async def create_chat(
    request: CreateChatRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ChatResponse:
    now = datetime.utcnow()
    chat = Chat(
        id=uuid.uuid4().hex,
        user_id=user.id,
        title=request.title or "New chat",
        messages=[],
        created_at=now,
        updated_at=now,
    )
    db.add(chat)
    await db.commit()
    await db.refresh(chat)
    return ChatResponse.model_validate(chat)


@router.get("/{chat_id}", response_model=ChatResponse)
async def get_chat(
    chat_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ChatResponse:
    return ChatResponse.model_validate(await _get_owned_chat(db, chat_id, user))


@router.post("/{chat_id}/messages", response_model=SendMessageResponse)
async def send_message(
    chat_id: str,
    request: SendMessageRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    generator: GeminiRecipeGenerator = Depends(get_recipe_generator),
) -> SendMessageResponse:
    """
    Post a message and get the assistant's reply.

    Requests that conflict with the user's diet are answered with
    alternatives and generate nothing. Otherwise recipes are generated
    within the daily quota of the user's plan.
    """
    chat = await _get_owned_chat(db, chat_id, user)
    prefs = UserPreferencesData.model_validate(await load_preferences(db, user.id))

    context = ConversationContext(
        user_preferences=prefs,
        chat_history=[m["content"] for m in chat.messages if m.get("role") == "user"],
    )
    analysis = analyze_conversation_context(request.content, context)
    response = handle_recipe_request(request.content, context)

    recipes: list[RecipeData] = []
    used_fallback = False
    if response.should_generate_recipe:
        try:
            used = await check_recipe_quota(db, user)
        except QuotaExceededError as e:
            raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(e)) from e

        count = extract_recipe_count(request.content) or DEFAULT_RECIPE_COUNT
        limit = get_plan(user).limits.recipe_generations
        if limit != UNLIMITED:
            count = min(count, limit - used)

        try:
            recipes = await generate_compliant_recipes(request.content, context, generator, count)
        except RecipeGenerationFailed as e:
            logger.warning(f"{e} Serving fallback recipes")
            recipes = fallback_recipes(count)
            used_fallback = True

        if not used_fallback:
            await record_usage(db, user.id, "recipe", len(recipes))

    messages = list(chat.messages)
    messages.append(_message("user", request.content))
    messages.append(_message("assistant", response.message, recipes))
    chat.messages = messages
    if chat.title == "New chat":
        chat.title = request.content[:TITLE_MAX_LENGTH]
    chat.updated_at = datetime.utcnow()
    await db.commit()
    await db.refresh(chat)

    return SendMessageResponse(
        chat=ChatResponse.model_validate(chat),
        reply=AssistantReply(
            **{k: v for k, v in asdict(response).items() if k in AssistantReply.model_fields},
            user_intent=analysis.user_intent,
            used_fallback=used_fallback,
        ),
    )


@router.delete("/{chat_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chat(
    chat_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    chat = await _get_owned_chat(db, chat_id, user)
    await db.delete(chat)
    await db.commit()

"""API routers for the CookGPT application."""

from cookgpt.routers.auth import router as auth_router
from cookgpt.routers.chats import router as chats_router
from cookgpt.routers.content import router as content_router
from cookgpt.routers.meal_planning import router as meal_planning_router
from cookgpt.routers.onboarding import router as onboarding_router
from cookgpt.routers.preferences import router as preferences_router
from cookgpt.routers.prompt import router as prompt_router
from cookgpt.routers.pwa import router as pwa_router
from cookgpt.routers.recipes import router as recipes_router
from cookgpt.routers.saved_recipes import router as saved_recipes_router
from cookgpt.routers.storage import router as storage_router
from cookgpt.routers.subscription import router as subscription_router

__all__ = [
    "auth_router",
    "chats_router",
    "content_router",
    "meal_planning_router",
    "onboarding_router",
    "preferences_router",
    "prompt_router",
    "pwa_router",
    "recipes_router",
    "saved_recipes_router",
    "storage_router",
    "subscription_router",
]

"""FastAPI application entry point."""

import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from cookgpt.config import get_settings
from cookgpt.database import Base, async_engine
from cookgpt.logging_config import LoggingContext, configure_logging, get_logger
from cookgpt.routers import (
    auth_router,
    chats_router,
    content_router,
    meal_planning_router,
    onboarding_router,
    preferences_router,
    prompt_router,
    pwa_router,
    recipes_router,
    saved_recipes_router,
    storage_router,
    subscription_router,
)

settings = get_settings()

# Configure logging on module load
configure_logging(settings.log_level, settings.environment)
logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting CookGPT API")

    # Create database tables if they don't exist
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialized")

    if not settings.gemini_configured:
        logger.warning("GEMINI_API_KEY not set, chats will serve fallback recipes")
    if not settings.cashfree_configured:
        logger.warning("Cashfree credentials not set, checkout returns sandbox mock links")

    yield

    logger.info("Shutting down CookGPT API")
    await async_engine.dispose()


app = FastAPI(
    title="CookGPT API",
    description="Personalized recipes and meal plans that respect your dietary preferences",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Tag every log line of a request with its request id."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
    with LoggingContext(request_id=request_id):
        response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


# Include routers
app.include_router(auth_router)
app.include_router(preferences_router)
app.include_router(onboarding_router)
app.include_router(recipes_router)
app.include_router(saved_recipes_router)
app.include_router(chats_router)
app.include_router(prompt_router)
app.include_router(meal_planning_router)
app.include_router(subscription_router)
app.include_router(pwa_router)
app.include_router(storage_router)
app.include_router(content_router)


@app.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok", "service": "cookgpt-api"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "name": "CookGPT API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }

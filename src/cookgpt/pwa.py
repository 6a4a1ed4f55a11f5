"""Progressive web app support: cache manifest, caching policy and worker messages."""

import re
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from cookgpt.logging_config import get_logger

logger = get_logger(__name__)

CACHE_VERSION = "cookgpt-v3.0.0"
CACHE_NAME = f"cookgpt-cache-{CACHE_VERSION}"
RUNTIME_CACHE = "cookgpt-runtime-cache"
OFFLINE_URL = "/offline/"
UPDATE_CHECK_INTERVAL_SECONDS = 30

PRECACHE_URLS = [
    "/",
    "/about/",
    "/meal-planning/",
    "/explore-recipes/",
    "/preferences/",
    "/dashboard/",
    "/login/",
    "/register/",
    "/onboarding/",
    OFFLINE_URL,
    "/manifest.json",
    "/android-chrome-192x192.png",
    "/android-chrome-512x512.png",
    "/favicon-16x16.png",
    "/favicon-32x32.png",
    "/apple-icon.png",
    "/maskable-icon-192x192.png",
    "/maskable-icon-512x512.png",
    "/cookitnext_logo.png",
]

API_CACHE_PATTERNS = [
    re.compile(r"/api/(v1/)?recipes"),
    re.compile(r"/api/(v1/)?meal-plans"),
    re.compile(r"/api/(v1/)?preferences"),
    re.compile(r"/api/(v1/)?chats"),
]

_STATIC_ASSET_RE = re.compile(r"\.(js|css|png|jpg|jpeg|gif|svg|ico|woff|woff2|ttf|eot)$")


class CacheStrategy(str, Enum):
    CACHE_FIRST = "cache-first"
    NETWORK_FIRST = "network-first"
    STALE_WHILE_REVALIDATE = "stale-while-revalidate"
    NETWORK_ONLY = "network-only"
    CACHE_ONLY = "cache-only"


def caching_strategy(path: str, is_navigation: bool = False) -> CacheStrategy:
    """Pick how the worker serves a request path."""
    if _STATIC_ASSET_RE.search(path):
        return CacheStrategy.CACHE_FIRST
    if any(pattern.search(path) for pattern in API_CACHE_PATTERNS):
        return CacheStrategy.NETWORK_FIRST
    if is_navigation:
        return CacheStrategy.STALE_WHILE_REVALIDATE
    return CacheStrategy.NETWORK_FIRST


class InvalidWorkerMessage(ValueError):
    """Raised for messages outside the service worker protocol."""


class CacheUrlsPayload(BaseModel):
    urls: list[str] = Field(default_factory=list)


class WorkerMessage(BaseModel):
    """Page-to-worker message."""

    type: Literal["SKIP_WAITING", "GET_CACHE_STATUS", "CLEAR_CACHE", "CACHE_URLS"]
    payload: CacheUrlsPayload | None = None


class ClientNotification(BaseModel):
    """Worker-to-page notification."""

    type: Literal["UPDATE_AVAILABLE", "SW_ACTIVATED"]
    version: str = CACHE_VERSION


def parse_message(data: Any) -> WorkerMessage:
    try:
        return WorkerMessage.model_validate(data)
    except ValidationError as e:
        raise InvalidWorkerMessage(f"Unsupported service worker message: {data!r}") from e


class RuntimeCacheRegistry:
    """Tracks which URLs the runtime cache holds, per process."""

    def __init__(self) -> None:
        self.urls: list[str] = []
        self.waiting_worker = False

    def handle(self, message: WorkerMessage) -> dict[str, Any]:
        if message.type == "SKIP_WAITING":
            self.waiting_worker = False
            return {"type": "SW_ACTIVATED", "version": CACHE_VERSION}

        if message.type == "CACHE_URLS":
            urls = message.payload.urls if message.payload else []
            self.urls = list(dict.fromkeys(self.urls + urls))
            logger.info(f"Cached {len(urls)} URLs in {RUNTIME_CACHE}")
            return self.status()

        if message.type == "CLEAR_CACHE":
            self.urls = []
            logger.info("Runtime cache cleared")
            return self.status()

        return self.status()

    def status(self) -> dict[str, Any]:
        return {
            "version": CACHE_VERSION,
            "caches": {
                CACHE_NAME: len(PRECACHE_URLS),
                RUNTIME_CACHE: len(self.urls),
            },
            "runtimeUrls": list(self.urls),
        }


def build_manifest() -> dict[str, Any]:
    """Web app manifest for installing the site."""
    return {
        "name": "CookGPT - AI Recipe Generator",
        "short_name": "CookGPT",
        "description": "Personalized AI recipes and meal plans",
        "start_url": "/",
        "display": "standalone",
        "background_color": "#ffffff",
        "theme_color": "#f97316",
        "orientation": "portrait",
        "icons": [
            {"src": "/android-chrome-192x192.png", "sizes": "192x192", "type": "image/png"},
            {"src": "/android-chrome-512x512.png", "sizes": "512x512", "type": "image/png"},
            {
                "src": "/maskable-icon-192x192.png",
                "sizes": "192x192",
                "type": "image/png",
                "purpose": "maskable",
            },
            {
                "src": "/maskable-icon-512x512.png",
                "sizes": "512x512",
                "type": "image/png",
                "purpose": "maskable",
            },
        ],
    }

"""API routes for the installable web app and its service worker."""

from typing import Annotated, Any

from fastapi import APIRouter, HTTPException, Query, status

from cookgpt.pwa import (
    CACHE_VERSION,
    PRECACHE_URLS,
    InvalidWorkerMessage,
    RuntimeCacheRegistry,
    build_manifest,
    caching_strategy,
    parse_message,
)

router = APIRouter(prefix="/api/v1/pwa", tags=["pwa"])

runtime_cache = RuntimeCacheRegistry()


@router.get("/manifest")
async def manifest() -> dict[str, Any]:
    return build_manifest()


@router.get("/cache")
async def cache_manifest() -> dict[str, Any]:
    return {"version": CACHE_VERSION, "precache": PRECACHE_URLS, **runtime_cache.status()}


@router.post("/messages")
async def post_message(message: dict[str, Any]) -> dict[str, Any]:
    try:
        parsed = parse_message(message)
    except InvalidWorkerMessage as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return runtime_cache.handle(parsed)


@router.get("/strategy")
async def strategy(
    path: Annotated[str, Query(min_length=1)],
    navigation: bool = False,
) -> dict[str, str]:
    """How the service worker serves a request path."""
    return {"path": path, "strategy": caching_strategy(path, navigation).value}

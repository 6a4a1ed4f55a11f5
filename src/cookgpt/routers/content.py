"""API routes serving the marketing and policy pages."""

from fastapi import APIRouter, HTTPException, status

from cookgpt.content import PAGES, ContentPage, get_page

router = APIRouter(prefix="/api/v1/content", tags=["content"])


@router.get("", response_model=list[str])
async def list_pages() -> list[str]:
    return list(PAGES)


@router.get("/{slug}", response_model=ContentPage)
async def get_content(slug: str) -> ContentPage:
    page = get_page(slug)
    if page is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Page {slug} not found",
        )
    return page

"""Download and upload routes for stored recipe images."""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cookgpt.auth import get_current_user
from cookgpt.database import get_db
from cookgpt.logging_config import get_logger
from cookgpt.models import User
from cookgpt.storage import StorageError, get_bucket, upload_recipe_image
from cookgpt.usage import QuotaExceededError, check_image_quota, record_usage

logger = get_logger(__name__)

router = APIRouter(tags=["storage"])


class UploadImageRequest(BaseModel):
    data_url: str = Field(min_length=1)
    title: str = "recipe"


class UploadImageResponse(BaseModel):
    url: str


@router.get("/v0/b/{bucket}/o/{path:path}")
async def download_object(bucket: str, path: str) -> Response:
    store = get_bucket()
    if bucket != store.bucket:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bucket not found")
    try:
        data, content_type = store.get(path)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return Response(content=data, media_type=content_type)


@router.post(
    "/api/v1/storage/images",
    response_model=UploadImageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_image(
    request: UploadImageRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UploadImageResponse:
    """Store a generated recipe image, counted against the daily image quota."""
    try:
        await check_image_quota(db, user)
    except QuotaExceededError as e:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(e)) from e

    try:
        url = upload_recipe_image(request.data_url, user.id, request.title)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    await record_usage(db, user.id, "image")
    return UploadImageResponse(url=url)

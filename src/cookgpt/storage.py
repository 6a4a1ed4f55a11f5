"""
Recipe image storage.

Images arrive as base64 data URLs from the client and are written to a
local bucket directory. Download URLs follow the Firebase Storage layout
(``/v0/b/{bucket}/o/{encoded path}?alt=media``) so stored links keep
working if the bucket is moved to a hosted object store.
"""

import base64
import binascii
import json
import re
import uuid
from datetime import datetime
from pathlib import Path
from urllib.parse import quote, unquote, urlparse

from cookgpt.config import get_settings
from cookgpt.logging_config import get_logger

logger = get_logger(__name__)

IMAGE_PREFIX = "recipe-images"
METADATA_SUFFIX = ".meta.json"

_DATA_URL_RE = re.compile(r"^data:([^;]+);base64,(.+)$", re.DOTALL)
_OBJECT_PATH_RE = re.compile(r"/o/(.+)$")


class StorageError(Exception):
    """Raised when an object cannot be stored or located."""


class LocalBucket:
    """A storage bucket backed by a directory on the local filesystem."""

    def __init__(self, root: str | Path, bucket: str, public_base_url: str):
        self.root = Path(root)
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")

    @property
    def bucket_dir(self) -> Path:
        return self.root / self.bucket

    def object_file(self, path: str) -> Path:
        """Resolve an object path to its file, refusing paths outside the bucket and metadata files."""
        target = (self.bucket_dir / path).resolve()
        if not target.is_relative_to(self.bucket_dir.resolve()) or target.name.endswith(METADATA_SUFFIX):
            raise StorageError(f"Invalid object path: {path}")
        return target

    def download_url(self, path: str) -> str:
        return f"{self.public_base_url}/v0/b/{self.bucket}/o/{quote(path, safe='')}?alt=media"

    def put(self, path: str, data: bytes, content_type: str, metadata: dict[str, str]) -> str:
        target = self.object_file(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        target.with_name(target.name + METADATA_SUFFIX).write_text(
            json.dumps({"contentType": content_type, "customMetadata": metadata})
        )
        return self.download_url(path)

    def get(self, path: str) -> tuple[bytes, str]:
        """Read an object and its content type."""
        target = self.object_file(path)
        if not target.is_file():
            raise StorageError(f"Object not found: {path}")

        content_type = "application/octet-stream"
        meta_file = target.with_name(target.name + METADATA_SUFFIX)
        if meta_file.is_file():
            content_type = json.loads(meta_file.read_text()).get("contentType", content_type)
        return target.read_bytes(), content_type

    def delete(self, path: str) -> None:
        target = self.object_file(path)
        if not target.is_file():
            raise StorageError(f"Object not found: {path}")
        target.unlink()
        target.with_name(target.name + METADATA_SUFFIX).unlink(missing_ok=True)

    def path_from_url(self, url: str) -> str:
        """Extract the object path from one of this bucket's download URLs."""
        match = _OBJECT_PATH_RE.search(urlparse(url).path)
        if not match:
            raise StorageError("Invalid storage URL")
        return unquote(match.group(1))


def get_bucket() -> LocalBucket:
    settings = get_settings()
    return LocalBucket(
        settings.storage_root,
        settings.storage_bucket,
        settings.storage_public_base_url,
    )


def sanitize_title(title: str) -> str:
    return re.sub(r"[^a-zA-Z0-9\-_]", "_", title).lower()


def is_base64_data_url(url: str) -> bool:
    return url.startswith("data:") and "base64," in url


def is_storage_url(url: str) -> bool:
    """Check whether a URL points at an object store download endpoint."""
    return (
        "firebasestorage.googleapis.com" in url
        or "storage.googleapis.com" in url
        or "/v0/b/" in url
    )


def upload_recipe_image(
    data_url: str,
    user_id: str,
    recipe_title: str,
    bucket: LocalBucket | None = None,
) -> str:
    """
    Store a base64 image under the user's folder and return its download URL.

    Raises:
        StorageError: The data URL is malformed or the write failed.
    """
    bucket = bucket or get_bucket()

    match = _DATA_URL_RE.match(data_url)
    if not match:
        raise StorageError("Invalid base64 data URL format")

    mime_type, payload = match.groups()
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise StorageError(f"Failed to upload image: {e}") from e

    extension = mime_type.split("/")[1] if "/" in mime_type else "png"
    file_name = f"{sanitize_title(recipe_title)}_{uuid.uuid4().hex[:8]}.{extension or 'png'}"
    path = f"{IMAGE_PREFIX}/{user_id}/{file_name}"

    try:
        url = bucket.put(
            path,
            data,
            content_type=mime_type,
            metadata={
                "recipeTitle": recipe_title,
                "userId": user_id,
                "uploadedAt": datetime.utcnow().isoformat(),
            },
        )
    except OSError as e:
        raise StorageError(f"Failed to upload image: {e}") from e

    logger.info(f"Image uploaded: {path}")
    return url


def delete_recipe_image(image_url: str, bucket: LocalBucket | None = None) -> None:
    """Delete a stored image. Failures are logged and never raised."""
    bucket = bucket or get_bucket()
    try:
        path = bucket.path_from_url(image_url)
        bucket.delete(path)
        logger.info(f"Image deleted: {path}")
    except (StorageError, OSError) as e:
        logger.warning(f"Image deletion failed, continuing: {e}")


def process_recipe_image_url(
    image_url: str | None,
    user_id: str,
    recipe_title: str,
    bucket: LocalBucket | None = None,
) -> str:
    """
    Turn a client-supplied image reference into a URL safe to persist.

    Base64 images are uploaded, http(s) URLs are kept as they are, and
    anything else (or a failed upload) becomes an empty string.
    """
    if not image_url:
        return ""

    if is_base64_data_url(image_url):
        try:
            return upload_recipe_image(image_url, user_id, recipe_title, bucket=bucket)
        except StorageError as e:
            logger.error(f"Error processing image for recipe '{recipe_title}': {e}")
            return ""

    if image_url.startswith("http"):
        return image_url

    logger.warning(f"Invalid image URL format for recipe: {recipe_title}")
    return ""

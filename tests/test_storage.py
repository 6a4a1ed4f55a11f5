"""Tests for recipe image storage."""

import base64

import pytest

from cookgpt.storage import (
    LocalBucket,
    StorageError,
    delete_recipe_image,
    get_bucket,
    is_base64_data_url,
    is_storage_url,
    process_recipe_image_url,
    sanitize_title,
    upload_recipe_image,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()


@pytest.fixture
def bucket(tmp_path):
    return LocalBucket(tmp_path, "test-bucket", "http://testserver/")


class TestLocalBucket:
    def test_put_and_get(self, bucket):
        url = bucket.put("recipe-images/u1/a.png", PNG_BYTES, "image/png", {"userId": "u1"})

        assert url == "http://testserver/v0/b/test-bucket/o/recipe-images%2Fu1%2Fa.png?alt=media"
        assert bucket.get("recipe-images/u1/a.png") == (PNG_BYTES, "image/png")

    def test_path_from_url(self, bucket):
        url = bucket.download_url("recipe-images/u1/my file.png")
        assert bucket.path_from_url(url) == "recipe-images/u1/my file.png"

    def test_path_traversal_rejected(self, bucket):
        with pytest.raises(StorageError, match="Invalid object path"):
            bucket.put("../escape.png", PNG_BYTES, "image/png", {})

    def test_missing_object(self, bucket):
        with pytest.raises(StorageError, match="Object not found"):
            bucket.get("recipe-images/nope.png")

    def test_metadata_files_not_addressable(self, bucket):
        bucket.put("recipe-images/u1/a.png", PNG_BYTES, "image/png", {"userId": "u1"})

        with pytest.raises(StorageError, match="Invalid object path"):
            bucket.get("recipe-images/u1/a.png.meta.json")

    def test_delete(self, bucket):
        bucket.put("a.png", PNG_BYTES, "image/png", {})
        bucket.delete("a.png")

        with pytest.raises(StorageError):
            bucket.get("a.png")


class TestHelpers:
    def test_sanitize_title(self):
        assert sanitize_title("Mac & Cheese (Vegan)") == "mac___cheese__vegan_"

    def test_url_kinds(self):
        assert is_base64_data_url(PNG_DATA_URL) is True
        assert is_base64_data_url("https://example.com/a.png") is False
        assert is_storage_url("https://firebasestorage.googleapis.com/v0/b/x/o/y") is True
        assert is_storage_url("http://localhost:8000/v0/b/bucket/o/a.png") is True
        assert is_storage_url("https://images.unsplash.com/photo") is False


class TestRecipeImages:
    def test_upload_layout(self, bucket):
        url = upload_recipe_image(PNG_DATA_URL, "user-1", "Green Curry", bucket=bucket)

        path = bucket.path_from_url(url)
        assert path.startswith("recipe-images/user-1/green_curry_")
        assert path.endswith(".png")
        assert bucket.get(path)[0] == PNG_BYTES

    def test_upload_rejects_malformed_data_url(self, bucket):
        with pytest.raises(StorageError, match="Invalid base64 data URL format"):
            upload_recipe_image("data:image/png,abc", "user-1", "x", bucket=bucket)

    def test_process_uploads_base64(self, bucket):
        url = process_recipe_image_url(PNG_DATA_URL, "user-1", "Soup", bucket=bucket)
        assert "/v0/b/test-bucket/o/recipe-images%2Fuser-1%2Fsoup_" in url

    def test_process_keeps_http_urls(self, bucket):
        url = "https://images.unsplash.com/photo.jpg"
        assert process_recipe_image_url(url, "user-1", "Soup", bucket=bucket) == url

    def test_process_invalid_values(self, bucket):
        assert process_recipe_image_url(None, "user-1", "Soup", bucket=bucket) == ""
        assert process_recipe_image_url("blob:abc", "user-1", "Soup", bucket=bucket) == ""
        assert process_recipe_image_url("data:image/png;base64,!!!", "u", "S", bucket=bucket) == ""

    def test_delete_never_raises(self, bucket):
        url = upload_recipe_image(PNG_DATA_URL, "user-1", "Soup", bucket=bucket)

        delete_recipe_image(url, bucket=bucket)
        delete_recipe_image(url, bucket=bucket)
        delete_recipe_image("https://example.com/not-storage", bucket=bucket)

        with pytest.raises(StorageError):
            bucket.get(bucket.path_from_url(url))


class TestStorageApi:
    def test_upload_and_download(self, client, auth_headers):
        response = client.post(
            "/api/v1/storage/images",
            json={"data_url": PNG_DATA_URL, "title": "Pancakes"},
            headers=auth_headers,
        )
        assert response.status_code == 201

        path = get_bucket().path_from_url(response.json()["url"])
        download = client.get(f"/v0/b/{get_bucket().bucket}/o/{path}")

        assert download.status_code == 200
        assert download.content == PNG_BYTES
        assert download.headers["content-type"] == "image/png"

    def test_free_tier_image_quota(self, client, auth_headers):
        for _ in range(2):
            response = client.post(
                "/api/v1/storage/images",
                json={"data_url": PNG_DATA_URL},
                headers=auth_headers,
            )
            assert response.status_code == 201

        response = client.post(
            "/api/v1/storage/images",
            json={"data_url": PNG_DATA_URL},
            headers=auth_headers,
        )
        assert response.status_code == 429
        assert "Upgrade to Basic" in response.json()["detail"]

    def test_invalid_data_url(self, client, auth_headers):
        response = client.post(
            "/api/v1/storage/images",
            json={"data_url": "not-an-image"},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_download_unknown_bucket(self, client):
        assert client.get("/v0/b/other-bucket/o/a.png").status_code == 404

    def test_upload_requires_auth(self, client):
        response = client.post("/api/v1/storage/images", json={"data_url": PNG_DATA_URL})
        assert response.status_code == 401

    def test_metadata_not_downloadable(self, client, auth_headers):
        response = client.post(
            "/api/v1/storage/images",
            json={"data_url": PNG_DATA_URL, "title": "Pancakes"},
            headers=auth_headers,
        )
        path = get_bucket().path_from_url(response.json()["url"])

        download = client.get(f"/v0/b/{get_bucket().bucket}/o/{path}.meta.json")
        assert download.status_code == 404

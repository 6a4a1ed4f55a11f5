"""Tests for dashboard chats with the recipe assistant."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from cookgpt.database import sync_engine
from cookgpt.generation import GeminiRecipeGenerator
from cookgpt.models import UsageRecord


def usage_count(user_id: str, kind: str = "recipe") -> int:
    with Session(sync_engine) as session:
        record = session.execute(
            select(UsageRecord).where(UsageRecord.user_id == user_id, UsageRecord.kind == kind)
        ).scalar_one_or_none()
        return record.count if record else 0


@pytest.fixture
def chat_id(client, auth_headers):
    response = client.post("/api/v1/chats", json={}, headers=auth_headers)
    assert response.status_code == 201
    return response.json()["id"]


def send(client, headers, chat_id, content):
    return client.post(
        f"/api/v1/chats/{chat_id}/messages", json={"content": content}, headers=headers
    )


class TestChatCrud:
    def test_create_and_list(self, client, auth_headers, chat_id):
        chats = client.get("/api/v1/chats", headers=auth_headers).json()

        assert [c["id"] for c in chats] == [chat_id]
        assert chats[0]["title"] == "New chat"

    def test_get_chat(self, client, auth_headers, chat_id):
        data = client.get(f"/api/v1/chats/{chat_id}", headers=auth_headers).json()
        assert data["messages"] == []

    def test_other_users_chat_is_hidden(self, client, chat_id, register_account):
        other = register_account("other@example.com")
        headers = {"Authorization": f"Bearer {other['access_token']}"}

        assert client.get(f"/api/v1/chats/{chat_id}", headers=headers).status_code == 404
        assert send(client, headers, chat_id, "pasta").status_code == 404

    def test_delete(self, client, auth_headers, chat_id):
        assert client.delete(f"/api/v1/chats/{chat_id}", headers=auth_headers).status_code == 204
        assert client.get(f"/api/v1/chats/{chat_id}", headers=auth_headers).status_code == 404

    def test_requires_auth(self, client):
        assert client.get("/api/v1/chats").status_code == 401


class TestSendMessage:
    def test_generates_requested_count(self, client, auth_headers, user_id, chat_id, use_generator):
        response = send(client, auth_headers, chat_id, "Give me 2 recipes for pasta")

        assert response.status_code == 200
        data = response.json()
        assert data["reply"]["should_generate_recipe"] is True
        assert data["reply"]["user_intent"] == "recipe_request"
        assert data["reply"]["used_fallback"] is False

        messages = data["chat"]["messages"]
        assert [m["role"] for m in messages] == ["user", "assistant"]
        assert len(messages[1]["recipes"]) == 2
        assert data["chat"]["title"] == "Give me 2 recipes for pasta"
        assert usage_count(user_id) == 2

        use_generator.generate_recipes.assert_called_once()
        assert use_generator.generate_recipes.call_args.kwargs["count"] == 2

    def test_title_truncated(self, client, auth_headers, chat_id, use_generator):
        content = "I would love a recipe for a cozy autumn soup with squash and sage please"
        data = send(client, auth_headers, chat_id, content).json()

        assert data["chat"]["title"] == content[:50]

    def test_free_quota_caps_and_blocks(self, client, auth_headers, user_id, chat_id, use_generator):
        send(client, auth_headers, chat_id, "Give me 2 recipes")

        data = send(client, auth_headers, chat_id, "Give me 5 recipes").json()
        assert len(data["chat"]["messages"][-1]["recipes"]) == 1
        assert usage_count(user_id) == 3

        response = send(client, auth_headers, chat_id, "one more recipe")
        assert response.status_code == 429
        assert response.json()["detail"].startswith("You've reached your 3 recipe limit")

    def test_pro_tier_is_unlimited(self, client, auth_headers, user_id, chat_id, use_generator, set_tier):
        set_tier(user_id, "pro")

        data = send(client, auth_headers, chat_id, "Give me 10 recipes").json()
        assert len(data["chat"]["messages"][-1]["recipes"]) == 7

    def test_dietary_conflict_generates_nothing(
        self, client, auth_headers, user_id, chat_id, use_generator, vegan_preferences
    ):
        client.put("/api/v1/preferences", json=vegan_preferences.model_dump(), headers=auth_headers)

        data = send(client, auth_headers, chat_id, "chicken curry").json()

        assert data["reply"]["should_generate_recipe"] is False
        assert data["reply"]["conflict_type"] == "dietary"
        assert data["reply"]["alternatives"][:3] == ["tofu", "tempeh", "seitan"]
        assert data["chat"]["messages"][-1]["recipes"] is None
        use_generator.generate_recipes.assert_not_called()
        assert usage_count(user_id) == 0

    def test_generator_receives_request(self, client, auth_headers, chat_id, use_generator):
        send(client, auth_headers, chat_id, "mushroom risotto")

        kwargs = use_generator.generate_recipes.call_args.kwargs
        assert kwargs["specific_request"] == "mushroom risotto"
        assert kwargs["count"] == 3

    def test_fallback_when_generation_unavailable(self, client, auth_headers, user_id, chat_id):
        data = send(client, auth_headers, chat_id, "dinner ideas").json()

        recipes = data["chat"]["messages"][-1]["recipes"]
        assert data["reply"]["used_fallback"] is True
        assert [r["title"] for r in recipes] == [
            "Quick Pasta Primavera",
            "Healthy Grilled Chicken",
            "Fresh Garden Salad",
        ]
        assert usage_count(user_id) == 0

    def test_fallback_when_generator_fails(self, client, auth_headers, chat_id, use_generator):
        use_generator.generate_recipes = AsyncMock(side_effect=RuntimeError("quota"))

        data = send(client, auth_headers, chat_id, "a quick lunch").json()

        assert data["reply"]["used_fallback"] is True
        assert len(data["chat"]["messages"][-1]["recipes"]) == 1

    def test_empty_message_rejected(self, client, auth_headers, chat_id):
        assert send(client, auth_headers, chat_id, "").status_code == 422

    def test_generator_closed_after_request(self, client, auth_headers, chat_id):
        with patch.object(GeminiRecipeGenerator, "close", new_callable=AsyncMock) as mock_close:
            response = send(client, auth_headers, chat_id, "dinner ideas")

        assert response.status_code == 200
        mock_close.assert_awaited_once()

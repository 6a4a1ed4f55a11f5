"""Tests for the Gemini recipe generator."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from cookgpt.connectors.base import ConnectorError, ConnectorResponse, HTTPConnector
from cookgpt.generation.gemini import (
    FALLBACK_TEXT_MODEL,
    GeminiRecipeGenerator,
    GenerationError,
    GenerationUnavailableError,
    build_recipe_prompt,
    fallback_recipes,
    get_recipe_generator,
    normalize_recipe,
    parse_recipes,
    resolve_model_name,
)


def gemini_reply(text: str) -> ConnectorResponse:
    return ConnectorResponse(
        data={"candidates": [{"content": {"parts": [{"text": text}]}}]},
        status_code=200,
        headers={},
    )


@pytest.fixture
def generated_recipes_json():
    """Model reply in the requested JSON array shape."""
    return json.dumps(
        [
            {
                "id": "r1",
                "title": "Lentil Bolognese",
                "description": "Hearty lentils in tomato sauce.",
                "cookingTime": "35 minutes",
                "servings": 4,
                "difficulty": "easy",
                "ingredients": ["lentils", "tomatoes"],
                "instructions": ["Simmer lentils", "Add sauce"],
                "tags": ["vegan", "italian"],
                "calories": 410.6,
            },
            {
                "title": "Chickpea Salad",
                "ingredients": [{"amount": "1", "unit": "can", "name": "chickpeas"}],
                "instructions": [{"step": 1, "instruction": "Mix everything"}],
            },
        ]
    )


class TestPromptAndParsing:
    def test_resolve_deprecated_model(self):
        assert resolve_model_name("gemini-1.5-flash") == FALLBACK_TEXT_MODEL
        assert resolve_model_name("gemini-2.5-pro") == "gemini-2.5-pro"
        assert resolve_model_name("") == FALLBACK_TEXT_MODEL

    def test_prompt_includes_preferences(self, vegan_preferences):
        prompt = build_recipe_prompt(vegan_preferences, 3, "tofu curry", "dinner")

        assert "Generate 3 personalized recipes" in prompt
        assert '**USER\'S SPECIFIC REQUEST**: "tofu curry"' in prompt
        assert "**REQUESTED RECIPE TYPE**: dinner" in prompt
        assert "**Dietary Restrictions**: vegan" in prompt
        assert "**Skill Level**: beginner" in prompt

    def test_prompt_defaults(self):
        from cookgpt.schemas import UserPreferencesData

        prompt = build_recipe_prompt(UserPreferencesData(), 1)

        assert '"General recipe recommendations"' in prompt
        assert "**REQUESTED RECIPE TYPE**: Any type" in prompt
        assert "**Dietary Restrictions**: None" in prompt
        assert "**Goals**: General cooking" in prompt

    def test_parse_strips_code_fences(self, vegan_preferences, generated_recipes_json):
        recipes = parse_recipes(f"```json\n{generated_recipes_json}\n```", vegan_preferences)

        assert [r.title for r in recipes] == ["Lentil Bolognese", "Chickpea Salad"]
        assert recipes[0].cooking_time == "35 minutes"
        assert recipes[0].difficulty == "Easy"
        assert recipes[0].calories == 411

    def test_parse_fills_defaults(self, vegan_preferences, generated_recipes_json):
        recipe = parse_recipes(generated_recipes_json, vegan_preferences)[1]

        assert recipe.id.startswith("recipe_")
        assert recipe.description == "A wonderful dish to try"
        assert recipe.servings == 4
        assert recipe.cooking_time == "30min"
        assert recipe.difficulty == "Easy"  # beginner
        assert recipe.ingredients == ["1 can chickpeas"]
        assert recipe.instructions == ["Mix everything"]

    def test_parse_accepts_wrapped_object(self, open_preferences):
        recipes = parse_recipes('{"recipes": [{"title": "Ramen"}]}', open_preferences)
        assert recipes[0].title == "Ramen"
        assert recipes[0].difficulty == "Medium"  # intermediate

    def test_parse_invalid_json(self, open_preferences):
        with pytest.raises(GenerationError, match="invalid JSON"):
            parse_recipes("Sorry, I can't help with that.", open_preferences)

    def test_normalize_bad_servings(self, open_preferences):
        recipe = normalize_recipe({"title": "Soup", "servings": "lots"}, open_preferences)
        assert recipe.servings == 4
        assert recipe.title == "Soup"

    def test_normalize_missing_title(self, open_preferences):
        assert normalize_recipe({}, open_preferences).title == "Delicious Recipe"

    def test_fallback_recipes(self):
        assert [r.title for r in fallback_recipes(5)] == [
            "Quick Pasta Primavera",
            "Healthy Grilled Chicken",
            "Fresh Garden Salad",
        ]
        assert len(fallback_recipes(1)) == 1


class TestGeminiRecipeGenerator:
    @pytest.fixture
    def generator(self):
        return GeminiRecipeGenerator(api_key="test-key", model="gemini-2.5-flash")

    @pytest.mark.asyncio
    async def test_unavailable_without_key(self, open_preferences):
        generator = GeminiRecipeGenerator(api_key="")

        assert generator.is_available is False
        with pytest.raises(GenerationUnavailableError):
            await generator.generate_recipes(open_preferences)

    @pytest.mark.asyncio
    async def test_generate_recipes(self, generator, vegan_preferences, generated_recipes_json):
        with patch.object(generator, "_request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = gemini_reply(generated_recipes_json)

            recipes = await generator.generate_recipes(vegan_preferences, count=1)

            assert len(recipes) == 1
            assert recipes[0].title == "Lentil Bolognese"

            args, kwargs = mock_request.call_args
            assert args == ("POST", "models/gemini-2.5-flash:generateContent")
            assert kwargs["params"] == {"key": "test-key"}
            assert kwargs["json"]["generationConfig"]["temperature"] == 0.7

    @pytest.mark.asyncio
    async def test_unknown_model_retries_with_fallback(
        self, generator, open_preferences, generated_recipes_json
    ):
        with patch.object(generator, "_request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = [
                ConnectorError("not found", status_code=404),
                gemini_reply(generated_recipes_json),
            ]

            recipes = await generator.generate_recipes(open_preferences, count=2)

            assert len(recipes) == 2
            assert mock_request.call_count == 2
            assert mock_request.call_args.args[1] == f"models/{FALLBACK_TEXT_MODEL}:generateContent"

    @pytest.mark.asyncio
    async def test_api_error_raises_generation_error(self, generator, open_preferences):
        with patch.object(generator, "_request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = ConnectorError("server error", status_code=500)

            with pytest.raises(GenerationError, match="request failed"):
                await generator.generate_recipes(open_preferences)

            assert mock_request.call_count == 1

    @pytest.mark.asyncio
    async def test_reply_without_candidates(self, generator, open_preferences):
        with patch.object(generator, "_request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = ConnectorResponse(data={}, status_code=200, headers={})

            with pytest.raises(GenerationError, match="no content"):
                await generator.generate_recipes(open_preferences)


class TestClientLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager_closes_http_client(self):
        async with HTTPConnector("https://example.com") as connector:
            client = await connector._get_client()
            assert client.is_closed is False

        assert client.is_closed is True
        assert connector._client is None

    @pytest.mark.asyncio
    async def test_dependency_closes_generator(self):
        dependency = get_recipe_generator()
        generator = await anext(dependency)

        with patch.object(generator, "close", new_callable=AsyncMock) as mock_close:
            with pytest.raises(StopAsyncIteration):
                await anext(dependency)

            mock_close.assert_awaited_once()

"""Tests for chat-level handling of recipe requests."""

from unittest.mock import AsyncMock

import pytest

from cookgpt.prompt.conversation import (
    ConversationContext,
    RecipeGenerationFailed,
    analyze_conversation_context,
    create_dietary_conflict_flow,
    extract_recipe_count,
    generate_compliant_recipes,
    handle_recipe_request,
    provide_dietary_education,
)
from cookgpt.prompt.validator import PromptValidationResult, validate_recipe_request
from cookgpt.schemas import RecipeData


@pytest.fixture
def vegan_context(vegan_preferences):
    return ConversationContext(user_preferences=vegan_preferences)


class TestHandleRecipeRequest:
    def test_valid_request_generates(self, open_preferences):
        response = handle_recipe_request(
            "spaghetti for dinner", ConversationContext(user_preferences=open_preferences)
        )

        assert response.should_generate_recipe is True
        assert response.message == (
            "Perfect! I'll create a personalized recipe that matches your preferences perfectly."
        )
        assert response.conflict_type is None

    def test_dietary_conflict_offers_alternatives(self, vegan_context):
        response = handle_recipe_request("chicken curry", vegan_context)

        assert response.should_generate_recipe is False
        assert response.conflict_type == "dietary"
        assert response.is_educational is True
        assert response.alternatives == ["tofu", "tempeh", "seitan", "chickpeas", "lentils"]
        assert response.message.startswith("I notice you've selected vegan")

    def test_cuisine_mismatch_is_educational_but_generates(self, open_preferences):
        response = handle_recipe_request(
            "chicken enchiladas", ConversationContext(user_preferences=open_preferences)
        )

        assert response.should_generate_recipe is True
        assert response.conflict_type == "cuisine"
        assert response.is_educational is True


class TestDietaryEducation:
    def test_lists_three_alternatives(self):
        message = provide_dietary_education("chicken", ["vegan"])

        assert message.startswith("Great question! While chicken doesn't fit")
        assert "tofu, tempeh, seitan." in message

    def test_no_alternatives_known(self):
        message = provide_dietary_education("steak", ["vegan"])
        assert message.startswith("I understand you're interested in steak.")


class TestDietaryConflictFlow:
    def test_three_step_flow(self, vegan_context):
        validation = validate_recipe_request("chicken curry", vegan_context.user_preferences)
        flow = create_dietary_conflict_flow("chicken curry", validation, vegan_context)

        assert len(flow) == 3
        assert flow[0].message == validation.suggestion
        assert flow[1].message == "Here are some great alternatives to chicken: tofu, tempeh, seitan."
        assert flow[1].alternatives == ["tofu", "tempeh", "seitan", "chickpeas", "lentils"]
        assert flow[2].message == validation.alternative_prompt
        assert flow[2].modified_prompt == "tofu curry"
        assert all(step.should_generate_recipe is False for step in flow)

    def test_flow_without_conflicting_items(self, vegan_context):
        validation = PromptValidationResult(
            is_valid=False, should_generate_recipe=False, conflict_type="dietary"
        )
        flow = create_dietary_conflict_flow("something", validation, vegan_context)

        assert len(flow) == 2
        assert flow[0].message == "I notice there's a dietary preference conflict."
        assert flow[1].message == (
            "Would you like me to create a recipe using these alternatives instead?"
        )


class TestAnalyzeConversationContext:
    @pytest.mark.parametrize(
        "prompt,intent",
        [
            ("Can you make pasta?", "recipe_request"),
            ("I want to cook tonight", "recipe_request"),
            ("What is tofu?", "question"),
            ("yes please", "clarification"),
            ("hello there", "general"),
        ],
    )
    def test_user_intent(self, open_preferences, prompt, intent):
        context = ConversationContext(user_preferences=open_preferences)
        assert analyze_conversation_context(prompt, context).user_intent == intent

    def test_follow_up_detection(self, open_preferences):
        context = ConversationContext(user_preferences=open_preferences)

        assert analyze_conversation_context("sure, sounds fine", context).is_follow_up is True
        assert analyze_conversation_context("lasagna", context).is_follow_up is False

    def test_topic_continuity(self, open_preferences):
        context = ConversationContext(
            user_preferences=open_preferences, chat_history=["pasta ideas for dinner"]
        )

        assert analyze_conversation_context("pasta with garlic", context).topic_continuity is True
        assert analyze_conversation_context("soup", context).topic_continuity is False

    def test_blank_prompt_continues_topic(self, open_preferences):
        context = ConversationContext(
            user_preferences=open_preferences, chat_history=["pasta ideas for dinner"]
        )
        assert analyze_conversation_context("", context).topic_continuity is True

    def test_no_history_no_continuity(self, open_preferences):
        context = ConversationContext(user_preferences=open_preferences)
        assert analyze_conversation_context("pasta", context).topic_continuity is False


class TestExtractRecipeCount:
    @pytest.mark.parametrize(
        "message,count",
        [
            ("Give me 3 recipes", 3),
            ("Show me 2 options", 2),
            ("I need 10 recipe ideas", 7),
            ("0 suggestions", 1),
            ("a quick lunch", 1),
            ("couple of dinners", 2),
            ("some snacks", 3),
            ("lots of desserts", 5),
            ("everything vegan", 7),
            ("pasta", 0),
        ],
    )
    def test_counts(self, message, count):
        assert extract_recipe_count(message) == count


class TestGenerateCompliantRecipes:
    @pytest.mark.asyncio
    async def test_generates_from_rewritten_prompt(self, vegan_context):
        recipe = RecipeData(id="r1", title="Tofu Curry")
        generator = AsyncMock()
        generator.generate_recipes = AsyncMock(return_value=[recipe])

        recipes = await generate_compliant_recipes("chicken curry", vegan_context, generator, 2)

        assert recipes == [recipe]
        generator.generate_recipes.assert_called_once_with(
            vegan_context.user_preferences,
            count=2,
            specific_request="tofu curry",
        )

    @pytest.mark.asyncio
    async def test_generator_failure(self, vegan_context):
        generator = AsyncMock()
        generator.generate_recipes = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RecipeGenerationFailed, match="Failed to generate recipes"):
            await generate_compliant_recipes("lentil soup", vegan_context, generator)

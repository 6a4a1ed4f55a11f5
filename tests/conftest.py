"""Pytest configuration and shared fixtures."""

import json
import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock

# Point the app at a throwaway SQLite database and storage root before it is imported
_TEST_DIR = tempfile.mkdtemp(prefix="cookgpt-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/cookgpt.db"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_DIR, "storage")
os.environ["GEMINI_API_KEY"] = ""
os.environ["CASHFREE_CLIENT_ID"] = ""
os.environ["CASHFREE_CLIENT_SECRET"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from cookgpt.database import DATABASE_URL, Base, sync_engine  # noqa: E402
from cookgpt.generation import get_recipe_generator  # noqa: E402
from cookgpt.main import app  # noqa: E402
from cookgpt.models import Recipe, User  # noqa: E402
from cookgpt.schemas import RecipeData, UserPreferencesData  # noqa: E402

SAMPLE_RECIPES_FILE = Path(__file__).parents[1] / "scripts" / "sample_recipes.json"

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow running")


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_database():
    """Start every test from empty tables."""
    Base.metadata.drop_all(sync_engine)
    Base.metadata.create_all(sync_engine)
    yield


@pytest_asyncio.fixture
async def db_session():
    """Async session on its own engine, bound to the test's event loop."""
    engine = create_async_engine(DATABASE_URL, poolclass=NullPool)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def stored_user():
    """Insert a free-tier user directly and return its id."""
    with Session(sync_engine) as session:
        session.add(User(id="user-1", email="stored@example.com", hashed_password="x"))
        session.commit()
    return "user-1"


@pytest.fixture
def set_tier():
    """Change a user's subscription tier."""

    def _set_tier(user_id: str, tier: str) -> None:
        with Session(sync_engine) as session:
            session.get(User, user_id).subscription_tier = tier
            session.commit()

    return _set_tier


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def client():
    """Test client with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client: TestClient, email: str = "cook@example.com", password: str = "secret123") -> dict:
    response = client.post("/api/v1/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def register_account(client):
    """Register another account through the API."""

    def _register(email: str, password: str = "secret123") -> dict:
        return register(client, email, password)

    return _register


@pytest.fixture
def session_data(client):
    """A registered, signed-in user."""
    return register(client)


@pytest.fixture
def auth_headers(session_data):
    return {"Authorization": f"Bearer {session_data['access_token']}"}


@pytest.fixture
def user_id(session_data):
    return session_data["user"]["id"]


# =============================================================================
# Recipe Fixtures
# =============================================================================


@pytest.fixture
def sample_recipe_docs():
    """The sample recipes shipped for seeding the explorer."""
    with SAMPLE_RECIPES_FILE.open(encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def seeded_recipes(sample_recipe_docs):
    """Store the sample recipes in the database."""
    with Session(sync_engine) as session:
        for doc in sample_recipe_docs:
            session.add(Recipe(**doc))
        session.commit()
    return sample_recipe_docs


def make_recipe(index: int = 1, **overrides) -> RecipeData:
    data = {
        "id": f"generated-{index}",
        "title": f"Chickpea Curry {index}",
        "description": "A warming curry with chickpeas and spinach.",
        "cooking_time": "30 minutes",
        "servings": 4,
        "difficulty": "Easy",
        "ingredients": ["chickpeas", "spinach", "coconut milk"],
        "instructions": ["Simmer everything for twenty minutes"],
        "tags": ["vegan", "dinner"],
        "calories": 420,
    }
    data.update(overrides)
    return RecipeData(**data)


@pytest.fixture
def fake_generator():
    """Recipe generator that returns as many recipes as asked for."""
    generator = AsyncMock()
    generator.generate_recipes = AsyncMock(
        side_effect=lambda preferences, count=5, specific_request=None, requested_type=None: [
            make_recipe(i) for i in range(1, count + 1)
        ]
    )
    return generator


@pytest.fixture
def use_generator(client, fake_generator):
    """Route recipe generation in the API through the fake generator."""
    app.dependency_overrides[get_recipe_generator] = lambda: fake_generator
    return fake_generator


# =============================================================================
# Preference Fixtures
# =============================================================================


@pytest.fixture
def open_preferences():
    """Preferences with no dietary restrictions."""
    return UserPreferencesData(
        dietary_restrictions=["none"],
        cuisine_preferences=["italian", "asian"],
        meal_type_focus=["dinner"],
        skill_level="intermediate",
        cooking_time="30min",
        goals=["quick-meals"],
    )


@pytest.fixture
def vegan_preferences():
    return UserPreferencesData(
        dietary_restrictions=["vegan"],
        cuisine_preferences=["italian", "indian"],
        meal_type_focus=["dinner"],
        skill_level="beginner",
        cooking_time="30min",
        goals=["healthy-eating"],
    )

"""
Quality gate for explorer recipes.

Stored documents are screened before they reach the explorer: placeholder
content, broken image links and near-duplicate titles are dropped.
"""

import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from pydantic import ValidationError

from cookgpt.logging_config import get_logger
from cookgpt.schemas import RecipeData, normalize_difficulty

logger = get_logger(__name__)

PLACEHOLDER_PATTERNS = [
    re.compile(r"^¥\d+$"),
    re.compile(r"^test"),
    re.compile(r"^sample"),
    re.compile(r"^placeholder"),
    re.compile(r"^lorem ipsum"),
    re.compile(r"^untitled"),
    re.compile(r"^recipe \d+$"),
    re.compile(r"^new recipe$"),
    re.compile(r"^\d+$"),
    re.compile(r"^[a-z]$"),
]

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg")
IMAGE_HOSTS = (
    "images.unsplash.com",
    "cdn.pixabay.com",
    "images.pexels.com",
    "firebasestorage.googleapis.com",
)

MIN_TITLE_LENGTH = 3
MIN_DESCRIPTION_LENGTH = 10
MIN_INGREDIENT_LENGTH = 3
MIN_INSTRUCTION_LENGTH = 6

# Titles sharing more than this fraction of their words are the same dish
DUPLICATE_SIMILARITY_THRESHOLD = 0.8


@dataclass
class ProcessingSummary:
    total_documents: int = 0
    invalid_content: int = 0
    invalid_images: int = 0
    duplicates_removed: int = 0
    valid_recipes: int = 0


def is_placeholder(text: str) -> bool:
    """Check whether text looks like dummy or test content."""
    value = text.strip().lower()
    return any(pattern.search(value) for pattern in PLACEHOLDER_PATTERNS)


def _meaningful(items: Any, min_length: int) -> list[str]:
    if not isinstance(items, list):
        return []
    return [
        item
        for item in items
        if isinstance(item, str) and len(item.strip()) >= min_length and not is_placeholder(item)
    ]


def validate_recipe(doc: dict[str, Any]) -> bool:
    """Check that a stored recipe document has real, displayable content."""
    title = (doc.get("title") or "").strip()
    description = (doc.get("description") or "").strip()
    cooking_time = (doc.get("cooking_time") or doc.get("cookingTime") or "").strip()

    if not title or not description or not cooking_time:
        return False
    if len(title) < MIN_TITLE_LENGTH or len(description) < MIN_DESCRIPTION_LENGTH:
        return False
    if is_placeholder(title) or is_placeholder(description):
        return False

    if not _meaningful(doc.get("ingredients"), MIN_INGREDIENT_LENGTH):
        return False
    if not _meaningful(doc.get("instructions"), MIN_INSTRUCTION_LENGTH):
        return False

    servings = doc.get("servings")
    return isinstance(servings, int) and servings >= 1


def is_valid_image_url(image_url: str | None) -> bool:
    """Accept http(s) URLs that point at an image file or a known image host."""
    if not image_url:
        return False
    try:
        url = urlparse(image_url)
    except ValueError:
        return False

    if url.scheme not in ("http", "https"):
        return False

    path = url.path.lower()
    hostname = url.hostname or ""
    return any(ext in path for ext in IMAGE_EXTENSIONS) or any(host in hostname for host in IMAGE_HOSTS)


def normalize_title(title: str) -> str:
    """Lower-case a title, strip punctuation and collapse whitespace."""
    title = re.sub(r"[^\w\s]", "", title.lower().strip())
    return re.sub(r"\s+", " ", title)


def title_similarity(first: str, second: str) -> float:
    """
    Word overlap of two normalized titles, from 0 to 1.

    Words of ``first`` that also occur in ``second`` are counted (repeats
    included) and divided by the number of distinct words in both.
    """
    first_words = first.split(" ")
    second_words = second.split(" ")
    common = [word for word in first_words if word in second_words]
    return len(common) / len(set(first_words) | set(second_words))


def remove_duplicate_recipes(recipes: list[RecipeData]) -> list[RecipeData]:
    """Keep the first of each group of recipes with the same or nearly the same title."""
    unique: list[RecipeData] = []
    seen_titles: list[str] = []

    for recipe in recipes:
        title = normalize_title(recipe.title)
        if title in seen_titles:
            logger.debug(f"Exact duplicate recipe removed: '{recipe.title}'")
            continue

        similar = next(
            (t for t in seen_titles if title_similarity(title, t) > DUPLICATE_SIMILARITY_THRESHOLD),
            None,
        )
        if similar is not None:
            logger.debug(f"Similar recipe removed: '{recipe.title}' (matches '{similar}')")
            continue

        seen_titles.append(title)
        unique.append(recipe)

    return unique


def _whole_calories(value: Any) -> Any:
    if isinstance(value, float):
        return round(value) or None
    return value or None


def load_explorer_recipes(
    docs: list[dict[str, Any]],
) -> tuple[list[RecipeData], ProcessingSummary]:
    """
    Screen raw recipe documents for the explorer.

    Each document must carry an ``id``. Recipes whose image URL is set but
    unusable are dropped rather than shown without a picture.

    Returns:
        The surviving recipes sorted by title, and counts of what was dropped.
    """
    summary = ProcessingSummary(total_documents=len(docs))
    accepted: list[RecipeData] = []

    for doc in docs:
        if not validate_recipe(doc):
            logger.debug(f"Invalid recipe skipped: {doc.get('id')} - '{doc.get('title') or 'No title'}'")
            summary.invalid_content += 1
            continue

        image_url = (doc.get("image_url") or doc.get("imageUrl") or "").strip()
        if image_url and not is_valid_image_url(image_url):
            logger.debug(f"Invalid image URL for recipe {doc.get('id')}")
            summary.invalid_images += 1
            continue

        try:
            recipe = RecipeData(
                id=str(doc["id"]),
                title=doc["title"],
                description=doc["description"],
                cooking_time=doc.get("cooking_time") or doc.get("cookingTime"),
                servings=doc["servings"],
                difficulty=normalize_difficulty(doc.get("difficulty")),
                ingredients=doc.get("ingredients") or [],
                instructions=doc.get("instructions") or [],
                tags=doc.get("tags") or [],
                calories=_whole_calories(doc.get("calories")),
                image_url=image_url or None,
            )
        except ValidationError as e:
            logger.warning(f"Malformed recipe skipped: {doc.get('id')} - {e.error_count()} field errors")
            summary.invalid_content += 1
            continue
        accepted.append(recipe)

    unique = remove_duplicate_recipes(accepted)
    summary.duplicates_removed = len(accepted) - len(unique)

    unique.sort(key=lambda r: r.title.lower())
    summary.valid_recipes = len(unique)

    logger.info(
        f"Recipe processing: {summary.total_documents} documents, "
        f"{summary.invalid_content} invalid, {summary.invalid_images} bad images, "
        f"{summary.duplicates_removed} duplicates, {summary.valid_recipes} valid"
    )
    return unique, summary

#!/usr/bin/env python
"""
Database seeding script for the recipe explorer.

It will:

1. Wait for the database to accept connections
2. Create the tables if they don't exist
3. Skip seeding when recipes are already present (unless disabled)
4. Insert the sample recipes from scripts/sample_recipes.json

Run with: python scripts/seed_database.py

Environment Variables:
    SEED_RECIPES_FILE: JSON file with recipes to insert (default: sample_recipes.json)
    SEED_SKIP_IF_EXISTS: Skip seeding if recipes exist (default: true)
    DATABASE_URL: Database connection string
"""

import json
import os
import sys
import time
from datetime import datetime
from pathlib import Path

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from cookgpt.database import Base, sync_engine
from cookgpt.explore.quality import validate_recipe
from cookgpt.logging_config import configure_logging, get_logger
from cookgpt.models import Recipe

configure_logging(log_level=os.getenv("LOG_LEVEL", "INFO"))
logger = get_logger(__name__)

DEFAULT_RECIPES_FILE = Path(__file__).parent / "sample_recipes.json"

SEED_RECIPES_FILE = Path(os.getenv("SEED_RECIPES_FILE", str(DEFAULT_RECIPES_FILE)))
SEED_SKIP_IF_EXISTS = os.getenv("SEED_SKIP_IF_EXISTS", "true").lower() == "true"


def wait_for_database(max_retries: int = 30, retry_delay: int = 2) -> bool:
    """Wait for the database to be available."""
    logger.info("Waiting for database to be ready...")

    for attempt in range(max_retries):
        try:
            with sync_engine.connect() as conn:
                conn.execute(select(1))
            logger.info("Database is ready")
            return True
        except Exception as e:
            logger.debug(f"Database not ready (attempt {attempt + 1}/{max_retries}): {e}")
            time.sleep(retry_delay)

    logger.error("Database did not become ready in time")
    return False


def load_recipes(path: Path) -> list[dict]:
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def store_recipes(session: Session, recipes: list[dict]) -> int:
    """Insert recipes that pass the explorer quality checks and are not stored yet."""
    inserted = 0
    for data in recipes:
        if not validate_recipe(data):
            logger.warning(f"Skipping invalid sample recipe: {data.get('title')}")
            continue
        if session.get(Recipe, data["id"]) is not None:
            continue
        session.add(Recipe(**data, created_at=datetime.utcnow()))
        inserted += 1

    session.commit()
    logger.info(f"Stored {inserted} recipes in database")
    return inserted


def seed_database() -> dict:
    results = {"status": "started", "recipes_inserted": 0}

    if not wait_for_database():
        results["status"] = "failed"
        return results

    Base.metadata.create_all(sync_engine)

    with Session(sync_engine) as session:
        existing_count = session.execute(select(func.count(Recipe.id))).scalar() or 0
        logger.info(f"Found {existing_count} existing recipes")

        if existing_count and SEED_SKIP_IF_EXISTS:
            logger.info("Recipes already present, skipping seeding")
            results["status"] = "skipped"
            return results

        results["recipes_inserted"] = store_recipes(session, load_recipes(SEED_RECIPES_FILE))

    results["status"] = "completed"
    return results


def main():
    logger.info(f"Seeding explorer recipes from {SEED_RECIPES_FILE} (skip if present: {SEED_SKIP_IF_EXISTS})")

    try:
        results = seed_database()
    except KeyboardInterrupt:
        logger.info("Seeding interrupted")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Seeding failed: {e}")
        sys.exit(1)

    logger.info(f"Seeding {results['status']}: {results['recipes_inserted']} recipes inserted")
    sys.exit(0 if results["status"] in ("completed", "skipped") else 1)


if __name__ == "__main__":
    main()

"""Per-day usage counters backing the subscription quotas."""

from datetime import date
from typing import Literal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookgpt.models import UsageRecord, User
from cookgpt.subscription.plans import (
    can_generate_images,
    can_generate_recipes,
    get_upgrade_message,
)

UsageKind = Literal["recipe", "image"]


class QuotaExceededError(Exception):
    """Raised when a user has used up today's allowance."""


async def _get_record(db: AsyncSession, user_id: str, kind: UsageKind, day: date) -> UsageRecord | None:
    result = await db.execute(
        select(UsageRecord).where(
            UsageRecord.user_id == user_id,
            UsageRecord.kind == kind,
            UsageRecord.usage_date == day,
        )
    )
    return result.scalar_one_or_none()


async def get_usage(db: AsyncSession, user_id: str, kind: UsageKind, day: date | None = None) -> int:
    record = await _get_record(db, user_id, kind, day or date.today())
    return record.count if record else 0


async def record_usage(
    db: AsyncSession,
    user_id: str,
    kind: UsageKind,
    amount: int = 1,
    day: date | None = None,
) -> int:
    """Add to today's counter and return the new total."""
    day = day or date.today()
    record = await _get_record(db, user_id, kind, day)
    if record is None:
        record = UsageRecord(user_id=user_id, kind=kind, usage_date=day, count=0)
        db.add(record)
    record.count += amount
    await db.commit()
    return record.count


async def check_recipe_quota(db: AsyncSession, user: User) -> int:
    """
    Ensure the user may generate another recipe today.

    Returns:
        Today's count so far.

    Raises:
        QuotaExceededError: With the upgrade message for the user's tier.
    """
    used = await get_usage(db, user.id, "recipe")
    if not can_generate_recipes(user, used):
        raise QuotaExceededError(get_upgrade_message(user))
    return used


async def check_image_quota(db: AsyncSession, user: User) -> int:
    used = await get_usage(db, user.id, "image")
    if not can_generate_images(user, used):
        raise QuotaExceededError(get_upgrade_message(user))
    return used

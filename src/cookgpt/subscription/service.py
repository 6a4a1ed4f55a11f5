"""Subscription checkout and provider webhook handling."""

import time
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from cookgpt.connectors.base import ConnectorError
from cookgpt.logging_config import LoggingContext, get_logger
from cookgpt.models import Subscription, User
from cookgpt.subscription.cashfree import CASHFREE_PLANS, CashfreeClient

logger = get_logger(__name__)

DEFAULT_PHONE = "9999999999"
ACTIVE_STATUS = "ACTIVE"
SUCCESS_BANNER_SECONDS = 5


class SubscriptionError(Exception):
    """Raised when a subscription request cannot be processed."""

    def __init__(self, message: str, status_code: int = 400, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


@dataclass
class BannerState:
    visible: bool
    auto_hide_seconds: int | None = None


def new_subscription_id(user_id: str, plan_id: str) -> str:
    return f"sub_{user_id}_{plan_id}_{int(time.time() * 1000)}"


async def create_subscription(
    db: AsyncSession,
    user_id: str | None,
    plan_id: str | None,
    email: str | None = None,
    phone: str | None = None,
    client: CashfreeClient | None = None,
) -> dict[str, Any]:
    """
    Start checkout for a paid plan.

    Persists a pending subscription and returns the provider's
    authorization link for the user to approve the mandate.

    Raises:
        SubscriptionError: Missing ids (400), unknown plan (400), unknown
            user (404) or a provider failure (500).
    """
    if not user_id or not plan_id:
        raise SubscriptionError("User ID and Plan ID are required")
    if plan_id not in CASHFREE_PLANS:
        raise SubscriptionError("Invalid plan ID")
    if await db.get(User, user_id) is None:
        raise SubscriptionError("User not found", status_code=404)

    subscription_id = new_subscription_id(user_id, plan_id)
    # A client passed in stays open for its owner
    provider = nullcontext(client) if client is not None else CashfreeClient()

    with LoggingContext(user_id=user_id, subscription_id=subscription_id):
        try:
            async with provider as cashfree:
                link = await cashfree.create_subscription(
                    subscription_id, plan_id, email, phone or DEFAULT_PHONE
                )
        except ConnectorError as e:
            message = e.response.get("message") if isinstance(e.response, dict) else None
            raise SubscriptionError(
                message or "Cashfree error", status_code=500, details=e.response
            ) from e

        db.add(
            Subscription(
                id=subscription_id,
                user_id=user_id,
                plan_id=plan_id,
                status="pending",
                provider_response=link.provider_response,
            )
        )
        await db.commit()
        logger.info(f"Created subscription {subscription_id} for plan {plan_id}")

    return {
        "success": True,
        "subscriptionId": subscription_id,
        "authLink": link.auth_link,
        "status": link.status,
    }


def parse_webhook_payload(payload: dict[str, Any]) -> tuple[str, str]:
    """
    Extract the subscription id and status from a webhook body.

    Accepts the flat ``{subscriptionId, status}`` form and the provider's
    nested ``{data: {subscription_id, status}}`` form.
    """
    data = payload.get("data") if isinstance(payload.get("data"), dict) else {}
    subscription_id = payload.get("subscriptionId") or data.get("subscription_id")
    status = payload.get("status") or data.get("status")

    if not subscription_id or not status:
        raise SubscriptionError("Invalid webhook payload")
    return str(subscription_id), str(status)


async def handle_webhook(db: AsyncSession, payload: dict[str, Any]) -> dict[str, Any]:
    """Record a status change and upgrade the user when the mandate turns active."""
    subscription_id, status = parse_webhook_payload(payload)

    with LoggingContext(subscription_id=subscription_id):
        subscription = await db.get(Subscription, subscription_id)
        if subscription is None:
            logger.warning(f"Webhook for unknown subscription {subscription_id}")
            return {"success": True, "updated": False, "subscriptionId": subscription_id}

        subscription.status = status
        subscription.webhook_data = payload
        subscription.updated_at = datetime.utcnow()

        if status == ACTIVE_STATUS:
            user = await db.get(User, subscription.user_id)
            if user is not None:
                user.subscription_tier = subscription.plan_id
                user.subscription_updated_at = datetime.utcnow()
                logger.info(f"User {user.id} upgraded to {subscription.plan_id}")

        await db.commit()
        logger.info(f"Subscription {subscription_id} status set to {status}")

    return {
        "success": True,
        "updated": True,
        "subscriptionId": subscription_id,
        "status": status,
        "timestamp": datetime.utcnow().isoformat(),
    }


def success_banner_state(status_param: str | None) -> BannerState:
    """The checkout return page shows a success banner only for ``status=success``."""
    if status_param == "success":
        return BannerState(visible=True, auto_hide_seconds=SUCCESS_BANNER_SECONDS)
    return BannerState(visible=False)

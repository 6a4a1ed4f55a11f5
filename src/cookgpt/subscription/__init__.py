"""Subscription plans, payments and webhook processing."""

from cookgpt.subscription.plans import SUBSCRIPTION_PLANS, SubscriptionPlan, get_user_tier
from cookgpt.subscription.service import SubscriptionError

__all__ = ["SUBSCRIPTION_PLANS", "SubscriptionError", "SubscriptionPlan", "get_user_tier"]

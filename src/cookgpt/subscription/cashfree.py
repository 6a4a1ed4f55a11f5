"""Cashfree subscriptions API client."""

from dataclasses import dataclass
from typing import Any, Literal
from urllib.parse import urlencode

from cookgpt.config import get_settings
from cookgpt.connectors.base import ConnectorError, HTTPConnector
from cookgpt.logging_config import get_logger

logger = get_logger(__name__)

MOCK_AUTHORIZE_URL = "https://sandbox.cashfree.com/pg-subs/authorize"


@dataclass(frozen=True)
class CashfreePlan:
    plan_name: str
    max_amount: int
    recurring_amount: int
    interval_type: Literal["month", "year"]
    intervals: int
    description: str


CASHFREE_PLANS = {
    "basic": CashfreePlan("CookGPT Basic Plan", 499, 499, "month", 1, "Basic monthly plan"),
    "pro": CashfreePlan("CookGPT Pro Plan", 799, 799, "month", 1, "Pro monthly plan"),
}


@dataclass
class AuthorizationLink:
    """Where to send the user to authorize the recurring payment mandate."""

    auth_link: str
    status: str
    provider_response: dict[str, Any]


class CashfreeClient(HTTPConnector):
    """
    Creates periodic subscriptions with Cashfree.

    Without client credentials no request is made; a sandbox authorize
    link is returned instead so the checkout flow can be exercised locally.
    """

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        api_base: str | None = None,
        api_version: str | None = None,
        app_origin: str | None = None,
    ):
        settings = get_settings()
        super().__init__(base_url=api_base or settings.cashfree_api_base)
        self.client_id = client_id if client_id is not None else settings.cashfree_client_id
        self.client_secret = (
            client_secret if client_secret is not None else settings.cashfree_client_secret
        )
        self.api_version = api_version or settings.cashfree_api_version
        self.app_origin = (app_origin or settings.app_origin).rstrip("/")

    @property
    def name(self) -> str:
        return "cashfree"

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @property
    def return_url(self) -> str:
        return f"{self.app_origin}/subscription"

    @property
    def notify_url(self) -> str:
        return f"{self.app_origin}/api/v1/subscription/webhook"

    def default_headers(self) -> dict[str, str]:
        headers = super().default_headers()
        headers.update(
            {
                "X-Client-Id": self.client_id,
                "X-Client-Secret": self.client_secret,
                "x-api-version": self.api_version,
            }
        )
        return headers

    def mock_auth_link(self, subscription_id: str, plan_id: str) -> str:
        query = urlencode(
            {"subscriptionId": subscription_id, "return_url": self.return_url, "plan": plan_id}
        )
        return f"{MOCK_AUTHORIZE_URL}?{query}"

    def build_payload(
        self,
        subscription_id: str,
        plan: CashfreePlan,
        email: str | None,
        phone: str,
    ) -> dict[str, Any]:
        return {
            "subscriptionId": subscription_id,
            "planName": plan.plan_name,
            "subscriptionType": "PERIODIC",
            "maxAmount": plan.max_amount,
            "recurringAmount": plan.recurring_amount,
            "intervalType": plan.interval_type,
            "intervals": plan.intervals,
            "description": plan.description,
            "customerName": (email or "user").split("@")[0],
            "customerEmail": email,
            "customerPhone": phone,
            "returnUrl": self.return_url,
            "notifyUrl": self.notify_url,
        }

    async def create_subscription(
        self,
        subscription_id: str,
        plan_id: str,
        email: str | None,
        phone: str,
    ) -> AuthorizationLink:
        """
        Register a subscription and get its authorization link.

        Raises:
            KeyError: The plan has no Cashfree counterpart.
            ConnectorError: Cashfree rejected the request.
        """
        plan = CASHFREE_PLANS[plan_id]

        if not self.is_configured:
            logger.info(f"Cashfree not configured, using mock link for {subscription_id}")
            return AuthorizationLink(
                auth_link=self.mock_auth_link(subscription_id, plan_id),
                status="SUCCESS",
                provider_response={"mock": True},
            )

        try:
            response = await self._request(
                "POST",
                "/api/v2/subscriptions",
                json=self.build_payload(subscription_id, plan, email, phone),
            )
        except ConnectorError as e:
            logger.error(f"Cashfree API error {e.status_code}: {e.response}")
            raise

        result = response.data if isinstance(response.data, dict) else {}
        return AuthorizationLink(
            auth_link=result.get("authLink") or result.get("paymentLink") or "",
            status=result.get("status") or "SUCCESS",
            provider_response=result,
        )

"""
Subscriptions API - checkout, billing portal and reconciliation endpoints
"""

import logging
from typing import Optional

from pydantic import ValidationError as SchemaError

from errors import ApiError, CheckoutError, checkout_error_from
from models.responses import CheckoutResponse, PortalResponse, SubscriptionStatusResponse
from models.user import Subscription
from services.api_client import ApiClient

logger = logging.getLogger(__name__)

CHECKOUT_FAILED = "Failed to start checkout"
PORTAL_FAILED = "Failed to open billing portal"


class SubscriptionsAPI:
    """
    Contract with the billing service.
    The service talks to the payment provider; the client only receives
    opaque URLs to redirect to.
    """

    def __init__(self, client: ApiClient):
        """
        Args:
            client: Shared ApiClient instance
        """
        self.client = client

    async def checkout(self, plan_slug: str) -> str:
        """
        Create a checkout session for a plan.

        Args:
            plan_slug: Slug of the plan to subscribe to

        Returns:
            The externally issued checkout URL

        Raises:
            CheckoutError: the billing service rejected the request
            NetworkError: the request did not complete
        """
        try:
            body = await self.client.request(
                "POST", "/subscriptions/checkout", json={"plan_slug": plan_slug}
            )
            return CheckoutResponse.model_validate(body).checkout_url
        except ApiError as e:
            logger.error(f"Checkout for plan '{plan_slug}' rejected: {e.message}")
            raise checkout_error_from(e, CHECKOUT_FAILED) from e
        except SchemaError as e:
            logger.error(f"Checkout response for plan '{plan_slug}' has no checkout_url: {e}")
            raise CheckoutError(CHECKOUT_FAILED) from e

    async def portal(self) -> str:
        """
        Create a billing portal session for the current user.

        Returns:
            The externally issued portal URL

        Raises:
            CheckoutError: the billing service rejected the request
            NetworkError: the request did not complete
        """
        try:
            body = await self.client.request("POST", "/subscriptions/portal")
            return PortalResponse.model_validate(body).portal_url
        except ApiError as e:
            logger.error(f"Billing portal rejected: {e.message}")
            raise checkout_error_from(e, PORTAL_FAILED) from e
        except SchemaError as e:
            logger.error(f"Billing portal response has no portal_url: {e}")
            raise CheckoutError(PORTAL_FAILED) from e

    async def status(self) -> Optional[Subscription]:
        """GET /subscriptions/status"""
        body = await self.client.request("GET", "/subscriptions/status")
        return SubscriptionStatusResponse.model_validate(body).subscription

    async def sync(self) -> None:
        """Ask the billing service to reconcile the subscription with the provider."""
        await self.client.request("POST", "/subscriptions/sync")

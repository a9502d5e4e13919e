"""
Checkout Handoff - keeps a plan picked while anonymous alive across the
registration/login detour and resumes it once after login
"""

import logging
from typing import Optional

from config.settings import PENDING_CHECKOUT_KEY
from errors import ClientError
from models.plan import Plan
from navigation import CONTACT, DASHBOARD, PLANS, REGISTER, Navigation
from services.subscriptions_api import CHECKOUT_FAILED, SubscriptionsAPI
from session_store import SessionStore
from storage import StoragePort

logger = logging.getLogger(__name__)

RESUME_FAILED = "Failed to start checkout. Redirecting to plans page."


class CheckoutHandoff:
    """
    Owner of the single pending-checkout slot on the persistence port.

    The slot has no expiry: an abandoned selection stays until a later
    login consumes it or another selection overwrites it.
    """

    def __init__(self, storage: StoragePort, subscriptions: SubscriptionsAPI, store: SessionStore):
        self._storage = storage
        self._subscriptions = subscriptions
        self._store = store

    def pending_plan_slug(self) -> Optional[str]:
        """Peek at the pending slot without consuming it."""
        return self._storage.get(PENDING_CHECKOUT_KEY) or None

    def _take_pending(self) -> Optional[str]:
        slug = self._storage.get(PENDING_CHECKOUT_KEY) or None
        if slug is not None:
            self._storage.remove(PENDING_CHECKOUT_KEY)
        return slug

    async def select_plan(self, plan: Plan) -> Navigation:
        """
        Handle a click on a plan card.

        Sales-led plans go to the contact flow. An anonymous visitor picking
        a paid plan is remembered and sent to registration. A logged-in user
        goes straight to checkout.
        """
        if plan.is_custom or (not plan.is_free and not plan.is_purchasable):
            logger.info(f"Plan '{plan.slug}' is sold through sales - sending to contact")
            return Navigation.to(CONTACT)

        if plan.is_free:
            return Navigation.to(DASHBOARD if self._store.is_authenticated() else REGISTER)

        if not self._store.is_authenticated():
            self._storage.set(PENDING_CHECKOUT_KEY, plan.slug)
            logger.info(f"Remembered plan '{plan.slug}' until the visitor logs in")
            return Navigation.to(REGISTER)

        try:
            checkout_url = await self._subscriptions.checkout(plan.slug)
        except ClientError as e:
            logger.error(f"Checkout error for plan '{plan.slug}': {e.message}")
            return Navigation.to(PLANS, alert=e.message or CHECKOUT_FAILED)
        return Navigation.external_url(checkout_url)

    async def resume_after_login(self) -> Navigation:
        """
        Run right after a successful login.

        The pending slot is consumed before the checkout request is made, so
        it can never be replayed, even when the checkout fails.
        """
        plan_slug = self._take_pending()
        if plan_slug is None:
            return Navigation.to(DASHBOARD)

        logger.info(f"Resuming checkout for plan '{plan_slug}'")
        try:
            checkout_url = await self._subscriptions.checkout(plan_slug)
        except ClientError as e:
            logger.error(f"Checkout error for pending plan '{plan_slug}': {e.message}")
            return Navigation.to(PLANS, alert=e.message or RESUME_FAILED)
        return Navigation.external_url(checkout_url)

"""
Plans view - catalogue listing and plan selection
"""

import logging
from typing import Any, Dict, List, Optional

from checkout_handoff import CheckoutHandoff
from errors import ApiError, ClientError
from models.plan import Plan
from navigation import Navigation
from services.plans_api import PlansAPI
from session_store import SessionStore

logger = logging.getLogger(__name__)


class PlansView:
    def __init__(self, plans_api: PlansAPI, handoff: CheckoutHandoff, store: SessionStore):
        self.plans_api = plans_api
        self.handoff = handoff
        self.store = store
        self.plans: List[Plan] = []
        self.checkout_loading: Optional[str] = None

    async def load(self) -> List[Plan]:
        """Fetch the catalogue; on failure keep showing what we had."""
        try:
            self.plans = await self.plans_api.get_all()
        except ClientError as e:
            logger.error(f"Failed to fetch plans: {e}")
        return self.plans

    async def find(self, slug: str) -> Optional[Plan]:
        for plan in self.plans:
            if plan.slug == slug:
                return plan
        try:
            return await self.plans_api.get_by_slug(slug)
        except ApiError as e:
            if e.status_code == 404:
                return None
            raise

    async def select(self, plan: Plan) -> Optional[Navigation]:
        """Returns None while another checkout request is still in flight."""
        if self.checkout_loading is not None:
            return None
        self.checkout_loading = plan.slug
        try:
            return await self.handoff.select_plan(plan)
        finally:
            self.checkout_loading = None

    @property
    def current_plan_slug(self) -> Optional[str]:
        user = self.store.user
        if user is None or user.subscription is None or user.subscription.current_plan is None:
            return None
        return user.subscription.current_plan.slug

    def render(self) -> List[Dict[str, Any]]:
        current = self.current_plan_slug
        return [
            {**plan.model_dump(mode="json"), "is_current": plan.slug == current}
            for plan in self.plans
        ]

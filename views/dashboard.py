"""
Dashboard view - subscription summary, checkout confirmation banner and
billing portal access
"""

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

from errors import ClientError
from models.user import SubscriptionStatus
from navigation import DASHBOARD, Navigation
from reconciler import SubscriptionReconciler
from services.subscriptions_api import PORTAL_FAILED, SubscriptionsAPI
from session_store import SessionState, SessionStore

logger = logging.getLogger(__name__)

CHECKOUT_SIGNAL = "checkout"
CHECKOUT_SUCCESS = "success"
SUCCESS_MESSAGE = "Payment successful! Your subscription is now active."

STATUS_BADGES = {
    SubscriptionStatus.ACTIVE: "Active",
    SubscriptionStatus.TRIALING: "Trial",
    SubscriptionStatus.PAST_DUE: "Past Due",
    SubscriptionStatus.CANCELED: "Canceled",
    SubscriptionStatus.INACTIVE: "No Plan",
}


def status_badge(status: Optional[SubscriptionStatus]) -> str:
    return STATUS_BADGES.get(status, STATUS_BADGES[SubscriptionStatus.INACTIVE])


class DashboardView:
    """
    State behind the dashboard page.

    Every mount fires a background reconciliation and renders at once from
    the snapshot already held by the session store.
    """

    def __init__(
        self,
        store: SessionStore,
        subscriptions: SubscriptionsAPI,
        reconciler: SubscriptionReconciler,
        banner_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.subscriptions = subscriptions
        self.reconciler = reconciler
        self.banner_seconds = banner_seconds
        self.clock = clock
        self.portal_loading = False
        self._banner_until: Optional[float] = None
        self._banner_token: Optional[str] = None
        # The banner belongs to the session that came back from checkout
        self.store.subscribe(self._on_session_change)

    def mount(self, query_params: Optional[Mapping[str, str]] = None) -> Optional[Navigation]:
        """
        Start the background sync and pick up the one-shot checkout signal.

        Returns:
            A replace-navigation to the bare dashboard address when the
            signal was present, so a reload does not show the banner again.
            The sync is left to the mount that follows that redirect.
        """
        if query_params and query_params.get(CHECKOUT_SIGNAL) == CHECKOUT_SUCCESS:
            self._banner_until = self.clock() + self.banner_seconds
            self._banner_token = self.store.token
            return Navigation.redirect(DASHBOARD)

        self.reconciler.start()
        return None

    @property
    def banner_visible(self) -> bool:
        if self._banner_until is None:
            return False
        if self.clock() >= self._banner_until:
            self._banner_until = None
            return False
        return True

    def dismiss_banner(self) -> None:
        self._banner_until = None
        self._banner_token = None

    def _on_session_change(self, state: SessionState) -> None:
        if self._banner_until is not None and state.token != self._banner_token:
            self.dismiss_banner()

    async def open_billing_portal(self) -> Optional[Navigation]:
        """
        Send the user to the billing provider's portal.

        Returns None while a previous request is still in flight.
        """
        if self.portal_loading:
            return None
        self.portal_loading = True
        try:
            portal_url = await self.subscriptions.portal()
        except ClientError as e:
            logger.error(f"Portal error: {e.message}")
            return Navigation.to(DASHBOARD, alert=e.message or PORTAL_FAILED)
        finally:
            self.portal_loading = False
        return Navigation.external_url(portal_url)

    def snapshot(self) -> Dict[str, Any]:
        """Render-ready summary of the current session."""
        user = self.store.user
        subscription = user.subscription if user else None
        status = subscription.status if subscription else None
        plan = subscription.current_plan if subscription else None

        renewal = None
        if plan is not None and subscription.current_period_end is not None:
            period_end = subscription.current_period_end
            renewal = {
                "label": "Access until" if status == SubscriptionStatus.CANCELED else "Renews",
                "date": f"{period_end:%B} {period_end.day}, {period_end.year}",
            }

        return {
            "first_name": user.first_name if user else None,
            "email": user.email if user else None,
            "company_name": user.company_name if user else None,
            "member_since": user.created_at.strftime("%B %Y") if user and user.created_at else None,
            "admin": bool(user and user.admin),
            "subscription": {
                "status": status.value if status else SubscriptionStatus.INACTIVE.value,
                "badge": status_badge(status),
                "plan": plan.name if plan else None,
                "plan_slug": plan.slug if plan else None,
                "renewal": renewal,
                "can_manage_billing": plan is not None,
            },
            "banner": SUCCESS_MESSAGE if self.banner_visible else None,
        }

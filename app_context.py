"""
Application context - builds and wires the client core once
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import httpx
from fastapi import Request

from checkout_handoff import CheckoutHandoff
from config.settings import Settings, settings as default_settings
from reconciler import SubscriptionReconciler
from services.api_client import ApiClient
from services.auth_api import AuthAPI
from services.plans_api import PlansAPI
from services.subscriptions_api import SubscriptionsAPI
from session_store import SessionStore
from storage import SqlStorage, StoragePort
from views.dashboard import DashboardView
from views.plans import PlansView

logger = logging.getLogger(__name__)


@dataclass
class AccountContext:
    storage: StoragePort
    api_client: ApiClient
    auth_api: AuthAPI
    plans_api: PlansAPI
    subscriptions_api: SubscriptionsAPI
    session_store: SessionStore
    handoff: CheckoutHandoff
    reconciler: SubscriptionReconciler
    dashboard: DashboardView
    plans: PlansView
    flash: List[str] = field(default_factory=list)

    def push_alert(self, message: Optional[str]) -> None:
        if message:
            self.flash.append(message)

    def pop_alerts(self) -> List[str]:
        alerts, self.flash = self.flash, []
        return alerts

    async def aclose(self) -> None:
        await self.api_client.aclose()


def build_context(
    config: Optional[Settings] = None,
    storage: Optional[StoragePort] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Optional[Callable[[], float]] = None,
) -> AccountContext:
    """
    Construct every collaborator and connect them.

    Args:
        config: Settings to use (defaults to the environment)
        storage: Persistence port (defaults to SQL storage at STORAGE_URL)
        transport: httpx transport override, used by tests
        clock: Monotonic clock for the dashboard banner, used by tests
    """
    config = config or default_settings
    storage = storage or SqlStorage(config.storage_url)

    api_client = ApiClient(base_url=config.api_url, timeout=config.request_timeout, transport=transport)
    auth_api = AuthAPI(api_client)
    plans_api = PlansAPI(api_client)
    subscriptions_api = SubscriptionsAPI(api_client)

    session_store = SessionStore(storage, auth_api)
    api_client.token_provider = session_store.current_token
    api_client.add_unauthorized_listener(session_store.clear_session)

    handoff = CheckoutHandoff(storage, subscriptions_api, session_store)
    reconciler = SubscriptionReconciler(subscriptions_api, session_store)
    dashboard = DashboardView(
        session_store,
        subscriptions_api,
        reconciler,
        banner_seconds=config.checkout_banner_seconds,
        clock=clock or time.monotonic,
    )
    plans = PlansView(plans_api, handoff, session_store)

    logger.info(f"Account client ready (api={api_client.base_url}, signed_in={session_store.is_authenticated()})")
    return AccountContext(
        storage=storage,
        api_client=api_client,
        auth_api=auth_api,
        plans_api=plans_api,
        subscriptions_api=subscriptions_api,
        session_store=session_store,
        handoff=handoff,
        reconciler=reconciler,
        dashboard=dashboard,
        plans=plans,
    )


def get_context(request: Request) -> AccountContext:
    """FastAPI dependency returning the context built at startup."""
    return request.app.state.context

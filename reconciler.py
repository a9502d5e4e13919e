"""
Subscription Reconciler - background sync of the cached subscription
"""

import asyncio
import logging
from typing import Optional, Set

from errors import ClientError
from services.subscriptions_api import SubscriptionsAPI
from session_store import SessionStore

logger = logging.getLogger(__name__)


class SubscriptionReconciler:
    """
    Asks the billing service to reconcile with the payment provider, then
    refreshes the session snapshot. Never raises; failures are logged.
    """

    def __init__(self, subscriptions: SubscriptionsAPI, store: SessionStore):
        self._subscriptions = subscriptions
        self._store = store
        self._tasks: Set[asyncio.Task] = set()

    async def reconcile(self) -> None:
        try:
            await self._subscriptions.sync()
        except ClientError as e:
            logger.error(f"Sync error: {e}")
        await self._store.refresh_user()

    def start(self) -> Optional[asyncio.Task]:
        """
        Schedule ``reconcile`` on the running loop without waiting for it.

        Returns:
            The scheduled task, or None when no event loop is running
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop - skipping background subscription sync")
            return None
        task = loop.create_task(self.reconcile())
        # Keep a reference until done so the task is not garbage collected
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

"""
Dashboard Router - customer dashboard and admin area
"""

from fastapi import APIRouter, Depends, Request

from app_context import AccountContext, get_context
from guards import require_admin, require_session
from utils.responses import navigation_response, success_response

dashboard_router = APIRouter(tags=["dashboard"])


@dashboard_router.get("/dashboard", dependencies=[Depends(require_session)])
async def dashboard(request: Request, context: AccountContext = Depends(get_context)):
    """
    Renders immediately from the cached session while a background sync
    refreshes the subscription. ``?checkout=success`` shows the confirmation
    banner once and is stripped from the address.
    """
    navigation = context.dashboard.mount(request.query_params)
    if navigation is not None:
        return navigation_response(navigation, context)
    return success_response(data=context.dashboard.snapshot(), alerts=context.pop_alerts())


@dashboard_router.post("/dashboard/banner/dismiss", dependencies=[Depends(require_session)])
async def dismiss_banner(context: AccountContext = Depends(get_context)):
    context.dashboard.dismiss_banner()
    return success_response()


@dashboard_router.get("/admin", dependencies=[Depends(require_admin)])
async def admin_home(context: AccountContext = Depends(get_context)):
    user = context.session_store.user
    return success_response(data={"admin": user.email}, alerts=context.pop_alerts())

"""
Billing Router - plan catalogue, plan selection and billing portal
"""

import logging

from fastapi import APIRouter, Depends

from app_context import AccountContext, get_context
from errors import ClientError
from guards import require_session
from services.plans_api import PLANS_UNAVAILABLE
from utils.responses import error_response, navigation_response, success_response

logger = logging.getLogger(__name__)

billing_router = APIRouter(tags=["billing"])


async def _plans_page(context: AccountContext):
    await context.plans.load()
    return success_response(
        data={
            "plans": context.plans.render(),
            "current_plan": context.plans.current_plan_slug,
            "signed_in": context.session_store.is_authenticated(),
        },
        alerts=context.pop_alerts(),
    )


@billing_router.get("/")
async def landing(context: AccountContext = Depends(get_context)):
    """Public pricing section"""
    return await _plans_page(context)


@billing_router.get("/plans", dependencies=[Depends(require_session)])
async def plans_page(context: AccountContext = Depends(get_context)):
    return await _plans_page(context)


@billing_router.post("/plans/{slug}/select")
async def select_plan(slug: str, context: AccountContext = Depends(get_context)):
    """
    Pick a plan. Anonymous visitors are sent through registration and the
    checkout resumes after their next login.
    """
    try:
        plan = await context.plans.find(slug)
    except ClientError as e:
        logger.error(f"Plan lookup failed for '{slug}': {e.message}")
        return error_response("plans_unavailable", status=503, message=PLANS_UNAVAILABLE)
    if plan is None:
        return error_response("plan_not_found", status=404, message=f"Unknown plan '{slug}'")

    navigation = await context.plans.select(plan)
    if navigation is None:
        return error_response("checkout_in_progress", status=409, message="Checkout already in progress")
    return navigation_response(navigation, context)


@billing_router.post("/billing/portal", dependencies=[Depends(require_session)])
async def billing_portal(context: AccountContext = Depends(get_context)):
    navigation = await context.dashboard.open_billing_portal()
    if navigation is None:
        return error_response("portal_in_progress", status=409, message="Billing portal already opening")
    return navigation_response(navigation, context)

"""
Account Router - registration, login, logout and profile pages
"""

import logging

from fastapi import APIRouter, Depends

from app_context import AccountContext, get_context
from errors import AuthError, NetworkError, ValidationError
from forms import LoginForm, ProfileForm, RegistrationForm
from guards import require_session
from navigation import HOME, LOGIN, Navigation
from utils.responses import error_response, navigation_response, success_response

logger = logging.getLogger(__name__)

account_router = APIRouter(tags=["account"])


def _auth_page(context: AccountContext):
    return success_response(
        data={
            "pending_plan": context.handoff.pending_plan_slug(),
            "error": context.session_store.error,
            "loading": context.session_store.is_loading,
        },
        alerts=context.pop_alerts(),
    )


@account_router.get("/register")
async def register_page(context: AccountContext = Depends(get_context)):
    return _auth_page(context)


@account_router.post("/register")
async def register(form: RegistrationForm, context: AccountContext = Depends(get_context)):
    """Create the account; the visitor is sent to log in next."""
    try:
        form.validate_locally()
    except ValidationError as e:
        return error_response("validation_error", status=422, message=e.message)

    try:
        await context.session_store.register(form.to_fields())
    except AuthError as e:
        return error_response("auth_error", status=400, message=e.message)
    except NetworkError:
        return error_response("network_error", status=503, message=context.session_store.error)

    context.push_alert("Account created! Please sign in.")
    return navigation_response(Navigation.to(LOGIN), context)


@account_router.get("/login")
async def login_page(context: AccountContext = Depends(get_context)):
    return _auth_page(context)


@account_router.post("/login")
async def login(form: LoginForm, context: AccountContext = Depends(get_context)):
    """
    Log in, then either resume the checkout picked before the detour or
    continue to the dashboard.
    """
    try:
        await context.session_store.login(form.model_dump())
    except AuthError as e:
        return error_response("auth_error", status=401, message=e.message)
    except NetworkError:
        return error_response("network_error", status=503, message=context.session_store.error)

    navigation = await context.handoff.resume_after_login()
    return navigation_response(navigation, context)


@account_router.post("/login/clear-error")
async def clear_error(context: AccountContext = Depends(get_context)):
    context.session_store.clear_error()
    return success_response()


@account_router.post("/logout")
async def logout(context: AccountContext = Depends(get_context)):
    await context.session_store.logout()
    return navigation_response(Navigation.to(HOME), context)


@account_router.patch("/profile", dependencies=[Depends(require_session)])
async def update_profile(form: ProfileForm, context: AccountContext = Depends(get_context)):
    try:
        user = await context.session_store.update_profile(form.to_fields())
    except AuthError as e:
        return error_response("auth_error", status=400, message=e.message)
    except NetworkError:
        return error_response("network_error", status=503, message=context.session_store.error)
    return success_response(data={"user": user.model_dump(mode="json")}, message="Profile updated")

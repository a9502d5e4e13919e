"""
Merot account shell - local FastAPI app wiring the session, guards,
checkout handoff and subscription reconciler
"""

import logging
import traceback
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from app_context import AccountContext, build_context
from config.settings import settings
from guards import GuardRedirect
from routers.account_router import account_router
from routers.billing_router import billing_router
from routers.dashboard_router import dashboard_router
from utils.responses import navigation_response

# Logging setup - write ALL events to logs/app.log
LOGS_DIR = settings.log_dir
LOGS_DIR.mkdir(parents=True, exist_ok=True)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(LOGS_DIR / "app.log"),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


# Uncaught exception middleware - logs all unhandled exceptions and returns 500
class UncaughtExceptionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Uncaught exception: {e}\n{traceback.format_exc()}")
            return JSONResponse(
                status_code=500,
                content={"ok": False, "error": "Internal Server Error"}
            )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses: X-Frame-Options, X-Content-Type-Options, Referrer-Policy"""
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Checkout and portal URLs are external; do not leak account paths to them
        response.headers["Referrer-Policy"] = "same-origin"
        return response


def create_app(context: Optional[AccountContext] = None) -> FastAPI:
    """
    Build the account shell.

    Args:
        context: Prebuilt client core; built from settings at startup when omitted
    """
    app = FastAPI(title="Merot Account")
    app.state.context = context

    app.add_middleware(UncaughtExceptionMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    @app.exception_handler(GuardRedirect)
    async def guard_redirect_handler(request, exc: GuardRedirect):
        return navigation_response(exc.navigation)

    @app.on_event("startup")
    async def initialize_context():
        """Build the client core unless one was injected."""
        if app.state.context is None:
            app.state.context = build_context(settings)
            logger.info("✅ Account context initialized")

    @app.on_event("shutdown")
    async def close_context():
        if app.state.context is not None:
            await app.state.context.aclose()

    app.include_router(billing_router)
    app.include_router(account_router)
    app.include_router(dashboard_router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)

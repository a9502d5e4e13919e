from typing import List, Optional

from fastapi.responses import JSONResponse, RedirectResponse

from navigation import Navigation


def success_response(data=None, message="OK", status=200, alerts: Optional[List[str]] = None):
    return JSONResponse(
        status_code=status,
        content={
            "ok": True,
            "data": data or {},
            "error": None,
            "message": message,
            "alerts": alerts or [],
        }
    )


def error_response(error_code, status=400, message="An error occurred", data=None):
    return JSONResponse(
        status_code=status,
        content={
            "ok": False,
            "data": data or {},
            "error": error_code,
            "message": message,
            "alerts": [],
        }
    )


def navigation_response(navigation: Navigation, context=None):
    """
    Turn a navigation outcome into a 303 redirect.
    Internal routes and external checkout/portal URLs are followed verbatim;
    the alert, if any, is kept for the next rendered page.
    """
    if context is not None and navigation.alert:
        context.push_alert(navigation.alert)
    return RedirectResponse(url=navigation.location, status_code=303)

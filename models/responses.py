"""
Result types for every backend endpoint the client consumes
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from models.plan import Plan
from models.user import Subscription, User


class ErrorPayload(BaseModel):
    """
    Error body returned by the backend.

    Known shapes:
        {"errors": ["Email has already been taken", ...]}
        {"errors": {"email": ["has already been taken"], ...}}
        {"error": "Invalid email or password"}
        {"message": "..."}
    """

    model_config = ConfigDict(extra="ignore")

    errors: Optional[Union[List[Any], Dict[str, Any]]] = None
    error: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_body(cls, body: Any) -> "ErrorPayload":
        if isinstance(body, dict):
            errors = body.get("errors")
            if not isinstance(errors, (list, dict)):
                errors = None
            error = body.get("error")
            message = body.get("message")
            return cls(
                errors=errors,
                error=error if isinstance(error, str) else None,
                message=message if isinstance(message, str) else None,
            )
        if isinstance(body, str) and body.strip():
            return cls(error=body.strip())
        return cls()

    def describe(self, default: str) -> str:
        """Human-readable message, falling back to ``default``."""
        if isinstance(self.errors, list):
            parts = [str(item) for item in self.errors if item]
            if parts:
                return ", ".join(parts)
        if isinstance(self.errors, dict):
            parts = []
            for field, messages in self.errors.items():
                if isinstance(messages, (list, tuple)):
                    parts.extend(f"{field} {message}" for message in messages)
                elif messages:
                    parts.append(f"{field} {messages}")
            if parts:
                return ", ".join(parts)
        if self.error:
            return self.error
        if self.message:
            return self.message
        return default


class AuthResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    token: str
    user: User


class ProfileResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user: User


class PlansResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    plans: List[Plan] = Field(default_factory=list)


class PlanResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    plan: Plan


class CheckoutResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    checkout_url: str


class PortalResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    portal_url: str


class SubscriptionStatusResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    subscription: Optional[Subscription] = None

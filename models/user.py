from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from models.plan import Plan


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    TRIALING = "trialing"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    INACTIVE = "inactive"


class Subscription(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: SubscriptionStatus = SubscriptionStatus.INACTIVE
    current_plan: Optional[Plan] = None
    current_period_end: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def _unknown_status_is_inactive(cls, value):
        if value is None:
            return SubscriptionStatus.INACTIVE
        try:
            return SubscriptionStatus(value)
        except ValueError:
            return SubscriptionStatus.INACTIVE

    @property
    def has_plan(self) -> bool:
        return self.current_plan is not None


class User(BaseModel):
    """Profile of the logged-in customer, always replaced as a whole."""

    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    email: str
    full_name: str = ""
    first_name: str = ""
    last_name: Optional[str] = None
    admin: bool = False
    company_name: Optional[str] = None
    created_at: Optional[datetime] = None
    subscription: Optional[Subscription] = None

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from config.settings import PLAN_ENTERPRISE, PRICE_CUSTOM


class BillingPeriod(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    ONE_TIME = "one_time"


class Plan(BaseModel):
    """Read-only catalogue entry."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: Union[int, str]
    slug: str
    name: str
    description: str = ""
    price: Optional[float] = None
    price_cents: Optional[int] = None
    price_formatted: Optional[str] = None
    billing_period: Optional[BillingPeriod] = None
    is_featured: bool = False
    badge: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    stripe_price_id: Optional[str] = None

    @property
    def is_custom(self) -> bool:
        """Enterprise-tier or custom-priced plans are sold through sales."""
        return self.slug == PLAN_ENTERPRISE or self.price_formatted == PRICE_CUSTOM

    @property
    def is_free(self) -> bool:
        if self.price_cents is not None:
            return self.price_cents == 0
        return self.price is not None and self.price == 0

    @property
    def is_purchasable(self) -> bool:
        """True for paid plans that can go through checkout."""
        if self.is_custom or self.is_free:
            return False
        if self.price is None and self.price_cents is None:
            return False
        return bool(self.stripe_price_id)

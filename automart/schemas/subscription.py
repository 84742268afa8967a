# automart/schemas/subscription.py
from datetime import datetime
from typing import List, Literal, Optional

from .base import BaseSchema

TierLiteral = Literal["free", "premium", "vip"]


class SubscriptionOut(BaseSchema):
    id: int
    user_id: int
    tier: TierLiteral
    active: bool
    start_date: datetime
    end_date: Optional[datetime] = None


class SubscriptionIn(BaseSchema):
    tier: TierLiteral


class AdminSubscriptionIn(BaseSchema):
    tier: Optional[TierLiteral] = None
    active: Optional[bool] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class TierOut(BaseSchema):
    id: TierLiteral
    name: str
    price: float
    price_display: str
    listing_limit: Optional[int] = None
    features: List[str]

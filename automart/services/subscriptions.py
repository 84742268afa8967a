# automart/services/subscriptions.py
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from automart.core.config import settings
from automart.core.roles import UserRole
from automart.models.showroom import Showroom
from automart.models.subscription import Subscription, SubscriptionTier
from automart.models.user import User

logger = logging.getLogger(__name__)

TIERS = [
    {
        "id": SubscriptionTier.FREE.value,
        "name": "Free",
        "price": 0,
        "price_display": "$0",
        "listing_limit": settings.FREE_TIER_LISTING_LIMIT,
        "features": [
            f"Up to {settings.FREE_TIER_LISTING_LIMIT} car listings",
            "Basic showroom profile",
            "Standard search visibility",
            "Email support",
        ],
    },
    {
        "id": SubscriptionTier.PREMIUM.value,
        "name": "Premium",
        "price": 29.99,
        "price_display": "$29.99",
        "listing_limit": None,
        "features": [
            "Unlimited car listings",
            "Enhanced showroom profile",
            "Priority search placement",
            "Phone support",
            "Detailed analytics",
        ],
    },
    {
        "id": SubscriptionTier.VIP.value,
        "name": "VIP",
        "price": 99.99,
        "price_display": "$99.99",
        "listing_limit": None,
        "features": [
            "Unlimited car listings",
            "Premium showroom profile",
            "Top search placement",
            "Featured in VIP section",
            "Dedicated account manager",
        ],
    },
]


def list_tiers() -> List[dict]:
    return TIERS


def listing_limit(subscription: Subscription) -> Optional[int]:
    if subscription.tier == SubscriptionTier.FREE.value or not subscription.active:
        return settings.FREE_TIER_LISTING_LIMIT
    return None


def get_subscription(db: Session, user_id: int) -> Optional[Subscription]:
    return db.execute(select(Subscription).where(Subscription.user_id == user_id)).scalars().first()


def sync_showroom_featured(db: Session, user: User, subscription: Subscription) -> None:
    """VIP and active -> the seller's showroom is featured, anything else -> not."""
    if user.role != UserRole.SELLER.value:
        return
    showroom = db.execute(select(Showroom).where(Showroom.user_id == user.id)).scalars().first()
    if showroom is None:
        return
    featured = subscription.tier == SubscriptionTier.VIP.value and bool(subscription.active)
    if showroom.is_featured != featured:
        logger.info("showroom %s featured -> %s", showroom.id, featured)
        showroom.is_featured = featured


def upsert_subscription(
    db: Session,
    user: User,
    tier: Optional[str] = None,
    active: Optional[bool] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    clear_end_date: bool = False,
) -> Tuple[Subscription, bool]:
    """Returns (subscription, created). Caller commits."""
    sub = get_subscription(db, user.id)
    created = sub is None

    if created:
        sub = Subscription(
            user_id=user.id,
            tier=tier or SubscriptionTier.FREE.value,
            active=True if active is None else active,
            start_date=start_date or datetime.now(timezone.utc),
            end_date=end_date,
        )
        db.add(sub)
    else:
        if tier is not None:
            sub.tier = tier
        if active is not None:
            sub.active = active
        if start_date is not None:
            sub.start_date = start_date
        if end_date is not None or clear_end_date:
            sub.end_date = end_date

    db.flush()
    sync_showroom_featured(db, user, sub)
    return sub, created


def cancel_subscription(db: Session, user: User, subscription: Subscription) -> Subscription:
    subscription.active = False
    sync_showroom_featured(db, user, subscription)
    return subscription

# automart/routers/subscriptions.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from automart.core.auth import get_current_user, require_capability
from automart.core.db import get_db
from automart.core.roles import Capability
from automart.models.user import User
from automart.schemas.subscription import SubscriptionIn, SubscriptionOut, TierOut
from automart.services.subscriptions import (
    cancel_subscription,
    get_subscription,
    list_tiers,
    upsert_subscription,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["subscriptions"])


@router.get("/subscription-tiers", response_model=List[TierOut])
def subscription_tiers():
    return list_tiers()


@router.get("/subscriptions/my", response_model=SubscriptionOut)
def my_subscription(
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    sub = get_subscription(db, me.id)
    if not sub:
        raise HTTPException(status_code=404, detail="subscription_not_found")
    return sub


@router.post("/subscriptions", response_model=SubscriptionOut)
def subscribe(
    body: SubscriptionIn,
    db: Session = Depends(get_db),
    me: User = Depends(require_capability(Capability.MANAGE_SUBSCRIPTION)),
):
    # recorded as active right away; nothing is charged
    sub, created = upsert_subscription(db, me, tier=body.tier, active=True, clear_end_date=True)
    db.commit()
    db.refresh(sub)
    logger.info("user %s %s %s subscription", me.id, "started" if created else "switched to", sub.tier)
    return sub


@router.post("/subscriptions/cancel", response_model=SubscriptionOut)
def cancel_my_subscription(
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    sub = get_subscription(db, me.id)
    if not sub:
        raise HTTPException(status_code=404, detail="subscription_not_found")
    cancel_subscription(db, me, sub)
    db.commit()
    db.refresh(sub)
    return sub

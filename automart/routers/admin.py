# automart/routers/admin.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status
from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from automart.core.auth import require_admin
from automart.core.db import get_db
from automart.core.roles import UserRole
from automart.core.security import hash_password
from automart.models.subscription import Subscription
from automart.models.user import User
from automart.schemas.subscription import AdminSubscriptionIn, SubscriptionOut
from automart.schemas.user import CreateSellerIn, UserOut
from automart.services.catalog import create_default_showroom
from automart.services.subscriptions import cancel_subscription, get_subscription, upsert_subscription

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="user_not_found")
    return user


# ---------- sellers ----------
@router.post("/create-seller", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_seller(
    body: CreateSellerIn,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    dup = db.execute(
        select(User).where(or_(User.username == body.username, User.email == body.email))
    ).scalars().first()
    if dup is not None:
        detail = "username_exists" if dup.username == body.username else "email_exists"
        raise HTTPException(status_code=400, detail=detail)

    user = User(
        username=body.username,
        email=body.email,
        password_hash=hash_password(body.password),
        role=UserRole.SELLER.value,
        name=body.name,
        phone=body.phone,
        is_active=True,
    )
    db.add(user)
    db.flush()
    create_default_showroom(db, user)
    db.commit()
    db.refresh(user)
    logger.info("admin %s created seller %s", admin.id, user.id)
    return user


# ---------- subscriptions ----------
@router.get("/subscriptions", response_model=List[SubscriptionOut])
def list_subscriptions(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return db.execute(select(Subscription).order_by(Subscription.user_id)).scalars().all()


@router.get("/users/{user_id}/subscription", response_model=Optional[SubscriptionOut])
def get_user_subscription(
    user_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    _user_or_404(db, user_id)
    # null rather than 404 so the client can offer "create"
    return get_subscription(db, user_id)


@router.put("/users/{user_id}/subscription", response_model=SubscriptionOut)
def set_user_subscription(
    body: AdminSubscriptionIn,
    response: Response,
    user_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = _user_or_404(db, user_id)
    sub, created = upsert_subscription(
        db,
        user,
        tier=body.tier,
        active=body.active,
        start_date=body.start_date,
        end_date=body.end_date,
        clear_end_date="end_date" in body.model_fields_set and body.end_date is None,
    )
    db.commit()
    db.refresh(sub)

    if created:
        response.status_code = status.HTTP_201_CREATED
    logger.info("admin %s set subscription of user %s to %s (active=%s)", admin.id, user.id, sub.tier, sub.active)
    return sub


@router.post("/users/{user_id}/subscription/cancel", response_model=SubscriptionOut)
def cancel_user_subscription(
    user_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = _user_or_404(db, user_id)
    sub = get_subscription(db, user_id)
    if not sub:
        raise HTTPException(status_code=404, detail="subscription_not_found")
    cancel_subscription(db, user, sub)
    db.commit()
    db.refresh(sub)
    return sub

# automart/routers/users.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from automart.core.auth import get_current_user, require_admin
from automart.core.db import get_db
from automart.core.roles import UserRole, STORED_ROLES
from automart.core.security import hash_password
from automart.core.visibility import ShowroomStatus
from automart.models.user import User
from automart.schemas.user import UserOut, UserUpdateIn
from automart.services.catalog import get_showroom_by_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return db.execute(select(User).order_by(User.id)).scalars().all()


@router.get("/active", response_model=List[UserOut])
def list_active_users(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return db.execute(select(User).where(User.is_active.is_(True)).order_by(User.id)).scalars().all()


@router.get("/role/{role}", response_model=List[UserOut])
def list_users_by_role(role: str, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    if role not in {r.value for r in STORED_ROLES}:
        raise HTTPException(status_code=400, detail="invalid_role")
    return db.execute(select(User).where(User.role == role).order_by(User.id)).scalars().all()


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    body: UserUpdateIn,
    user_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    is_admin = me.role == UserRole.ADMIN.value
    if user_id != me.id and not is_admin:
        raise HTTPException(status_code=403, detail="forbidden")

    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="user_not_found")

    data = body.model_dump(exclude_unset=True, by_alias=False)

    if "role" in data and not is_admin:
        raise HTTPException(status_code=403, detail="role_change_requires_admin")

    if "email" in data and data["email"] != user.email:
        taken = db.execute(select(User).where(User.email == data["email"], User.id != user.id)).scalars().first()
        if taken:
            raise HTTPException(status_code=400, detail="email_exists")

    password = data.pop("password", None)
    if password:
        user.password_hash = hash_password(password)

    for field, value in data.items():
        if value is not None:
            setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user


@router.post("/{user_id}/disable", response_model=UserOut)
def disable_user(
    user_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="cannot_disable_self")

    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="user_not_found")

    # a disabled seller's showroom drops out of public listings
    if user.role == UserRole.SELLER.value:
        showroom = get_showroom_by_user(db, user.id)
        if showroom:
            showroom.status = ShowroomStatus.DRAFT.value

    user.is_active = False
    db.commit()
    db.refresh(user)
    logger.info("user %s disabled by admin %s", user.id, admin.id)
    return user


@router.post("/{user_id}/enable", response_model=UserOut)
def enable_user(
    user_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="user_not_found")

    user.is_active = True
    db.commit()
    db.refresh(user)
    return user

# automart/routers/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status, Response, Request
from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from automart.core.auth import get_current_user
from automart.core.config import settings
from automart.core.db import get_db
from automart.core.rate_limit import auth_limit
from automart.core.roles import UserRole, capabilities_for, home_path
from automart.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
)
from automart.models.user import User
from automart.schemas.auth import RegisterIn, LoginIn, LoginOut, TokenOut, SessionUserOut
from automart.schemas.common import StatusMessageOut
from automart.schemas.user import UserOut
from automart.services.catalog import create_default_showroom

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])

REFRESH_COOKIE = "refreshToken"


def _set_refresh_cookie(response: Response, user: User) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=create_refresh_token(sub=str(user.id)),
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        path="/",
    )


def to_session_user(user: User) -> SessionUserOut:
    role = UserRole(user.role)
    return SessionUserOut(
        **UserOut.model_validate(user).model_dump(),
        capabilities=sorted(c.value for c in capabilities_for(role)),
        home_path=home_path(role),
    )


# ---------- 1) register ----------
@router.post(
    "/register",
    response_model=LoginOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_limit)],
)
def register(payload: RegisterIn, response: Response, db: Session = Depends(get_db)):
    dup = db.execute(
        select(User).where(or_(User.username == payload.username, User.email == payload.email))
    ).scalars().first()
    if dup is not None:
        detail = "username_exists" if dup.username == payload.username else "email_exists"
        raise HTTPException(status_code=400, detail=detail)

    user = User(
        username=payload.username,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=payload.role,
        name=payload.name,
        phone=payload.phone,
        avatar=payload.avatar,
        is_active=True,
    )
    db.add(user)
    db.flush()

    # sellers start with an empty draft showroom
    if user.role == UserRole.SELLER.value:
        create_default_showroom(db, user)

    db.commit()
    db.refresh(user)
    logger.info("registered user %s (%s)", user.id, user.role)

    _set_refresh_cookie(response, user)
    return LoginOut(access_token=create_access_token(sub=str(user.id)), user=UserOut.model_validate(user))


# ---------- 2) login ----------
@router.post("/login", response_model=LoginOut, dependencies=[Depends(auth_limit)])
def login(payload: LoginIn, response: Response, db: Session = Depends(get_db)):
    user = db.execute(select(User).where(User.username == payload.username)).scalars().first()

    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="invalid_credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="account_disabled")

    _set_refresh_cookie(response, user)
    return LoginOut(access_token=create_access_token(sub=str(user.id)), user=UserOut.model_validate(user))


# ---------- 3) refresh ----------
@router.post("/refresh", response_model=TokenOut)
def refresh(request: Request, db: Session = Depends(get_db)):
    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        raise HTTPException(status_code=401, detail="no_refresh_token")

    payload = decode_refresh_token(token)
    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="invalid_token_payload")

    user = db.get(User, int(sub))
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="invalid_refresh_token")

    return TokenOut(access_token=create_access_token(sub=sub))


# ---------- 4) logout ----------
@router.post("/logout", response_model=StatusMessageOut)
def logout(response: Response):
    response.delete_cookie(key=REFRESH_COOKIE, httponly=True, samesite="lax", path="/")
    return StatusMessageOut(message="logged_out")


# ---------- 5) current user ----------
@router.get("/user", response_model=SessionUserOut)
def current_user(me: User = Depends(get_current_user)):
    return to_session_user(me)

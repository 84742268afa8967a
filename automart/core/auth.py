# automart/core/auth.py
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, ExpiredSignatureError
from sqlalchemy.orm import Session

from automart.core.db import get_db
from automart.core.roles import Capability, UserRole, has_capability
from automart.core.security import decode_access_token
from automart.core.visibility import Requester
from automart.models.user import User

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_from_token(token: str, db: Session) -> User:
    try:
        payload = decode_access_token(token)
    except ExpiredSignatureError:
        raise _unauthorized("token_expired")
    except JWTError:
        raise _unauthorized("invalid_token")

    sub = payload.get("sub")
    if not sub or payload.get("type", "access") != "access":
        raise _unauthorized("invalid_token")
    try:
        user_id = int(sub)
    except ValueError:
        raise _unauthorized("invalid_token")

    user = db.get(User, user_id)
    if not user:
        raise _unauthorized("user_not_found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="account_disabled")
    return user


def get_current_user_optional(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    No Authorization header -> None (anonymous).
    A bearer token that is invalid or expired -> 401, never silently anonymous.
    """
    if creds is None or (creds.scheme or "").lower() != "bearer":
        return None
    return _user_from_token(creds.credentials, db)


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    if not creds or (creds.scheme or "").lower() != "bearer":
        raise _unauthorized("authentication_required")
    return _user_from_token(creds.credentials, db)


def get_requester(me: Optional[User] = Depends(get_current_user_optional)) -> Requester:
    return Requester.from_user(me)


def require_admin(me: User = Depends(get_current_user)) -> User:
    if me.role != UserRole.ADMIN.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="admin_required")
    return me


def require_capability(capability: Capability):
    def dependency(me: User = Depends(get_current_user)) -> User:
        if not has_capability(me.role, capability):
            logger.info("capability check failed: user=%s role=%s needed=%s", me.id, me.role, capability.value)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="insufficient_permissions")
        return me

    return dependency

# automart/routers/showrooms.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from automart.core.auth import get_current_user, get_requester, require_capability
from automart.core.config import settings
from automart.core.db import get_db
from automart.core.rate_limit import public_listings_limit
from automart.core.roles import Capability, UserRole
from automart.core.visibility import Requester, can_view_showroom, featured_showrooms
from automart.models.car import Car
from automart.models.showroom import Showroom
from automart.models.user import User
from automart.schemas.car import CarOut
from automart.schemas.showroom import ShowroomCreateIn, ShowroomUpdateIn, ShowroomOut
from automart.services.catalog import get_showroom_by_user, list_visible_showrooms

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/showrooms", tags=["showrooms"])


def _visible_showroom_or_404(db: Session, requester: Requester, showroom_id: int) -> Showroom:
    showroom = db.get(Showroom, showroom_id)
    # hidden drafts get the exact same answer as missing rows
    if not can_view_showroom(requester, showroom):
        raise HTTPException(status_code=404, detail="showroom_not_found")
    return showroom


# ---------- public ----------
@router.get("", response_model=List[ShowroomOut], dependencies=[Depends(public_listings_limit)])
def list_showrooms(
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester),
):
    return list_visible_showrooms(db, requester)


@router.get("/featured", response_model=List[ShowroomOut], dependencies=[Depends(public_listings_limit)])
def list_featured_showrooms(
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester),
):
    rows = db.execute(select(Showroom).order_by(Showroom.id)).scalars().all()
    return featured_showrooms(requester, rows)


@router.get("/user/{user_id}", response_model=ShowroomOut)
def get_showroom_of_user(
    user_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    if user_id != me.id and me.role != UserRole.ADMIN.value:
        raise HTTPException(status_code=403, detail="forbidden")

    showroom = get_showroom_by_user(db, user_id)
    if not showroom:
        raise HTTPException(status_code=404, detail="showroom_not_found")
    return showroom


@router.get("/{showroom_id}", response_model=ShowroomOut)
def get_showroom(
    showroom_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester),
):
    return _visible_showroom_or_404(db, requester, showroom_id)


@router.get("/{showroom_id}/cars", response_model=List[CarOut])
def list_showroom_cars(
    showroom_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester),
):
    _visible_showroom_or_404(db, requester, showroom_id)
    q = select(Car).where(Car.showroom_id == showroom_id).order_by(desc(Car.created_at), desc(Car.id))
    return db.execute(q).scalars().all()


# ---------- seller / admin ----------
@router.post("", response_model=ShowroomOut, status_code=status.HTTP_201_CREATED)
def create_showroom(
    body: ShowroomCreateIn,
    db: Session = Depends(get_db),
    me: User = Depends(require_capability(Capability.MANAGE_SHOWROOM)),
):
    if get_showroom_by_user(db, me.id):
        raise HTTPException(status_code=400, detail="showroom_already_exists")

    data = body.model_dump(by_alias=False)
    data["logo"] = data.get("logo") or settings.PLACEHOLDER_LOGO
    data["header_image"] = data.get("header_image") or settings.PLACEHOLDER_HEADER

    showroom = Showroom(user_id=me.id, **data)
    db.add(showroom)
    db.commit()
    db.refresh(showroom)
    logger.info("showroom %s created by user %s (%s)", showroom.id, me.id, showroom.status)
    return showroom


@router.put("/{showroom_id}", response_model=ShowroomOut)
def update_showroom(
    body: ShowroomUpdateIn,
    showroom_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    requester = Requester.from_user(me)
    showroom = _visible_showroom_or_404(db, requester, showroom_id)
    if not (requester.owns(showroom) or requester.is_admin):
        raise HTTPException(status_code=403, detail="forbidden")

    data = body.model_dump(exclude_unset=True, by_alias=False)

    # clearing an image keeps the current one (or the placeholder)
    if "logo" in data and not data["logo"]:
        data["logo"] = showroom.logo or settings.PLACEHOLDER_LOGO
    if "header_image" in data and not data["header_image"]:
        data["header_image"] = showroom.header_image or settings.PLACEHOLDER_HEADER

    for field, value in data.items():
        if value is None and field in ("name", "city", "country", "status"):
            continue
        setattr(showroom, field, value)

    db.commit()
    db.refresh(showroom)
    return showroom

# automart/routers/cars.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from automart.core.auth import get_current_user, get_requester, require_capability
from automart.core.config import settings
from automart.core.db import get_db
from automart.core.rate_limit import public_listings_limit, standard_limit
from automart.core.roles import Capability, UserRole
from automart.core.visibility import Requester, can_view_car, can_view_showroom, featured_cars, filter_cars
from automart.models.car import Car
from automart.models.showroom import Showroom
from automart.models.user import User
from automart.schemas.car import CarCreateIn, CarUpdateIn, CarOut, CarSearchIn
from automart.services.catalog import count_cars, get_showroom_by_user, search_cars, showroom_lookup
from automart.services.subscriptions import get_subscription, listing_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cars", tags=["cars"])

DEFAULT_FEATURED_LIMIT = 6


def _images_or_placeholder(images: Optional[List[str]]) -> List[str]:
    cleaned = [url for url in (images or []) if url]
    return cleaned or [settings.PLACEHOLDER_CAR_IMAGE]


def _owned_car_or_error(db: Session, car_id: int, me: User) -> Car:
    car = db.get(Car, car_id)
    showroom = db.get(Showroom, car.showroom_id) if car else None
    requester = Requester.from_user(me)
    # a car hidden from the caller answers like a missing one, before any ownership check
    if car is None or not can_view_showroom(requester, showroom):
        raise HTTPException(status_code=404, detail="car_not_found")
    if not (requester.owns(showroom) or requester.is_admin):
        raise HTTPException(status_code=403, detail="forbidden")
    return car


# ---------- public ----------
@router.get("/featured", response_model=List[CarOut], dependencies=[Depends(public_listings_limit)])
def list_featured_cars(
    limit: int = Query(DEFAULT_FEATURED_LIMIT, ge=1, le=50),
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester),
):
    rows = db.execute(select(Car).order_by(desc(Car.created_at), desc(Car.id))).scalars().all()
    return featured_cars(requester, rows, showroom_lookup(db), limit=limit)


@router.post("/search", response_model=List[CarOut], dependencies=[Depends(public_listings_limit)])
def search(
    params: CarSearchIn,
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester),
):
    return filter_cars(requester, search_cars(db, params), showroom_lookup(db))


@router.get("/{car_id}", response_model=CarOut)
def get_car(
    car_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester),
):
    car = db.get(Car, car_id)
    if not can_view_car(requester, car, showroom_lookup(db)):
        raise HTTPException(status_code=404, detail="car_not_found")
    return car


@router.get("", response_model=List[CarOut], dependencies=[Depends(public_listings_limit)])
def list_cars(
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester),
):
    rows = db.execute(select(Car).order_by(desc(Car.created_at), desc(Car.id))).scalars().all()
    return filter_cars(requester, rows, showroom_lookup(db))


# ---------- seller / admin ----------
@router.post(
    "",
    response_model=CarOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(standard_limit)],
)
def create_car(
    body: CarCreateIn,
    db: Session = Depends(get_db),
    me: User = Depends(require_capability(Capability.MANAGE_LISTINGS)),
):
    showroom = get_showroom_by_user(db, me.id)
    if not showroom:
        raise HTTPException(status_code=400, detail="showroom_required")

    subscription = get_subscription(db, me.id)
    if not subscription:
        raise HTTPException(status_code=400, detail="subscription_required")

    limit = listing_limit(subscription)
    if limit is not None and count_cars(db, showroom.id) >= limit:
        raise HTTPException(status_code=403, detail="listing_limit_reached")

    data = body.model_dump(by_alias=False)
    data["images"] = _images_or_placeholder(data.get("images"))

    car = Car(showroom_id=showroom.id, is_featured=False, **data)
    db.add(car)
    db.commit()
    db.refresh(car)
    logger.info("car %s listed in showroom %s", car.id, showroom.id)
    return car


@router.put("/{car_id}", response_model=CarOut)
def update_car(
    body: CarUpdateIn,
    car_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    car = _owned_car_or_error(db, car_id, me)
    data = body.model_dump(exclude_unset=True, by_alias=False)

    if "is_featured" in data and me.role != UserRole.ADMIN.value:
        raise HTTPException(status_code=403, detail="featuring_requires_admin")

    if "images" in data:
        data["images"] = _images_or_placeholder(data["images"])

    for field, value in data.items():
        if value is None and field not in ("color", "condition", "description"):
            continue
        setattr(car, field, value)

    db.commit()
    db.refresh(car)
    return car


@router.delete("/{car_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_car(
    car_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    car = _owned_car_or_error(db, car_id, me)
    db.delete(car)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

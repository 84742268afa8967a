# automart/routers/favorites.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status
from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from automart.core.auth import require_capability
from automart.core.db import get_db
from automart.core.rate_limit import standard_limit
from automart.core.roles import Capability
from automart.core.visibility import Requester, can_view_car
from automart.models.car import Car
from automart.models.favorite import Favorite
from automart.models.user import User
from automart.schemas.favorite import FavoriteCheckOut, FavoriteCreateIn, FavoriteOut
from automart.services.catalog import showroom_lookup

save_favorites = require_capability(Capability.SAVE_FAVORITES)

router = APIRouter(
    prefix="/api/favorites",
    tags=["favorites"],
    dependencies=[Depends(standard_limit)],
)


def _find(db: Session, user_id: int, car_id: int):
    return db.execute(
        select(Favorite).where(Favorite.user_id == user_id, Favorite.car_id == car_id)
    ).scalars().first()


@router.get("", response_model=List[FavoriteOut])
def list_favorites(
    db: Session = Depends(get_db),
    me: User = Depends(save_favorites),
):
    rows = db.execute(
        select(Favorite).where(Favorite.user_id == me.id).order_by(desc(Favorite.id))
    ).scalars().all()

    # a saved car whose showroom went back to draft drops out of the list
    requester = Requester.from_user(me)
    lookup = showroom_lookup(db)
    return [f for f in rows if can_view_car(requester, db.get(Car, f.car_id), lookup)]


@router.get("/car/{car_id}", response_model=FavoriteCheckOut)
def check_favorite(
    car_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    me: User = Depends(save_favorites),
):
    return FavoriteCheckOut(is_favorite=_find(db, me.id, car_id) is not None)


@router.post("", response_model=FavoriteOut, status_code=status.HTTP_201_CREATED)
def add_favorite(
    body: FavoriteCreateIn,
    db: Session = Depends(get_db),
    me: User = Depends(save_favorites),
):
    car = db.get(Car, body.car_id)
    if not can_view_car(Requester.from_user(me), car, showroom_lookup(db)):
        raise HTTPException(status_code=404, detail="car_not_found")

    if _find(db, me.id, car.id):
        raise HTTPException(status_code=400, detail="already_favorited")

    fav = Favorite(user_id=me.id, car_id=car.id)
    db.add(fav)
    db.commit()
    db.refresh(fav)
    return fav


@router.delete("/{favorite_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_favorite(
    favorite_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    me: User = Depends(save_favorites),
):
    fav = db.get(Favorite, favorite_id)
    if not fav:
        raise HTTPException(status_code=404, detail="favorite_not_found")
    if fav.user_id != me.id:
        raise HTTPException(status_code=403, detail="forbidden")

    db.delete(fav)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

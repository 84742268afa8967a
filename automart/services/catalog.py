# automart/services/catalog.py
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy import select, desc, func
from sqlalchemy.orm import Session

from automart.core.visibility import Requester, filter_showrooms, ShowroomStatus
from automart.models.car import Car
from automart.models.showroom import Showroom
from automart.schemas.car import CarSearchIn


def showroom_lookup(db: Session) -> Callable[[int], Optional[Showroom]]:
    """Memoised ``showroom_id -> Showroom | None`` for one request."""
    cache: Dict[int, Optional[Showroom]] = {}

    def lookup(showroom_id: int) -> Optional[Showroom]:
        if showroom_id not in cache:
            cache[showroom_id] = db.get(Showroom, showroom_id)
        return cache[showroom_id]

    return lookup


def get_showroom_by_user(db: Session, user_id: int) -> Optional[Showroom]:
    return db.execute(select(Showroom).where(Showroom.user_id == user_id)).scalars().first()


def list_visible_showrooms(db: Session, requester: Requester) -> List[Showroom]:
    rows = db.execute(select(Showroom).order_by(Showroom.id)).scalars().all()
    return filter_showrooms(requester, rows)


def parse_price_range(value: Optional[str]) -> Tuple[Optional[int], Optional[int]]:
    """'1000-5000' -> (1000, 5000), '1000-' -> (1000, None), '-5000' -> (None, 5000).
    Zero bounds are treated as absent."""
    if not value:
        return None, None
    low, _, high = value.partition("-")
    return (int(low) or None) if low else None, (int(high) or None) if high else None


def search_cars(db: Session, params: CarSearchIn) -> List[Car]:
    q = select(Car)

    if params.make:
        q = q.where(Car.make.ilike(f"%{params.make}%"))
    if params.model:
        q = q.where(Car.model.ilike(f"%{params.model}%"))
    if params.category:
        q = q.where(Car.category == params.category)
    if params.year:
        q = q.where(Car.year == params.year)
    if params.transmission:
        q = q.where(Car.transmission == params.transmission)
    if params.fuel_type:
        q = q.where(Car.fuel_type == params.fuel_type)

    low, high = parse_price_range(params.price_range)
    if low is not None:
        q = q.where(Car.price >= low)
    if high is not None:
        q = q.where(Car.price <= high)

    q = q.order_by(desc(Car.created_at), desc(Car.id))
    return list(db.execute(q).scalars().all())


def count_cars(db: Session, showroom_id: int) -> int:
    return db.scalar(select(func.count(Car.id)).where(Car.showroom_id == showroom_id)) or 0


def create_default_showroom(db: Session, user, status: ShowroomStatus = ShowroomStatus.DRAFT) -> Showroom:
    """Empty showroom every seller account starts with. Caller commits."""
    showroom = Showroom(
        user_id=user.id,
        name=f"{user.name}'s Showroom",
        description="",
        city="",
        country="",
        email=user.email,
        status=status.value,
        is_featured=False,
    )
    db.add(showroom)
    return showroom

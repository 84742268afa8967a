# automart/core/visibility.py
"""
Who may see which showrooms and cars.

Three cases only: admins see everything, a published showroom is visible to
everyone, a draft is visible to its owner and nobody else. Cars inherit the
visibility of their showroom.

Detail endpoints turn a ``False`` from :func:`can_view_showroom` /
:func:`can_view_car` into the same 404 they return for a missing row, so a
draft's existence is never revealed.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Set, TypeVar

from automart.core.roles import UserRole


class ShowroomStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


@dataclass(frozen=True)
class Requester:
    authenticated: bool
    user_id: Optional[int]
    role: UserRole

    @classmethod
    def anonymous(cls) -> "Requester":
        return cls(authenticated=False, user_id=None, role=UserRole.GUEST)

    @classmethod
    def from_user(cls, user) -> "Requester":
        if user is None:
            return cls.anonymous()
        return cls(authenticated=True, user_id=user.id, role=UserRole(user.role))

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def owns(self, showroom) -> bool:
        return self.authenticated and self.user_id is not None and showroom.user_id == self.user_id


S = TypeVar("S")
C = TypeVar("C")
ShowroomLookup = Callable[[int], Optional[object]]


def _is_published(showroom) -> bool:
    return ShowroomStatus(showroom.status) == ShowroomStatus.PUBLISHED


def can_view_showroom(requester: Requester, showroom) -> bool:
    if showroom is None:
        return False
    if requester.is_admin:
        return True
    return _is_published(showroom) or requester.owns(showroom)


def can_view_car(requester: Requester, car, showroom_lookup: ShowroomLookup) -> bool:
    if car is None:
        return False
    return can_view_showroom(requester, showroom_lookup(car.showroom_id))


def filter_showrooms(requester: Requester, showrooms: Iterable[S]) -> List[S]:
    rows = list(showrooms)
    if requester.is_admin:
        return rows

    kept = [s for s in rows if _is_published(s)]

    if requester.authenticated:
        kept_ids = {s.id for s in kept}
        own = next((s for s in rows if requester.owns(s) and s.id not in kept_ids), None)
        if own is not None:
            kept.append(own)

    return kept


def visible_showroom_ids(requester: Requester, showrooms: Iterable) -> Set[int]:
    return {s.id for s in filter_showrooms(requester, showrooms)}


def filter_cars(requester: Requester, cars: Iterable[C], showroom_lookup: ShowroomLookup) -> List[C]:
    rows = list(cars)
    if requester.is_admin:
        return rows
    return [car for car in rows if can_view_car(requester, car, showroom_lookup)]


def featured_cars(
    requester: Requester,
    cars: Iterable[C],
    showroom_lookup: ShowroomLookup,
    limit: Optional[int] = None,
) -> List[C]:
    # visibility before featured selection, never the other way round
    featured = [car for car in filter_cars(requester, cars, showroom_lookup) if car.is_featured]
    if limit is not None:
        featured = featured[:limit]
    return featured


def featured_showrooms(requester: Requester, showrooms: Iterable[S]) -> List[S]:
    return [s for s in filter_showrooms(requester, showrooms) if s.is_featured]

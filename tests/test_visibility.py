from types import SimpleNamespace

from automart.core.roles import UserRole
from automart.core.visibility import (
    Requester,
    ShowroomStatus,
    can_view_car,
    can_view_showroom,
    featured_cars,
    featured_showrooms,
    filter_cars,
    filter_showrooms,
    visible_showroom_ids,
)

PUBLISHED = ShowroomStatus.PUBLISHED.value
DRAFT = ShowroomStatus.DRAFT.value


def showroom(id, user_id, status, is_featured=False):
    return SimpleNamespace(id=id, user_id=user_id, status=status, is_featured=is_featured)


def car(id, showroom_id, is_featured=False):
    return SimpleNamespace(id=id, showroom_id=showroom_id, is_featured=is_featured)


def lookup_for(showrooms):
    by_id = {s.id: s for s in showrooms}
    return by_id.get


def requester(user_id, role):
    return Requester(authenticated=True, user_id=user_id, role=role)


ANON = Requester.anonymous()
ADMIN = requester(99, UserRole.ADMIN)

# s1 published (owner 10), s2 draft (owner 20), s3 published (owner 30)
S1 = showroom(1, 10, PUBLISHED, is_featured=True)
S2 = showroom(2, 20, DRAFT, is_featured=True)
S3 = showroom(3, 30, PUBLISHED)
SHOWROOMS = [S1, S2, S3]


def test_anonymous_sees_only_published_showrooms():
    assert filter_showrooms(ANON, SHOWROOMS) == [S1, S3]


def test_admin_sees_everything_unchanged():
    assert filter_showrooms(ADMIN, SHOWROOMS) == SHOWROOMS
    assert filter_cars(ADMIN, [car(1, 2), car(2, 404)], lookup_for(SHOWROOMS))[1].id == 2


def test_owner_of_draft_gets_it_appended():
    owner = requester(20, UserRole.SELLER)
    assert filter_showrooms(owner, SHOWROOMS) == [S1, S3, S2]


def test_owner_of_published_showroom_is_not_duplicated():
    owner = requester(10, UserRole.SELLER)
    assert filter_showrooms(owner, SHOWROOMS) == [S1, S3]


def test_other_seller_cannot_see_draft():
    other = requester(30, UserRole.SELLER)
    assert S2 not in filter_showrooms(other, SHOWROOMS)
    assert not can_view_showroom(other, S2)


def test_anonymous_requester_never_owns_a_showroom():
    # user_id None must not match a row whose user_id is None either
    orphan = showroom(7, None, DRAFT)
    assert not ANON.owns(orphan)
    assert not can_view_showroom(ANON, orphan)


def test_missing_showroom_is_never_visible():
    assert not can_view_showroom(ADMIN, None)
    assert not can_view_car(ANON, None, lookup_for(SHOWROOMS))


def test_car_inherits_showroom_visibility():
    lookup = lookup_for(SHOWROOMS)
    draft_car = car(5, 2)
    assert not can_view_car(ANON, draft_car, lookup)
    assert can_view_car(requester(20, UserRole.SELLER), draft_car, lookup)
    assert can_view_car(ADMIN, draft_car, lookup)
    assert can_view_car(ANON, car(6, 1), lookup)


def test_car_with_missing_showroom_is_hidden_from_non_admins():
    orphan = car(9, 404)
    assert filter_cars(ANON, [orphan], lookup_for(SHOWROOMS)) == []
    assert filter_cars(requester(10, UserRole.BUYER), [orphan], lookup_for(SHOWROOMS)) == []


def test_filter_cars_keeps_input_order():
    cars = [car(3, 3), car(1, 1), car(2, 2), car(4, 1)]
    assert [c.id for c in filter_cars(ANON, cars, lookup_for(SHOWROOMS))] == [3, 1, 4]


def test_filtering_is_idempotent():
    owner = requester(20, UserRole.SELLER)
    once = filter_showrooms(owner, SHOWROOMS)
    assert filter_showrooms(owner, once) == once


def test_featured_cars_apply_visibility_first():
    lookup = lookup_for(SHOWROOMS)
    cars = [car(1, 2, is_featured=True), car(2, 1, is_featured=True), car(3, 3), car(4, 3, is_featured=True)]
    assert [c.id for c in featured_cars(ANON, cars, lookup)] == [2, 4]
    # the limit counts only visible featured cars
    assert [c.id for c in featured_cars(ANON, cars, lookup, limit=1)] == [2]


def test_featured_showrooms_skip_featured_drafts():
    assert featured_showrooms(ANON, SHOWROOMS) == [S1]
    assert featured_showrooms(ADMIN, SHOWROOMS) == [S1, S2]


def test_visible_showroom_ids():
    assert visible_showroom_ids(ANON, SHOWROOMS) == {1, 3}
    assert visible_showroom_ids(requester(20, UserRole.BUYER), SHOWROOMS) == {1, 2, 3}


def test_requester_from_user():
    assert Requester.from_user(None) == ANON
    r = Requester.from_user(SimpleNamespace(id=5, role="seller"))
    assert r.authenticated and r.user_id == 5 and r.role == UserRole.SELLER
    assert not r.is_admin


def test_buyer_sees_published_showroom_of_seller_with_draft():
    buyer = requester(5, UserRole.BUYER)
    rows = [showroom(1, 9, DRAFT), showroom(2, 9, PUBLISHED)]
    assert [s.id for s in filter_showrooms(buyer, rows)] == [2]

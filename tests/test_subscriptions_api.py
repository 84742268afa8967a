from automart.core.config import settings


def test_tier_catalog(client):
    tiers = client.get("/api/subscription-tiers").json()
    assert [t["id"] for t in tiers] == ["free", "premium", "vip"]
    assert tiers[0]["listingLimit"] == settings.FREE_TIER_LISTING_LIMIT
    assert tiers[2]["listingLimit"] is None


def test_subscribe_upgrade_and_cancel(client, make_user, make_showroom, headers):
    seller = make_user("seller")
    showroom = make_showroom(seller)
    h = headers(seller)

    assert client.get("/api/subscriptions/my", headers=h).status_code == 404

    r = client.post("/api/subscriptions", json={"tier": "premium"}, headers=h)
    assert r.status_code == 200
    assert r.json()["tier"] == "premium"
    assert r.json()["active"] is True

    r = client.post("/api/subscriptions", json={"tier": "vip"}, headers=h)
    sub_id = r.json()["id"]
    assert r.json()["tier"] == "vip"
    assert client.get(f"/api/showrooms/{showroom.id}").json()["isFeatured"] is True

    r = client.post("/api/subscriptions/cancel", headers=h)
    assert r.json()["id"] == sub_id
    assert r.json()["active"] is False
    assert client.get(f"/api/showrooms/{showroom.id}").json()["isFeatured"] is False


def test_buyer_cannot_subscribe(client, make_user, headers):
    r = client.post("/api/subscriptions", json={"tier": "vip"}, headers=headers(make_user("buyer")))
    assert r.status_code == 403


def test_unknown_tier_is_rejected(client, make_user, headers):
    r = client.post("/api/subscriptions", json={"tier": "gold"}, headers=headers(make_user("seller")))
    assert r.status_code == 422


def test_admin_manages_subscriptions(client, make_user, make_showroom, headers):
    admin = headers(make_user("admin"))
    seller = make_user("seller")
    showroom = make_showroom(seller)

    assert client.get(f"/api/admin/users/{seller.id}/subscription", headers=admin).json() is None

    r = client.put(f"/api/admin/users/{seller.id}/subscription", json={"tier": "vip"}, headers=admin)
    assert r.status_code == 201
    assert client.get(f"/api/showrooms/{showroom.id}").json()["isFeatured"] is True

    r = client.put(
        f"/api/admin/users/{seller.id}/subscription",
        json={"active": False, "endDate": "2030-01-01T00:00:00Z"},
        headers=admin,
    )
    assert r.status_code == 200
    assert r.json()["tier"] == "vip"
    assert r.json()["endDate"].startswith("2030-01-01")
    assert client.get(f"/api/showrooms/{showroom.id}").json()["isFeatured"] is False

    r = client.put(f"/api/admin/users/{seller.id}/subscription", json={"endDate": None}, headers=admin)
    assert r.json()["endDate"] is None

    assert [s["userId"] for s in client.get("/api/admin/subscriptions", headers=admin).json()] == [seller.id]

    r = client.post(f"/api/admin/users/{seller.id}/subscription/cancel", headers=admin)
    assert r.json()["active"] is False

    assert client.get("/api/admin/subscriptions", headers=headers(seller)).status_code == 403
    assert client.get("/api/admin/users/9999/subscription", headers=admin).status_code == 404


def test_admin_creates_seller_with_draft_showroom(client, make_user, headers):
    admin = headers(make_user("admin"))
    body = {"username": "newseller", "email": "new@example.com", "password": "secret123", "name": "New Motors"}

    r = client.post("/api/admin/create-seller", json=body, headers=admin)
    assert r.status_code == 201
    seller = r.json()
    assert seller["role"] == "seller"

    showroom = client.get(f"/api/showrooms/user/{seller['id']}", headers=admin).json()
    assert showroom["status"] == "draft"
    assert showroom["name"] == "New Motors's Showroom"

    assert client.post("/api/admin/create-seller", json=body, headers=admin).json()["detail"] == "username_exists"

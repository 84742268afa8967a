from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from automart.core.db import get_db
from automart.core.rate_limit import InMemoryRateLimitStore, RateLimiter

from conftest import auth, override_get_db


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_store_counts_within_window_and_resets_after():
    clock = FakeClock()
    store = InMemoryRateLimitStore(clock=clock)

    assert store.hit("k", 60) == (1, 1060.0)
    assert store.hit("k", 60) == (2, 1060.0)
    assert store.hit("other", 60)[0] == 1

    clock.now = 1060.0
    assert store.hit("k", 60) == (1, 1120.0)


def test_store_expires_stale_keys():
    clock = FakeClock()
    store = InMemoryRateLimitStore(clock=clock)
    store.hit("a", 10)
    clock.now += 11
    store.hit("b", 10)
    assert len(store) == 1

    store.reset()
    assert len(store) == 0


def _app(limit):
    app = FastAPI()
    app.state.rate_limit_store = InMemoryRateLimitStore()
    app.dependency_overrides[get_db] = override_get_db

    @app.get("/ping", dependencies=[Depends(RateLimiter(limit, window_seconds=60, scope="test"))])
    def ping():
        return {"ok": True}

    return app


def test_limiter_sets_headers_and_blocks():
    client = TestClient(_app(2))

    first = client.get("/ping")
    assert first.status_code == 200
    assert first.headers["X-RateLimit-Limit"] == "2"
    assert first.headers["X-RateLimit-Remaining"] == "1"

    assert client.get("/ping").status_code == 200

    blocked = client.get("/ping")
    assert blocked.status_code == 429
    assert blocked.json()["detail"] == "rate_limit_exceeded"
    assert int(blocked.headers["Retry-After"]) >= 1


def test_signed_in_users_get_their_own_bucket(make_user):
    client = TestClient(_app(1))
    alice, bob = make_user("buyer"), make_user("buyer")

    assert client.get("/ping", headers=auth(alice)).status_code == 200
    assert client.get("/ping", headers=auth(alice)).status_code == 429
    assert client.get("/ping", headers=auth(bob)).status_code == 200
    # anonymous callers are keyed by address, separate from both
    assert client.get("/ping").status_code == 200

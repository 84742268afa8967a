import os

# must be in place before automart.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_AUTH", "1000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from automart.core.db import Base, get_db
from automart.core.security import create_access_token, hash_password
from automart.core.visibility import ShowroomStatus
from automart.main import app
from automart.models.car import Car
from automart.models.message import Message
from automart.models.showroom import Showroom
from automart.models.subscription import Subscription
from automart.models.user import User

PASSWORD = "secret123"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="session")
def password_hash():
    # argon2 is slow on purpose; hash once
    return hash_password(PASSWORD)


@pytest.fixture(autouse=True)
def _fresh_state():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    app.state.rate_limit_store.reset()
    yield


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def auth(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(sub=str(user.id))}"}


@pytest.fixture
def headers():
    return auth


@pytest.fixture
def make_user(db, password_hash):
    counter = {"n": 0}

    def _make(role="buyer", name=None, is_active=True, username=None):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            username=username or f"{role}{n}",
            email=f"{username or role}{n}@example.com",
            password_hash=password_hash,
            role=role,
            name=name or f"{role.title()} {n}",
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_showroom(db):
    def _make(owner, status=ShowroomStatus.PUBLISHED, is_featured=False, name=None):
        showroom = Showroom(
            user_id=owner.id,
            name=name or f"{owner.name}'s Showroom",
            city="Dubai",
            country="UAE",
            status=status.value,
            is_featured=is_featured,
        )
        db.add(showroom)
        db.commit()
        db.refresh(showroom)
        return showroom

    return _make


@pytest.fixture
def make_car(db):
    def _make(showroom, make="Toyota", model="Camry", price=50000, is_featured=False, **extra):
        data = dict(
            showroom_id=showroom.id,
            title=f"{make} {model}",
            make=make,
            model=model,
            year=2020,
            price=price,
            mileage=10000,
            transmission="automatic",
            fuel_type="petrol",
            category="sedan",
            features=[],
            images=["https://img.example.com/car.jpg"],
            is_featured=is_featured,
        )
        data.update(extra)
        car = Car(**data)
        db.add(car)
        db.commit()
        db.refresh(car)
        return car

    return _make


@pytest.fixture
def make_subscription(db):
    def _make(user, tier="free", active=True):
        sub = Subscription(user_id=user.id, tier=tier, active=active)
        db.add(sub)
        db.commit()
        db.refresh(sub)
        return sub

    return _make


@pytest.fixture
def make_message(db):
    def _make(sender, receiver, content="hello", is_read=False, created_at=None):
        msg = Message(sender_id=sender.id, receiver_id=receiver.id, content=content, is_read=is_read)
        if created_at is not None:
            msg.created_at = created_at
        db.add(msg)
        db.commit()
        db.refresh(msg)
        return msg

    return _make

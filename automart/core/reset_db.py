# automart/core/reset_db.py
import logging

from automart.core.config import settings
from automart.core.db import Base, SessionLocal, engine
from automart.core.logging import configure_logging
from automart.core.roles import UserRole
from automart.core.security import hash_password
from automart.core.visibility import ShowroomStatus
from automart.models.car import Car, CarStatus
from automart.models.favorite import Favorite  # noqa: F401
from automart.models.message import Message  # noqa: F401
from automart.models.showroom import Showroom
from automart.models.subscription import Subscription, SubscriptionTier
from automart.models.user import User

logger = logging.getLogger("automart.reset_db")

SEED_PASSWORD = "password123"

SEED_USERS = [
    {"username": "admin", "email": "admin@automart.local", "name": "Admin", "role": UserRole.ADMIN.value},
    {"username": "seller", "email": "seller@automart.local", "name": "Gulf Motors", "role": UserRole.SELLER.value},
    {"username": "seller2", "email": "seller2@automart.local", "name": "Desert Auto", "role": UserRole.SELLER.value},
    {"username": "buyer", "email": "buyer@automart.local", "name": "Sam Buyer", "role": UserRole.BUYER.value},
]

SEED_CARS = [
    {
        "title": "2022 Toyota Land Cruiser GXR",
        "make": "Toyota", "model": "Land Cruiser", "year": 2022, "price": 285000, "mileage": 18000,
        "transmission": "automatic", "fuel_type": "petrol", "category": "suv", "color": "White",
        "condition": "used", "features": ["Sunroof", "Leather seats", "360 camera"],
    },
    {
        "title": "2021 Nissan Patrol Platinum",
        "make": "Nissan", "model": "Patrol", "year": 2021, "price": 240000, "mileage": 32000,
        "transmission": "automatic", "fuel_type": "petrol", "category": "suv", "color": "Black",
        "condition": "used", "features": ["Cruise control", "Bose audio"],
    },
    {
        "title": "2023 Tesla Model 3 Long Range",
        "make": "Tesla", "model": "Model 3", "year": 2023, "price": 175000, "mileage": 6000,
        "transmission": "automatic", "fuel_type": "electric", "category": "sedan", "color": "Blue",
        "condition": "used", "features": ["Autopilot", "Glass roof"],
    },
]


def seed(db) -> None:
    users = {}
    for data in SEED_USERS:
        user = User(password_hash=hash_password(SEED_PASSWORD), is_active=True, **data)
        db.add(user)
        users[data["username"]] = user
    db.flush()

    gulf = Showroom(
        user_id=users["seller"].id,
        name="Gulf Motors",
        description="Quality pre-owned SUVs and sedans.",
        logo=settings.PLACEHOLDER_LOGO,
        header_image=settings.PLACEHOLDER_HEADER,
        city="Dubai",
        country="UAE",
        email=users["seller"].email,
        rating=4.6,
        review_count=38,
        status=ShowroomStatus.PUBLISHED.value,
        is_featured=True,
    )
    desert = Showroom(
        user_id=users["seller2"].id,
        name="Desert Auto",
        description="Electric and hybrid specialists.",
        logo=settings.PLACEHOLDER_LOGO,
        header_image=settings.PLACEHOLDER_HEADER,
        city="Abu Dhabi",
        country="UAE",
        email=users["seller2"].email,
        status=ShowroomStatus.PUBLISHED.value,
        is_featured=False,
    )
    db.add_all([gulf, desert])
    db.flush()

    db.add_all([
        Subscription(user_id=users["seller"].id, tier=SubscriptionTier.VIP.value, active=True),
        Subscription(user_id=users["seller2"].id, tier=SubscriptionTier.FREE.value, active=True),
    ])

    for i, data in enumerate(SEED_CARS):
        showroom = desert if data["fuel_type"] == "electric" else gulf
        db.add(Car(
            showroom_id=showroom.id,
            description=data["title"],
            images=[settings.PLACEHOLDER_CAR_IMAGE],
            is_featured=True,
            status=CarStatus.AVAILABLE.value,
            **data,
        ))

    db.commit()
    logger.info("seeded %d users, 2 showrooms, %d cars", len(SEED_USERS), len(SEED_CARS))


# run once: python -m automart.core.reset_db
def reset_db(with_seed: bool = True) -> None:
    logger.info("resetting database %s", engine.url.render_as_string(hide_password=True))
    Base.metadata.drop_all(bind=engine, checkfirst=True)
    Base.metadata.create_all(bind=engine)
    if with_seed:
        db = SessionLocal()
        try:
            seed(db)
        finally:
            db.close()
    logger.info("reset done")


if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL)
    reset_db()

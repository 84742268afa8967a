# automart/schemas/favorite.py
from datetime import datetime

from pydantic import Field

from .base import BaseSchema


class FavoriteCreateIn(BaseSchema):
    car_id: int = Field(..., ge=1)


class FavoriteOut(BaseSchema):
    id: int
    user_id: int
    car_id: int
    created_at: datetime


class FavoriteCheckOut(BaseSchema):
    is_favorite: bool

# automart/schemas/user.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field

from .base import BaseSchema


class UserOut(BaseSchema):
    id: int
    username: str
    email: EmailStr
    role: str
    name: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    is_active: bool
    created_at: datetime


class UserUpdateIn(BaseSchema):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    avatar: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[Literal["buyer", "seller", "admin"]] = None


class CreateSellerIn(BaseSchema):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = None

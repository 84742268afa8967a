# automart/schemas/auth.py
from typing import List, Literal, Optional

from pydantic import EmailStr, Field

from .base import BaseSchema
from .user import UserOut


class RegisterIn(BaseSchema):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=100)
    role: Literal["buyer", "seller"] = "buyer"
    phone: Optional[str] = None
    avatar: Optional[str] = None


class LoginIn(BaseSchema):
    username: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)


class TokenOut(BaseSchema):
    access_token: str


class LoginOut(BaseSchema):
    access_token: str
    user: UserOut


class SessionUserOut(UserOut):
    capabilities: List[str]
    home_path: str

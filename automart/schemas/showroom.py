# automart/schemas/showroom.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field

from .base import BaseSchema

StatusLiteral = Literal["draft", "published"]


class ShowroomCreateIn(BaseSchema):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    logo: Optional[str] = None
    header_image: Optional[str] = None
    address: Optional[str] = None
    city: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    status: StatusLiteral = "published"


class ShowroomUpdateIn(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    logo: Optional[str] = None
    header_image: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    status: Optional[StatusLiteral] = None


class ShowroomOut(BaseSchema):
    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None
    header_image: Optional[str] = None
    address: Optional[str] = None
    city: str
    country: str
    phone: Optional[str] = None
    email: Optional[str] = None
    rating: float
    review_count: int
    status: StatusLiteral
    is_featured: bool
    created_at: datetime

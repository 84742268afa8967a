# automart/schemas/car.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from .base import BaseSchema

CarStatusLiteral = Literal["available", "sold"]


class CarCreateIn(BaseSchema):
    title: str = Field(..., min_length=1, max_length=200)
    make: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    year: int = Field(..., ge=1886, le=2100)
    price: int = Field(..., ge=0)
    mileage: int = Field(0, ge=0)
    transmission: str
    fuel_type: str
    category: str
    color: Optional[str] = None
    condition: Optional[str] = None
    description: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)


class CarUpdateIn(BaseSchema):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(None, ge=1886, le=2100)
    price: Optional[int] = Field(None, ge=0)
    mileage: Optional[int] = Field(None, ge=0)
    transmission: Optional[str] = None
    fuel_type: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None
    condition: Optional[str] = None
    description: Optional[str] = None
    features: Optional[List[str]] = None
    images: Optional[List[str]] = None
    status: Optional[CarStatusLiteral] = None
    is_featured: Optional[bool] = None


class CarOut(BaseSchema):
    id: int
    showroom_id: int
    title: str
    make: str
    model: str
    year: int
    price: int
    mileage: int
    transmission: str
    fuel_type: str
    category: str
    color: Optional[str] = None
    condition: Optional[str] = None
    description: Optional[str] = None
    features: List[str]
    images: List[str]
    is_featured: bool
    status: CarStatusLiteral
    created_at: datetime


class CarSearchIn(BaseSchema):
    make: Optional[str] = None
    model: Optional[str] = None
    price_range: Optional[str] = None
    category: Optional[str] = None
    year: Optional[int] = None
    transmission: Optional[str] = None
    fuel_type: Optional[str] = None

    @field_validator("price_range")
    @classmethod
    def v_price_range(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        low, sep, high = v.partition("-")
        if not sep or not all(part == "" or part.isdigit() for part in (low, high)):
            raise ValueError("priceRange must look like 'min-max', 'min-' or '-max'")
        return v

from enum import Enum

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship

from automart.core.db import Base


class CarStatus(str, Enum):
    AVAILABLE = "available"
    SOLD = "sold"


class Car(Base):
    __tablename__ = "cars"

    id = Column(Integer, primary_key=True, index=True)
    showroom_id = Column(Integer, ForeignKey("showrooms.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    make = Column(String(100), nullable=False, index=True)
    model = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    price = Column(Integer, nullable=False)
    mileage = Column(Integer, nullable=False, default=0)
    transmission = Column(String(50), nullable=False)
    fuel_type = Column(String(50), nullable=False)
    category = Column(String(50), nullable=False)
    color = Column(String(50), nullable=True)
    condition = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)

    features = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)

    is_featured = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default=CarStatus.AVAILABLE.value)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    showroom = relationship("Showroom", back_populates="cars")

from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from automart.core.db import Base
from automart.core.visibility import ShowroomStatus


class Showroom(Base):
    __tablename__ = "showrooms"

    id = Column(Integer, primary_key=True, index=True)

    # one showroom per seller
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    logo = Column(String(1024), nullable=True)
    header_image = Column(String(1024), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False, default="")
    country = Column(String(100), nullable=False, default="")
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)

    rating = Column(Float, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)

    status = Column(String(20), nullable=False, default=ShowroomStatus.DRAFT.value, index=True)
    is_featured = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    owner = relationship("User", back_populates="showroom")
    cars = relationship("Car", back_populates="showroom", cascade="all, delete-orphan")

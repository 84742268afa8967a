from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from automart.core.db import Base
from automart.core.roles import UserRole


class User(Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.BUYER.value)

    name = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=True)
    avatar = Column(String(1024), nullable=True)

    # disabled accounts cannot log in and their tokens stop working
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    showroom = relationship("Showroom", back_populates="owner", uselist=False)
    subscription = relationship("Subscription", back_populates="user", uselist=False)

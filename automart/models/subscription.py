from enum import Enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from automart.core.db import Base


class SubscriptionTier(str, Enum):
    FREE = "free"
    PREMIUM = "premium"
    VIP = "vip"


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    tier = Column(String(20), nullable=False, default=SubscriptionTier.FREE.value)
    active = Column(Boolean, nullable=False, default=True)

    start_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    # None means open ended
    end_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="subscription")

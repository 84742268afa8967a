from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey

from automart.core.db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    sender_id = Column("from_user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id = Column("to_user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    car_id = Column(Integer, ForeignKey("cars.id", ondelete="SET NULL"), nullable=True)

    content = Column("message", Text, nullable=False)

    # false -> true once, by the receiver only
    is_read = Column(Boolean, nullable=False, default=False)

    # client-side default keeps sub-second ordering on SQLite
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)

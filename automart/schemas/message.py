# automart/schemas/message.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base import BaseSchema


class MessageCreateIn(BaseSchema):
    receiver_id: int = Field(..., ge=1)
    content: str = Field(..., min_length=1, max_length=500)
    car_id: Optional[int] = None


class MessageOut(BaseSchema):
    id: int
    sender_id: int
    receiver_id: int
    car_id: Optional[int] = None
    content: str
    is_read: bool
    created_at: datetime


# largest batch one mark-read request may carry
MARK_READ_MAX_IDS = 500


class MarkReadIn(BaseSchema):
    message_ids: List[int] = Field(..., min_length=1, max_length=MARK_READ_MAX_IDS)


class MarkReadOut(BaseSchema):
    updated: List[int]
    unread_count: int


class CounterpartOut(BaseSchema):
    id: int
    name: str
    avatar: Optional[str] = None


class ConversationOut(BaseSchema):
    id: str
    counterpart: CounterpartOut
    messages: List[MessageOut]
    last_message: Optional[MessageOut] = None
    unread_count: int

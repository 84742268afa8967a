# automart/routers/messages.py
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session

from automart.core.auth import get_current_user, require_capability
from automart.core.db import get_db
from automart.core.rate_limit import standard_limit
from automart.core.roles import Capability
from automart.core.visibility import Requester, can_view_car
from automart.models.car import Car
from automart.models.message import Message
from automart.models.user import User
from automart.schemas.message import (
    ConversationOut,
    MarkReadIn,
    MarkReadOut,
    MessageCreateIn,
    MessageOut,
)
from automart.services.catalog import showroom_lookup
from automart.services.conversations import filter_conversations
from automart.services.messaging import (
    conversation_between,
    conversations_for_user,
    mark_read,
    messages_for_user,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/messages",
    tags=["messages"],
    dependencies=[Depends(standard_limit)],
)


@router.get("", response_model=List[MessageOut])
def list_messages(
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    return messages_for_user(db, me.id)


@router.get("/conversations", response_model=List[ConversationOut])
def list_conversations(
    search: Optional[str] = Query(None, max_length=100),
    tab: Literal["all", "unread"] = Query("all"),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    # grouped over the full history first, narrowed afterwards
    conversations = filter_conversations(conversations_for_user(db, me.id), search=search, tab=tab)
    return [ConversationOut.model_validate(c) for c in conversations]


@router.get("/conversation/{user_id}", response_model=List[MessageOut])
def get_conversation(
    user_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    return conversation_between(db, me.id, user_id)


@router.post("", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def send_message(
    body: MessageCreateIn,
    db: Session = Depends(get_db),
    me: User = Depends(require_capability(Capability.SEND_MESSAGES)),
):
    if body.receiver_id == me.id:
        raise HTTPException(status_code=400, detail="cannot_message_self")

    receiver = db.get(User, body.receiver_id)
    if not receiver or not receiver.is_active:
        raise HTTPException(status_code=404, detail="receiver_not_found")

    # a car the sender cannot see is reported exactly like a missing one
    if body.car_id is not None and not can_view_car(
        Requester.from_user(me), db.get(Car, body.car_id), showroom_lookup(db)
    ):
        raise HTTPException(status_code=404, detail="car_not_found")

    message = Message(
        sender_id=me.id,
        receiver_id=receiver.id,
        car_id=body.car_id,
        content=body.content,
        is_read=False,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    logger.debug("message %s: %s -> %s", message.id, me.id, receiver.id)
    return message


@router.post("/mark-read", response_model=MarkReadOut)
def mark_messages_read(
    body: MarkReadIn,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    updated, remaining = mark_read(db, me.id, body.message_ids)
    db.commit()
    return MarkReadOut(updated=updated, unread_count=remaining)


@router.put("/{message_id}/read", response_model=MessageOut)
def mark_message_read(
    message_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    message = db.get(Message, message_id)
    if not message:
        raise HTTPException(status_code=404, detail="message_not_found")
    if message.receiver_id != me.id:
        raise HTTPException(status_code=403, detail="forbidden")

    if not message.is_read:
        message.is_read = True
        db.commit()
        db.refresh(message)
    return message

# automart/services/messaging.py
from typing import Dict, Iterable, List, Tuple

from sqlalchemy import select, update, or_, and_, desc, func
from sqlalchemy.orm import Session

from automart.models.message import Message
from automart.models.user import User
from automart.services.conversations import (
    Conversation,
    Counterpart,
    MessageView,
    group_conversations,
)


def messages_for_user(db: Session, user_id: int) -> List[Message]:
    q = (
        select(Message)
        .where(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
        .order_by(desc(Message.created_at), desc(Message.id))
    )
    return list(db.execute(q).scalars().all())


def conversation_between(db: Session, user_a: int, user_b: int) -> List[Message]:
    q = (
        select(Message)
        .where(
            or_(
                and_(Message.sender_id == user_a, Message.receiver_id == user_b),
                and_(Message.sender_id == user_b, Message.receiver_id == user_a),
            )
        )
        .order_by(Message.created_at, Message.id)
    )
    return list(db.execute(q).scalars().all())


def counterpart_profiles(db: Session, user_ids: Iterable[int]) -> Dict[int, Counterpart]:
    ids = set(user_ids)
    if not ids:
        return {}
    rows = db.execute(select(User).where(User.id.in_(ids))).scalars().all()
    return {u.id: Counterpart(id=u.id, name=u.name, avatar=u.avatar) for u in rows}


def conversations_for_user(db: Session, user_id: int) -> List[Conversation]:
    rows = messages_for_user(db, user_id)
    others = {m.receiver_id if m.sender_id == user_id else m.sender_id for m in rows}
    return group_conversations(
        user_id,
        [MessageView.from_row(m) for m in rows],
        counterpart_profiles(db, others),
    )


def unread_count(db: Session, user_id: int) -> int:
    q = select(func.count(Message.id)).where(Message.receiver_id == user_id, Message.is_read.is_(False))
    return db.scalar(q) or 0


def mark_read(db: Session, user_id: int, message_ids: Iterable[int]) -> Tuple[List[int], int]:
    """
    One batch: flip every listed message addressed to ``user_id`` that is still unread.
    Ids that are already read, belong to someone else, or don't exist are skipped.
    Returns (ids changed, unread messages left for the user). Caller commits.
    """
    ids = sorted(set(message_ids))
    if not ids:
        return [], unread_count(db, user_id)

    changed = list(
        db.execute(
            select(Message.id).where(
                Message.id.in_(ids),
                Message.receiver_id == user_id,
                Message.is_read.is_(False),
            )
        ).scalars().all()
    )
    if changed:
        db.execute(
            update(Message)
            .where(Message.id.in_(changed))
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
    db.flush()
    return sorted(changed), unread_count(db, user_id)

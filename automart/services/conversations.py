# automart/services/conversations.py
"""
Threaded conversations rebuilt from the flat message log.

Nothing here is stored. ``group_conversations`` is rerun over the complete
message history of the current user every time the history changes; search and
the unread tab are applied to its output, never to the raw messages, otherwise
unread counts and last-message pointers would be computed on a partial log.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional


def conversation_key(user_a: int, user_b: int) -> str:
    return f"conv_{min(user_a, user_b)}_{max(user_a, user_b)}"


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes, Postgres aware ones
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return _as_utc(value)
    return _as_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))


@dataclass(frozen=True)
class MessageView:
    id: int
    sender_id: int
    receiver_id: int
    content: str
    is_read: bool
    created_at: datetime
    car_id: Optional[int] = None

    @classmethod
    def from_row(cls, row) -> "MessageView":
        return cls(
            id=row.id,
            sender_id=row.sender_id,
            receiver_id=row.receiver_id,
            content=row.content,
            is_read=bool(row.is_read),
            created_at=_as_utc(row.created_at),
            car_id=row.car_id,
        )

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "MessageView":
        return cls(
            id=data["id"],
            sender_id=data["senderId"],
            receiver_id=data["receiverId"],
            content=data["content"],
            is_read=bool(data.get("isRead", False)),
            created_at=_parse_datetime(data["createdAt"]),
            car_id=data.get("carId"),
        )


@dataclass(frozen=True)
class Counterpart:
    id: int
    name: str
    avatar: Optional[str] = None

    @classmethod
    def placeholder(cls, user_id: int) -> "Counterpart":
        return cls(id=user_id, name=f"User #{user_id}")


@dataclass
class Conversation:
    id: str
    counterpart: Counterpart
    messages: List[MessageView] = field(default_factory=list)
    last_message: Optional[MessageView] = None
    unread_count: int = 0


def _chronological(messages: Iterable[MessageView]) -> List[MessageView]:
    return sorted(messages, key=lambda m: (m.created_at, m.id))


def count_unread(messages: Iterable[MessageView], current_user_id: int) -> int:
    return sum(1 for m in messages if not m.is_read and m.receiver_id == current_user_id)


def _by_recent_activity(conv: Conversation):
    # conversations without a last message go last
    if conv.last_message is None:
        return (1, 0.0)
    return (0, -conv.last_message.created_at.timestamp())


def group_conversations(
    current_user_id: int,
    messages: Iterable[MessageView],
    profiles: Optional[Mapping[int, Counterpart]] = None,
) -> List[Conversation]:
    profiles = profiles or {}
    buckets: Dict[str, List[MessageView]] = {}
    counterparts: Dict[str, int] = {}

    for message in messages:
        other_id = message.receiver_id if message.sender_id == current_user_id else message.sender_id
        key = conversation_key(current_user_id, other_id)
        buckets.setdefault(key, []).append(message)
        counterparts[key] = other_id

    conversations = []
    for key, bucket in buckets.items():
        ordered = _chronological(bucket)
        other_id = counterparts[key]
        conversations.append(
            Conversation(
                id=key,
                counterpart=profiles.get(other_id) or Counterpart.placeholder(other_id),
                messages=ordered,
                last_message=ordered[-1] if ordered else None,
                unread_count=count_unread(ordered, current_user_id),
            )
        )

    conversations.sort(key=_by_recent_activity)
    return conversations


def filter_conversations(
    conversations: Iterable[Conversation],
    search: Optional[str] = None,
    tab: str = "all",
) -> List[Conversation]:
    result = list(conversations)

    if search:
        needle = search.lower()
        result = [
            c for c in result
            if needle in c.counterpart.name.lower()
            or any(needle in m.content.lower() for m in c.messages)
        ]

    if tab == "unread":
        result = [c for c in result if c.unread_count > 0]

    return result


def unread_message_ids(conversation: Conversation, current_user_id: int) -> List[int]:
    return [m.id for m in conversation.messages if not m.is_read and m.receiver_id == current_user_id]


def apply_read(conversation: Conversation, message_ids: Iterable[int], current_user_id: int) -> Conversation:
    """Flip the given messages to read in place. Ids already read, or not addressed to the
    current user, are left alone, so applying the same batch twice changes nothing."""
    ids = set(message_ids)
    conversation.messages = [
        replace(m, is_read=True) if m.id in ids and m.receiver_id == current_user_id else m
        for m in conversation.messages
    ]
    if conversation.messages:
        conversation.last_message = conversation.messages[-1]
    conversation.unread_count = count_unread(conversation.messages, current_user_id)
    return conversation


# ---------- outgoing message state machine ----------

class SendState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"


class SendInProgress(RuntimeError):
    pass


class OutgoingMessage:
    """
    Optimistic append for one conversation.

    idle/sent/failed --begin--> sending --confirm--> sent
                                        --fail-----> failed (pending message rolled back)
    """

    def __init__(self, conversation: Conversation):
        self.conversation = conversation
        self.state = SendState.IDLE
        self.error: Optional[BaseException] = None
        self._pending: Optional[MessageView] = None
        self._previous_last: Optional[MessageView] = None

    def begin(self, pending: MessageView) -> None:
        if self.state == SendState.SENDING:
            raise SendInProgress("a message is already being sent in this conversation")
        self._previous_last = self.conversation.last_message
        self._pending = pending
        self.conversation.messages.append(pending)
        self.conversation.last_message = pending
        self.error = None
        self.state = SendState.SENDING

    def confirm(self, saved: MessageView) -> None:
        self._require_sending()
        msgs = self.conversation.messages
        for i, m in enumerate(msgs):
            if m is self._pending:
                msgs[i] = saved
                break
        else:
            msgs.append(saved)
        self.conversation.last_message = saved
        self._pending = None
        self.state = SendState.SENT

    def fail(self, error: BaseException) -> None:
        self._require_sending()
        self.conversation.messages = [m for m in self.conversation.messages if m is not self._pending]
        self.conversation.last_message = self._previous_last
        self._pending = None
        self.error = error
        self.state = SendState.FAILED

    def _require_sending(self) -> None:
        if self.state != SendState.SENDING:
            raise RuntimeError(f"no send in progress (state={self.state.value})")

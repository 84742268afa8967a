# automart/inbox.py
"""
Messages client for the AutoMart API.

Keeps the grouped conversation view of one signed-in user in sync with the
server. The view is always rebuilt from the flat ``GET /api/messages`` log;
local edits are limited to the read flags the server has confirmed and the
optimistic append of an outgoing message.
"""
import itertools
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

import httpx

from automart.schemas.message import MARK_READ_MAX_IDS
from automart.services.conversations import (
    Conversation,
    Counterpart,
    MessageView,
    OutgoingMessage,
    apply_read,
    filter_conversations,
    group_conversations,
    unread_message_ids,
)

logger = logging.getLogger(__name__)


class InboxError(Exception):
    """A request to the messages API failed. The local view was left consistent."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class Inbox:
    def __init__(self, client: httpx.Client, current_user_id: int, token: Optional[str] = None):
        self.client = client
        self.current_user_id = current_user_id
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._conversations: List[Conversation] = []
        self._outgoing: Dict[str, OutgoingMessage] = {}
        self._profiles: Dict[int, Counterpart] = {}
        self.selected_id: Optional[str] = None
        # pending messages get negative ids so they never collide with saved ones
        self._temp_ids = itertools.count(-1, -1)

    # ---------- transport ----------
    def _request(self, method: str, url: str, **kwargs):
        try:
            resp = self.client.request(method, url, headers=self._headers, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("%s %s -> %s", method, url, e.response.status_code)
            raise InboxError(f"{method} {url} failed", status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.warning("%s %s -> %s", method, url, e)
            raise InboxError(f"{method} {url} failed") from e
        return resp.json()

    # ---------- view ----------
    def refresh(self) -> List[Conversation]:
        """Refetch the full message log and regroup it."""
        rows = self._request("GET", "/api/messages")
        self._load_profiles()
        self._conversations = group_conversations(
            self.current_user_id,
            [MessageView.from_json(r) for r in rows],
            self._profiles,
        )
        # state machines hold the old objects
        self._outgoing.clear()
        return self._conversations

    def _load_profiles(self) -> None:
        # the grouped endpoint carries names and avatars, the flat log does not
        for c in self._request("GET", "/api/messages/conversations"):
            cp = c["counterpart"]
            self._profiles[cp["id"]] = Counterpart(id=cp["id"], name=cp["name"], avatar=cp.get("avatar"))

    def conversations(self, search: Optional[str] = None, tab: str = "all") -> List[Conversation]:
        return filter_conversations(self._conversations, search=search, tab=tab)

    def get(self, conversation_id: str) -> Optional[Conversation]:
        return next((c for c in self._conversations if c.id == conversation_id), None)

    @property
    def unread_total(self) -> int:
        return sum(c.unread_count for c in self._conversations)

    # ---------- actions ----------
    def select(self, conversation_id: str) -> Conversation:
        """Open a conversation and mark everything addressed to us as read.

        Ids go out in batches of at most ``MARK_READ_MAX_IDS``; each batch is applied
        locally only once the server has confirmed it.
        """
        conv = self.get(conversation_id)
        if conv is None:
            raise KeyError(conversation_id)
        self.selected_id = conversation_id

        ids = unread_message_ids(conv, self.current_user_id)
        for start in range(0, len(ids), MARK_READ_MAX_IDS):
            batch = ids[start:start + MARK_READ_MAX_IDS]
            result = self._request("POST", "/api/messages/mark-read", json={"messageIds": batch})
            apply_read(conv, result["updated"], self.current_user_id)
        return conv

    def send(self, content: str, car_id: Optional[int] = None) -> MessageView:
        if self.selected_id is None:
            raise RuntimeError("no conversation selected")
        conv = self.get(self.selected_id)
        outgoing = self._outgoing.setdefault(conv.id, OutgoingMessage(conv))

        pending = MessageView(
            id=next(self._temp_ids),
            sender_id=self.current_user_id,
            receiver_id=conv.counterpart.id,
            content=content,
            is_read=False,
            created_at=datetime.now(timezone.utc),
            car_id=car_id,
        )
        outgoing.begin(pending)

        payload = {"receiverId": conv.counterpart.id, "content": content}
        if car_id is not None:
            payload["carId"] = car_id
        try:
            saved = MessageView.from_json(self._request("POST", "/api/messages", json=payload))
        except InboxError as e:
            outgoing.fail(e)
            raise
        outgoing.confirm(saved)

        # the message is stored; a failed reconcile must not look like a failed send
        try:
            self.refresh()
        except InboxError:
            logger.warning("message %s sent, reconcile deferred to next refresh", saved.id)
        return saved

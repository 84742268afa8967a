from datetime import datetime, timedelta, timezone

import pytest

from automart.services.conversations import (
    Conversation,
    Counterpart,
    MessageView,
    OutgoingMessage,
    SendInProgress,
    SendState,
    apply_read,
    conversation_key,
    count_unread,
    filter_conversations,
    group_conversations,
    unread_message_ids,
)

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def msg(id, sender, receiver, t, is_read=False, content="hi"):
    return MessageView(
        id=id,
        sender_id=sender,
        receiver_id=receiver,
        content=content,
        is_read=is_read,
        created_at=T0 + timedelta(seconds=t),
    )


def test_two_way_exchange_counts_only_incoming_unread():
    convs = group_conversations(1, [msg(1, 1, 2, 10), msg(2, 2, 1, 20)])
    assert len(convs) == 1
    conv = convs[0]
    assert conv.id == "conv_1_2"
    assert conv.counterpart.id == 2
    assert conv.unread_count == 1
    assert conv.last_message.id == 2


def test_conversation_key_is_order_independent():
    assert conversation_key(7, 3) == conversation_key(3, 7) == "conv_3_7"


def test_empty_history_gives_no_conversations():
    assert group_conversations(1, []) == []


def test_messages_in_each_conversation_are_chronological():
    convs = group_conversations(1, [msg(3, 2, 1, 30), msg(1, 1, 2, 10), msg(2, 2, 1, 20)])
    assert [m.id for m in convs[0].messages] == [1, 2, 3]


def test_same_timestamp_keeps_id_order():
    convs = group_conversations(1, [msg(5, 2, 1, 10), msg(4, 1, 2, 10)])
    assert [m.id for m in convs[0].messages] == [4, 5]


def test_conversations_sorted_by_latest_activity():
    history = [
        msg(1, 1, 2, 10),
        msg(2, 3, 1, 50),
        msg(3, 2, 1, 30),
        msg(4, 1, 4, 40),
    ]
    convs = group_conversations(1, history)
    assert [c.counterpart.id for c in convs] == [3, 4, 2]


def test_unknown_profiles_get_placeholder_label():
    profiles = {2: Counterpart(id=2, name="Dana", avatar="a.png")}
    convs = group_conversations(1, [msg(1, 2, 1, 1), msg(2, 3, 1, 2)], profiles)
    names = {c.counterpart.id: c.counterpart.name for c in convs}
    assert names == {2: "Dana", 3: "User #3"}


def test_read_messages_do_not_count():
    convs = group_conversations(1, [msg(1, 2, 1, 1, is_read=True), msg(2, 2, 1, 2)])
    assert convs[0].unread_count == 1
    assert count_unread(convs[0].messages, 1) == 1


def test_filter_by_search_matches_name_or_content():
    profiles = {2: Counterpart(id=2, name="Dana"), 3: Counterpart(id=3, name="Lee")}
    convs = group_conversations(
        1,
        [msg(1, 2, 1, 1, content="Is the Patrol still available?"), msg(2, 3, 1, 2, content="thanks")],
        profiles,
    )
    assert [c.counterpart.id for c in filter_conversations(convs, search="patrol")] == [2]
    assert [c.counterpart.id for c in filter_conversations(convs, search="LEE")] == [3]
    assert filter_conversations(convs, search="nothing like this") == []


def test_unread_tab_keeps_order_and_drops_read_conversations():
    convs = group_conversations(
        1,
        [msg(1, 2, 1, 1), msg(2, 3, 1, 2, is_read=True), msg(3, 4, 1, 3)],
    )
    unread = filter_conversations(convs, tab="unread")
    assert [c.counterpart.id for c in unread] == [4, 2]
    assert len(filter_conversations(convs, tab="all")) == 3


def test_unread_ids_and_apply_read_are_idempotent():
    conv = group_conversations(1, [msg(1, 1, 2, 1), msg(2, 2, 1, 2), msg(3, 2, 1, 3)])[0]
    ids = unread_message_ids(conv, 1)
    assert ids == [2, 3]

    apply_read(conv, ids, 1)
    assert conv.unread_count == 0
    assert all(m.is_read for m in conv.messages if m.receiver_id == 1)
    # our own outgoing message is not touched
    assert conv.messages[0].is_read is False

    snapshot = list(conv.messages)
    apply_read(conv, ids, 1)
    assert conv.messages == snapshot
    assert conv.last_message.id == 3


def test_apply_read_ignores_messages_not_addressed_to_user():
    conv = group_conversations(1, [msg(1, 1, 2, 1)])[0]
    apply_read(conv, [1], 1)
    assert conv.messages[0].is_read is False


def test_message_view_from_json():
    m = MessageView.from_json({
        "id": 9,
        "senderId": 1,
        "receiverId": 2,
        "content": "hey",
        "isRead": False,
        "createdAt": "2024-05-01T12:00:00Z",
    })
    assert m.created_at == T0
    assert m.car_id is None


# ---------- outgoing ----------

def _conv():
    return group_conversations(1, [msg(1, 2, 1, 1)])[0]


def test_send_success_replaces_pending_message():
    conv = _conv()
    out = OutgoingMessage(conv)
    assert out.state == SendState.IDLE

    pending = msg(-1, 1, 2, 5, content="offer")
    out.begin(pending)
    assert out.state == SendState.SENDING
    assert conv.last_message is pending

    saved = msg(10, 1, 2, 5, content="offer")
    out.confirm(saved)
    assert out.state == SendState.SENT
    assert [m.id for m in conv.messages] == [1, 10]
    assert conv.last_message is saved


def test_send_failure_rolls_back():
    conv = _conv()
    before = conv.last_message
    out = OutgoingMessage(conv)
    out.begin(msg(-1, 1, 2, 5))

    err = RuntimeError("network down")
    out.fail(err)
    assert out.state == SendState.FAILED
    assert out.error is err
    assert [m.id for m in conv.messages] == [1]
    assert conv.last_message is before


def test_double_submit_is_refused():
    out = OutgoingMessage(_conv())
    out.begin(msg(-1, 1, 2, 5))
    with pytest.raises(SendInProgress):
        out.begin(msg(-2, 1, 2, 6))


def test_can_send_again_after_failure():
    conv = _conv()
    out = OutgoingMessage(conv)
    out.begin(msg(-1, 1, 2, 5))
    out.fail(RuntimeError("boom"))
    out.begin(msg(-2, 1, 2, 6))
    assert out.state == SendState.SENDING
    assert out.error is None


def test_confirm_without_send_is_an_error():
    out = OutgoingMessage(Conversation(id="conv_1_2", counterpart=Counterpart.placeholder(2)))
    with pytest.raises(RuntimeError):
        out.confirm(msg(1, 1, 2, 1))

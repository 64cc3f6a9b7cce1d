"""Тесты приглашений: создание, принятие, отказ, доставка уведомлений."""

import pytest

from tictactoe.constants import INVITE_ACCEPTED, INVITE_DECLINED, INVITE_PENDING, O, X
from tictactoe.errors import (
    AlreadyResolved,
    IllegalState,
    InvalidRequest,
    NotFound,
    SelfInvite,
    StoreFailure,
)


def test_create_invite_is_pending(hub):
    invite, _ = hub.create_invite("alice", "bob")
    assert invite.status == INVITE_PENDING
    assert invite.from_player == "alice"
    assert invite.to_player == "bob"
    assert invite.resolved_at is None
    assert hub.invites.get_invite(invite.id) == invite


def test_self_invite_is_rejected(hub):
    with pytest.raises(SelfInvite):
        hub.create_invite("alice", "alice")


def test_invite_to_unknown_player(hub):
    with pytest.raises(NotFound):
        hub.create_invite("alice", "nobody")
    with pytest.raises(NotFound):
        hub.create_invite("nobody", "alice")


def test_online_recipient_gets_notified(hub):
    hub.mark_online("bob", "addr-b")
    invite, outbox = hub.create_invite("alice", "bob")
    assert len(outbox) == 1
    assert outbox[0].address == "addr-b"
    assert outbox[0].event["type"] == "game_invite"
    assert outbox[0].event["invite_id"] == invite.id
    assert outbox[0].event["from_player"]["id"] == "alice"


def test_offline_recipient_gets_nothing_even_after_coming_online(hub):
    invite, outbox = hub.create_invite("alice", "bob")
    assert outbox == []
    _, online_outbox = hub.mark_online("bob", "addr-b")
    assert all(o.event["type"] != "game_invite" for o in online_outbox)
    pending = hub.pending_invites("bob")
    assert [p["id"] for p in pending] == [invite.id]
    assert pending[0]["from_player_profile"]["id"] == "alice"


def test_accept_creates_session_and_notifies_both(hub):
    hub.mark_online("alice", "addr-a")
    hub.mark_online("bob", "addr-b")
    invite, _ = hub.create_invite("alice", "bob")
    resolved, session, outbox = hub.resolve_invite(invite.id, INVITE_ACCEPTED, "bob")

    assert resolved.status == INVITE_ACCEPTED
    assert resolved.resolved_at is not None
    assert resolved.session_id == session.id
    assert session.symbol_of("alice") == X
    assert session.symbol_of("bob") == O
    assert hub.get_session(session.id).player_x == "alice"

    assert [(o.address, o.event["type"]) for o in outbox] == [
        ("addr-a", "invite_accepted"),
        ("addr-b", "session_started"),
    ]
    assert outbox[0].event["session_id"] == session.id
    assert outbox[0].event["opponent"]["id"] == "bob"
    assert outbox[1].event["opponent"]["id"] == "alice"


def test_accept_with_sender_offline_notifies_recipient_only(hub):
    hub.mark_online("bob", "addr-b")
    invite, _ = hub.create_invite("alice", "bob")
    _, _, outbox = hub.resolve_invite(invite.id, INVITE_ACCEPTED)
    assert [(o.address, o.event["type"]) for o in outbox] == [("addr-b", "session_started")]


def test_decline(hub):
    invite, _ = hub.create_invite("alice", "bob")
    resolved, session, outbox = hub.resolve_invite(invite.id, INVITE_DECLINED, "bob")
    assert resolved.status == INVITE_DECLINED
    assert session is None
    assert outbox == []
    assert hub.pending_invites("bob") == []
    assert hub.sessions.list_sessions() == []


def test_resolved_invite_cannot_change(hub):
    invite, _ = hub.create_invite("alice", "bob")
    hub.resolve_invite(invite.id, INVITE_DECLINED)
    with pytest.raises(AlreadyResolved):
        hub.resolve_invite(invite.id, INVITE_ACCEPTED)
    assert hub.invites.get_invite(invite.id).status == INVITE_DECLINED


def test_accepted_invite_yields_exactly_one_session(hub):
    invite, _ = hub.create_invite("alice", "bob")
    session, _ = hub.create_session_from_invite(invite.id)
    with pytest.raises(AlreadyResolved):
        hub.create_session_from_invite(invite.id)
    assert [s.id for s in hub.sessions.list_sessions()] == [session.id]


def test_only_recipient_can_respond(hub):
    invite, _ = hub.create_invite("alice", "bob")
    with pytest.raises(IllegalState):
        hub.resolve_invite(invite.id, INVITE_ACCEPTED, "alice")
    assert hub.invites.get_invite(invite.id).status == INVITE_PENDING


def test_unknown_decision(hub):
    invite, _ = hub.create_invite("alice", "bob")
    with pytest.raises(InvalidRequest):
        hub.resolve_invite(invite.id, "maybe")


def test_unknown_invite(hub):
    with pytest.raises(NotFound):
        hub.resolve_invite("missing", INVITE_ACCEPTED)


def test_pending_invites_only_for_recipient_and_pending(hub):
    hub.players.ensure_player("carol")
    first, _ = hub.create_invite("alice", "bob")
    second, _ = hub.create_invite("carol", "bob")
    hub.create_invite("bob", "alice")
    hub.resolve_invite(first.id, INVITE_DECLINED)
    assert [p["id"] for p in hub.pending_invites("bob")] == [second.id]
    assert len(hub.pending_invites("alice")) == 1
    assert hub.pending_invites("carol") == []


def test_failed_invite_write_is_not_reported(failing_hub, failing_store):
    failing_hub.mark_online("bob", "addr-b")
    failing_store.fail_prefixes.add("invite:")
    with pytest.raises(StoreFailure):
        failing_hub.create_invite("alice", "bob")
    assert failing_store.list("invite:") == []
    assert failing_hub.pending_invites("bob") == []


def test_failed_session_write_keeps_invite_pending(failing_hub, failing_store):
    invite, _ = failing_hub.create_invite("alice", "bob")
    failing_store.fail_prefixes.add("session:")
    with pytest.raises(StoreFailure):
        failing_hub.resolve_invite(invite.id, INVITE_ACCEPTED, "bob")
    assert failing_hub.invites.get_invite(invite.id).status == INVITE_PENDING
    assert failing_hub.sessions.list_sessions() == []

    failing_store.fail_prefixes.clear()
    resolved, session, _ = failing_hub.resolve_invite(invite.id, INVITE_ACCEPTED, "bob")
    assert resolved.session_id == session.id


def test_failed_accept_write_keeps_invite_pending(failing_hub, failing_store):
    invite, _ = failing_hub.create_invite("alice", "bob")
    failing_store.fail_prefixes.add("invite:")
    with pytest.raises(StoreFailure):
        failing_hub.resolve_invite(invite.id, INVITE_ACCEPTED, "bob")
    assert failing_hub.invites.get_invite(invite.id).status == INVITE_PENDING

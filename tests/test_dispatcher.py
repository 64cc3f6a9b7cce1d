"""Тесты доставки событий."""

import asyncio

from tictactoe.dispatcher import Dispatcher
from tictactoe.events import Outbound
from tictactoe.models import Session
from tictactoe.presence import PresenceLedger


class _BrokenTransport:
    async def send(self, address, payload):
        raise ConnectionError("gone")

    async def broadcast(self, payload, exclude=None):
        raise ConnectionError("gone")


def test_to_player_skips_offline():
    ledger = PresenceLedger()
    dispatcher = Dispatcher(ledger)
    assert dispatcher.to_player("alice", {"type": "x"}) == []
    ledger.mark_online("alice", "addr-a")
    assert dispatcher.to_player("alice", {"type": "x"}) == [Outbound("addr-a", {"type": "x"})]


def test_deliver_sends_and_broadcasts(transport):
    dispatcher = Dispatcher(PresenceLedger(), transport)
    outbox = [
        Outbound("addr-a", {"type": "one"}),
        Outbound(None, {"type": "all"}, exclude="addr-a"),
    ]
    asyncio.run(dispatcher.deliver(outbox))
    assert transport.sent == [("addr-a", {"type": "one"})]
    assert transport.broadcasts == [({"type": "all"}, "addr-a")]


def test_broadcast_to_session_participants(transport):
    ledger = PresenceLedger()
    ledger.mark_online("bob", "addr-b")
    dispatcher = Dispatcher(ledger, transport)
    s = Session(id="s1", player_x="alice", player_o="bob")
    asyncio.run(dispatcher.broadcast_to_session_participants(s, {"type": "ping"}))
    assert transport.sent == [("addr-b", {"type": "ping"})]


def test_transport_errors_are_dropped():
    dispatcher = Dispatcher(PresenceLedger(), _BrokenTransport())
    assert asyncio.run(dispatcher.send_to("addr-a", {"type": "x"})) is False
    asyncio.run(dispatcher.deliver([Outbound(None, {"type": "x"})]))


def test_without_transport_nothing_is_sent():
    dispatcher = Dispatcher(PresenceLedger())
    assert asyncio.run(dispatcher.send_to("addr-a", {"type": "x"})) is False

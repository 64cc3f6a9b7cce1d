"""Общие фикстуры для тестов."""

import pytest

from tictactoe.config import get_config
from tictactoe.errors import StoreFailure
from tictactoe.hub import GameHub
from tictactoe.store import MemoryStore


class FakeTransport:
    """Транспорт, который запоминает всё отправленное."""

    def __init__(self):
        self.sent = []
        self.broadcasts = []

    async def send(self, address, payload):
        self.sent.append((address, payload))
        return True

    async def broadcast(self, payload, exclude=None):
        self.broadcasts.append((payload, exclude))


class FailingStore(MemoryStore):
    """MemoryStore, у которого put падает для ключей с заданными префиксами."""

    def __init__(self):
        super().__init__()
        self.fail_prefixes = set()

    def put(self, key, record):
        if any(key.startswith(p) for p in self.fail_prefixes):
            raise StoreFailure(f"write failed for {key}")
        super().put(key, record)


@pytest.fixture(autouse=True)
def _fresh_config():
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def hub(store, transport) -> GameHub:
    """Хаб с двумя зарегистрированными игроками: alice и bob."""
    h = GameHub(store, transport=transport)
    h.players.ensure_player("alice")
    h.players.ensure_player("bob")
    return h


@pytest.fixture
def session(hub):
    """Активная партия: alice — X, bob — O."""
    return hub.sessions.create_session("alice", "bob")


@pytest.fixture
def play(hub):
    """Сыграть ходы по очереди: ход делает тот, чья сейчас очередь."""

    def _play(session_id, slots):
        s = hub.get_session(session_id)
        outboxes = []
        for slot in slots:
            s, outbox = hub.apply_move(session_id, s.player_for(s.current_turn), slot)
            outboxes.append(outbox)
        return s, outboxes

    return _play


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def failing_hub(failing_store, transport) -> GameHub:
    """Как hub, но запись в хранилище можно сломать через fail_prefixes."""
    h = GameHub(failing_store, transport=transport)
    h.players.ensure_player("alice")
    h.players.ensure_player("bob")
    return h

"""
Кто сейчас онлайн и по какому адресу (id WebSocket-соединения).
Эфемерно, в памяти процесса. Один живой адрес на игрока:
переподключение заменяет прежнюю запись.
"""
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from . import events
from .events import Outbound, Outbox
from .models import utc_now_iso

logger = logging.getLogger(__name__)

ONLINE = "online"
OFFLINE = "offline"


@dataclass
class PresenceEntry:
    player_id: str
    address: str
    last_seen: str


class PresenceLedger:
    def __init__(self, profile_lookup: Callable[[str], dict] | None = None):
        self._by_player: dict[str, PresenceEntry] = {}
        self._by_address: dict[str, str] = {}
        self._lock = threading.Lock()
        self._profile_lookup = profile_lookup

    def mark_online(self, player_id: str, address: str) -> tuple[str | None, Outbox]:
        """
        Отметить игрока онлайн. Возвращает (заменённый адрес или None, outbox):
        status_changed всем, кроме нового адреса, и снимок онлайна — новому адресу.
        """
        with self._lock:
            old = self._by_player.get(player_id)
            replaced = None
            if old is not None and old.address != address:
                replaced = old.address
                self._by_address.pop(old.address, None)
            self._by_player[player_id] = PresenceEntry(player_id, address, utc_now_iso())
            self._by_address[address] = player_id
        if replaced:
            logger.info("presence: %s reconnected, replacing address %s", player_id, replaced)
        logger.info("presence: %s online at %s", player_id, address)
        outbox = [
            Outbound(None, events.status_changed(player_id, ONLINE), exclude=address),
            Outbound(address, events.online_users(self.snapshot())),
        ]
        return replaced, outbox

    def mark_offline(self, player_id: str) -> Outbox:
        with self._lock:
            entry = self._by_player.pop(player_id, None)
            if entry is None:
                return []
            self._by_address.pop(entry.address, None)
        logger.info("presence: %s offline", player_id)
        return [Outbound(None, events.status_changed(player_id, OFFLINE))]

    def mark_offline_by_address(self, address: str) -> Outbox:
        """Отключение по адресу. Если адрес уже никому не принадлежит — ничего."""
        with self._lock:
            player_id = self._by_address.pop(address, None)
            if player_id is None:
                return []
            self._by_player.pop(player_id, None)
        logger.info("presence: %s offline (address %s closed)", player_id, address)
        return [Outbound(None, events.status_changed(player_id, OFFLINE))]

    def touch(self, player_id: str) -> None:
        with self._lock:
            entry = self._by_player.get(player_id)
            if entry is not None:
                entry.last_seen = utc_now_iso()

    def address_of(self, player_id: str) -> str | None:
        with self._lock:
            entry = self._by_player.get(player_id)
            return entry.address if entry else None

    def player_at(self, address: str) -> str | None:
        with self._lock:
            return self._by_address.get(address)

    def is_online(self, player_id: str) -> bool:
        return self.address_of(player_id) is not None

    def online_players(self) -> list[str]:
        with self._lock:
            return list(self._by_player)

    def entries(self) -> list[PresenceEntry]:
        with self._lock:
            return list(self._by_player.values())

    def snapshot(self) -> list[dict]:
        items = []
        for entry in self.entries():
            item = {"id": entry.player_id}
            if self._profile_lookup is not None:
                item.update(self._profile_lookup(entry.player_id))
            item["last_seen"] = entry.last_seen
            item["status"] = ONLINE
            items.append(item)
        return items

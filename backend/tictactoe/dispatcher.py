"""
Доставка событий: адресация через PresenceLedger, отправка через транспорт.
Best-effort: без подтверждений и повторов. Клиент, пропустивший событие,
всегда может перезапросить состояние по id.
"""
import logging
from typing import Any, Protocol

from .events import Outbound, Outbox
from .models import Session
from .presence import PresenceLedger

logger = logging.getLogger(__name__)


class Transport(Protocol):
    async def send(self, address: str, payload: dict[str, Any]) -> bool: ...

    async def broadcast(self, payload: dict[str, Any], exclude: str | None = None) -> None: ...


class Dispatcher:
    def __init__(self, presence: PresenceLedger, transport: Transport | None = None):
        self.presence = presence
        self.transport = transport

    def to_player(self, player_id: str, event: dict[str, Any]) -> Outbox:
        """Доставка одному игроку, если он сейчас онлайн."""
        address = self.presence.address_of(player_id)
        if address is None:
            return []
        return [Outbound(address, event)]

    def to_session_participants(self, s: Session, event: dict[str, Any]) -> Outbox:
        outbox: Outbox = []
        for player_id in (s.player_x, s.player_o):
            outbox.extend(self.to_player(player_id, event))
        return outbox

    async def send_to(self, address: str, event: dict[str, Any]) -> bool:
        if self.transport is None:
            return False
        try:
            return await self.transport.send(address, event)
        except Exception as e:
            logger.warning("send_to %s failed: %s", address, e)
            return False

    async def broadcast(self, event: dict[str, Any], exclude: str | None = None) -> None:
        if self.transport is None:
            return
        try:
            await self.transport.broadcast(event, exclude=exclude)
        except Exception as e:
            logger.warning("broadcast %s failed: %s", event.get("type"), e)

    async def broadcast_to_session_participants(self, s: Session, event: dict[str, Any]) -> None:
        await self.deliver(self.to_session_participants(s, event))

    async def deliver(self, outbox: Outbox) -> None:
        for item in outbox:
            if item.is_broadcast:
                await self.broadcast(item.event, exclude=item.exclude)
            else:
                await self.send_to(item.address, item.event)

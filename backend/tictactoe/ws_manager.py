"""
Менеджер WebSocket: соединения по адресу (id соединения), точечная
отправка и рассылка всем. Транспорт для Dispatcher.
"""
import logging
import uuid
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class Connection:
    def __init__(self, ws: WebSocket, address: str):
        self.ws = ws
        self.address = address


class WSManager:
    def __init__(self):
        self._by_address: dict[str, Connection] = {}

    def connect(self, ws: WebSocket) -> Connection:
        conn = Connection(ws, uuid.uuid4().hex)
        self._by_address[conn.address] = conn
        return conn

    def disconnect(self, address: str) -> None:
        self._by_address.pop(address, None)

    async def close(self, address: str, code: int = 4000) -> None:
        conn = self._by_address.pop(address, None)
        if not conn:
            return
        try:
            await conn.ws.close(code=code)
        except Exception as e:
            logger.debug("close %s: %s", address, e)

    async def send(self, address: str, payload: dict[str, Any]) -> bool:
        conn = self._by_address.get(address)
        if not conn:
            return False
        try:
            await conn.ws.send_json(payload)
            return True
        except Exception as e:
            logger.warning("send %s: %s", address, e)
            return False

    async def broadcast(self, payload: dict[str, Any], exclude: str | None = None) -> None:
        dead = []
        for conn in list(self._by_address.values()):
            if conn.address == exclude:
                continue
            try:
                await conn.ws.send_json(payload)
            except Exception:
                dead.append(conn)
        for conn in dead:
            self.disconnect(conn.address)


manager = WSManager()

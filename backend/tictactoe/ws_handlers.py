"""
Обработка сообщений WebSocket: hello, make_move, send_invite,
respond_invite, subscribe_session, pending_invites.
Ошибки уходят только отправителю (move_rejected / error), не в рассылку.
"""
import json
import logging
from typing import Any

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

from . import events
from .errors import GameError, InvalidRequest, StoreFailure
from .events import invite_payload, session_payload
from .hub import GameHub

logger = logging.getLogger(__name__)


async def _reply(hub: GameHub, address: str, payload: dict[str, Any]) -> None:
    await hub.dispatcher.send_to(address, payload)


async def _reject(hub: GameHub, address: str, msg_type: str, err: GameError) -> None:
    if isinstance(err, StoreFailure):
        logger.error("WS: store failure on %s: %s", msg_type, err.message)
        message = "internal error, please retry"
    else:
        logger.warning("WS: %s rejected: %s (%s)", msg_type, err.reason, err.message)
        message = err.message
    if msg_type == "make_move":
        await _reply(hub, address, events.move_rejected(err.reason, message))
    else:
        await _reply(hub, address, events.error(err.reason, message))


async def handle_ws_message(hub: GameHub, address: str, raw: str, player_id: str) -> bool:
    """
    Обрабатывает одно сообщение от клиента, прошедшего hello.
    Возвращает False если соединение нужно закрыть.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("WS: invalid JSON from %s: %s", player_id, e)
        return True
    if not isinstance(data, dict):
        return True
    t = data.get("type")
    logger.info("WS: msg from %s type=%s", player_id, t)
    hub.presence.touch(player_id)
    try:
        if t == "make_move":
            _, outbox = hub.apply_move(data.get("session_id") or "", player_id, data.get("slot"))
            await hub.dispatcher.deliver(outbox)
        elif t == "send_invite":
            invite, outbox = hub.create_invite(player_id, data.get("to_player") or "")
            await _reply(hub, address, {"type": "invite_created", "invite": invite_payload(invite)})
            await hub.dispatcher.deliver(outbox)
        elif t == "respond_invite":
            invite, _, outbox = hub.resolve_invite(
                data.get("invite_id") or "",
                data.get("response") or "",
                acting_player=player_id,
            )
            await _reply(hub, address, {"type": "invite_resolved", "invite": invite_payload(invite)})
            await hub.dispatcher.deliver(outbox)
        elif t == "subscribe_session":
            s = hub.sessions.get_session_for_player(data.get("session_id") or "", player_id)
            await _reply(hub, address, {"type": "session_state", "session": session_payload(s)})
        elif t == "pending_invites":
            await _reply(hub, address, {"type": "pending_invites", "invites": hub.pending_invites(player_id)})
        else:
            logger.warning("WS: unknown message type %r from %s", t, player_id)
            await _reply(hub, address, events.error(InvalidRequest.reason, f"unknown message type {t!r}"))
    except GameError as e:
        await _reject(hub, address, t, e)
    return True


async def ws_hello_and_loop(ws: WebSocket, hub: GameHub) -> None:
    """
    Первое сообщение — hello с player_id. Дальше цикл приёма сообщений.
    """
    conns = hub.transport
    player_id = None
    address = None
    try:
        await ws.accept()
        logger.info("WS: accepted, waiting for hello")
        raw = await ws.receive_text()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            data = {}
        msg_type = data.get("type") if isinstance(data, dict) else None
        if msg_type != "hello":
            logger.warning("WS: expected hello, got %s, closing 4001", msg_type)
            await ws.close(code=4001)
            return
        player_id = str(data.get("player_id") or "").strip()
        if not player_id:
            logger.warning("WS: hello without player_id, closing 4003")
            await ws.close(code=4003)
            return
        address = conns.connect(ws).address
        replaced, outbox = hub.mark_online(player_id, address)
        if replaced:
            await conns.close(replaced, code=4000)
        logger.info("WS: hello ok player_id=%s address=%s", player_id, address)
        await hub.dispatcher.deliver(outbox)
        while True:
            msg = await ws.receive_text()
            if not await handle_ws_message(hub, address, msg, player_id):
                break
    except WebSocketDisconnect as e:
        logger.info("WS: client disconnected code=%s reason=%s player_id=%s", e.code, e.reason or "", player_id)
    except Exception as e:
        logger.exception("WS: error player_id=%s: %s", player_id, e)
    finally:
        if address:
            conns.disconnect(address)
            await hub.dispatcher.deliver(hub.disconnect(address))
            logger.info("WS: disconnected player_id=%s", player_id)

"""
События для клиентов и исходящие доставки.
Операции движка не шлют ничего сами — они возвращают outbox:
список Outbound, который потом доставляет Dispatcher.
"""
from dataclasses import dataclass
from typing import Any

from .models import Invite, Player, Session


@dataclass
class Outbound:
    address: str | None  # None — всем подключённым
    event: dict[str, Any]
    exclude: str | None = None  # адрес, который при broadcast пропускаем

    @property
    def is_broadcast(self) -> bool:
        return self.address is None


Outbox = list[Outbound]


def session_payload(s: Session) -> dict:
    """Состояние партии для отправки клиенту."""
    return {
        "id": s.id,
        "player_x": s.player_x,
        "player_o": s.player_o,
        "board": list(s.board),
        "current_turn": s.current_turn,
        "status": s.status,
        "outcome": s.outcome,
        "winning_line": s.winning_line,
        "moves": [
            {"player": m.player, "symbol": m.symbol, "slot": m.slot, "timestamp": m.timestamp}
            for m in s.moves
        ],
        "created_at": s.created_at,
        "last_move_at": s.last_move_at,
    }


def invite_payload(i: Invite) -> dict:
    return i.to_dict()


def move_made(s: Session, slot: int, player_id: str) -> dict:
    return {"type": "move_made", "session": session_payload(s), "slot": slot, "player": player_id}


def session_finished(s: Session) -> dict:
    return {
        "type": "session_finished",
        "session": session_payload(s),
        "outcome": s.outcome,
        "winning_line": s.winning_line,
    }


def game_invite(invite: Invite, sender: Player) -> dict:
    return {
        "type": "game_invite",
        "invite_id": invite.id,
        "from_player": sender.public_payload(),
        "message": f"{sender.display_name} invited you to play Tic Tac Toe!",
    }


def invite_accepted(session_id: str, opponent: Player) -> dict:
    return {"type": "invite_accepted", "session_id": session_id, "opponent": opponent.public_payload()}


def session_started(session_id: str, opponent: Player) -> dict:
    return {"type": "session_started", "session_id": session_id, "opponent": opponent.public_payload()}


def status_changed(player_id: str, status: str) -> dict:
    return {"type": "status_changed", "player_id": player_id, "status": status}


def online_users(users: list[dict]) -> dict:
    return {"type": "online_users", "users": users}


def move_rejected(reason: str, message: str = "") -> dict:
    return {"type": "move_rejected", "reason": reason, "message": message or reason}


def error(reason: str, message: str = "") -> dict:
    return {"type": "error", "reason": reason, "message": message or reason}

"""
Реестр игроков: профиль и накопленная статистика.
Игрок создаётся при первом контакте и никогда не удаляется.
"""
import logging
import re

from .constants import RESULT_DRAW, RESULT_LOSS, RESULT_WIN
from .errors import InvalidRequest, NotFound
from .models import Player, utc_now_iso
from .store import SessionStore, player_key

logger = logging.getLogger(__name__)

RECORDED_SESSIONS_LIMIT = 100

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class PlayerRegistry:
    def __init__(self, store: SessionStore):
        self.store = store

    def get_player(self, player_id: str) -> Player:
        data = self.store.get(player_key(player_id))
        if data is None:
            raise NotFound(f"player {player_id} not found")
        return Player.from_dict(data)

    def find_player(self, player_id: str) -> Player | None:
        data = self.store.get(player_key(player_id))
        return Player.from_dict(data) if data is not None else None

    def ensure_player(self, player_id: str) -> Player:
        """Вернуть игрока, создав запись при первом контакте."""
        if not player_id:
            raise InvalidRequest("player id is required")
        key = player_key(player_id)
        with self.store.lock(key):
            data = self.store.get(key)
            if data is not None:
                return Player.from_dict(data)
            player = Player(id=player_id)
            self.store.put(key, player.to_dict())
        logger.info("players: new player %s", player_id)
        return player

    def update_profile(
        self,
        player_id: str,
        first_name: str,
        last_name: str,
        username: str,
        email: str,
    ) -> Player:
        fields = [first_name, last_name, username, email]
        if not all(f and f.strip() for f in fields):
            raise InvalidRequest("all fields are required")
        if not EMAIL_RE.match(email.strip()):
            raise InvalidRequest("please enter a valid email address")
        self.ensure_player(player_id)
        key = player_key(player_id)
        with self.store.lock(key):
            player = Player.from_dict(self.store.get(key))
            player.first_name = first_name.strip()
            player.last_name = last_name.strip()
            player.username = username.strip()
            player.email = email.strip()
            player.profile_completed = True
            self.store.put(key, player.to_dict())
        logger.info("players: profile updated %s", player_id)
        return player

    def record_result(self, player_id: str, result: str, session_id: str | None = None) -> Player:
        """
        Обновить статистику после завершённой партии: win / loss / draw.
        С session_id повторный вызов для той же партии ничего не меняет.
        """
        if result not in (RESULT_WIN, RESULT_LOSS, RESULT_DRAW):
            raise InvalidRequest(f"unknown result {result!r}")
        key = player_key(player_id)
        with self.store.lock(key):
            data = self.store.get(key)
            player = Player.from_dict(data) if data is not None else Player(id=player_id)
            if session_id is not None and session_id in player.recorded_sessions:
                return player
            stats = player.stats
            stats["games_played"] += 1
            if result == RESULT_WIN:
                stats["games_won"] += 1
                stats["win_streak"] += 1
                stats["best_win_streak"] = max(stats["best_win_streak"], stats["win_streak"])
            elif result == RESULT_LOSS:
                stats["games_lost"] += 1
                stats["win_streak"] = 0
            else:
                stats["games_drawn"] += 1
                stats["win_streak"] = 0
            if session_id is not None:
                player.recorded_sessions = (player.recorded_sessions + [session_id])[-RECORDED_SESSIONS_LIMIT:]
            self.store.put(key, player.to_dict())
        return player

    def list_players(self) -> list[Player]:
        return [Player.from_dict(d) for d in self.store.list("player:")]

    def public_profile(self, player_id: str) -> dict:
        player = self.find_player(player_id)
        if player is None:
            return {"id": player_id, "username": "", "display_name": f"user_{player_id[:8]}"}
        return player.public_payload()

    @staticmethod
    def created_on(player: Player, day: str | None = None) -> bool:
        day = day or utc_now_iso()[:10]
        return player.created_at.startswith(day)

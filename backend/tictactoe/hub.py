"""
Сборка компонентов и операции, доступные транспорту (REST и WebSocket).
"""
import logging
from functools import lru_cache

from .constants import INVITE_ACCEPTED, STATUS_FINISHED
from .dispatcher import Dispatcher, Transport
from .events import Outbox
from .invites import InviteCoordinator
from .models import Invite, Player, Session, utc_now_iso
from .players import PlayerRegistry
from .presence import PresenceLedger
from .sessions import SessionEngine
from .store import SessionStore, create_store
from .ws_manager import WSManager, manager

logger = logging.getLogger(__name__)


class GameHub:
    def __init__(self, store: SessionStore, transport: Transport | None = None):
        self.store = store
        self.transport = transport if transport is not None else WSManager()
        self.players = PlayerRegistry(store)
        self.presence = PresenceLedger(profile_lookup=self.players.public_profile)
        self.dispatcher = Dispatcher(self.presence, self.transport)
        self.sessions = SessionEngine(store, self.players, self.dispatcher)
        self.invites = InviteCoordinator(store, self.players, self.sessions, self.dispatcher)

    # --- presence ---

    def mark_online(self, player_id: str, address: str) -> tuple[str | None, Outbox]:
        self.players.ensure_player(player_id)
        return self.presence.mark_online(player_id, address)

    def mark_offline(self, player_id: str) -> Outbox:
        return self.presence.mark_offline(player_id)

    def disconnect(self, address: str) -> Outbox:
        return self.presence.mark_offline_by_address(address)

    def online_users(self) -> list[dict]:
        return self.presence.snapshot()

    # --- players ---

    def get_player(self, player_id: str) -> Player:
        return self.players.get_player(player_id)

    def register(self, player_id: str, first_name: str, last_name: str, username: str, email: str) -> Player:
        return self.players.update_profile(player_id, first_name, last_name, username, email)

    # --- invites ---

    def create_invite(self, from_player: str, to_player: str) -> tuple[Invite, Outbox]:
        return self.invites.create_invite(from_player, to_player)

    def resolve_invite(
        self,
        invite_id: str,
        decision: str,
        acting_player: str | None = None,
    ) -> tuple[Invite, Session | None, Outbox]:
        return self.invites.resolve_invite(invite_id, decision, acting_player)

    def create_session_from_invite(self, invite_id: str, acting_player: str | None = None) -> tuple[Session, Outbox]:
        _, session, outbox = self.invites.resolve_invite(invite_id, INVITE_ACCEPTED, acting_player)
        return session, outbox

    def pending_invites(self, player_id: str) -> list[dict]:
        return self.invites.pending_invites_for(player_id)

    # --- sessions ---

    def get_session(self, session_id: str) -> Session:
        return self.sessions.get_session(session_id)

    def apply_move(self, session_id: str, player_id: str, slot: int) -> tuple[Session, Outbox]:
        return self.sessions.apply_move(session_id, player_id, slot)

    # --- statistics ---

    def statistics(self) -> dict:
        players = self.players.list_players()
        sessions = self.sessions.list_sessions()
        today = utc_now_iso()[:10]
        return {
            "total_users": len(players),
            "users_today": sum(1 for p in players if PlayerRegistry.created_on(p, today)),
            "online_users": len(self.presence.online_players()),
            "active_games": sum(1 for s in sessions if s.status != STATUS_FINISHED),
            "total_games": len(sessions),
            "games_played": sum(1 for s in sessions if s.status == STATUS_FINISHED),
        }


@lru_cache
def get_hub() -> GameHub:
    logger.info("hub: initializing")
    return GameHub(create_store(), transport=manager)

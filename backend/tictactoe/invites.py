"""
Приглашения: pending -> accepted | declined, без обратных переходов.
Принятое приглашение создаёт ровно одну партию: отправитель играет X,
получатель — O.
"""
import logging
import uuid

from . import events
from .constants import INVITE_ACCEPTED, INVITE_DECISIONS, INVITE_PENDING
from .dispatcher import Dispatcher
from .errors import AlreadyResolved, IllegalState, InvalidRequest, NotFound, SelfInvite
from .events import Outbox
from .models import Invite, Session, utc_now_iso
from .players import PlayerRegistry
from .sessions import SessionEngine
from .store import SessionStore, invite_key

logger = logging.getLogger(__name__)


class InviteCoordinator:
    def __init__(
        self,
        store: SessionStore,
        players: PlayerRegistry,
        sessions: SessionEngine,
        dispatcher: Dispatcher,
    ):
        self.store = store
        self.players = players
        self.sessions = sessions
        self.dispatcher = dispatcher

    def create_invite(self, from_player: str, to_player: str) -> tuple[Invite, Outbox]:
        if not from_player or not to_player:
            raise InvalidRequest("missing player ids")
        if from_player == to_player:
            raise SelfInvite("you cannot invite yourself")
        sender = self.players.get_player(from_player)
        self.players.get_player(to_player)
        invite = Invite(id=str(uuid.uuid4()), from_player=from_player, to_player=to_player)
        self.store.put(invite_key(invite.id), invite.to_dict())
        logger.info("invite %s: %s -> %s", invite.id, from_player, to_player)
        # получатель офлайн — уведомления нет, он увидит приглашение в pending_invites
        outbox = self.dispatcher.to_player(to_player, events.game_invite(invite, sender))
        return invite, outbox

    def get_invite(self, invite_id: str) -> Invite:
        data = self.store.get(invite_key(invite_id))
        if data is None:
            raise NotFound(f"invite {invite_id} not found")
        return Invite.from_dict(data)

    def resolve_invite(
        self,
        invite_id: str,
        decision: str,
        acting_player: str | None = None,
    ) -> tuple[Invite, Session | None, Outbox]:
        """
        Принять или отклонить приглашение.
        Возвращает (приглашение, партия или None, outbox).
        """
        if decision not in INVITE_DECISIONS:
            raise InvalidRequest(f"decision must be one of {INVITE_DECISIONS}, got {decision!r}")
        key = invite_key(invite_id)
        session = None
        with self.store.lock(key):
            data = self.store.get(key)
            if data is None:
                raise NotFound(f"invite {invite_id} not found")
            invite = Invite.from_dict(data)
            if acting_player is not None and acting_player != invite.to_player:
                raise IllegalState("only the invited player can respond")
            if invite.status != INVITE_PENDING:
                raise AlreadyResolved(f"invite {invite_id} is already {invite.status}")
            if decision == INVITE_ACCEPTED:
                # сначала партия, потом приглашение: accepted без партии не бывает
                session = self.sessions.create_session(invite.from_player, invite.to_player)
                invite.session_id = session.id
            invite.status = decision
            invite.resolved_at = utc_now_iso()
            self.store.put(key, invite.to_dict())

        logger.info("invite %s %s", invite.id, decision)
        if session is None:
            return invite, None, []
        sender = self.players.get_player(invite.from_player)
        recipient = self.players.get_player(invite.to_player)
        outbox = self.dispatcher.to_player(sender.id, events.invite_accepted(session.id, recipient))
        outbox += self.dispatcher.to_player(recipient.id, events.session_started(session.id, sender))
        return invite, session, outbox

    def pending_invites_for(self, player_id: str) -> list[dict]:
        """Ожидающие приглашения игроку, старые первыми, с профилем отправителя."""
        invites = [
            Invite.from_dict(d)
            for d in self.store.list("invite:")
            if d.get("to_player") == player_id and d.get("status") == INVITE_PENDING
        ]
        invites.sort(key=lambda i: i.created_at)
        return [
            {**i.to_dict(), "from_player_profile": self.players.public_profile(i.from_player)}
            for i in invites
        ]

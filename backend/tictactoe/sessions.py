"""
Партии: создание и применение ходов.
Жизненный цикл: active -> finished. Ходы в партии применяются строго
по одному под блокировкой ключа партии.
"""
import logging
import uuid

from . import events
from .constants import DRAW, RESULT_DRAW, RESULT_LOSS, RESULT_WIN, STATUS_ACTIVE, STATUS_FINISHED
from .dispatcher import Dispatcher
from .errors import IllegalState, InvalidSlot, NotFound, NotParticipant, SlotOccupied, WrongTurn
from .events import Outbox
from .models import MoveRecord, Session, utc_now_iso
from .players import PlayerRegistry
from .rules import evaluate, is_valid_slot, other
from .store import SessionStore, session_key

logger = logging.getLogger(__name__)


class SessionEngine:
    def __init__(self, store: SessionStore, players: PlayerRegistry, dispatcher: Dispatcher):
        self.store = store
        self.players = players
        self.dispatcher = dispatcher

    def create_session(self, player_x: str, player_o: str, session_id: str | None = None) -> Session:
        """Новая партия: пустая доска, первым ходит X (player_x)."""
        if player_x == player_o:
            raise IllegalState("a session needs two different players")
        s = Session(id=session_id or str(uuid.uuid4()), player_x=player_x, player_o=player_o)
        self.store.put(session_key(s.id), s.to_dict())
        logger.info("session %s created: X=%s O=%s", s.id, player_x, player_o)
        return s

    def get_session(self, session_id: str) -> Session:
        data = self.store.get(session_key(session_id))
        if data is None:
            raise NotFound(f"session {session_id} not found")
        return Session.from_dict(data)

    def get_session_for_player(self, session_id: str, player_id: str) -> Session:
        """Партия существует и игрок в ней участник."""
        s = self.get_session(session_id)
        if s.symbol_of(player_id) is None:
            raise NotParticipant(f"{player_id} is not playing in session {session_id}")
        return s

    def list_sessions(self, active_only: bool = False) -> list[Session]:
        sessions = [Session.from_dict(d) for d in self.store.list("session:")]
        if active_only:
            sessions = [s for s in sessions if s.status == STATUS_ACTIVE]
        return sessions

    def apply_move(self, session_id: str, player_id: str, slot: int) -> tuple[Session, Outbox]:
        """
        Применить ход. Возвращает (партия, outbox): move_made обоим участникам
        и, если ход завершил партию, session_finished.
        """
        if not is_valid_slot(slot):
            raise InvalidSlot(f"slot must be an integer in [0, 9), got {slot!r}")
        key = session_key(session_id)
        with self.store.lock(key):
            data = self.store.get(key)
            if data is None:
                raise NotFound(f"session {session_id} not found")
            s = Session.from_dict(data)
            if s.finished:
                raise IllegalState(f"session {session_id} is already finished")
            symbol = s.symbol_of(player_id)
            if symbol is None:
                raise NotParticipant(f"{player_id} is not playing in session {session_id}")
            if s.board[slot] is not None:
                raise SlotOccupied(f"slot {slot} is already taken")
            if symbol != s.current_turn:
                raise WrongTurn(f"it is {s.current_turn}'s turn")

            now = utc_now_iso()
            s.board[slot] = symbol
            s.moves.append(MoveRecord(player=player_id, symbol=symbol, slot=slot, timestamp=now))
            s.last_move_at = now
            outcome, line = evaluate(s.board)
            if outcome is None:
                s.current_turn = other(symbol)
            else:
                s.status = STATUS_FINISHED
                s.outcome = outcome
                s.winning_line = line
                # сохранённая finished-партия всегда уже учтена в статистике
                self._record_results(s)
            self.store.put(key, s.to_dict())

        logger.info("session %s: %s (%s) -> slot %d", s.id, player_id, symbol, slot)
        if s.finished:
            logger.info("session %s finished: outcome=%s line=%s", s.id, s.outcome, s.winning_line)

        outbox = self.dispatcher.to_session_participants(s, events.move_made(s, slot, player_id))
        if s.finished:
            outbox += self.dispatcher.to_session_participants(s, events.session_finished(s))
        return s, outbox

    def _record_results(self, s: Session) -> None:
        if s.outcome == DRAW:
            self.players.record_result(s.player_x, RESULT_DRAW, s.id)
            self.players.record_result(s.player_o, RESULT_DRAW, s.id)
            return
        winner = s.player_for(s.outcome)
        loser = s.player_for(other(s.outcome))
        self.players.record_result(winner, RESULT_WIN, s.id)
        self.players.record_result(loser, RESULT_LOSS, s.id)

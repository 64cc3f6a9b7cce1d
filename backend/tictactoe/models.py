"""
Записи, которые живут в хранилище: игрок, партия, приглашение.
В хранилище лежат как dict (to_dict / from_dict).
"""
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

from .constants import (
    INVITE_PENDING,
    O,
    STATUS_ACTIVE,
    STATUS_FINISHED,
    X,
    PlayerStats,
    empty_stats,
)
from .rules import Board, empty_board


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Player:
    id: str
    username: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    profile_completed: bool = False
    created_at: str = field(default_factory=utc_now_iso)
    stats: PlayerStats = field(default_factory=empty_stats)
    # последние партии, уже учтённые в stats
    recorded_sessions: list[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.username or self.first_name or f"user_{self.id[:8]}"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Player":
        stats = empty_stats()
        stats.update(data.get("stats") or {})
        return cls(
            id=data["id"],
            username=data.get("username", ""),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            email=data.get("email", ""),
            profile_completed=bool(data.get("profile_completed", False)),
            created_at=data.get("created_at") or utc_now_iso(),
            stats=stats,
            recorded_sessions=list(data.get("recorded_sessions") or []),
        )

    def public_payload(self) -> dict:
        """Профиль без email — то, что видят другие игроки."""
        return {
            "id": self.id,
            "username": self.username,
            "display_name": self.display_name,
            "stats": dict(self.stats),
        }


@dataclass
class MoveRecord:
    player: str
    symbol: str
    slot: int
    timestamp: str


@dataclass
class Session:
    id: str
    player_x: str
    player_o: str
    board: Board = field(default_factory=empty_board)
    current_turn: str = X
    status: str = STATUS_ACTIVE
    outcome: str | None = None  # None | "X" | "O" | "draw"
    winning_line: list[int] | None = None
    moves: list[MoveRecord] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now_iso)
    last_move_at: str = ""

    def __post_init__(self) -> None:
        if not self.last_move_at:
            self.last_move_at = self.created_at

    @property
    def finished(self) -> bool:
        return self.status == STATUS_FINISHED

    def symbol_of(self, player_id: str) -> str | None:
        if player_id == self.player_x:
            return X
        if player_id == self.player_o:
            return O
        return None

    def player_for(self, symbol: str) -> str:
        return self.player_x if symbol == X else self.player_o

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        return cls(
            id=data["id"],
            player_x=data["player_x"],
            player_o=data["player_o"],
            board=list(data.get("board") or empty_board()),
            current_turn=data.get("current_turn", X),
            status=data.get("status", STATUS_ACTIVE),
            outcome=data.get("outcome"),
            winning_line=data.get("winning_line"),
            moves=[MoveRecord(**m) for m in data.get("moves", [])],
            created_at=data.get("created_at") or utc_now_iso(),
            last_move_at=data.get("last_move_at", ""),
        )


@dataclass
class Invite:
    id: str
    from_player: str
    to_player: str
    status: str = INVITE_PENDING
    created_at: str = field(default_factory=utc_now_iso)
    resolved_at: str | None = None
    session_id: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Invite":
        return cls(
            id=data["id"],
            from_player=data["from_player"],
            to_player=data["to_player"],
            status=data.get("status", INVITE_PENDING),
            created_at=data.get("created_at") or utc_now_iso(),
            resolved_at=data.get("resolved_at"),
            session_id=data.get("session_id"),
        )

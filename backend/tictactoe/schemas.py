"""Модели Pydantic для запросов и ответов REST API."""
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


# --- POST /api/register/{player_id} ---
class RegisterRequest(BaseModel):
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)
    username: str = Field(default="", max_length=100)
    email: str = Field(default="", max_length=200)


class PlayerOut(BaseModel):
    id: str
    username: str = ""
    first_name: str = ""
    last_name: str = ""
    display_name: str = ""
    profile_completed: bool = False
    created_at: Optional[str] = None
    stats: dict[str, int] = Field(default_factory=dict)


class PlayerResponse(BaseModel):
    success: bool = True
    user: PlayerOut


# --- GET /api/online-users ---
class OnlineUsersResponse(BaseModel):
    success: bool = True
    users: list[dict[str, Any]] = Field(default_factory=list)


# --- POST /api/send-invite ---
class SendInviteRequest(BaseModel):
    from_player: str = Field(min_length=1)
    to_player: str = Field(min_length=1)


class InviteOut(BaseModel):
    id: str
    from_player: str
    to_player: str
    status: str
    created_at: str
    resolved_at: Optional[str] = None
    session_id: Optional[str] = None


class InviteResponse(BaseModel):
    success: bool = True
    invite: InviteOut


# --- POST /api/respond-invite ---
class RespondInviteRequest(BaseModel):
    invite_id: str = Field(min_length=1)
    response: Literal["accepted", "declined"]
    player_id: Optional[str] = None


class RespondInviteResponse(BaseModel):
    success: bool = True
    invite: InviteOut
    session_id: Optional[str] = None


# --- GET /api/pending-invites/{player_id} ---
class PendingInvitesResponse(BaseModel):
    success: bool = True
    invites: list[dict[str, Any]] = Field(default_factory=list)


# --- GET /api/game/{session_id} ---
class MoveOut(BaseModel):
    player: str
    symbol: str
    slot: int
    timestamp: str


class SessionOut(BaseModel):
    id: str
    player_x: str
    player_o: str
    board: list[Optional[str]]
    current_turn: str
    status: str
    outcome: Optional[str] = None
    winning_line: Optional[list[int]] = None
    moves: list[MoveOut] = Field(default_factory=list)
    created_at: str
    last_move_at: str


class SessionResponse(BaseModel):
    success: bool = True
    game: SessionOut


# --- POST /api/game/{session_id}/move ---
class MoveRequest(BaseModel):
    player_id: str = Field(min_length=1)
    slot: int


# --- GET /api/statistics ---
class StatisticsOut(BaseModel):
    total_users: int = 0
    users_today: int = 0
    online_users: int = 0
    active_games: int = 0
    total_games: int = 0
    games_played: int = 0


class StatisticsResponse(BaseModel):
    success: bool = True
    statistics: StatisticsOut


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"

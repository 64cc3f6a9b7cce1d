"""
REST API: профиль, онлайн, приглашения, партии, статистика.
GameError поднимается наружу и превращается в ответ в main.py.
"""
import logging

from fastapi import APIRouter, Depends

from .events import invite_payload, session_payload
from .hub import GameHub, get_hub
from .models import Player
from .schemas import (
    InviteOut,
    InviteResponse,
    MoveRequest,
    OnlineUsersResponse,
    PendingInvitesResponse,
    PlayerOut,
    PlayerResponse,
    RegisterRequest,
    RespondInviteRequest,
    RespondInviteResponse,
    SendInviteRequest,
    SessionOut,
    SessionResponse,
    StatisticsOut,
    StatisticsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["game"])


def _player_out(p: Player) -> PlayerOut:
    return PlayerOut(
        id=p.id,
        username=p.username,
        first_name=p.first_name,
        last_name=p.last_name,
        display_name=p.display_name,
        profile_completed=p.profile_completed,
        created_at=p.created_at,
        stats=dict(p.stats),
    )


@router.get("/user/{player_id}", response_model=PlayerResponse)
def get_user(player_id: str, hub: GameHub = Depends(get_hub)):
    return PlayerResponse(user=_player_out(hub.get_player(player_id)))


@router.post("/register/{player_id}", response_model=PlayerResponse)
def register(player_id: str, body: RegisterRequest, hub: GameHub = Depends(get_hub)):
    logger.info("API: registration submitted for %s", player_id)
    player = hub.register(player_id, body.first_name, body.last_name, body.username, body.email)
    return PlayerResponse(user=_player_out(player))


@router.get("/online-users", response_model=OnlineUsersResponse)
def online_users(hub: GameHub = Depends(get_hub)):
    return OnlineUsersResponse(users=hub.online_users())


@router.post("/send-invite", response_model=InviteResponse)
async def send_invite(body: SendInviteRequest, hub: GameHub = Depends(get_hub)):
    invite, outbox = hub.create_invite(body.from_player, body.to_player)
    await hub.dispatcher.deliver(outbox)
    return InviteResponse(invite=InviteOut(**invite_payload(invite)))


@router.post("/respond-invite", response_model=RespondInviteResponse)
async def respond_invite(body: RespondInviteRequest, hub: GameHub = Depends(get_hub)):
    invite, session, outbox = hub.resolve_invite(body.invite_id, body.response, body.player_id)
    await hub.dispatcher.deliver(outbox)
    return RespondInviteResponse(
        invite=InviteOut(**invite_payload(invite)),
        session_id=session.id if session else None,
    )


@router.get("/pending-invites/{player_id}", response_model=PendingInvitesResponse)
def pending_invites(player_id: str, hub: GameHub = Depends(get_hub)):
    return PendingInvitesResponse(invites=hub.pending_invites(player_id))


@router.get("/game/{session_id}", response_model=SessionResponse)
def get_game(session_id: str, hub: GameHub = Depends(get_hub)):
    return SessionResponse(game=SessionOut(**session_payload(hub.get_session(session_id))))


@router.post("/game/{session_id}/move", response_model=SessionResponse)
async def make_move(session_id: str, body: MoveRequest, hub: GameHub = Depends(get_hub)):
    s, outbox = hub.apply_move(session_id, body.player_id, body.slot)
    await hub.dispatcher.deliver(outbox)
    return SessionResponse(game=SessionOut(**session_payload(s)))


@router.get("/statistics", response_model=StatisticsResponse)
def statistics(hub: GameHub = Depends(get_hub)):
    return StatisticsResponse(statistics=StatisticsOut(**hub.statistics()))

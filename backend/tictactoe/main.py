"""
Tic Tac Toe API и WebSocket.
"""
import logging

from fastapi import Depends, FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_config
from .errors import (
    AlreadyResolved,
    GameError,
    IllegalState,
    InvalidRequest,
    InvalidSlot,
    NotFound,
    SelfInvite,
    SlotOccupied,
    StoreFailure,
    WrongTurn,
)
from .hub import GameHub, get_hub
from .routes import router
from .schemas import HealthResponse
from .ws_handlers import ws_hello_and_loop

config = get_config()

logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# порядок важен: подклассы раньше базовых
ERROR_STATUS: list[tuple[type[GameError], int]] = [
    (NotFound, 404),
    (SlotOccupied, 409),
    (WrongTurn, 409),
    (AlreadyResolved, 409),
    (IllegalState, 409),
    (SelfInvite, 422),
    (InvalidSlot, 422),
    (InvalidRequest, 422),
    (StoreFailure, 500),
]

app = FastAPI(title="Tic Tac Toe API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(router)


def status_for(err: GameError) -> int:
    for cls, status in ERROR_STATUS:
        if isinstance(err, cls):
            return status
    return 400


@app.exception_handler(GameError)
async def game_error_handler(request: Request, err: GameError):
    status = status_for(err)
    if isinstance(err, StoreFailure):
        logger.error("API: %s %s store failure: %s", request.method, request.url.path, err.message)
        message = "internal error, please retry"
    else:
        logger.warning("API: %s %s rejected: %s", request.method, request.url.path, err.reason)
        message = err.message
    return JSONResponse(status_code=status, content={"detail": message, "reason": err.reason})


@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok")


@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket, hub: GameHub = Depends(get_hub)):
    logger.info("WS: connection attempt from %s", ws.client)
    await ws_hello_and_loop(ws, hub)

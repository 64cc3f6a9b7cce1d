"""Константы игры: символы, статусы, линии победы."""
from typing import TypedDict

X = "X"
O = "O"
DRAW = "draw"

BOARD_SIZE = 9

STATUS_ACTIVE = "active"
STATUS_FINISHED = "finished"

INVITE_PENDING = "pending"
INVITE_ACCEPTED = "accepted"
INVITE_DECLINED = "declined"
INVITE_DECISIONS = (INVITE_ACCEPTED, INVITE_DECLINED)

RESULT_WIN = "win"
RESULT_LOSS = "loss"
RESULT_DRAW = "draw"

# 3 строки, 3 столбца, 2 диагонали
WIN_LINES: list[tuple[int, int, int]] = [
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
]


class PlayerStats(TypedDict):
    games_played: int
    games_won: int
    games_lost: int
    games_drawn: int
    win_streak: int
    best_win_streak: int


def empty_stats() -> PlayerStats:
    return {
        "games_played": 0,
        "games_won": 0,
        "games_lost": 0,
        "games_drawn": 0,
        "win_streak": 0,
        "best_win_streak": 0,
    }

"""
Правила крестиков-ноликов 3x3: чистые функции без состояния и I/O.
"""
from .constants import BOARD_SIZE, DRAW, O, WIN_LINES, X

Board = list[str | None]


def empty_board() -> Board:
    return [None] * BOARD_SIZE


def other(symbol: str) -> str:
    return O if symbol == X else X


def is_full(board: Board) -> bool:
    return all(cell is not None for cell in board)


def symbol_counts(board: Board) -> dict[str, int]:
    return {X: board.count(X), O: board.count(O)}


def is_valid_slot(slot) -> bool:
    # bool — подкласс int, True/False слотом не считаем
    return isinstance(slot, int) and not isinstance(slot, bool) and 0 <= slot < BOARD_SIZE


def evaluate(board: Board) -> tuple[str | None, list[int] | None]:
    """
    Итог позиции: (outcome, winning_line).
    outcome — None (игра продолжается), "X", "O" или "draw".
    Линии проверяются в фиксированном порядке: строки, столбцы, диагонали.
    """
    for a, b, c in WIN_LINES:
        if board[a] is not None and board[a] == board[b] == board[c]:
            return board[a], [a, b, c]
    if is_full(board):
        return DRAW, None
    return None, None

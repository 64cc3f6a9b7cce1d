"""Тесты правил: линии победы, ничья, продолжение игры."""

import pytest

from tictactoe.constants import DRAW, O, WIN_LINES, X
from tictactoe.rules import empty_board, evaluate, is_full, is_valid_slot, other, symbol_counts


@pytest.mark.parametrize("symbol", [X, O])
@pytest.mark.parametrize("line", WIN_LINES)
def test_each_line_wins_with_exact_line(line, symbol):
    board = empty_board()
    for i in line:
        board[i] = symbol
    assert evaluate(board) == (symbol, list(line))


def test_empty_board_is_undecided():
    assert evaluate(empty_board()) == (None, None)


def test_partial_board_without_line_is_undecided():
    board = [X, O, X, None, O, None, None, None, None]
    assert evaluate(board) == (None, None)


def test_full_board_without_line_is_draw():
    # X: 0,1,5,6,8  O: 2,3,4,7
    board = [X, X, O, O, O, X, X, O, X]
    assert evaluate(board) == (DRAW, None)


def test_win_on_last_slot_beats_draw():
    board = [X, O, X, O, X, O, O, X, X]
    assert is_full(board)
    assert evaluate(board) == (X, [0, 4, 8])


def test_lines_are_checked_in_fixed_order():
    board = [X, X, X, X, X, X, None, None, None]
    assert evaluate(board) == (X, [0, 1, 2])


def test_helpers():
    assert other(X) == O
    assert other(O) == X
    assert symbol_counts([X, O, X, None, None, None, None, None, None]) == {X: 2, O: 1}
    assert not is_full(empty_board())


@pytest.mark.parametrize("slot", [0, 4, 8])
def test_valid_slots(slot):
    assert is_valid_slot(slot)


@pytest.mark.parametrize("slot", [-1, 9, 100, "1", None, 1.0, True])
def test_invalid_slots(slot):
    assert not is_valid_slot(slot)

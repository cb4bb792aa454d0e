from __future__ import annotations

import random

import pytest

from checkers_arena.engine.board import TEAM_1, TEAM_2, Board
from checkers_arena.engine.move import Move
from checkers_arena.engine.movegen import is_capture, moves_for_team
from checkers_arena.eval import WIN_SCORE
from checkers_arena.search.minimax import minimax_move, minimax_search, order_moves


CAPTURE = "8/8/2x5/3o4/8/8/8/8"


def test_team1_takes_winning_capture() -> None:
    res = minimax_search(Board.from_diagram(CAPTURE), TEAM_1, depth=3, rng=random.Random(0))
    assert res.best_move is not None and res.best_move.to_str() == "c3e5"
    assert res.score == WIN_SCORE - 1
    assert res.nodes >= 1


def test_team2_minimizes() -> None:
    res = minimax_search(Board.from_diagram(CAPTURE), TEAM_2, depth=3, rng=random.Random(0))
    assert res.best_move is not None and res.best_move.to_str() == "d4b2"
    assert res.score == -(WIN_SCORE - 1)


KING_CAPTURE = "8/8/2X5/3o4/8/8/8/8"


@pytest.mark.parametrize("depth", [2, 3, 4])
def test_team1_king_takes_last_man(depth: int) -> None:
    board = Board.from_diagram(KING_CAPTURE)
    res = minimax_search(board, TEAM_1, depth=depth, rng=random.Random(0))
    assert res.best_move is not None
    # Every king landing beyond d4 jumps it; all of them end the game at once.
    assert res.best_move.to_str() in {"c3e5", "c3f6", "c3g7", "c3h8"}
    assert is_capture(res.best_move, board)
    assert res.score == WIN_SCORE - 1


def test_startpos_returns_legal_move() -> None:
    board = Board.startpos()
    for team in (TEAM_1, TEAM_2):
        move = minimax_move(board, team, depth=2, rng=random.Random(7))
        assert move in moves_for_team(board, team)


def test_same_seed_same_move() -> None:
    board = Board.startpos()
    a = minimax_move(board, TEAM_1, depth=2, rng=random.Random(11))
    b = minimax_move(board, TEAM_1, depth=2, rng=random.Random(11))
    assert a == b


def test_no_moves_returns_none() -> None:
    board = Board.from_diagram("8/8/8/8/4o3/8/8/8")
    res = minimax_search(board, TEAM_1, depth=2, rng=random.Random(0))
    assert res.best_move is None and res.score is None


def test_depth_must_be_positive() -> None:
    with pytest.raises(ValueError):
        minimax_search(Board.startpos(), TEAM_1, depth=0)


def test_order_moves_puts_captures_first() -> None:
    board = Board.from_diagram("8/8/2x5/3o4/8/8/8/7x")
    quiet = Move(board.piece_at(7, 7).id, (7, 7), (6, 6))
    capture = moves_for_team(board, TEAM_1)[0]
    ordered = order_moves([quiet, capture], board)
    assert ordered == [capture, quiet]
    assert is_capture(ordered[0], board)

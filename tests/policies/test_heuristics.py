from __future__ import annotations

import random

import pytest

from checkers_arena.engine.board import TEAM_1, TEAM_2, Board
from checkers_arena.engine.movegen import moves_for_team
from checkers_arena.policies.base import PolicyContext, pick_within, sort_scored
from checkers_arena.policies.heuristics import (
    adaptive_policy,
    adaptive_strategy,
    defensive_policy,
    greedy_policy,
    positional_policy,
    random_policy,
    super_greedy_policy,
)


HEURISTICS = [
    random_policy,
    greedy_policy,
    super_greedy_policy,
    defensive_policy,
    adaptive_policy,
    positional_policy,
]


@pytest.mark.parametrize("policy", HEURISTICS)
def test_policy_returns_legal_move(policy) -> None:
    ctx = PolicyContext(rng=random.Random(1))
    board = Board.startpos()
    for team in (TEAM_1, TEAM_2):
        assert policy(board, team, ctx) in moves_for_team(board, team)


@pytest.mark.parametrize("policy", HEURISTICS)
def test_policy_with_no_moves_returns_none(policy) -> None:
    board = Board.from_diagram("8/8/8/8/4o3/8/8/8")
    assert policy(board, TEAM_1, PolicyContext()) is None


@pytest.mark.parametrize("policy", HEURISTICS)
def test_policy_takes_forced_capture(policy) -> None:
    board = Board.from_diagram("8/8/2x5/3o4/8/8/8/o7")
    move = policy(board, TEAM_1, PolicyContext(rng=random.Random(2)))
    assert move is not None and move.to_str() == "c3e5"


def test_greedy_prefers_longer_chain() -> None:
    # c3 can take two pieces (via e5 to g7), f2 only one (to h4).
    board = Board.from_diagram("8/5x2/2x3o1/3o4/8/5o2/8/o7")
    for seed in range(5):
        move = greedy_policy(board, TEAM_1, PolicyContext(rng=random.Random(seed)))
        assert move is not None and move.to_str() == "c3e5"


def test_defensive_avoids_exposing_piece() -> None:
    # c3-d4 would leave the man en prise to the o on e5.
    board = Board.from_diagram("8/8/2x5/8/4o3/8/8/8")
    for seed in range(5):
        move = defensive_policy(board, TEAM_1, PolicyContext(rng=random.Random(seed)))
        assert move is not None and move.to_str() != "c3d4"


def test_adaptive_strategy_follows_material() -> None:
    assert adaptive_strategy(Board.startpos(), TEAM_1) == "positional"
    ahead = Board.from_diagram("x1x1x3/8/8/8/8/8/8/7o")
    assert adaptive_strategy(ahead, TEAM_1) == "defensive"
    assert adaptive_strategy(ahead, TEAM_2) == "aggressive"


def test_pick_within_band() -> None:
    board = Board.startpos()
    moves = moves_for_team(board, TEAM_1)
    scored = sort_scored([(float(i), m) for i, m in enumerate(moves)])
    assert scored[0][1] == moves[-1]
    rng = random.Random(0)
    picks = {pick_within(scored, 5.0, rng) for _ in range(50)}
    assert picks <= {moves[5], moves[6]}

from __future__ import annotations

import random

from checkers_arena.engine.board import TEAM_1, TEAM_2, Board
from checkers_arena.engine.movegen import moves_for_team
from checkers_arena.search.mcts import MCTSTree, mcts_move, simulate


def test_finished_position_returns_none() -> None:
    board = Board.from_diagram("8/8/4x3/8/8/8/8/8")
    assert mcts_move(board, TEAM_1, iterations=10, rng=random.Random(0)) is None


def test_single_move_returned_without_search() -> None:
    board = Board.from_diagram("8/8/2x5/3o4/8/8/8/8")
    move = mcts_move(board, TEAM_1, iterations=0, rng=random.Random(0))
    assert move is not None and move.to_str() == "c3e5"


def test_startpos_move_is_legal() -> None:
    board = Board.startpos()
    for team in (TEAM_1, TEAM_2):
        move = mcts_move(board, team, iterations=40, rollout_cap=20, rng=random.Random(3))
        assert move in moves_for_team(board, team)


def test_tree_visit_accounting() -> None:
    tree = MCTSTree(Board.startpos(), TEAM_1, random.Random(5), rollout_cap=15)
    for _ in range(25):
        tree.iterate()
    root = tree.nodes[tree.root]
    assert root.visits == 25
    assert sum(tree.nodes[c].visits for c in root.children) == 25
    # seven root moves; the first seven iterations expand one each
    assert len(root.children) == 7
    best = tree.robust_child()
    assert best is not None
    assert tree.nodes[best].visits == max(tree.nodes[c].visits for c in root.children)


def test_simulate_result_range() -> None:
    rng = random.Random(9)
    for _ in range(5):
        assert simulate(Board.startpos(), TEAM_1, rng, max_moves=30) in (0.0, 0.5, 1.0)
    # already won
    assert simulate(Board.from_diagram("8/8/4x3/8/8/8/8/8"), TEAM_2, rng) == 1.0

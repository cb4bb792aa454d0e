from __future__ import annotations

import logging
from typing import Dict, Optional, Union

from checkers_arena.engine.board import Board
from checkers_arena.engine.move import Move
from checkers_arena.engine.movegen import is_capture, moves_for_team
from checkers_arena.search.mcts import mcts_move
from checkers_arena.search.minimax import minimax_move

from .base import Policy, PolicyContext, PolicyId
from .heuristics import (
    adaptive_policy,
    defensive_policy,
    greedy_policy,
    positional_policy,
    random_policy,
    super_greedy_policy,
)


logger = logging.getLogger(__name__)


def minimax_policy(board: Board, team: int, ctx: PolicyContext) -> Optional[Move]:
    return minimax_move(board, team, depth=ctx.params.minimax_depth, rng=ctx.rng)


def mcts_policy(board: Board, team: int, ctx: PolicyContext) -> Optional[Move]:
    return mcts_move(
        board,
        team,
        iterations=ctx.params.mcts_iterations,
        rollout_cap=ctx.params.rollout_cap,
        rng=ctx.rng,
    )


POLICIES: Dict[PolicyId, Policy] = {
    PolicyId.RANDOM: random_policy,
    PolicyId.GREEDY: greedy_policy,
    PolicyId.SUPER_GREEDY: super_greedy_policy,
    PolicyId.DEFENSIVE: defensive_policy,
    PolicyId.ADAPTIVE: adaptive_policy,
    PolicyId.MINIMAX: minimax_policy,
    PolicyId.MCTS: mcts_policy,
    PolicyId.POSITIONAL: positional_policy,
}


def parse_policy(policy: Union[PolicyId, str]) -> PolicyId:
    """Resolve a policy identifier.

    Raises:
        ValueError: If ``policy`` names no known policy.
    """
    try:
        return PolicyId(policy)
    except ValueError:
        raise ValueError(f"unknown policy: {policy!r}") from None


def get_move(
    policy: Union[PolicyId, str],
    board: Board,
    team: int,
    ctx: Optional[PolicyContext] = None,
) -> Optional[Move]:
    """Ask ``policy`` for a move for ``team`` and enforce mandatory capture.

    A non-capturing answer while a capture exists is replaced by a uniformly
    random legal capture. ``None`` means ``team`` has no legal move.
    """
    ctx = ctx or PolicyContext()
    pid = parse_policy(policy)
    legal = moves_for_team(board, team)
    if not legal:
        return None

    move = POLICIES[pid](board, team, ctx)
    if move is None:
        # Only reachable when the policy sees a finished position it could still move in.
        logger.debug("policy returned no move", extra={"policy": pid.value, "team": team})
        return legal[ctx.rng.randrange(len(legal))]

    if not is_capture(move, board) and is_capture(legal[0], board):
        logger.debug("mandatory capture override", extra={"policy": pid.value, "team": team})
        return legal[ctx.rng.randrange(len(legal))]
    return move

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass
from typing import List, Optional

from checkers_arena.engine.board import TEAM_1, Board, opponent
from checkers_arena.engine.move import Move
from checkers_arena.engine.movegen import apply, game_status, is_capture, moves_for_team
from checkers_arena.eval import WIN_SCORE, evaluate
from checkers_arena.search.noise import noise


logger = logging.getLogger(__name__)

DEFAULT_DEPTH = 4


@dataclass
class SearchStats:
    nodes: int = 0
    cutoffs: int = 0


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: Optional[float]
    nodes: int
    cutoffs: int
    depth: int
    time_ms: int


def order_moves(moves: List[Move], board: Board) -> List[Move]:
    """Stable partition: captures first, input order kept within each group."""
    captures = [m for m in moves if is_capture(m, board)]
    quiet = [m for m in moves if not is_capture(m, board)]
    return captures + quiet


def search(
    board: Board,
    depth: int,
    alpha: float,
    beta: float,
    maximizing: bool,
    side_to_move: int,
    max_depth: int,
    stats: Optional[SearchStats] = None,
) -> float:
    """Alpha-beta minimax over cloned boards.

    Args:
        board (Board): Position at this node.
        depth (int): Remaining plies.
        alpha (float): Lower bound for the maximizer.
        beta (float): Upper bound for the minimizer.
        maximizing (bool): True when team 1's interests are maximized here.
        side_to_move (int): Team whose moves are expanded.
        max_depth (int): Root depth, used to prefer quicker forced wins.
        stats (Optional[SearchStats]): Counters updated in place.

    Returns:
        float: Score from team 1's point of view.
    """
    if stats is not None:
        stats.nodes += 1
    status = game_status(board)
    if status.over:
        penalty = max_depth - depth
        return WIN_SCORE - penalty if status.winner == TEAM_1 else -(WIN_SCORE - penalty)
    if depth == 0:
        return evaluate(board)

    moves = order_moves(moves_for_team(board, side_to_move), board)
    next_side = opponent(side_to_move)
    if maximizing:
        best = -math.inf
        for m in moves:
            child = apply(board, m).board
            score = search(child, depth - 1, alpha, beta, False, next_side, max_depth, stats)
            best = max(best, score)
            alpha = max(alpha, score)
            if beta <= alpha:
                if stats is not None:
                    stats.cutoffs += 1
                break
        return best
    best = math.inf
    for m in moves:
        child = apply(board, m).board
        score = search(child, depth - 1, alpha, beta, True, next_side, max_depth, stats)
        best = min(best, score)
        beta = min(beta, score)
        if beta <= alpha:
            if stats is not None:
                stats.cutoffs += 1
            break
    return best


def minimax_search(
    board: Board,
    team: int,
    depth: int = DEFAULT_DEPTH,
    rng: Optional[random.Random] = None,
) -> SearchResult:
    """Score every root move with a full-window search and keep the extremum.

    Team 1 keeps the highest noisy score, team 2 the lowest. The reported
    ``score`` is the chosen move's search score without the noise.
    """
    if depth < 1:
        raise ValueError("depth must be >= 1")
    rng = rng or random.Random()
    start = time.perf_counter()
    stats = SearchStats()

    best_move: Optional[Move] = None
    best_noisy = -math.inf if team == TEAM_1 else math.inf
    best_score: Optional[float] = None
    for m in moves_for_team(board, team):
        child = apply(board, m).board
        raw = search(
            child, depth - 1, -math.inf, math.inf, team != TEAM_1, opponent(team), depth, stats
        )
        noisy = raw + noise(rng)
        if (team == TEAM_1 and noisy > best_noisy) or (team != TEAM_1 and noisy < best_noisy):
            best_noisy = noisy
            best_move = m
            best_score = raw

    time_ms = int((time.perf_counter() - start) * 1000)
    logger.debug(
        "minimax",
        extra={"team": team, "depth": depth, "nodes": stats.nodes, "time_ms": time_ms},
    )
    return SearchResult(
        best_move=best_move,
        score=best_score,
        nodes=stats.nodes,
        cutoffs=stats.cutoffs,
        depth=depth,
        time_ms=time_ms,
    )


def minimax_move(
    board: Board,
    team: int,
    depth: int = DEFAULT_DEPTH,
    rng: Optional[random.Random] = None,
) -> Optional[Move]:
    return minimax_search(board, team, depth, rng).best_move

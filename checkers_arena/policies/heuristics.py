"""Non-search policies.

Each one scores every legal move, adds a small random perturbation, and
samples uniformly among the moves inside its own tolerance band below the
best score. The band is what gives each bot a consistent style without
replaying identical games.
"""

from __future__ import annotations

import random
from typing import Final, List, Optional

from checkers_arena.engine.board import TEAM_1, Board, Piece, home_row, opponent
from checkers_arena.engine.errors import InvalidStateError
from checkers_arena.engine.move import Move
from checkers_arena.engine.movegen import (
    apply,
    capture_detect,
    chain_capture_depth,
    moves_for_team,
)
from checkers_arena.eval import advancement, is_square_safe
from checkers_arena.search.noise import noise

from .base import PolicyContext, ScoredMove, exposed_pieces, pick_within, sort_scored


SUPER_GREEDY_RATIO: Final = 0.9
SUPER_GREEDY_FLOOR: Final = 10
DEFENSIVE_BAND: Final = 50
ADAPTIVE_BAND: Final = 20
POSITIONAL_BAND: Final = 30

ADAPTIVE_SWING: Final = 20
ADAPTIVE_EXPOSURE = {"aggressive": 80, "positional": 100, "defensive": 130}


def _axis_center(v: int) -> float:
    return 4 - abs(3.5 - v)


def _piece(board: Board, move: Move) -> Piece:
    piece = board.piece_by_id(move.piece_id)
    if piece is None:
        raise InvalidStateError(f"piece {move.piece_id} is not on the board")
    return piece


def _captures(board: Board, move: Move) -> bool:
    return capture_detect(_piece(board, move), move.to_sq, board) is not None


def _chain(board: Board, move: Move) -> int:
    return chain_capture_depth(board, _piece(board, move), move.to_sq)


def _material(board: Board, team: int) -> int:
    return sum(25 if p.king else 10 for p in board.pieces if p.team == team)


def random_policy(board: Board, team: int, ctx: PolicyContext) -> Optional[Move]:
    moves = moves_for_team(board, team)
    if not moves:
        return None
    return moves[ctx.rng.randrange(len(moves))]


def greedy_policy(board: Board, team: int, ctx: PolicyContext) -> Optional[Move]:
    """Take the longest capture chain, preferring safe landings; else move at random."""
    moves = moves_for_team(board, team)
    if not moves:
        return None
    if not _captures(board, moves[0]):
        return moves[ctx.rng.randrange(len(moves))]

    scored: List[ScoredMove] = []
    for m in moves:
        safe = is_square_safe(board, m.to_sq[0], m.to_sq[1], team)
        score = _chain(board, m) * 100 + (50 if safe else 0) + noise(ctx.rng)
        scored.append((score, m))
    scored = sort_scored(scored)
    return pick_within(scored, scored[0][0], ctx.rng)


def super_greedy_scores(board: Board, team: int, rng: random.Random) -> List[ScoredMove]:
    """Score every move on captures, landing safety, advancement and centre.

    Pieces left en prise after the move cost 120 each.
    """
    scored: List[ScoredMove] = []
    for m in moves_for_team(board, team):
        piece = _piece(board, m)
        x, y = m.to_sq
        total_captures = _chain(board, m) if _captures(board, m) else 0
        safe = is_square_safe(board, x, y, team)
        adv = 0 if piece.king else advancement(team, y)
        exposed = exposed_pieces(apply(board, m).board, team)

        score = total_captures * 200 + (100 if safe else -60) + adv * 10
        score += (_axis_center(x) + _axis_center(y)) / 2
        score -= exposed * 120
        score += noise(rng)
        scored.append((score, m))
    return scored


def super_greedy_threshold(top: float) -> float:
    """Lowest score still picked: 90% of a positive best, else ten below it."""
    return top * SUPER_GREEDY_RATIO if top > 0 else top - SUPER_GREEDY_FLOOR


def super_greedy_policy(board: Board, team: int, ctx: PolicyContext) -> Optional[Move]:
    scored = sort_scored(super_greedy_scores(board, team, ctx.rng))
    if not scored:
        return None
    return pick_within(scored, super_greedy_threshold(scored[0][0]), ctx.rng)


def defensive_scores(board: Board, team: int, rng: random.Random) -> List[ScoredMove]:
    scored: List[ScoredMove] = []
    for m in moves_for_team(board, team):
        x, y = m.to_sq
        capture = _captures(board, m)
        threatened = not is_square_safe(board, m.from_sq[0], m.from_sq[1], team)
        dest_safe = is_square_safe(board, x, y, team)
        exposed = exposed_pieces(apply(board, m).board, team)
        back_rank_bonus = 7 - y if team == TEAM_1 else y

        score = 0.0
        score += 500 if threatened and dest_safe else 0
        score += 200 if dest_safe else -300
        score -= exposed * 150
        score += 150 if capture and dest_safe else 0
        score += back_rank_bonus * 10
        score += noise(rng)
        scored.append((score, m))
    return scored


def defensive_policy(board: Board, team: int, ctx: PolicyContext) -> Optional[Move]:
    """Safety first: flee threats, avoid exposing pieces, hang back."""
    scored = sort_scored(defensive_scores(board, team, ctx.rng))
    if not scored:
        return None
    return pick_within(scored, scored[0][0] - DEFENSIVE_BAND, ctx.rng)


def adaptive_strategy(board: Board, team: int) -> str:
    """Pick a sub-strategy from the material balance."""
    advantage = _material(board, team) - _material(board, opponent(team))
    if advantage >= ADAPTIVE_SWING:
        return "defensive"
    if advantage <= -ADAPTIVE_SWING:
        return "aggressive"
    return "positional"


def adaptive_scores(
    board: Board, team: int, rng: random.Random, strategy: Optional[str] = None
) -> List[ScoredMove]:
    """Score moves under one adaptive sub-strategy.

    Args:
        board (Board): Current position.
        team (int): Side to score for.
        rng (random.Random): Source of the tie-break noise.
        strategy (Optional[str]): ``aggressive``, ``defensive`` or
            ``positional``; chosen from the material balance when omitted.

    Returns:
        List[ScoredMove]: One entry per legal move, in generation order.
    """
    strategy = strategy or adaptive_strategy(board, team)
    if strategy not in ADAPTIVE_EXPOSURE:
        raise ValueError(f"unknown adaptive strategy: {strategy!r}")

    scored: List[ScoredMove] = []
    for m in moves_for_team(board, team):
        x, y = m.to_sq
        capture = _captures(board, m)
        safe = is_square_safe(board, x, y, team)
        chain = _chain(board, m) if capture else 0
        adv = advancement(team, y)
        center = _axis_center(x) + _axis_center(y)
        exposed = exposed_pieces(apply(board, m).board, team)

        score = 0.0
        if strategy == "aggressive":
            score += chain * 200 + (150 if capture else 0) + adv * 15 + (80 if safe else -60)
        elif strategy == "defensive":
            score += (300 if safe else -200) + (150 if capture and safe else 0)
            score += -adv * 5 + (7 - adv) * 10
        else:
            score += chain * 100 + (150 if safe else -100) + center * 15 + adv * 10
        score -= exposed * ADAPTIVE_EXPOSURE[strategy]
        score += noise(rng)
        scored.append((score, m))
    return scored


def adaptive_policy(board: Board, team: int, ctx: PolicyContext) -> Optional[Move]:
    scored = sort_scored(adaptive_scores(board, team, ctx.rng))
    if not scored:
        return None
    return pick_within(scored, scored[0][0] - ADAPTIVE_BAND, ctx.rng)


def vacates_back_rank(move: Move, after: Board, team: int) -> bool:
    """True when ``move`` leaves the home row and at most two guards stay there."""
    back = home_row(team)
    if move.from_sq[1] != back or move.to_sq[1] == back:
        return False
    return sum(1 for p in after.pieces_of(team) if p.y == back) <= 2


def positional_scores(board: Board, team: int, rng: random.Random) -> List[ScoredMove]:
    scored: List[ScoredMove] = []
    for m in moves_for_team(board, team):
        x, y = m.to_sq
        after = apply(board, m).board
        capture = _captures(board, m)
        mine = after.pieces_of(team)
        score = 0.0

        cohesion = 0
        for p in mine:
            for other in mine:
                if p.id != other.id and abs(p.x - other.x) <= 1 and abs(p.y - other.y) <= 1:
                    cohesion += 1
        score += cohesion * 25

        score += (_axis_center(x) + _axis_center(y)) * 15

        avg_adv = sum(advancement(team, p.y) for p in mine) / len(mine)
        deviation = abs(advancement(team, y) - avg_adv)
        score += avg_adv * 10
        score -= deviation * 20

        if vacates_back_rank(m, after, team):
            score -= 80

        score -= len(moves_for_team(after, opponent(team))) * 8

        safe = is_square_safe(after, x, y, team)
        score += 60 if safe else -120
        score -= exposed_pieces(after, team) * 60

        if capture:
            score += 150 if safe else 20

        score += noise(rng)
        scored.append((score, m))
    return scored


def positional_policy(board: Board, team: int, ctx: PolicyContext) -> Optional[Move]:
    """Patient strategist: cohesion, centre, group advancement, restricting the opponent."""
    scored = sort_scored(positional_scores(board, team, ctx.rng))
    if not scored:
        return None
    return pick_within(scored, scored[0][0] - POSITIONAL_BAND, ctx.rng)

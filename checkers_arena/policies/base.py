from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from checkers_arena.engine.board import Board
from checkers_arena.engine.move import Move
from checkers_arena.eval import is_square_safe
from checkers_arena.search.mcts import DEFAULT_ITERATIONS, DEFAULT_ROLLOUT_CAP
from checkers_arena.search.minimax import DEFAULT_DEPTH


class PolicyId(str, Enum):
    RANDOM = "random"
    GREEDY = "greedy"
    SUPER_GREEDY = "super_greedy"
    DEFENSIVE = "defensive"
    ADAPTIVE = "adaptive"
    MINIMAX = "minimax"
    MCTS = "mcts"
    POSITIONAL = "positional"


POLICY_NAMES: Dict[PolicyId, str] = {
    PolicyId.RANDOM: "Random",
    PolicyId.GREEDY: "Greedy",
    PolicyId.SUPER_GREEDY: "Super Greedy",
    PolicyId.DEFENSIVE: "Defensive",
    PolicyId.ADAPTIVE: "Adaptive",
    PolicyId.MINIMAX: "Minimax",
    PolicyId.MCTS: "MCTS",
    PolicyId.POSITIONAL: "Positional",
}


@dataclass(frozen=True)
class SearchParams:
    minimax_depth: int = DEFAULT_DEPTH
    mcts_iterations: int = DEFAULT_ITERATIONS
    rollout_cap: int = DEFAULT_ROLLOUT_CAP


@dataclass
class PolicyContext:
    """Everything a policy may draw on besides the board: randomness and search limits."""

    rng: random.Random = field(default_factory=random.Random)
    params: SearchParams = field(default_factory=SearchParams)


Policy = Callable[[Board, int, PolicyContext], Optional[Move]]
ScoredMove = Tuple[float, Move]


def exposed_pieces(board: Board, team: int) -> int:
    """Number of ``team``'s pieces that stand on an unsafe square."""
    return sum(1 for p in board.pieces if p.team == team and not is_square_safe(board, p.x, p.y, team))


def pick_within(scored: List[ScoredMove], threshold: float, rng: random.Random) -> Move:
    """Uniformly pick among moves scoring at least ``threshold``."""
    best = [m for s, m in scored if s >= threshold]
    return best[rng.randrange(len(best))]


def sort_scored(scored: List[ScoredMove]) -> List[ScoredMove]:
    return sorted(scored, key=lambda sm: sm[0], reverse=True)

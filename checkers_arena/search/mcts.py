"""Monte Carlo Tree Search over an index-addressed node arena.

Nodes refer to their parent and children by integer index into
``MCTSTree.nodes``; the arena owns every node and every untried-move list.
"""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass, field
from typing import Final, List, Optional

from checkers_arena.engine.board import TEAM_1, Board, opponent
from checkers_arena.engine.move import Move
from checkers_arena.engine.movegen import GameStatus, apply, game_status, is_capture, moves_for_team
from checkers_arena.eval import evaluate, is_square_safe


logger = logging.getLogger(__name__)

EXPLORATION: Final = 1.41
DEFAULT_ITERATIONS: Final = 1000
DEFAULT_ROLLOUT_CAP: Final = 100
SAFE_MOVE_BIAS: Final = 0.7


@dataclass
class MCTSNode:
    board: Board
    team: int  # side to move at this node
    parent: Optional[int]
    move: Optional[Move]  # move that produced this node from its parent
    children: List[int] = field(default_factory=list)
    visits: int = 0
    wins: float = 0.0
    untried: Optional[List[Move]] = None
    status: Optional[GameStatus] = None


class MCTSTree:
    """Search tree rooted at ``board`` with ``team`` to move."""

    def __init__(
        self,
        board: Board,
        team: int,
        rng: random.Random,
        exploration: float = EXPLORATION,
        rollout_cap: int = DEFAULT_ROLLOUT_CAP,
    ) -> None:
        self.rng = rng
        self.exploration = exploration
        self.rollout_cap = rollout_cap
        self.root_team = team
        self.nodes: List[MCTSNode] = []
        self.root = self._add(MCTSNode(board=board, team=team, parent=None, move=None))

    def _add(self, node: MCTSNode) -> int:
        self.nodes.append(node)
        idx = len(self.nodes) - 1
        if node.parent is not None:
            self.nodes[node.parent].children.append(idx)
        return idx

    # ---- Node queries ----
    def untried_moves(self, idx: int) -> List[Move]:
        node = self.nodes[idx]
        if node.untried is None:
            node.untried = moves_for_team(node.board, node.team)
        return node.untried

    def status(self, idx: int) -> GameStatus:
        node = self.nodes[idx]
        if node.status is None:
            node.status = game_status(node.board)
        return node.status

    def is_terminal(self, idx: int) -> bool:
        return self.status(idx).over

    def is_fully_expanded(self, idx: int) -> bool:
        return len(self.untried_moves(idx)) == 0

    def ucb1(self, idx: int) -> float:
        node = self.nodes[idx]
        if node.visits == 0:
            return math.inf
        parent = self.nodes[node.parent] if node.parent is not None else node
        return node.wins / node.visits + self.exploration * math.sqrt(
            math.log(parent.visits) / node.visits
        )

    def select_child(self, idx: int) -> int:
        best_child = -1
        best_ucb = -math.inf
        for child in self.nodes[idx].children:
            ucb = self.ucb1(child)
            if ucb > best_ucb:
                best_ucb = ucb
                best_child = child
        return best_child

    # ---- Phases ----
    def select(self) -> int:
        idx = self.root
        while (
            not self.is_terminal(idx)
            and self.is_fully_expanded(idx)
            and self.nodes[idx].children
        ):
            idx = self.select_child(idx)
        return idx

    def expand(self, idx: int) -> Optional[int]:
        untried = self.untried_moves(idx)
        if not untried:
            return None
        move = untried.pop(self.rng.randrange(len(untried)))
        node = self.nodes[idx]
        result = apply(node.board, move)
        # Side to move always flips, even when the move left a chain capture open.
        return self._add(
            MCTSNode(board=result.board, team=opponent(node.team), parent=idx, move=move)
        )

    def backpropagate(self, idx: Optional[int], result: float) -> None:
        while idx is not None:
            node = self.nodes[idx]
            node.visits += 1
            perspective = self.nodes[node.parent].team if node.parent is not None else self.root_team
            node.wins += result if perspective == TEAM_1 else 1 - result
            idx = node.parent

    def iterate(self) -> None:
        idx = self.select()
        if not self.is_terminal(idx) and not self.is_fully_expanded(idx):
            expanded = self.expand(idx)
            if expanded is None:
                return
            idx = expanded
        node = self.nodes[idx]
        if not self.is_terminal(idx):
            result = simulate(node.board, node.team, self.rng, self.rollout_cap)
        else:
            result = 1.0 if self.status(idx).winner == TEAM_1 else 0.0
        self.backpropagate(idx, result)

    def robust_child(self) -> Optional[int]:
        best_child = None
        best_visits = -1
        for child in self.nodes[self.root].children:
            if self.nodes[child].visits > best_visits:
                best_visits = self.nodes[child].visits
                best_child = child
        return best_child


def simulate(
    board: Board, team: int, rng: random.Random, max_moves: int = DEFAULT_ROLLOUT_CAP
) -> float:
    """Play a biased random game from ``board``.

    Captures are always preferred; otherwise a safe destination is chosen
    with probability ``SAFE_MOVE_BIAS`` when one exists.

    Returns:
        float: 1 if team 1 wins, 0 if team 2 wins; when the move cap is hit,
        the sign of the static evaluation (0.5 for a level position).
    """
    sim = board
    for _ in range(max_moves):
        status = game_status(sim)
        if status.over:
            return 1.0 if status.winner == TEAM_1 else 0.0
        moves = moves_for_team(sim, team)
        if not moves:
            return 0.0 if team == TEAM_1 else 1.0

        captures = [m for m in moves if is_capture(m, sim)]
        if captures:
            chosen = captures[rng.randrange(len(captures))]
        else:
            safe = [m for m in moves if is_square_safe(sim, m.to_sq[0], m.to_sq[1], team)]
            if safe and rng.random() < SAFE_MOVE_BIAS:
                chosen = safe[rng.randrange(len(safe))]
            else:
                chosen = moves[rng.randrange(len(moves))]

        sim = apply(sim, chosen).board
        team = opponent(team)
    score = evaluate(sim)
    if score > 0:
        return 1.0
    if score < 0:
        return 0.0
    return 0.5


def mcts_move(
    board: Board,
    team: int,
    iterations: int = DEFAULT_ITERATIONS,
    rollout_cap: int = DEFAULT_ROLLOUT_CAP,
    rng: Optional[random.Random] = None,
) -> Optional[Move]:
    """Pick a move for ``team`` with UCB1 tree search.

    Returns ``None`` on a finished position and the only legal move, without
    searching, when there is exactly one.
    """
    if game_status(board).over:
        return None
    moves = moves_for_team(board, team)
    if not moves:
        return None
    if len(moves) == 1:
        return moves[0]

    rng = rng or random.Random()
    start = time.perf_counter()
    tree = MCTSTree(board, team, rng, rollout_cap=rollout_cap)
    for _ in range(iterations):
        tree.iterate()

    best = tree.robust_child()
    logger.debug(
        "mcts",
        extra={
            "team": team,
            "iterations": iterations,
            "tree_nodes": len(tree.nodes),
            "time_ms": int((time.perf_counter() - start) * 1000),
        },
    )
    if best is None:
        return None
    return tree.nodes[best].move

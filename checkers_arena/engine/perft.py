from __future__ import annotations

from .board import TEAM_1, Board, opponent
from .movegen import apply, moves_for_team


def perft(board: Board, depth: int, side: int = TEAM_1) -> int:
    """Compute perft node count for `board` at `depth`.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Note: sides alternate every ply, the same tree minimax walks. Chain
    continuations are not folded into a single ply.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    nodes = 0
    for m in moves_for_team(board, side):
        child = apply(board, m).board
        nodes += perft(child, depth - 1, opponent(side))
    return nodes

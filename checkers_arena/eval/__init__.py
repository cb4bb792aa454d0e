"""Evaluation heuristics and related utilities.

Pure, deterministic, and side-effect free. Scores are from team 1's point of
view: positive favours team 1, negative favours team 2.
"""

from __future__ import annotations

from typing import Final, Optional

from checkers_arena.engine.board import TEAM_1, TEAM_2, Board, home_row, on_board, opponent
from checkers_arena.engine.movegen import moves_for_team


WIN_SCORE: Final = 10000

# Piece values
MAN_VAL: Final = 10
KING_VAL: Final = 25

# Heuristic weights
ADVANCE_PER_ROW: Final = 0.5
NEAR_PROMOTION_BONUS: Final = 5
CENTER_WEIGHT: Final = 0.3
UNSAFE_MAN_PENALTY: Final = 10
UNSAFE_KING_PENALTY: Final = 15
MOBILITY_WEIGHT: Final = 0.2
BACK_RANK_MIN: Final = 2
BACK_RANK_PENALTY: Final = 3

JUMP_OFFSETS: Final = ((2, 2), (2, -2), (-2, 2), (-2, -2))


def _terminal(winner: int, depth: Optional[int]) -> float:
    score = WIN_SCORE if depth is None else WIN_SCORE - depth
    return score if winner == TEAM_1 else -score


def advancement(team: int, y: int) -> int:
    """Rows advanced from the team's home row."""
    return y if team == TEAM_1 else 7 - y


def center_bonus(x: int, y: int) -> float:
    # 4 at the centre squares, 0 in the corners
    return 4 - abs(3.5 - x) - abs(3.5 - y)


def is_square_safe(board: Board, x: int, y: int, team: int) -> bool:
    """True unless an opposing piece could jump a piece standing on ``(x, y)``.

    Uses raw two-square jump geometry from each opposing piece, regardless
    of who actually occupies ``(x, y)`` or whether the jumper is a man.
    """
    for p in board.pieces:
        if p.team != opponent(team):
            continue
        for dx, dy in JUMP_OFFSETS:
            jx, jy = p.x + dx, p.y + dy
            if p.x + dx // 2 != x or p.y + dy // 2 != y:
                continue
            if on_board(jx, jy) and board.piece_at(jx, jy) is None:
                return False
    return True


def evaluate(board: Board, depth: Optional[int] = None) -> float:
    """Static evaluation of ``board``.

    Args:
        board (Board): Position to score.
        depth (Optional[int]): When given, terminal scores shrink by this much
            so that quicker wins score higher.

    Returns:
        float: Score, positive for team 1.
    """
    team1 = board.pieces_of(TEAM_1)
    team2 = board.pieces_of(TEAM_2)

    if not team1:
        return _terminal(TEAM_2, depth)
    if not team2:
        return _terminal(TEAM_1, depth)
    team1_moves = moves_for_team(board, TEAM_1)
    team2_moves = moves_for_team(board, TEAM_2)
    if not team1_moves:
        return _terminal(TEAM_2, depth)
    if not team2_moves:
        return _terminal(TEAM_1, depth)

    score = 0.0
    for piece in board.pieces:
        sign = 1 if piece.team == TEAM_1 else -1
        value: float = KING_VAL if piece.king else MAN_VAL

        if not piece.king:
            adv = advancement(piece.team, piece.y)
            value += adv * ADVANCE_PER_ROW
            if adv == 6:
                value += NEAR_PROMOTION_BONUS

        value += center_bonus(piece.x, piece.y) * CENTER_WEIGHT

        if not is_square_safe(board, piece.x, piece.y, piece.team):
            value -= UNSAFE_KING_PENALTY if piece.king else UNSAFE_MAN_PENALTY

        score += sign * value

    score += (len(team1_moves) - len(team2_moves)) * MOBILITY_WEIGHT

    if sum(1 for p in team1 if p.y == home_row(TEAM_1)) < BACK_RANK_MIN:
        score -= BACK_RANK_PENALTY
    if sum(1 for p in team2 if p.y == home_row(TEAM_2)) < BACK_RANK_MIN:
        score += BACK_RANK_PENALTY

    return score

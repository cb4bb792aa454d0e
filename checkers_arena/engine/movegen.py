"""Move generation, move application and game-over detection.

All functions are pure: boards passed in are never modified.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .board import TEAM_1, TEAM_2, Board, Piece, on_board
from .errors import IllegalMoveRequested, InvalidStateError
from .move import Move, Square


# One- and two-square diagonal candidates, in generation order.
STEP_DIRECTIONS = (
    (1, -1),
    (2, -2),
    (-1, -1),
    (-2, -2),
    (1, 1),
    (2, 2),
    (-1, 1),
    (-2, 2),
)
KING_REACH = 7


@dataclass(frozen=True)
class MoveResult:
    board: Board
    piece: Piece  # the moved piece on the new board, promoted if it landed on the far row
    captured: bool


@dataclass(frozen=True)
class GameStatus:
    over: bool
    winner: Optional[int]


def _midpoint(piece: Piece, x: int, y: int) -> Optional[Square]:
    # Only even distances have an exact middle square.
    if (piece.x + x) % 2 or (piece.y + y) % 2:
        return None
    return (piece.x + x) // 2, (piece.y + y) // 2


def is_valid_destination(piece: Piece, x: int, y: int, board: Board) -> bool:
    """Validity predicate for moving ``piece`` to ``(x, y)`` on ``board``.

    Notes:
        King moves longer than two squares are only checked for an empty,
        diagonal destination; the path between is not inspected.
    """
    if not on_board(x, y):
        return False
    dist = abs(piece.x - x)
    if dist != abs(piece.y - y):
        return False
    if dist == 0:
        return False
    if dist > 2 and not piece.king:
        return False

    occupant = board.piece_at(x, y)
    if occupant is not None and occupant.id != piece.id:
        return False

    mid = _midpoint(piece, x, y)
    mid_piece = board.piece_at(*mid) if mid is not None else None
    if mid_piece is not None and mid_piece.team == piece.team:
        return False

    if dist == 2 and not piece.king:
        if mid_piece is None:
            return False
    return True


def moves_for_piece(piece: Piece, board: Board) -> List[Square]:
    """Enumerate destination squares for ``piece``.

    Args:
        piece (Piece): Piece to move; must stand on ``board``.
        board (Board): Current position.

    Returns:
        List[Square]: Destinations in generation order. Kings list their
        short moves twice (once from the step table, once from the diagonal
        scan).
    """
    x, y = piece.x, piece.y
    moves: List[Square] = []
    for dx, dy in STEP_DIRECTIONS:
        if is_valid_destination(piece, x + dx, y + dy, board):
            moves.append((x + dx, y + dy))

    if piece.king:
        for i in range(-KING_REACH, KING_REACH + 1):
            if i == 0:
                continue
            if is_valid_destination(piece, x + i, y + i, board):
                moves.append((x + i, y + i))
            if is_valid_destination(piece, x + i, y - i, board):
                moves.append((x + i, y - i))
    return moves


def capture_detect(piece: Piece, dest: Square, board: Board) -> Optional[Piece]:
    """Return the opposing piece jumped by moving ``piece`` to ``dest``, if any.

    Scans the squares strictly between origin and destination, starting next
    to the origin. Single steps never capture.
    """
    dx = dest[0] - piece.x
    dy = dest[1] - piece.y
    dist = abs(dx)
    if dist <= 1:
        return None
    sx = 1 if dx > 0 else -1
    sy = 1 if dy > 0 else -1
    for i in range(1, dist):
        other = board.piece_at(piece.x + i * sx, piece.y + i * sy)
        if other is not None and other.team != piece.team:
            return other
    return None


def is_capture(move: Move, board: Board) -> bool:
    piece = board.piece_by_id(move.piece_id)
    return piece is not None and capture_detect(piece, move.to_sq, board) is not None


def moves_for_team(board: Board, team: int) -> List[Move]:
    """All legal moves for ``team``, restricted to captures when any exist.

    Order is piece order on the board, then per-piece generation order.
    """
    moves: List[Move] = []
    captures: List[Move] = []
    for piece in board.pieces:
        if piece.team != team:
            continue
        for dest in moves_for_piece(piece, board):
            m = Move(piece.id, piece.square, dest)
            moves.append(m)
            if capture_detect(piece, dest, board) is not None:
                captures.append(m)
    return captures if captures else moves


def apply_move(board: Board, piece: Piece, dest: Square) -> MoveResult:
    """Apply a move to a copy of ``board``.

    Args:
        board (Board): Position before the move; left untouched.
        piece (Piece): Moving piece as it stands on ``board``.
        dest (Square): Destination square.

    Returns:
        MoveResult: New board, the moved piece, and whether a piece was taken.

    Raises:
        InvalidStateError: If ``piece`` is not on ``board`` where it claims to be.
        IllegalMoveRequested: If ``dest`` fails the validity predicate.
    """
    current = board.piece_by_id(piece.id)
    if current is None or current.square != piece.square:
        raise InvalidStateError(f"piece {piece.id} is not on the board at {piece.square}")
    if not is_valid_destination(current, dest[0], dest[1], board):
        raise IllegalMoveRequested(f"piece {piece.id} cannot move to {dest}")

    killed = capture_detect(current, dest, board)
    moved = current.moved_to(*dest)
    new_board = board.replace_piece(moved, removed_id=killed.id if killed else None)
    return MoveResult(board=new_board, piece=moved, captured=killed is not None)


def apply(board: Board, move: Move) -> MoveResult:
    """Apply a :class:`Move` value; resolves the piece by id."""
    piece = board.piece_by_id(move.piece_id)
    if piece is None:
        raise InvalidStateError(f"piece {move.piece_id} is not on the board")
    return apply_move(board, piece, move.to_sq)


def capture_continuations(piece: Piece, board: Board) -> List[Square]:
    """Capturing destinations still open to ``piece`` after it has just captured."""
    return [d for d in moves_for_piece(piece, board) if capture_detect(piece, d, board) is not None]


def chain_capture_depth(board: Board, piece: Piece, dest: Square, depth: int = 0) -> int:
    """Length of the longest capture chain that starts with ``piece`` -> ``dest``.

    Returns ``depth`` when the move does not capture; otherwise follows every
    two-square continuation from the landing square and keeps the maximum.
    """
    result = apply_move(board, piece, dest)
    if not result.captured:
        return depth
    moved = result.piece
    jumps = [d for d in moves_for_piece(moved, result.board) if abs(d[0] - moved.x) == 2]
    if not jumps:
        return depth + 1
    best = depth + 1
    for d in jumps:
        best = max(best, chain_capture_depth(result.board, moved, d, depth + 1))
    return best


def game_status(board: Board) -> GameStatus:
    """Report whether the game on ``board`` is over and who won.

    A side with no pieces or no legal moves has lost.
    """
    if board.count(TEAM_1) == 0:
        return GameStatus(True, TEAM_2)
    if board.count(TEAM_2) == 0:
        return GameStatus(True, TEAM_1)
    if not moves_for_team(board, TEAM_1):
        return GameStatus(True, TEAM_2)
    if not moves_for_team(board, TEAM_2):
        return GameStatus(True, TEAM_1)
    return GameStatus(False, None)

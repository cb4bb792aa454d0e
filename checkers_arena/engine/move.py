from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:
    from .board import Board


Square = Tuple[int, int]

FILES = "abcdefgh"


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    Attributes:
        piece_id (int): Identity of the moving piece.
        from_sq (Square): Origin square ``(x, y)``.
        to_sq (Square): Destination square ``(x, y)``.
    """

    piece_id: int
    from_sq: Square
    to_sq: Square

    @property
    def distance(self) -> int:
        return abs(self.to_sq[0] - self.from_sq[0])

    def to_str(self) -> str:
        """Serialize the move as origin and destination square names.

        Returns:
            str: Move encoded like ``"c3d4"``.
        """
        return square_to_str(self.from_sq) + square_to_str(self.to_sq)


def parse_move(text: str, board: "Board") -> Move:
    """Parse a move string against ``board``.

    Args:
        text (str): Move such as ``"c3d4"``.
        board (Board): Position the move is played on; resolves the piece id.

    Returns:
        Move: Parsed move. Legality is not checked here.

    Raises:
        ValueError: If the string is malformed or no piece stands on the
            origin square.
    """
    if len(text) != 4:
        raise ValueError(f"invalid move length: {text!r}")
    from_sq = str_to_square(text[0:2])
    to_sq = str_to_square(text[2:4])
    piece = board.piece_at(*from_sq)
    if piece is None:
        raise ValueError(f"no piece on {text[0:2]}")
    return Move(piece.id, from_sq, to_sq)


def str_to_square(s: str) -> Square:
    """Convert a square name such as ``"c3"`` into ``(x, y)``.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    return FILES.index(s[0]), int(s[1]) - 1


def square_to_str(sq: Square) -> str:
    x, y = sq
    if not (0 <= x < 8 and 0 <= y < 8):
        raise ValueError(f"invalid square: {sq!r}")
    return FILES[x] + str(y + 1)

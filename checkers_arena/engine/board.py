from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import InvalidStateError
from .move import Square


BOARD_SIZE = 8
TEAM_1 = 1
TEAM_2 = 2
TEAMS = (TEAM_1, TEAM_2)

STARTPOS_DIAGRAM = "x1x1x1x1/1x1x1x1x/x1x1x1x1/8/8/1o1o1o1o/o1o1o1o1/1o1o1o1o"

# Diagram characters: (team, king)
CHAR_TO_PIECE = {
    "x": (TEAM_1, False),
    "X": (TEAM_1, True),
    "o": (TEAM_2, False),
    "O": (TEAM_2, True),
}
PIECE_TO_CHAR = {v: k for k, v in CHAR_TO_PIECE.items()}


def opponent(team: int) -> int:
    return TEAM_2 if team == TEAM_1 else TEAM_1


def on_board(x: int, y: int) -> bool:
    return 0 <= x < BOARD_SIZE and 0 <= y < BOARD_SIZE


def promotion_row(team: int) -> int:
    return BOARD_SIZE - 1 if team == TEAM_1 else 0


def home_row(team: int) -> int:
    return 0 if team == TEAM_1 else BOARD_SIZE - 1


@dataclass(frozen=True)
class Piece:
    """A single checker.

    Attributes:
        id (int): Identity, stable for the piece's lifetime.
        x (int): File index 0..7.
        y (int): Row index 0..7. Team 1 starts on rows 0-2.
        team (int): 1 or 2.
        king (bool): Promotion flag; never reverts.
    """

    id: int
    x: int
    y: int
    team: int
    king: bool = False

    @property
    def square(self) -> Square:
        return (self.x, self.y)

    def moved_to(self, x: int, y: int) -> "Piece":
        """Return this piece relocated to ``(x, y)``, promoted on the far row."""
        return replace(self, x=x, y=y, king=self.king or y == promotion_row(self.team))


@dataclass(frozen=True)
class Board:
    """Board value: an ordered tuple of pieces.

    Notes:
    - Boards are never mutated; transitions build new boards.
    - Piece order is stable and drives move-generation order.
    """

    pieces: Tuple[Piece, ...] = ()
    _by_square: Dict[Square, Piece] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "pieces", tuple(self.pieces))
        object.__setattr__(self, "_by_square", {p.square: p for p in self.pieces})

    @classmethod
    def startpos(cls) -> "Board":
        """Create the standard 24-piece starting position."""
        return cls.from_diagram(STARTPOS_DIAGRAM)

    @classmethod
    def from_pieces(cls, pieces: Iterable[Piece]) -> "Board":
        """Build a board after checking square, id and team invariants.

        Raises:
            InvalidStateError: If two pieces share a square or an id, a piece is
                off the board, or a team is not 1 or 2.
        """
        pieces = tuple(pieces)
        squares = set()
        ids = set()
        for p in pieces:
            if not on_board(p.x, p.y):
                raise InvalidStateError(f"piece {p.id} is off the board at {p.square}")
            if p.team not in TEAMS:
                raise InvalidStateError(f"piece {p.id} has invalid team {p.team}")
            if p.square in squares:
                raise InvalidStateError(f"two pieces on square {p.square}")
            if p.id in ids:
                raise InvalidStateError(f"duplicate piece id {p.id}")
            squares.add(p.square)
            ids.add(p.id)
        return cls(pieces)

    @classmethod
    def from_diagram(cls, diagram: str) -> "Board":
        """Create a board from a row diagram.

        Args:
            diagram (str): Eight ``/``-separated rows, row ``y=0`` first. Digits
                are runs of empty squares; ``x``/``X`` are team-1 men/kings and
                ``o``/``O`` team-2 men/kings.

        Returns:
            Board: Board with piece ids assigned in reading order.

        Raises:
            ValueError: If the diagram is empty, has the wrong number of rows,
                or a row does not cover exactly eight squares.
        """
        if not diagram or not isinstance(diagram, str):
            raise ValueError("diagram must be a non-empty string")
        rows = diagram.strip().split("/")
        if len(rows) != BOARD_SIZE:
            raise ValueError("diagram must have 8 rows")
        pieces: List[Piece] = []
        for y, row in enumerate(rows):
            x = 0
            for ch in row:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > BOARD_SIZE:
                        raise ValueError("invalid empty count in diagram row")
                    x += n
                else:
                    if ch not in CHAR_TO_PIECE:
                        raise ValueError(f"invalid piece in diagram: {ch!r}")
                    if x >= BOARD_SIZE:
                        raise ValueError("too many squares in diagram row")
                    team, king = CHAR_TO_PIECE[ch]
                    pieces.append(Piece(len(pieces), x, y, team, king))
                    x += 1
            if x != BOARD_SIZE:
                raise ValueError("diagram row does not sum to 8 squares")
        return cls(tuple(pieces))

    def to_diagram(self) -> str:
        rows: List[str] = []
        for y in range(BOARD_SIZE):
            run = 0
            row = []
            for x in range(BOARD_SIZE):
                p = self._by_square.get((x, y))
                if p is None:
                    run += 1
                    continue
                if run > 0:
                    row.append(str(run))
                    run = 0
                row.append(PIECE_TO_CHAR[(p.team, p.king)])
            if run > 0:
                row.append(str(run))
            rows.append("".join(row))
        return "/".join(rows)

    def clone(self) -> "Board":
        """Return a deep value copy preserving id, position, team and king."""
        return Board(tuple(replace(p) for p in self.pieces))

    def piece_at(self, x: int, y: int) -> Optional[Piece]:
        return self._by_square.get((x, y))

    def piece_by_id(self, piece_id: int) -> Optional[Piece]:
        for p in self.pieces:
            if p.id == piece_id:
                return p
        return None

    def pieces_of(self, team: int) -> List[Piece]:
        return [p for p in self.pieces if p.team == team]

    def count(self, team: int) -> int:
        return sum(1 for p in self.pieces if p.team == team)

    def replace_piece(self, piece: Piece, removed_id: Optional[int] = None) -> "Board":
        """Return a new board with ``piece`` swapped in by id, optionally dropping one piece."""
        return Board(
            tuple(
                piece if p.id == piece.id else p
                for p in self.pieces
                if removed_id is None or p.id != removed_id
            )
        )

    def position_key(self) -> Tuple[Tuple[int, int, int, bool], ...]:
        # Identity-free key used for repetition counting.
        return tuple(sorted((p.x, p.y, p.team, p.king) for p in self.pieces))

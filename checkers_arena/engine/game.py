from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .board import TEAM_1, TEAMS, Board, opponent
from .errors import IllegalMoveRequested, InvalidStateError
from .move import Move
from .movegen import (
    GameStatus,
    MoveResult,
    apply,
    capture_continuations,
    moves_for_team,
)


PositionKey = Tuple[tuple, int]


@dataclass
class Game:
    """Authoritative game state threaded through the orchestrator.

    Responsibility: track board, side to move and a pending chain capture,
    expose legal moves, apply moves and switch turns.
    """

    board: Board
    side_to_move: int = TEAM_1
    # Set while the side to move must continue a chain capture with this piece.
    selected_piece_id: Optional[int] = None
    move_stack: List[Move] = field(default_factory=list)
    repetition: Dict[PositionKey, int] = field(default_factory=dict)

    @classmethod
    def new(cls) -> "Game":
        return cls(board=Board.startpos())

    @classmethod
    def from_position(cls, position: str) -> "Game":
        """Create a game from a diagram with an optional side-to-move field.

        Args:
            position (str): ``"<diagram> [1|2]"``.

        Raises:
            ValueError: If the diagram or side field is malformed.
        """
        if not position or not isinstance(position, str):
            raise ValueError("position must be a non-empty string")
        parts = position.strip().split()
        if len(parts) not in (1, 2):
            raise ValueError("position must be a diagram and an optional side to move")
        side = TEAM_1
        if len(parts) == 2:
            if parts[1] not in ("1", "2"):
                raise ValueError("side to move must be '1' or '2'")
            side = int(parts[1])
        return cls(board=Board.from_diagram(parts[0]), side_to_move=side)

    def to_position(self) -> str:
        return f"{self.board.to_diagram()} {self.side_to_move}"

    def __post_init__(self) -> None:
        if self.side_to_move not in TEAMS:
            raise InvalidStateError(f"invalid side to move: {self.side_to_move}")
        self._record()

    def _key(self, board: Board, side: int) -> PositionKey:
        return board.position_key(), side

    def _record(self) -> None:
        k = self._key(self.board, self.side_to_move)
        self.repetition[k] = self.repetition.get(k, 0) + 1

    def legal_moves(self) -> List[Move]:
        if self.selected_piece_id is not None:
            piece = self.board.piece_by_id(self.selected_piece_id)
            if piece is None:
                raise InvalidStateError(f"selected piece {self.selected_piece_id} is gone")
            return [
                Move(piece.id, piece.square, d) for d in capture_continuations(piece, self.board)
            ]
        return moves_for_team(self.board, self.side_to_move)

    def apply_move(self, move: Move) -> MoveResult:
        """Apply a legal move and advance the turn unless a chain continues.

        Raises:
            IllegalMoveRequested: If ``move`` is not among :meth:`legal_moves`.
        """
        if move not in self.legal_moves():
            raise IllegalMoveRequested(f"illegal move: {move.to_str()}")
        result = apply(self.board, move)
        self.board = result.board
        self.move_stack.append(move)
        if result.captured and capture_continuations(result.piece, result.board):
            self.selected_piece_id = result.piece.id
            return result
        self.selected_piece_id = None
        self.side_to_move = opponent(self.side_to_move)
        self._record()
        return result

    def would_repeat(self, board: Board, side: int) -> bool:
        # Reaching a position a third time counts as a repeat.
        return self.repetition.get(self._key(board, side), 0) >= 2

    # --- State flags for protocol ---
    def status(self) -> GameStatus:
        for team in TEAMS:
            if self.board.count(team) == 0:
                return GameStatus(True, opponent(team))
        if not self.legal_moves():
            return GameStatus(True, opponent(self.side_to_move))
        return GameStatus(False, None)

    @property
    def ply_count(self) -> int:
        return len(self.move_stack)

    def move_history(self) -> List[str]:
        return [m.to_str() for m in self.move_stack]

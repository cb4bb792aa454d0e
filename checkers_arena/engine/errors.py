from __future__ import annotations


class InvalidStateError(ValueError):
    """Raised when a board or game value breaks a structural invariant.

    Examples: a piece that is not on the board it is moved on, two pieces on
    one square, or a team identifier outside ``{1, 2}``.
    """


class IllegalMoveRequested(ValueError):
    """Raised when a move is applied that the validity predicate rejects."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from checkers_arena.engine.board import TEAM_1, opponent
from checkers_arena.engine.game import Game
from checkers_arena.engine.move import Move
from checkers_arena.engine.movegen import apply
from checkers_arena.policies.base import PolicyContext, PolicyId
from checkers_arena.policies.dispatch import get_move, parse_policy


logger = logging.getLogger(__name__)

DRAW = 0
MAX_GAME_MOVES = 500


@dataclass(frozen=True)
class GameRecord:
    """Outcome of one finished game.

    Attributes:
        team1 (PolicyId): Policy playing team 1.
        team2 (PolicyId): Policy playing team 2.
        winner (int): 1 or 2, or ``DRAW`` (0) when the move cap was reached.
        moves (int): Moves applied, chain continuations included.
        position (str): Final position.
    """

    team1: PolicyId
    team2: PolicyId
    winner: int
    moves: int
    position: str

    def winner_policy(self) -> Optional[PolicyId]:
        if self.winner == DRAW:
            return None
        return self.team1 if self.winner == TEAM_1 else self.team2


def play_turn(
    game: Game, policy: Union[PolicyId, str], ctx: Optional[PolicyContext] = None
) -> Optional[Move]:
    """Let ``policy`` make one move for the side to move and apply it.

    A pending chain capture is continued with its first available jump
    without consulting the policy. A move that would reach a position for the
    third time is swapped for a random non-repeating legal move when one
    exists.

    Returns:
        Optional[Move]: The applied move, or ``None`` if the side to move has
        no legal move.
    """
    ctx = ctx or PolicyContext()
    if game.selected_piece_id is not None:
        continuations = game.legal_moves()
        if continuations:
            game.apply_move(continuations[0])
            return continuations[0]

    side = game.side_to_move
    move = get_move(policy, game.board, side, ctx)
    if move is None:
        return None

    next_side = opponent(side)
    if game.would_repeat(apply(game.board, move).board, next_side):
        fresh = [
            m
            for m in game.legal_moves()
            if not game.would_repeat(apply(game.board, m).board, next_side)
        ]
        if fresh:
            move = fresh[ctx.rng.randrange(len(fresh))]

    game.apply_move(move)
    return move


def play_game(
    team1: Union[PolicyId, str],
    team2: Union[PolicyId, str],
    ctx: Optional[PolicyContext] = None,
    max_moves: int = MAX_GAME_MOVES,
    game: Optional[Game] = None,
) -> GameRecord:
    """Play a full game between two policies from the start position (or ``game``)."""
    ctx = ctx or PolicyContext()
    p1, p2 = parse_policy(team1), parse_policy(team2)
    game = game or Game.new()
    moves = 0
    while True:
        status = game.status()
        if status.over:
            winner = status.winner or DRAW
            break
        if moves >= max_moves:
            winner = DRAW
            break
        side = game.side_to_move
        move = play_turn(game, p1 if side == TEAM_1 else p2, ctx)
        if move is None:
            winner = opponent(side)
            break
        moves += 1
        logger.debug("move", extra={"ply": moves, "side": side, "move": move.to_str()})

    record = GameRecord(team1=p1, team2=p2, winner=winner, moves=moves, position=game.to_position())
    logger.info(
        "game finished",
        extra={"team1": p1.value, "team2": p2.value, "winner": winner, "moves": moves},
    )
    return record

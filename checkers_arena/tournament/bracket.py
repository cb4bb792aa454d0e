from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from checkers_arena.engine.board import TEAM_1
from checkers_arena.policies.base import PolicyContext, PolicyId

from .match import DRAW, MAX_GAME_MOVES, GameRecord, play_game


logger = logging.getLogger(__name__)

# Seeding order, strongest to weakest.
BRACKET_SEEDS = [
    PolicyId.MCTS,
    PolicyId.MINIMAX,
    PolicyId.ADAPTIVE,
    PolicyId.POSITIONAL,
    PolicyId.SUPER_GREEDY,
    PolicyId.DEFENSIVE,
    PolicyId.GREEDY,
    PolicyId.RANDOM,
]

GAMES_PER_MATCH = 2


@dataclass
class BracketMatch:
    player1: Optional[PolicyId] = None
    player2: Optional[PolicyId] = None
    winner: Optional[PolicyId] = None
    scores: List[int] = field(default_factory=lambda: [0, 0])
    games: List[GameRecord] = field(default_factory=list)
    status: str = "pending"  # pending | complete


@dataclass
class BracketResult:
    rounds: List[List[BracketMatch]]

    @property
    def champion(self) -> Optional[PolicyId]:
        return self.rounds[-1][0].winner if self.rounds else None

    @property
    def games(self) -> List[GameRecord]:
        return [g for rnd in self.rounds for m in rnd for g in m.games]


def _match_winner_of(match: BracketMatch, game_index: int, game: GameRecord) -> Optional[PolicyId]:
    if game.winner == DRAW:
        return None
    # Even games have player1 on team 1.
    if game_index % 2 == 0:
        return match.player1 if game.winner == TEAM_1 else match.player2
    return match.player2 if game.winner == TEAM_1 else match.player1


def play_match(
    match: BracketMatch,
    ctx: PolicyContext,
    max_moves: int = MAX_GAME_MOVES,
    on_game: Optional[Callable[[GameRecord], None]] = None,
) -> BracketMatch:
    """Best of two with alternating colours, then one sudden-death game if level.

    If the tiebreaker is drawn as well, ``player1`` advances.
    """
    if match.player1 is None or match.player2 is None:
        raise ValueError("match needs two players")

    def play(index: int) -> None:
        if index % 2 == 0:
            team1, team2 = match.player1, match.player2
        else:
            team1, team2 = match.player2, match.player1
        game = play_game(team1, team2, ctx, max_moves=max_moves)
        match.games.append(game)
        won = _match_winner_of(match, index, game)
        if won == match.player1:
            match.scores[0] += 1
        elif won == match.player2:
            match.scores[1] += 1
        if on_game is not None:
            on_game(game)

    for i in range(GAMES_PER_MATCH):
        play(i)
    if match.scores[0] == match.scores[1]:
        play(GAMES_PER_MATCH)

    match.winner = match.player1 if match.scores[0] >= match.scores[1] else match.player2
    match.status = "complete"
    logger.info(
        "match finished",
        extra={
            "player1": match.player1.value,
            "player2": match.player2.value,
            "scores": list(match.scores),
            "winner": match.winner.value,
        },
    )
    return match


def build_rounds(entrants: Sequence[PolicyId]) -> List[List[BracketMatch]]:
    """First round pairs neighbours; later rounds are empty slots to fill."""
    n = len(entrants)
    if n < 2 or n & (n - 1):
        raise ValueError("bracket needs a power-of-two number of entrants")
    rounds = [
        [BracketMatch(player1=entrants[i], player2=entrants[i + 1]) for i in range(0, n, 2)]
    ]
    size = n // 4
    while size >= 1:
        rounds.append([BracketMatch() for _ in range(size)])
        size //= 2
    return rounds


def run_bracket(
    seeds: Sequence[PolicyId] = BRACKET_SEEDS,
    shuffle: bool = True,
    ctx: Optional[PolicyContext] = None,
    max_moves: int = MAX_GAME_MOVES,
    on_game: Optional[Callable[[GameRecord], None]] = None,
) -> BracketResult:
    """Single elimination over ``seeds``, first-round draw shuffled with the context rng."""
    ctx = ctx or PolicyContext()
    entrants = list(seeds)
    if shuffle:
        ctx.rng.shuffle(entrants)
    rounds = build_rounds(entrants)

    for r, matches in enumerate(rounds):
        for match in matches:
            play_match(match, ctx, max_moves=max_moves, on_game=on_game)
        if r + 1 < len(rounds):
            for i, match in enumerate(matches):
                nxt = rounds[r + 1][i // 2]
                if i % 2 == 0:
                    nxt.player1 = match.winner
                else:
                    nxt.player2 = match.winner

    result = BracketResult(rounds=rounds)
    champion = result.champion
    logger.info("bracket finished", extra={"champion": champion.value if champion else None})
    return result

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from checkers_arena.engine.board import TEAM_1, TEAM_2
from checkers_arena.policies.base import PolicyContext, PolicyId

from .match import MAX_GAME_MOVES, GameRecord, play_game


logger = logging.getLogger(__name__)

GAMES_PER_PAIRING = 2


@dataclass
class Standing:
    wins: int = 0
    losses: int = 0
    draws: int = 0
    points: float = 0.0


@dataclass
class LeagueResult:
    policies: List[PolicyId]
    standings: Dict[PolicyId, Standing] = field(default_factory=dict)
    games: List[GameRecord] = field(default_factory=list)

    def record(self, game: GameRecord) -> None:
        """Credit a finished game: 1 point for a win, 0.5 each for a draw."""
        s1 = self.standings[game.team1]
        s2 = self.standings[game.team2]
        if game.winner == TEAM_1:
            s1.wins += 1
            s2.losses += 1
            s1.points += 1
        elif game.winner == TEAM_2:
            s2.wins += 1
            s1.losses += 1
            s2.points += 1
        else:
            s1.draws += 1
            s2.draws += 1
            s1.points += 0.5
            s2.points += 0.5
        self.games.append(game)

    def table(self) -> List[Tuple[PolicyId, Standing]]:
        """Standings sorted by points, then wins; entry order breaks remaining ties."""
        rows = [(p, self.standings[p]) for p in self.policies]
        return sorted(rows, key=lambda r: (-r[1].points, -r[1].wins))


def pairings(policies: Sequence[PolicyId]) -> List[Tuple[PolicyId, PolicyId]]:
    return [
        (policies[i], policies[j])
        for i in range(len(policies))
        for j in range(i + 1, len(policies))
    ]


def run_league(
    policies: Optional[Sequence[PolicyId]] = None,
    games_per_pairing: int = GAMES_PER_PAIRING,
    ctx: Optional[PolicyContext] = None,
    max_moves: int = MAX_GAME_MOVES,
    on_game: Optional[Callable[[GameRecord], None]] = None,
) -> LeagueResult:
    """Round robin: every pair plays ``games_per_pairing`` games, swapping colours each game."""
    ctx = ctx or PolicyContext()
    entrants = list(policies) if policies is not None else list(PolicyId)
    if len(entrants) < 2:
        raise ValueError("a league needs at least two policies")
    result = LeagueResult(policies=entrants, standings={p: Standing() for p in entrants})

    for a, b in pairings(entrants):
        for g in range(games_per_pairing):
            team1, team2 = (a, b) if g % 2 == 0 else (b, a)
            game = play_game(team1, team2, ctx, max_moves=max_moves)
            result.record(game)
            if on_game is not None:
                on_game(game)

    leader, standing = result.table()[0]
    logger.info(
        "league finished",
        extra={"games": len(result.games), "leader": leader.value, "points": standing.points},
    )
    return result

from __future__ import annotations

from typing import List, Optional, Sequence

from checkers_arena.policies.base import POLICY_NAMES

from .bracket import BracketResult
from .league import LeagueResult
from .match import DRAW, GameRecord


def format_games(games: Sequence[GameRecord]) -> List[str]:
    lines = []
    for i, g in enumerate(games, start=1):
        p1 = POLICY_NAMES[g.team1]
        p2 = POLICY_NAMES[g.team2]
        outcome = "Draw" if g.winner == DRAW else (p1 if g.winner == 1 else p2)
        lines.append(f"{i}. {p1} vs {p2} -> {outcome} ({g.moves}m)")
    return lines


def format_league(result: LeagueResult) -> str:
    lines = ["=== Round Robin Tournament Results ==="]
    lines.extend(format_games(result.games))
    lines.append("--- Standings ---")
    for i, (policy, s) in enumerate(result.table(), start=1):
        lines.append(
            f"{i}. {POLICY_NAMES[policy]}: {s.wins}W {s.losses}L {s.draws}D ({s.points:g}pts)"
        )
    return "\n".join(lines)


def format_bracket(result: BracketResult) -> str:
    lines = ["=== Bracket Tournament Results ==="]
    lines.extend(format_games(result.games))
    champion: Optional[str] = POLICY_NAMES[result.champion] if result.champion else None
    if champion:
        lines.append(f"Champion: {champion}")
    return "\n".join(lines)

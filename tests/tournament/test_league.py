from __future__ import annotations

import random

import pytest

from checkers_arena.policies.base import PolicyContext, PolicyId
from checkers_arena.tournament.league import Standing, LeagueResult, pairings, run_league
from checkers_arena.tournament.match import DRAW, GameRecord
from checkers_arena.tournament.report import format_league


CHEAP = [PolicyId.RANDOM, PolicyId.GREEDY, PolicyId.SUPER_GREEDY]


def test_pairings_each_pair_once() -> None:
    pairs = pairings(CHEAP)
    assert len(pairs) == 3
    assert (PolicyId.RANDOM, PolicyId.GREEDY) in pairs


def test_league_points_add_up() -> None:
    played = []
    result = run_league(
        CHEAP, games_per_pairing=2, ctx=PolicyContext(rng=random.Random(8)), max_moves=80,
        on_game=played.append,
    )
    assert len(result.games) == 6 == len(played)
    assert sum(s.points for s in result.standings.values()) == 6
    for s in result.standings.values():
        assert s.wins + s.losses + s.draws == 4
    # colours alternate within a pairing
    first, second = result.games[0], result.games[1]
    assert (first.team1, first.team2) == (second.team2, second.team1)

    table = result.table()
    points = [s.points for _, s in table]
    assert points == sorted(points, reverse=True)
    text = format_league(result)
    assert "Standings" in text and "Greedy" in text


def test_record_scoring() -> None:
    result = LeagueResult(
        policies=[PolicyId.RANDOM, PolicyId.MCTS],
        standings={PolicyId.RANDOM: Standing(), PolicyId.MCTS: Standing()},
    )
    result.record(GameRecord(PolicyId.MCTS, PolicyId.RANDOM, 1, 40, ""))
    result.record(GameRecord(PolicyId.RANDOM, PolicyId.MCTS, DRAW, 500, ""))
    mcts = result.standings[PolicyId.MCTS]
    rnd = result.standings[PolicyId.RANDOM]
    assert (mcts.wins, mcts.draws, mcts.points) == (1, 1, 1.5)
    assert (rnd.losses, rnd.draws, rnd.points) == (1, 1, 0.5)
    assert result.table()[0][0] is PolicyId.MCTS


def test_league_needs_two_policies() -> None:
    with pytest.raises(ValueError):
        run_league([PolicyId.RANDOM])

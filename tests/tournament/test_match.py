from __future__ import annotations

import random

from checkers_arena.engine.board import TEAM_1
from checkers_arena.engine.game import Game
from checkers_arena.engine.move import parse_move
from checkers_arena.policies.base import PolicyContext, PolicyId
from checkers_arena.tournament import match
from checkers_arena.tournament.match import DRAW, play_game, play_turn


def _ctx(seed: int) -> PolicyContext:
    return PolicyContext(rng=random.Random(seed))


def test_game_finishes_with_valid_outcome() -> None:
    record = play_game("random", "greedy", _ctx(1))
    assert record.winner in (DRAW, 1, 2)
    assert 0 < record.moves <= match.MAX_GAME_MOVES
    assert record.team1 is PolicyId.RANDOM and record.team2 is PolicyId.GREEDY
    if record.winner != DRAW:
        assert record.winner_policy() in (PolicyId.RANDOM, PolicyId.GREEDY)


def test_same_seed_same_game() -> None:
    a = play_game(PolicyId.SUPER_GREEDY, PolicyId.DEFENSIVE, _ctx(21), max_moves=120)
    b = play_game(PolicyId.SUPER_GREEDY, PolicyId.DEFENSIVE, _ctx(21), max_moves=120)
    assert a == b


def test_move_cap_draws() -> None:
    record = play_game("random", "random", _ctx(2), max_moves=3)
    assert record.winner == DRAW
    assert record.moves == 3
    assert record.winner_policy() is None


def test_finished_position_scores_immediately() -> None:
    game = Game.from_position("8/8/4x3/8/8/8/8/8 2")
    record = play_game("random", "random", _ctx(0), game=game)
    assert record.winner == TEAM_1
    assert record.moves == 0


def test_play_turn_continues_chain() -> None:
    game = Game.from_position("8/8/2x5/3o4/8/5o2/8/o7")
    first = play_turn(game, "random", _ctx(0))
    assert first is not None and first.to_str() == "c3e5"
    assert game.side_to_move == TEAM_1
    second = play_turn(game, "random", _ctx(0))
    assert second is not None and second.to_str() == "e5g7"
    assert game.side_to_move == 2


def test_play_turn_avoids_third_repetition(monkeypatch) -> None:
    game = Game.from_position("X5O1/8/8/8/8/8/8/8")
    for text in ("a1b2", "g1h2", "b2a1", "h2g1", "a1b2", "g1h2", "b2a1"):
        game.apply_move(parse_move(text, game.board))
    repeat = parse_move("h2g1", game.board)
    monkeypatch.setattr(match, "get_move", lambda policy, board, team, ctx: repeat)

    played = play_turn(game, "random", _ctx(0))
    assert played is not None and played != repeat
    assert game.repetition[(game.board.position_key(), game.side_to_move)] == 1


def test_play_turn_without_moves() -> None:
    game = Game.from_position("8/8/8/8/8/2x5/1x6/o7 2")
    assert play_turn(game, "greedy", _ctx(0)) is None

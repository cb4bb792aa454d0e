from __future__ import annotations

import argparse
import logging
import random
from typing import List, Optional, Sequence

import uvicorn

from ..config import Settings, get_settings
from ..policies.base import PolicyContext, PolicyId, SearchParams
from ..policies.dispatch import parse_policy
from ..tournament.bracket import BRACKET_SEEDS, run_bracket
from ..tournament.league import run_league
from ..tournament.match import GameRecord, play_game
from ..tournament.report import format_bracket, format_games, format_league


logger = logging.getLogger(__name__)


def _policy_list(text: str) -> List[PolicyId]:
    return [parse_policy(p.strip()) for p in text.split(",") if p.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="checkers-arena", description="Checkers AI arena")
    parser.add_argument("--seed", type=int, default=None, help="Seed for every random choice")
    parser.add_argument("--log-level", default=None, help="Logging level (default from settings)")
    parser.add_argument("--depth", type=int, default=None, help="Minimax search depth")
    parser.add_argument("--iterations", type=int, default=None, help="MCTS iterations per move")
    parser.add_argument("--rollout-cap", type=int, default=None, help="MCTS rollout move cap")
    parser.add_argument("--max-moves", type=int, default=None, help="Moves before a game is drawn")

    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    play = sub.add_parser("play", help="Play one game between two policies")
    play.add_argument("team1", type=parse_policy)
    play.add_argument("team2", type=parse_policy)

    league = sub.add_parser("league", help="Round robin between policies")
    league.add_argument(
        "--policies", type=_policy_list, default=None, help="Comma-separated ids (default: all)"
    )
    league.add_argument("--games", type=int, default=None, help="Games per pairing")

    bracket = sub.add_parser("bracket", help="Single elimination bracket")
    bracket.add_argument(
        "--policies", type=_policy_list, default=None, help="Comma-separated ids, power of two"
    )
    bracket.add_argument("--no-shuffle", action="store_true", help="Keep the seeding order")
    return parser


def _context(args: argparse.Namespace, settings: Settings) -> PolicyContext:
    base = settings.search_params()
    params = SearchParams(
        minimax_depth=args.depth or base.minimax_depth,
        mcts_iterations=args.iterations or base.mcts_iterations,
        rollout_cap=args.rollout_cap or base.rollout_cap,
    )
    seed = args.seed if args.seed is not None else settings.seed
    return PolicyContext(rng=random.Random(seed), params=params)


def _print_game(game: GameRecord) -> None:
    print(format_games([game])[0], flush=True)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=(args.log_level or settings.log_level).upper())
    max_moves = args.max_moves or settings.max_game_moves

    if args.command == "serve":
        uvicorn.run(
            "checkers_arena.protocol.http.app:create_app",
            factory=True,
            host=args.host or settings.host,
            port=args.port or settings.port,
        )
        return 0

    ctx = _context(args, settings)
    logger.info(
        "starting",
        extra={"command": args.command, "seed": args.seed, "max_moves": max_moves},
    )
    if args.command == "play":
        _print_game(play_game(args.team1, args.team2, ctx, max_moves=max_moves))
    elif args.command == "league":
        result = run_league(
            args.policies,
            games_per_pairing=args.games or settings.games_per_pairing,
            ctx=ctx,
            max_moves=max_moves,
        )
        print(format_league(result))
    elif args.command == "bracket":
        result = run_bracket(
            args.policies or BRACKET_SEEDS,
            shuffle=not args.no_shuffle,
            ctx=ctx,
            max_moves=max_moves,
        )
        print(format_bracket(result))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

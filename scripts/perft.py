#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import sys
import time

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo root (which contains `checkers_arena/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from checkers_arena.engine.board import STARTPOS_DIAGRAM, opponent
from checkers_arena.engine.game import Game
from checkers_arena.engine.movegen import apply
from checkers_arena.engine.perft import perft


def main() -> None:
    parser = argparse.ArgumentParser(description="Count move-tree leaves for a board diagram")
    parser.add_argument(
        "--position",
        type=str,
        default=STARTPOS_DIAGRAM,
        help="Board diagram, optionally followed by side to move (default: start position)",
    )
    parser.add_argument("--depth", type=int, default=4, help="Perft depth (default: 4)")
    parser.add_argument("--divide", action="store_true", help="Print the node count under each root move")
    args = parser.parse_args()

    game = Game.from_position(args.position)
    start = time.perf_counter()
    if args.divide and args.depth > 0:
        nodes = 0
        for m in game.legal_moves():
            sub = perft(apply(game.board, m).board, args.depth - 1, opponent(game.side_to_move))
            print(f"{m.to_str()}: {sub}")
            nodes += sub
    else:
        nodes = perft(game.board, args.depth, game.side_to_move)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()

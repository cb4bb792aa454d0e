from __future__ import annotations

import asyncio
import threading
from typing import List

import httpx

from checkers_arena.config import Settings
from checkers_arena.policies.base import PolicyId
from checkers_arena.protocol.http import app as app_module
from checkers_arena.protocol.http.app import create_app
from checkers_arena.tournament.match import GameRecord


def _settings() -> Settings:
    return Settings(minimax_depth=2, mcts_iterations=20, rollout_cap=10, seed=5)


def test_healthz_answers_while_match_is_running(monkeypatch) -> None:
    release = threading.Event()
    finished: List[str] = []

    def slow_game(team1, team2, ctx, max_moves):
        # Blocks until healthz has answered; on the event loop this never returns in time.
        if not release.wait(timeout=5):
            raise RuntimeError("healthz never answered while the match ran")
        return GameRecord(PolicyId(team1), PolicyId(team2), 0, max_moves, "8/8/8/8/8/8/8/8 1")

    monkeypatch.setattr(app_module, "play_game", slow_game)

    async def scenario() -> None:
        transport = httpx.ASGITransport(app=create_app(_settings()))
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:

            async def match() -> httpx.Response:
                r = await client.post(
                    "/api/matches", json={"team1": "mcts", "team2": "minimax", "max_moves": 40}
                )
                finished.append("match")
                return r

            async def health() -> httpx.Response:
                await asyncio.sleep(0.05)
                r = await client.get("/healthz")
                finished.append("healthz")
                release.set()
                return r

            match_r, health_r = await asyncio.gather(match(), health())
            assert health_r.status_code == 200
            assert match_r.status_code == 200
            assert match_r.json()["moves"] == 40

    asyncio.run(scenario())
    assert finished == ["healthz", "match"]


def test_healthz_answers_during_real_search() -> None:
    finished: List[str] = []

    async def scenario() -> None:
        settings = Settings(minimax_depth=3, mcts_iterations=200, rollout_cap=40, seed=11)
        transport = httpx.ASGITransport(app=create_app(settings))
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:

            async def match() -> None:
                r = await client.post(
                    "/api/matches",
                    json={"team1": "mcts", "team2": "minimax", "seed": 3, "max_moves": 40},
                )
                assert r.status_code == 200
                finished.append("match")

            async def health() -> None:
                await asyncio.sleep(0.05)
                r = await client.get("/healthz")
                assert r.status_code == 200
                finished.append("healthz")

            await asyncio.gather(match(), health())

    asyncio.run(scenario())
    assert finished == ["healthz", "match"]

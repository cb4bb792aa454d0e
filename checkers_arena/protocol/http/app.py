from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    engine_error_handler,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from ...config import Settings, get_settings
from ...engine.game import Game
from ...engine.move import parse_move
from ...engine.perft import perft as perft_nodes
from ...eval import evaluate
from ...policies.base import POLICY_NAMES, PolicyContext, PolicyId
from ...policies.dispatch import parse_policy
from ...tournament.match import play_game, play_turn
from .session import InMemorySessionStore, Session


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    position: Optional[str] = Field(default=None, description="Board diagram, optionally followed by side to move")


class CreateGameResponse(BaseModel):
    game_id: str
    position: str


class SetPositionRequest(BaseModel):
    position: str = Field(..., description="Board diagram, optionally followed by side to move")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Origin and destination squares, e.g. c3d4")


class AIRequest(BaseModel):
    policy: str = Field(..., description="Policy id, e.g. minimax")


class PerftRequest(BaseModel):
    position: str
    depth: int = Field(default=1, ge=0, le=8)


class MatchRequest(BaseModel):
    team1: str
    team2: str
    seed: Optional[int] = None
    max_moves: Optional[int] = Field(default=None, ge=1)


class GameState(BaseModel):
    game_id: str
    position: str
    side_to_move: int
    legal_moves: List[str]
    selected_piece: Optional[int]
    over: bool
    winner: Optional[int]
    last_move: Optional[str]
    move_history: List[str]


class AIResponse(BaseModel):
    policy: str
    move: Optional[str]
    state: GameState


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Checkers Arena API", version="0.1.0")

    logging.basicConfig(level=settings.log_level.upper())

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    # Engine input errors (bad diagram, bad move, unknown policy) are all ValueErrors.
    app.add_exception_handler(ValueError, engine_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore(seed=settings.seed)

    def context(session: Session) -> PolicyContext:
        return PolicyContext(rng=session.rng, params=settings.search_params())

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/policies")
    async def policies() -> List[Dict[str, str]]:
        return [{"id": p.value, "name": POLICY_NAMES[p]} for p in PolicyId]

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        game = Game.from_position(req.position) if req and req.position else Game.new()
        game_id = store.create(game)
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, position=game.to_position())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _state(game_id, _require_session(store, game_id).game)

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        _require_session(store, game_id)
        game = Game.from_position(req.position)
        store.replace_game(game_id, game)
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    def make_move(game_id: str, req: MoveRequest) -> GameState:
        session = _require_session(store, game_id)
        with session.lock:
            game = _require_live_game(store, game_id)
            game.apply_move(parse_move(req.move, game.board))
            return _state(game_id, game)

    # Sync routes run in the threadpool; searches must not stall the event loop.
    @app.post("/api/games/{game_id}/ai", response_model=AIResponse)
    def ai_move(game_id: str, req: AIRequest) -> AIResponse:
        session = _require_session(store, game_id)
        policy = parse_policy(req.policy)
        with session.lock:
            game = _require_live_game(store, game_id)
            move = play_turn(game, policy, context(session))
            state = _state(game_id, game)
        logger.info(
            "ai move",
            extra={"game_id": game_id, "policy": policy.value, "move": move.to_str() if move else None},
        )
        return AIResponse(policy=policy.value, move=move.to_str() if move else None, state=state)

    @app.post("/api/games/{game_id}/evaluate")
    async def evaluate_position(game_id: str) -> Dict[str, Any]:
        game = _require_session(store, game_id).game
        return {"score": evaluate(game.board), "side_to_move": game.side_to_move}

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, Any]:
        game = Game.from_position(req.position)
        nodes = perft_nodes(game.board, req.depth, game.side_to_move)
        return {"depth": req.depth, "nodes": nodes}

    @app.post("/api/matches")
    def play_match(req: MatchRequest) -> Dict[str, Any]:
        seed = req.seed if req.seed is not None else settings.seed
        ctx = PolicyContext(rng=random.Random(seed), params=settings.search_params())
        record = play_game(
            req.team1, req.team2, ctx, max_moves=req.max_moves or settings.max_game_moves
        )
        winner = record.winner_policy()
        return {
            "team1": record.team1.value,
            "team2": record.team2.value,
            "winner": record.winner,
            "winner_policy": winner.value if winner else None,
            "moves": record.moves,
            "position": record.position,
        }

    return app


def _state(game_id: str, game: Game) -> GameState:
    status = game.status()
    history = game.move_history()
    return GameState(
        game_id=game_id,
        position=game.to_position(),
        side_to_move=game.side_to_move,
        legal_moves=[m.to_str() for m in game.legal_moves()],
        selected_piece=game.selected_piece_id,
        over=status.over,
        winner=status.winner,
        last_move=history[-1] if history else None,
        move_history=history,
    )


def _require_session(store: InMemorySessionStore, game_id: str) -> Session:
    session = store.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="game not found")
    return session


def _require_live_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = _require_session(store, game_id).game
    if game.status().over:
        raise HTTPException(status_code=409, detail="game is over")
    return game

from __future__ import annotations

import random
import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from ...engine.game import Game


@dataclass
class Session:
    """One game plus the random source every AI decision in it draws from.

    `lock` serializes moves on the game; route handlers run in worker threads.
    """

    game: Game
    rng: random.Random = field(default_factory=random.Random)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Nothing is persisted; sessions vanish with the process.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, Session] = {}
        self._seed = seed

    def create(self, game: Optional[Game] = None) -> str:
        """Create a new session and return its `game_id`."""
        gid = str(uuid.uuid4())
        session = Session(game=game or Game.new(), rng=random.Random(self._seed))
        with self._lock:
            self._sessions[gid] = session
        return gid

    def get(self, game_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(game_id)

    def replace_game(self, game_id: str, game: Game) -> None:
        with self._lock:
            if game_id not in self._sessions:
                raise KeyError(game_id)
            self._sessions[game_id].game = game

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(game_id, None) is not None

"""Game store abstraction with optimistic version checks.

Stores hold snapshots, never live objects: every ``load`` returns a fresh
:class:`GameState`, so a caller mutating its copy cannot affect other readers
until it saves.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Protocol

from .exceptions import GameNotFoundError, VersionConflictError
from .game_state import GameState
from .persistence import GameStateSnapshot


class GameStore(Protocol):
    """Capability to load games by id and save them with a version check."""

    def create(self, state: GameState) -> None:
        """Store a brand new game; fails if the id is taken."""
        ...

    def load(self, game_id: str) -> GameState:
        """Return a fresh copy of the stored game."""
        ...

    def save(self, state: GameState, *, expected_version: int) -> None:
        """Replace the stored game if its version still equals ``expected_version``."""
        ...


class InMemoryGameStore:
    """Dictionary-backed store used by tests and single-process callers."""

    def __init__(self) -> None:
        self._snapshots: dict[str, GameStateSnapshot] = {}
        self._guard = threading.Lock()

    def __contains__(self, game_id: object) -> bool:
        return game_id in self._snapshots

    def create(self, state: GameState) -> None:
        with self._guard:
            if state.game_id in self._snapshots:
                raise VersionConflictError(f"Game already exists: {state.game_id}")
            self._snapshots[state.game_id] = GameStateSnapshot.from_game_state(state)

    def load(self, game_id: str) -> GameState:
        with self._guard:
            snapshot = self._snapshots.get(game_id)
        if snapshot is None:
            raise GameNotFoundError(game_id)
        return snapshot.restore()

    def save(self, state: GameState, *, expected_version: int) -> None:
        with self._guard:
            current = self._snapshots.get(state.game_id)
            if current is None:
                raise GameNotFoundError(state.game_id)
            if current.version != expected_version:
                raise VersionConflictError(
                    f"Game {state.game_id} is at version {current.version}, "
                    f"expected {expected_version}"
                )
            self._snapshots[state.game_id] = GameStateSnapshot.from_game_state(state)


class JsonFileGameStore:
    """Stores each game as ``<game_id>.json`` inside ``directory``."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._guard = threading.Lock()

    def _path(self, game_id: str) -> Path:
        return self.directory / f"{game_id}.json"

    def create(self, state: GameState) -> None:
        with self._guard:
            path = self._path(state.game_id)
            if path.exists():
                raise VersionConflictError(f"Game already exists: {state.game_id}")
            GameStateSnapshot.from_game_state(state).save(path)

    def load(self, game_id: str) -> GameState:
        path = self._path(game_id)
        if not path.exists():
            raise GameNotFoundError(game_id)
        return GameStateSnapshot.load(path).restore()

    def save(self, state: GameState, *, expected_version: int) -> None:
        with self._guard:
            path = self._path(state.game_id)
            if not path.exists():
                raise GameNotFoundError(state.game_id)
            stored_version = GameStateSnapshot.load(path).version
            if stored_version != expected_version:
                raise VersionConflictError(
                    f"Game {state.game_id} is at version {stored_version}, "
                    f"expected {expected_version}"
                )
            tmp_path = path.with_suffix(".json.tmp")
            GameStateSnapshot.from_game_state(state).save(tmp_path)
            tmp_path.replace(path)


__all__ = ["GameStore", "InMemoryGameStore", "JsonFileGameStore"]

"""Serialized entry points for callers that address games by id.

``GameService`` is the boundary a transport layer talks to. It owns one lock
per game id, so submissions for the same game never interleave, and it loads,
mutates and saves through an injected :class:`~coup.store.GameStore`.
"""

from __future__ import annotations

import random
import threading
import uuid
import weakref
from datetime import datetime
from typing import Callable, Optional, TypeVar

from .cards import DEFAULT_THEME, CardTheme, Deck, build_deck
from .config import GameConfig
from .enums import ActionKind, CardKind, PlayerType
from .events import EventLog
from .game_state import GameState, PendingAction, Reaction, TurnRecord
from .players import Player, PlayerId
from .projections import (
    AgentPerception,
    PrivateState,
    PublicState,
    get_agent_perception,
    get_private_state,
    get_public_state,
)
from .store import GameStore

T = TypeVar("T")


class GameService:
    """Runs engine operations against stored games one at a time per game."""

    def __init__(
        self,
        store: GameStore,
        *,
        config: GameConfig | None = None,
        record_events: bool = True,
    ) -> None:
        self.store = store
        self.config = config or GameConfig()
        self.record_events = record_events
        # A game's lock lives only while some call holds it.
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    def _lock_for(self, game_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(game_id)
            if lock is None:
                lock = self._locks[game_id] = threading.Lock()
            return lock

    def _mutate(self, game_id: str, operation: Callable[[GameState], T]) -> T:
        with self._lock_for(game_id):
            state = self.store.load(game_id)
            expected_version = state.version
            result = operation(state)
            self.store.save(state, expected_version=expected_version)
            return result

    def _read(self, game_id: str, projection: Callable[[GameState], T]) -> T:
        with self._lock_for(game_id):
            return projection(self.store.load(game_id))

    # ------------------------------------------------------------------
    # Setup

    def create_game(
        self,
        player_id: PlayerId,
        display_name: str,
        *,
        player_type: PlayerType = PlayerType.HUMAN,
        deck: Deck | None = None,
        theme: CardTheme = DEFAULT_THEME,
        game_id: Optional[str] = None,
        seed: Optional[int] = None,
        now: datetime | None = None,
    ) -> str:
        """Create a lobby and return its id."""

        new_id = game_id or uuid.uuid4().hex[:10]
        game_seed = seed if seed is not None else self.config.random_seed
        if deck is None:
            deck = build_deck(
                theme,
                copies_per_card=self.config.copies_per_card,
                rng=random.Random(game_seed),
            )
        state = GameState.create_game(
            new_id,
            Player(player_id=player_id, display_name=display_name, player_type=player_type),
            deck,
            config=self.config,
            theme=theme,
            seed=game_seed,
            event_log=EventLog() if self.record_events else None,
            now=now,
        )
        with self._lock_for(new_id):
            self.store.create(state)
        return new_id

    def join_game(
        self,
        game_id: str,
        player_id: PlayerId,
        display_name: str,
        player_type: PlayerType = PlayerType.HUMAN,
        *,
        now: datetime | None = None,
    ) -> Player:
        return self._mutate(
            game_id,
            lambda state: state.join_game(player_id, display_name, player_type, now=now),
        )

    def deal_initial_hands(self, game_id: str, *, now: datetime | None = None) -> None:
        self._mutate(game_id, lambda state: state.deal_initial_hands(now=now))

    # ------------------------------------------------------------------
    # Turn operations

    def submit_action(
        self,
        game_id: str,
        actor_id: PlayerId,
        action: ActionKind | str,
        target_id: Optional[PlayerId] = None,
        *,
        now: datetime | None = None,
    ) -> PendingAction:
        return self._mutate(
            game_id,
            lambda state: state.submit_action(actor_id, action, target_id, now=now),
        )

    def submit_challenge(
        self,
        game_id: str,
        challenger_id: PlayerId,
        *,
        now: datetime | None = None,
    ) -> Reaction:
        return self._mutate(game_id, lambda state: state.submit_challenge(challenger_id, now=now))

    def submit_block(
        self,
        game_id: str,
        blocker_id: PlayerId,
        claimed_card: CardKind | str,
        *,
        now: datetime | None = None,
    ) -> Reaction:
        return self._mutate(
            game_id,
            lambda state: state.submit_block(blocker_id, claimed_card, now=now),
        )

    def resolve(self, game_id: str, *, now: datetime | None = None) -> TurnRecord:
        return self._mutate(game_id, lambda state: state.resolve(now=now))

    # ------------------------------------------------------------------
    # Projections

    def get_public_state(self, game_id: str) -> PublicState:
        return self._read(game_id, get_public_state)

    def get_private_state(self, game_id: str, player_id: PlayerId) -> PrivateState:
        return self._read(game_id, lambda state: get_private_state(state, player_id))

    def get_agent_perception(self, game_id: str, agent_id: PlayerId) -> AgentPerception:
        return self._read(game_id, lambda state: get_agent_perception(state, agent_id))


__all__ = ["GameService"]

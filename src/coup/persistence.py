"""Serialization helpers for saving and loading Coup game state."""

from __future__ import annotations

import json
import random
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional

from .cards import Card, Deck
from .config import GameConfig
from .enums import ActionKind, CardKind, ReactionKind
from .events import EventLog, GameEvent
from .game_state import (
    ChallengeResult,
    Claim,
    GamePhase,
    GameState,
    PendingAction,
    Reaction,
    ResolutionOutcome,
    TurnRecord,
)
from .players import Player

SNAPSHOT_FORMAT = 1


@dataclass(frozen=True, slots=True)
class GameStateSnapshot:
    """Structured representation of a :class:`GameState` suitable for persistence."""

    payload: dict[str, Any]

    @property
    def game_id(self) -> str:
        return self.payload["game_id"]

    @property
    def version(self) -> int:
        return self.payload["state"]["version"]

    def to_json(self, *, indent: int = 2) -> str:
        """Serialise the snapshot to JSON."""

        return json.dumps(self.payload, indent=indent)

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the underlying payload."""

        return json.loads(json.dumps(self.payload))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameStateSnapshot":
        return cls(payload=dict(data))

    @classmethod
    def from_json(cls, raw: str) -> "GameStateSnapshot":
        return cls.from_dict(json.loads(raw))

    @classmethod
    def from_game_state(cls, state: GameState) -> "GameStateSnapshot":
        """Capture the provided game state as a snapshot."""

        return cls(payload=_state_to_payload(state))

    def restore(self) -> GameState:
        """Rehydrate the snapshot back into a :class:`GameState`."""

        return _payload_to_state(self.payload)

    def save(self, path: str | Path, *, indent: int = 2) -> None:
        """Persist the snapshot to disk as JSON."""

        Path(path).write_text(self.to_json(indent=indent), encoding="utf-8")

    @classmethod
    def load(cls, path: str | Path) -> "GameStateSnapshot":
        return cls.from_json(Path(path).read_text(encoding="utf-8"))


def snapshot_game_state(state: GameState) -> GameStateSnapshot:
    """Produce a :class:`GameStateSnapshot` for the supplied state."""

    return GameStateSnapshot.from_game_state(state)


def restore_game_state(snapshot: GameStateSnapshot) -> GameState:
    """Restore a :class:`GameState` instance from ``snapshot``."""

    return snapshot.restore()


def _state_to_payload(state: GameState) -> dict[str, Any]:
    return {
        "format": SNAPSHOT_FORMAT,
        "game_id": state.game_id,
        "config": state.config.to_dict(),
        "players": [player.to_dict() for player in state.players],
        "deck": [card.to_dict() for card in state.deck.cards],
        "discard_pile": [card.to_dict() for card in state.discard_pile],
        "state": {
            "phase": state.phase.value,
            "current_player_index": state.current_player_index,
            "turn_number": state.turn_number,
            "winner": state.winner,
            "version": state.version,
            "card_total": state.card_total,
            "reaction_deadline": _dt(state.reaction_deadline),
            "created_at": _dt(state.created_at),
            "last_update": _dt(state.last_update),
        },
        "pending_action": _pending_to_dict(state.pending_action),
        "reactions": [_reaction_to_dict(reaction) for reaction in state.reactions],
        "claims": [_claim_to_dict(claim) for claim in state.claims],
        "history": [_turn_to_dict(record) for record in state.action_history],
        "theme": {
            "period": state.period,
            "character": state.character,
            "action_names": {action.value: name for action, name in state.action_names.items()},
        },
        "seed": state.seed,
        "rng_state": _rng_state_to_list(state.rng),
        "event_log": [event.to_dict() for event in state.event_log.events]
        if state.event_log is not None
        else None,
    }


def _payload_to_state(payload: Mapping[str, Any]) -> GameState:
    block = payload["state"]
    theme = payload.get("theme") or {}
    event_data = payload.get("event_log")
    event_log = (
        EventLog(GameEvent.from_dict(item) for item in event_data)
        if event_data is not None
        else None
    )
    pending_raw = payload.get("pending_action")

    return GameState(
        game_id=payload["game_id"],
        config=GameConfig.from_mapping(payload["config"]),
        players=[Player.from_dict(raw) for raw in payload["players"]],
        deck=Deck(Card.from_dict(raw) for raw in payload["deck"]),
        discard_pile=[Card.from_dict(raw) for raw in payload.get("discard_pile", [])],
        phase=GamePhase(block["phase"]),
        current_player_index=block["current_player_index"],
        pending_action=_dict_to_pending(pending_raw) if pending_raw else None,
        reactions=[_dict_to_reaction(raw) for raw in payload.get("reactions", [])],
        reaction_deadline=_parse_dt(block.get("reaction_deadline")),
        claims=[_dict_to_claim(raw) for raw in payload.get("claims", [])],
        turn_number=block["turn_number"],
        action_history=[_dict_to_turn(raw) for raw in payload.get("history", [])],
        winner=block.get("winner"),
        version=block["version"],
        card_total=block["card_total"],
        seed=payload.get("seed"),
        period=theme.get("period", ""),
        character=theme.get("character", ""),
        action_names={
            ActionKind(action): name for action, name in theme.get("action_names", {}).items()
        },
        created_at=_parse_dt(block["created_at"]),
        last_update=_parse_dt(block.get("last_update")),
        event_log=event_log,
        rng=_list_to_rng(payload.get("rng_state"), payload.get("seed")),
    )


def _dt(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_dt(raw: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(raw) if raw else None


def _rng_state_to_list(rng: Optional[random.Random]) -> Optional[list[Any]]:
    if rng is None:
        return None
    version, internal, gauss_next = rng.getstate()
    return [version, list(internal), gauss_next]


def _list_to_rng(raw: Optional[list[Any]], seed: Optional[int]) -> random.Random:
    rng = random.Random(seed)
    if raw:
        version, internal, gauss_next = raw
        rng.setstate((version, tuple(internal), gauss_next))
    return rng


def _pending_to_dict(action: Optional[PendingAction]) -> Optional[dict[str, Any]]:
    if action is None:
        return None
    return {
        "action_id": action.action_id,
        "kind": action.kind.value,
        "actor_id": action.actor_id,
        "target_id": action.target_id,
        "claimed_card": action.claimed_card.value if action.claimed_card else None,
        "created_at": action.created_at.isoformat(),
    }


def _dict_to_pending(data: Mapping[str, Any]) -> PendingAction:
    claimed = data.get("claimed_card")
    return PendingAction(
        action_id=data["action_id"],
        kind=ActionKind(data["kind"]),
        actor_id=data["actor_id"],
        target_id=data.get("target_id"),
        claimed_card=CardKind(claimed) if claimed else None,
        created_at=datetime.fromisoformat(data["created_at"]),
    )


def _reaction_to_dict(reaction: Reaction) -> dict[str, Any]:
    return {
        "reaction_id": reaction.reaction_id,
        "player_id": reaction.player_id,
        "kind": reaction.kind.value,
        "claimed_card": reaction.claimed_card.value if reaction.claimed_card else None,
        "challenged_player_id": reaction.challenged_player_id,
        "created_at": reaction.created_at.isoformat(),
    }


def _dict_to_reaction(data: Mapping[str, Any]) -> Reaction:
    claimed = data.get("claimed_card")
    return Reaction(
        reaction_id=data["reaction_id"],
        player_id=data["player_id"],
        kind=ReactionKind(data["kind"]),
        claimed_card=CardKind(claimed) if claimed else None,
        challenged_player_id=data.get("challenged_player_id"),
        created_at=datetime.fromisoformat(data["created_at"]),
    )


def _claim_to_dict(claim: Claim) -> dict[str, Any]:
    return {
        "player_id": claim.player_id,
        "claimed_card": claim.claimed_card.value,
        "action": claim.action.value,
        "turn_number": claim.turn_number,
        "challenged": claim.challenged,
        "challenge_result": claim.challenge_result.value if claim.challenge_result else None,
        "created_at": claim.created_at.isoformat(),
    }


def _dict_to_claim(data: Mapping[str, Any]) -> Claim:
    result = data.get("challenge_result")
    return Claim(
        player_id=data["player_id"],
        claimed_card=CardKind(data["claimed_card"]),
        action=ActionKind(data["action"]),
        turn_number=data["turn_number"],
        challenged=data.get("challenged", False),
        challenge_result=ChallengeResult(result) if result else None,
        created_at=datetime.fromisoformat(data["created_at"]),
    )


def _turn_to_dict(record: TurnRecord) -> dict[str, Any]:
    return {
        "turn_number": record.turn_number,
        "action": _pending_to_dict(record.action),
        "reactions": [_reaction_to_dict(reaction) for reaction in record.reactions],
        "outcome": record.outcome.value,
        "result": record.result,
        "resolved_at": record.resolved_at.isoformat(),
    }


def _dict_to_turn(data: Mapping[str, Any]) -> TurnRecord:
    return TurnRecord(
        turn_number=data["turn_number"],
        action=_dict_to_pending(data["action"]),
        reactions=tuple(_dict_to_reaction(raw) for raw in data.get("reactions", [])),
        outcome=ResolutionOutcome(data["outcome"]),
        result=data["result"],
        resolved_at=datetime.fromisoformat(data["resolved_at"]),
    )


__all__ = [
    "GameStateSnapshot",
    "restore_game_state",
    "snapshot_game_state",
]

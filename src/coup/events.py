"""Turn-stamped event log for Coup games.

Most events are public table talk. Events that reveal card identities
(dealt hands, replacements drawn after a proven claim) carry an audience of
the seats allowed to see them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Sequence, Tuple


class GameEventType(str, Enum):
    """Enumerates high-level events emitted by the game engine."""

    PLAYER_JOINED = "player_joined"
    HANDS_DEALT = "hands_dealt"
    PHASE_CHANGED = "phase_changed"
    ACTION_SUBMITTED = "action_submitted"
    CHALLENGE_SUBMITTED = "challenge_submitted"
    BLOCK_SUBMITTED = "block_submitted"
    CHALLENGE_RESOLVED = "challenge_resolved"
    INFLUENCE_LOST = "influence_lost"
    PLAYER_ELIMINATED = "player_eliminated"
    CARD_REPLACED = "card_replaced"
    ACTION_RESOLVED = "action_resolved"
    TURN_ADVANCED = "turn_advanced"
    GAME_COMPLETED = "game_completed"


# Events whose payload names the cards in a player's hand.
CARD_EVENTS = frozenset({GameEventType.HANDS_DEALT, GameEventType.CARD_REPLACED})


class EventVisibility(str, Enum):
    """Indicates who should have access to an event payload."""

    PUBLIC = "public"
    PRIVATE = "private"


@dataclass(frozen=True, slots=True)
class GameEvent:
    """Something that happened during ``turn_number``."""

    timestamp: datetime
    type: GameEventType
    turn_number: int
    payload: Mapping[str, Any] = field(default_factory=dict)
    audience: Tuple[str, ...] = ()

    @property
    def visibility(self) -> EventVisibility:
        return EventVisibility.PRIVATE if self.audience else EventVisibility.PUBLIC

    def visible_to(self, player_id: str) -> bool:
        return not self.audience or player_id in self.audience

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "type": self.type.value,
            "turn_number": self.turn_number,
            "payload": dict(self.payload),
            "audience": list(self.audience),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameEvent":
        payload = data.get("payload") or {}
        if not isinstance(payload, Mapping):
            raise ValueError("Event payload must be a mapping")
        return cls(
            timestamp=datetime.fromisoformat(str(data["timestamp"])),
            type=GameEventType(data["type"]),
            turn_number=int(data["turn_number"]),
            payload=dict(payload),
            audience=tuple(str(item) for item in data.get("audience") or ()),
        )


class EventLog:
    """Append-only record of a game's events.

    The log is shared by reference with whoever created it, so rollbacks
    shrink it in place with :meth:`truncate` rather than replacing it.
    """

    def __init__(self, events: Iterable[GameEvent] = ()) -> None:
        self._events: list[GameEvent] = list(events)

    def record(
        self,
        event_type: GameEventType,
        turn_number: int,
        payload: Mapping[str, Any] | None = None,
        *,
        timestamp: datetime,
        audience: Sequence[str] | None = None,
    ) -> GameEvent:
        """Append a new event to the log and return it."""

        event = GameEvent(
            timestamp=timestamp,
            type=event_type,
            turn_number=turn_number,
            payload=dict(payload or {}),
            audience=tuple(audience or ()),
        )
        self._events.append(event)
        return event

    @property
    def events(self) -> tuple[GameEvent, ...]:
        return tuple(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[GameEvent]:
        return iter(tuple(self._events))

    def truncate(self, length: int) -> None:
        """Drop every event recorded after the first ``length``."""

        del self._events[length:]

    def of_type(self, event_type: GameEventType) -> tuple[GameEvent, ...]:
        return tuple(event for event in self._events if event.type is event_type)

    def for_turn(self, turn_number: int) -> tuple[GameEvent, ...]:
        return tuple(event for event in self._events if event.turn_number == turn_number)

    def card_history(self, player_id: str) -> tuple[GameEvent, ...]:
        """Return the dealt and replacement cards only ``player_id`` may see."""

        return tuple(
            event
            for event in self._events
            if event.type in CARD_EVENTS and player_id in event.audience
        )


__all__ = [
    "CARD_EVENTS",
    "EventLog",
    "EventVisibility",
    "GameEvent",
    "GameEventType",
]

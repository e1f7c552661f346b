"""Player-related domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from .cards import Card
from .enums import CardKind, PlayerType

PlayerId = str


@dataclass(slots=True)
class Player:
    """Mutable per-seat state.

    Influence is the number of cards still held, so ``influence_count`` is
    derived from the hand rather than stored next to it.
    """

    player_id: PlayerId
    display_name: str
    player_type: PlayerType = PlayerType.HUMAN
    coins: int = 0
    hand: list[Card] = field(default_factory=list)
    eliminated: bool = False
    last_action_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.player_id:
            raise ValueError("player_id may not be empty")
        if not self.display_name:
            raise ValueError("display_name may not be empty")

    @property
    def influence_count(self) -> int:
        return len(self.hand)

    @property
    def is_agent(self) -> bool:
        """Return True if this seat is controlled by an automated agent."""

        return self.player_type is PlayerType.AGENT

    def holds(self, kind: CardKind) -> bool:
        """Return ``True`` if any held card is of ``kind``."""

        return any(card.kind is kind for card in self.hand)

    def card_kinds(self) -> tuple[CardKind, ...]:
        return tuple(card.kind for card in self.hand)

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "display_name": self.display_name,
            "player_type": self.player_type.value,
            "coins": self.coins,
            "hand": [card.to_dict() for card in self.hand],
            "eliminated": self.eliminated,
            "last_action_at": self.last_action_at.isoformat() if self.last_action_at else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Player":
        last_action_raw = data.get("last_action_at")
        return cls(
            player_id=data["player_id"],
            display_name=data["display_name"],
            player_type=PlayerType(data.get("player_type", PlayerType.HUMAN.value)),
            coins=data.get("coins", 0),
            hand=[Card.from_dict(raw) for raw in data.get("hand", [])],
            eliminated=data.get("eliminated", False),
            last_action_at=datetime.fromisoformat(last_action_raw) if last_action_raw else None,
        )


@dataclass(frozen=True, slots=True)
class PlayerRegistration:
    """Registration payload describing an incoming player."""

    display_name: str
    player_type: PlayerType = PlayerType.HUMAN
    player_id: Optional[PlayerId] = None

    def resolved_id(self, seat: int) -> PlayerId:
        """Return the explicit id, or a seat-based one when none was given."""

        return self.player_id or f"p{seat + 1}"

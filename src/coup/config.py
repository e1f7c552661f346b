"""Configuration models and validation helpers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Any, Mapping, Optional

from .enums import CardKind
from .exceptions import ConfigurationError
from .rules import COUP_COST


@dataclass(frozen=True, slots=True)
class GameConfig:
    """Immutable table configuration.

    The defaults follow the standard game: two cards and two coins per seat,
    three copies of each character, a thirty second reaction window and a
    mandatory coup at ten coins.
    """

    starting_coins: int = 2
    starting_cards: int = 2
    copies_per_card: int = 3
    reaction_window_seconds: float = 30.0
    min_players: int = 2
    max_players: int = 6
    forced_coup_threshold: int = 10
    auto_start: bool = True
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.starting_coins < 0:
            raise ConfigurationError("starting_coins may not be negative")
        if self.starting_cards < 1:
            raise ConfigurationError("starting_cards must be at least 1")
        if self.copies_per_card < 1:
            raise ConfigurationError("copies_per_card must be at least 1")
        if self.reaction_window_seconds < 0:
            raise ConfigurationError("reaction_window_seconds may not be negative")
        if self.min_players < 2:
            raise ConfigurationError("A game needs at least two players")
        if self.max_players < self.min_players:
            raise ConfigurationError(
                f"max_players ({self.max_players}) is below min_players ({self.min_players})"
            )
        if self.forced_coup_threshold < COUP_COST:
            raise ConfigurationError(
                f"forced_coup_threshold must be at least the coup cost ({COUP_COST})"
            )
        if self.max_players * self.starting_cards > self.deck_size:
            raise ConfigurationError(
                f"A deck of {self.deck_size} cards cannot deal {self.starting_cards} "
                f"cards to {self.max_players} players"
            )

    @property
    def deck_size(self) -> int:
        """Number of cards in a full deck for this configuration."""

        return self.copies_per_card * len(CardKind)

    @property
    def reaction_window(self) -> timedelta:
        return timedelta(seconds=self.reaction_window_seconds)

    def with_overrides(self, **changes: Any) -> "GameConfig":
        """Return a new ``GameConfig`` with the provided fields replaced."""

        return replace(self, **changes)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GameConfig":
        """Build a configuration from plain data, rejecting unknown keys."""

        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown game settings: {', '.join(unknown)}")
        try:
            return cls(**dict(data))
        except TypeError as exc:
            raise ConfigurationError(str(exc)) from exc

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}

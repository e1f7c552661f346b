"""Cards, themes and the draw deck."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence

from .enums import ActionKind, CardKind
from .exceptions import ConfigurationError, InsufficientCardsError


@dataclass(frozen=True, slots=True)
class Card:
    """A single character card.

    Everything except ``kind`` is theming payload supplied by a content
    collaborator and is never read by the rules.
    """

    card_id: str
    kind: CardKind
    name: str = ""
    description: str = ""
    ability: str = ""
    image_url: Optional[str] = None
    historical_context: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.card_id:
            raise ValueError("card_id may not be empty")

    def to_dict(self) -> dict[str, Any]:
        return {
            "card_id": self.card_id,
            "kind": self.kind.value,
            "name": self.name,
            "description": self.description,
            "ability": self.ability,
            "image_url": self.image_url,
            "historical_context": self.historical_context,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Card":
        return cls(
            card_id=data["card_id"],
            kind=CardKind(data["kind"]),
            name=data.get("name", ""),
            description=data.get("description", ""),
            ability=data.get("ability", ""),
            image_url=data.get("image_url"),
            historical_context=data.get("historical_context"),
        )


@dataclass(frozen=True, slots=True)
class CardTemplate:
    """Themed face for one card kind, copied onto every card of that kind."""

    kind: CardKind
    name: str
    description: str = ""
    ability: str = ""
    image_url: Optional[str] = None
    historical_context: Optional[str] = None

    def make_card(self, card_id: str) -> Card:
        return Card(
            card_id=card_id,
            kind=self.kind,
            name=self.name,
            description=self.description,
            ability=self.ability,
            image_url=self.image_url,
            historical_context=self.historical_context,
        )


@dataclass(frozen=True, slots=True)
class CardTheme:
    """A themed deck: card faces plus display names for the actions."""

    period: str
    character: str
    templates: tuple[CardTemplate, ...]
    action_names: Mapping[ActionKind, str] = field(default_factory=dict)

    def template_for(self, kind: CardKind) -> CardTemplate:
        """Return the template for ``kind``, falling back to the default theme."""

        for template in self.templates:
            if template.kind is kind:
                return template
        return _DEFAULT_TEMPLATES[kind]

    def action_name(self, action: ActionKind) -> str:
        return self.action_names.get(action) or DEFAULT_ACTION_NAMES[action]


class Deck:
    """Ordered draw pile; the last element of the underlying list is the top."""

    def __init__(self, cards: Iterable[Card] | None = None) -> None:
        self._cards: list[Card] = list(cards) if cards else []

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Deck):
            return NotImplemented
        return self._cards == other._cards

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Deck({len(self._cards)} cards)"

    @property
    def cards(self) -> tuple[Card, ...]:
        """Return the cards bottom-first."""

        return tuple(self._cards)

    def draw(self) -> Card:
        """Pop and return the top card."""

        if not self._cards:
            raise InsufficientCardsError("The deck is empty")
        return self._cards.pop()

    def draw_many(self, count: int) -> list[Card]:
        """Draw up to ``count`` cards, stopping early if the deck runs out."""

        drawn: list[Card] = []
        while self._cards and len(drawn) < count:
            drawn.append(self._cards.pop())
        return drawn

    def put_back(self, card: Card) -> None:
        """Push ``card`` onto the top of the deck."""

        self._cards.append(card)

    def shuffle(self, rng: random.Random) -> None:
        rng.shuffle(self._cards)


DEFAULT_ACTION_NAMES: Mapping[ActionKind, str] = {
    ActionKind.INCOME: "Income",
    ActionKind.FOREIGN_AID: "Foreign Aid",
    ActionKind.COUP: "Coup",
    ActionKind.TAX: "Tax",
    ActionKind.ASSASSINATE: "Assassinate",
    ActionKind.STEAL: "Steal",
    ActionKind.EXCHANGE: "Exchange",
}


_DEFAULT_TEMPLATES: Mapping[CardKind, CardTemplate] = {
    CardKind.DUKE: CardTemplate(
        kind=CardKind.DUKE,
        name="Doge",
        description="The elected leader of the Venetian Republic, controlling vast trade wealth.",
        ability="Collect taxes from trade routes (3 coins), block foreign merchants",
        historical_context="The Doge was the chief magistrate of Venice, elected for life.",
    ),
    CardKind.ASSASSIN: CardTemplate(
        kind=CardKind.ASSASSIN,
        name="Assassino",
        description="A hired blade from the shadows, eliminating political rivals.",
        ability="Hire an assassin to eliminate a rival (3 coins)",
        historical_context="Political assassinations were common in Renaissance power struggles.",
    ),
    CardKind.CAPTAIN: CardTemplate(
        kind=CardKind.CAPTAIN,
        name="Condottiero",
        description="A mercenary captain commanding private armies.",
        ability="Plunder rival coffers (2 coins), defend against raids",
        historical_context="Condottieri were professional military leaders who sold their services.",
    ),
    CardKind.AMBASSADOR: CardTemplate(
        kind=CardKind.AMBASSADOR,
        name="Ambasciatore",
        description="A diplomatic envoy with access to secret information and networks.",
        ability="Exchange intelligence (swap cards), block raids",
        historical_context="Ambassadors were key figures in Renaissance diplomacy and espionage.",
    ),
    CardKind.CONTESSA: CardTemplate(
        kind=CardKind.CONTESSA,
        name="Contessa",
        description="A noble lady with the power to grant protection and sanctuary.",
        ability="Block assassination attempts",
        historical_context=(
            "Noble women wielded significant political influence through family connections."
        ),
    ),
}


DEFAULT_THEME = CardTheme(
    period="Renaissance Italy, 15th Century",
    character="A cunning merchant seeking political influence",
    templates=tuple(_DEFAULT_TEMPLATES[kind] for kind in CardKind),
    action_names={
        ActionKind.INCOME: "Trade Profit",
        ActionKind.FOREIGN_AID: "Merchant Guild",
        ActionKind.COUP: "Political Coup",
        ActionKind.TAX: "Tariff Collection",
        ActionKind.ASSASSINATE: "Hire Assassin",
        ActionKind.STEAL: "Raid Coffers",
        ActionKind.EXCHANGE: "Diplomatic Exchange",
    },
)


def build_deck(
    theme: CardTheme = DEFAULT_THEME,
    *,
    copies_per_card: int = 3,
    rng: random.Random | None = None,
) -> Deck:
    """Create a shuffled deck holding ``copies_per_card`` of every card kind."""

    if copies_per_card < 1:
        raise ConfigurationError("copies_per_card must be at least 1")
    cards = [
        theme.template_for(kind).make_card(f"{kind.value}_{copy + 1}")
        for kind in CardKind
        for copy in range(copies_per_card)
    ]
    deck = Deck(cards)
    deck.shuffle(rng or random.Random())
    return deck


def stacked_deck(top_down: Sequence[CardKind], theme: CardTheme = DEFAULT_THEME) -> Deck:
    """Build an unshuffled deck whose first listed kind is drawn first."""

    counters: dict[CardKind, int] = {}
    cards: list[Card] = []
    for kind in top_down:
        counters[kind] = counters.get(kind, 0) + 1
        cards.append(theme.template_for(kind).make_card(f"{kind.value}_{counters[kind]}"))
    cards.reverse()
    return Deck(cards)

"""Action rule table and card metadata for Coup."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional

from .enums import ActionKind, CardKind
from .exceptions import ConfigurationError

COUP_COST = 7
ASSASSINATE_COST = 3


@dataclass(frozen=True, slots=True)
class ActionRule:
    """Static requirements and reaction options for one action kind."""

    action: ActionKind
    claimed_card: Optional[CardKind]
    requires_target: bool
    cost: int
    prepaid: bool
    blockable: bool
    blocked_by: frozenset[CardKind] = frozenset()

    @property
    def claims_card(self) -> bool:
        """Return ``True`` when performing the action asserts a character."""

        return self.claimed_card is not None

    @property
    def immediate(self) -> bool:
        """Actions with no claim and no block resolve inline at submission."""

        return not self.claims_card and not self.blockable and not self.requires_target

    @property
    def opens_reaction_window(self) -> bool:
        return self.claims_card or self.blockable

    def can_be_blocked_with(self, card: CardKind) -> bool:
        return self.blockable and card in self.blocked_by


@dataclass(frozen=True, slots=True)
class CardDefinition:
    """Mechanical meaning of a card kind."""

    kind: CardKind
    action: Optional[ActionKind]
    blocks: frozenset[ActionKind]


ACTION_RULES: Mapping[ActionKind, ActionRule] = {
    ActionKind.INCOME: ActionRule(
        action=ActionKind.INCOME,
        claimed_card=None,
        requires_target=False,
        cost=0,
        prepaid=False,
        blockable=False,
    ),
    ActionKind.FOREIGN_AID: ActionRule(
        action=ActionKind.FOREIGN_AID,
        claimed_card=None,
        requires_target=False,
        cost=0,
        prepaid=False,
        blockable=True,
        blocked_by=frozenset({CardKind.DUKE}),
    ),
    ActionKind.COUP: ActionRule(
        action=ActionKind.COUP,
        claimed_card=None,
        requires_target=True,
        cost=COUP_COST,
        prepaid=True,
        blockable=False,
    ),
    ActionKind.TAX: ActionRule(
        action=ActionKind.TAX,
        claimed_card=CardKind.DUKE,
        requires_target=False,
        cost=0,
        prepaid=False,
        blockable=False,
    ),
    ActionKind.ASSASSINATE: ActionRule(
        action=ActionKind.ASSASSINATE,
        claimed_card=CardKind.ASSASSIN,
        requires_target=True,
        cost=ASSASSINATE_COST,
        prepaid=True,
        blockable=True,
        blocked_by=frozenset({CardKind.CONTESSA}),
    ),
    ActionKind.STEAL: ActionRule(
        action=ActionKind.STEAL,
        claimed_card=CardKind.CAPTAIN,
        requires_target=True,
        cost=0,
        prepaid=False,
        blockable=True,
        blocked_by=frozenset({CardKind.CAPTAIN, CardKind.AMBASSADOR}),
    ),
    ActionKind.EXCHANGE: ActionRule(
        action=ActionKind.EXCHANGE,
        claimed_card=CardKind.AMBASSADOR,
        requires_target=False,
        cost=0,
        prepaid=False,
        blockable=False,
    ),
}


CARD_DEFINITIONS: Mapping[CardKind, CardDefinition] = {
    CardKind.DUKE: CardDefinition(
        kind=CardKind.DUKE,
        action=ActionKind.TAX,
        blocks=frozenset({ActionKind.FOREIGN_AID}),
    ),
    CardKind.ASSASSIN: CardDefinition(
        kind=CardKind.ASSASSIN,
        action=ActionKind.ASSASSINATE,
        blocks=frozenset(),
    ),
    CardKind.CAPTAIN: CardDefinition(
        kind=CardKind.CAPTAIN,
        action=ActionKind.STEAL,
        blocks=frozenset({ActionKind.STEAL}),
    ),
    CardKind.AMBASSADOR: CardDefinition(
        kind=CardKind.AMBASSADOR,
        action=ActionKind.EXCHANGE,
        blocks=frozenset({ActionKind.STEAL}),
    ),
    # The contessa has no action of its own.
    CardKind.CONTESSA: CardDefinition(
        kind=CardKind.CONTESSA,
        action=None,
        blocks=frozenset({ActionKind.ASSASSINATE}),
    ),
}


def rule_for(action: ActionKind | str) -> ActionRule:
    """Return the rule entry for ``action``."""

    return ACTION_RULES[ActionKind(action)]


@lru_cache(maxsize=None)
def blockers_for(action: ActionKind) -> tuple[CardKind, ...]:
    """Card kinds that may block ``action``, in canonical enum order."""

    allowed = ACTION_RULES[action].blocked_by
    return tuple(kind for kind in CardKind if kind in allowed)


def action_for_card(kind: CardKind) -> Optional[ActionKind]:
    """Return the action a card kind enables, if any."""

    return CARD_DEFINITIONS[kind].action


def validate_rule_table() -> None:
    """Ensure the rule table is exhaustive and agrees with the card definitions."""

    missing = set(ActionKind) - set(ACTION_RULES)
    if missing:
        names = ", ".join(sorted(kind.value for kind in missing))
        raise ConfigurationError(f"Action rule table is missing: {names}")

    for kind in CardKind:
        if kind not in CARD_DEFINITIONS:
            raise ConfigurationError(f"Card definition missing for {kind.value}")

    for action, rule in ACTION_RULES.items():
        if rule.action is not action:
            raise ConfigurationError(f"Rule keyed by {action.value} describes {rule.action.value}")
        if rule.claimed_card is not None and action_for_card(rule.claimed_card) is not action:
            raise ConfigurationError(
                f"{action.value} claims {rule.claimed_card.value} which does not grant it"
            )
        if rule.blocked_by and not rule.blockable:
            raise ConfigurationError(f"{action.value} lists blockers but is not blockable")
        for card in rule.blocked_by:
            if action not in CARD_DEFINITIONS[card].blocks:
                raise ConfigurationError(f"{card.value} is not defined as blocking {action.value}")
        if rule.prepaid and rule.cost <= 0:
            raise ConfigurationError(f"{action.value} is prepaid but has no cost")

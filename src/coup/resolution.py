"""Challenge and block arbitration plus the per-action effects.

The functions here run inside :meth:`GameState.resolve` (or inline for
immediate actions) and mutate the state they are given; they do no
validation of their own beyond guarding engine invariants.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Callable, Mapping, Optional, Tuple

from .cards import Card
from .enums import ActionKind, CardKind, ReactionKind
from .events import GameEventType
from .exceptions import InvariantViolation
from .game_state import ChallengeResult, PendingAction, Reaction, ResolutionOutcome
from .players import Player
from .rules import ACTION_RULES

if TYPE_CHECKING:
    from .game_state import GameState

EffectFn = Callable[["GameState", PendingAction, datetime], str]

EXCHANGE_DRAW_COUNT = 2
STEAL_AMOUNT = 2


def lose_influence(state: GameState, player: Player, now: datetime) -> Optional[Card]:
    """Discard the first card in ``player``'s hand.

    The player has no say in which card goes. Returns the discarded card, or
    ``None`` if the player had nothing left to lose.
    """

    if not player.hand:
        return None
    lost = player.hand.pop(0)
    state.discard_pile.append(lost)
    state.record_event(
        GameEventType.INFLUENCE_LOST,
        {
            "player_id": player.player_id,
            "card": lost.kind.value,
            "remaining": player.influence_count,
        },
        now=now,
    )
    if player.influence_count == 0:
        player.eliminated = True
        state.record_event(
            GameEventType.PLAYER_ELIMINATED, {"player_id": player.player_id}, now=now
        )
    return lost


def replace_revealed_card(
    state: GameState, player: Player, kind: CardKind, now: datetime
) -> Card:
    """Shuffle a proven card back into the deck and draw its replacement."""

    index = next((i for i, card in enumerate(player.hand) if card.kind is kind), None)
    if index is None:
        raise InvariantViolation(f"{player.player_id} has no {kind.value} to reveal")
    revealed = player.hand.pop(index)
    state.deck.put_back(revealed)
    state.shuffle_deck()
    replacement = state.deck.draw()
    player.hand.append(replacement)
    state.record_event(
        GameEventType.CARD_REPLACED,
        {
            "player_id": player.player_id,
            "revealed": revealed.kind.value,
            "drawn": replacement.kind.value,
        },
        now=now,
        audience=[player.player_id],
    )
    return replacement


def refund_prepaid_cost(state: GameState, action: PendingAction) -> int:
    """Return any coins paid up front for ``action``; returns the amount."""

    rule = ACTION_RULES[action.kind]
    if not rule.prepaid:
        return 0
    state.player(action.actor_id).coins += rule.cost
    return rule.cost


def _target(state: GameState, action: PendingAction) -> Player:
    if action.target_id is None:
        raise InvariantViolation(f"{action.kind.value} resolved without a target")
    return state.player(action.target_id)


def _gain(amount: int) -> EffectFn:
    def effect(state: GameState, action: PendingAction, now: datetime) -> str:
        state.player(action.actor_id).coins += amount
        return f"+{amount} coin{'s' if amount != 1 else ''}"

    return effect


def _steal(state: GameState, action: PendingAction, now: datetime) -> str:
    actor = state.player(action.actor_id)
    target = _target(state, action)
    stolen = min(STEAL_AMOUNT, target.coins)
    target.coins -= stolen
    actor.coins += stolen
    return f"stole {stolen} from {target.display_name}"


def _remove_target_influence(state: GameState, action: PendingAction, now: datetime) -> str:
    # The cost was collected when the action was submitted.
    target = _target(state, action)
    lost = lose_influence(state, target, now)
    if lost is None:
        return f"{target.display_name} had no influence left"
    return f"{target.display_name} lost a {lost.kind.value}"


def _exchange(state: GameState, action: PendingAction, now: datetime) -> str:
    # No choice is offered: both drawn cards go straight back.
    drawn = state.deck.draw_many(EXCHANGE_DRAW_COUNT)
    for card in drawn:
        state.deck.put_back(card)
    state.shuffle_deck()
    return f"drew {len(drawn)} and returned them"


ACTION_EFFECTS: Mapping[ActionKind, EffectFn] = {
    ActionKind.INCOME: _gain(1),
    ActionKind.FOREIGN_AID: _gain(2),
    ActionKind.TAX: _gain(3),
    ActionKind.STEAL: _steal,
    ActionKind.ASSASSINATE: _remove_target_influence,
    ActionKind.EXCHANGE: _exchange,
    ActionKind.COUP: _remove_target_influence,
}


def apply_action_effect(state: GameState, action: PendingAction, now: datetime) -> str:
    """Apply the successful effect of ``action`` and describe it."""

    return ACTION_EFFECTS[action.kind](state, action, now)


def resolve_pending(
    state: GameState, action: PendingAction, now: datetime
) -> Tuple[ResolutionOutcome, str]:
    """Settle ``action`` against the recorded reactions.

    Precedence is challenge, then block, then unopposed success. Only the
    first reaction of the deciding kind, by submission order, is arbitrated.
    Every event recorded along the way is stamped with ``now``.
    """

    actor = state.player(action.actor_id)
    challenge = state.first_reaction(ReactionKind.CHALLENGE)
    block = state.first_reaction(ReactionKind.BLOCK)

    if challenge is not None:
        if block is not None and challenge.challenged_player_id == block.player_id:
            return _arbitrate_block_challenge(state, action, block, challenge, now)
        return _arbitrate_action_challenge(state, action, challenge, now)

    if block is not None:
        blocker = state.player(block.player_id)
        refund_prepaid_cost(state, action)
        card = block.claimed_card.value if block.claimed_card else "a block"
        return (
            ResolutionOutcome.BLOCKED,
            f"Action blocked by {blocker.display_name} using {card}",
        )

    effect = apply_action_effect(state, action, now)
    return (
        ResolutionOutcome.SUCCEEDED,
        f"{actor.display_name}'s {action.kind.value} succeeded ({effect})",
    )


def _arbitrate_action_challenge(
    state: GameState,
    action: PendingAction,
    challenge: Reaction,
    now: datetime,
) -> Tuple[ResolutionOutcome, str]:
    claimed = action.claimed_card
    if claimed is None:
        raise InvariantViolation(f"Challenge recorded against unclaimed {action.kind.value}")
    actor = state.player(action.actor_id)
    challenger = state.player(challenge.player_id)

    if actor.holds(claimed):
        state.annotate_claim(actor.player_id, claimed, action.kind, ChallengeResult.FAILED)
        lose_influence(state, challenger, now)
        replace_revealed_card(state, actor, claimed, now)
        _record_challenge(state, actor, challenger, claimed, ChallengeResult.FAILED, now)
        effect = apply_action_effect(state, action, now)
        return (
            ResolutionOutcome.CHALLENGE_FAILED,
            f"{actor.display_name} revealed {claimed.value}. Challenge failed. "
            f"{challenger.display_name} loses influence. {effect}",
        )

    state.annotate_claim(actor.player_id, claimed, action.kind, ChallengeResult.SUCCESS)
    lose_influence(state, actor, now)
    refund_prepaid_cost(state, action)
    _record_challenge(state, actor, challenger, claimed, ChallengeResult.SUCCESS, now)
    return (
        ResolutionOutcome.BLUFF_CAUGHT,
        f"{actor.display_name} caught bluffing! {actor.display_name} loses influence.",
    )


def _arbitrate_block_challenge(
    state: GameState,
    action: PendingAction,
    block: Reaction,
    challenge: Reaction,
    now: datetime,
) -> Tuple[ResolutionOutcome, str]:
    claimed = block.claimed_card
    if claimed is None:
        raise InvariantViolation("Block recorded without a claimed card")
    blocker = state.player(block.player_id)
    challenger = state.player(challenge.player_id)

    if blocker.holds(claimed):
        state.annotate_claim(blocker.player_id, claimed, action.kind, ChallengeResult.FAILED)
        lose_influence(state, challenger, now)
        replace_revealed_card(state, blocker, claimed, now)
        refund_prepaid_cost(state, action)
        _record_challenge(state, blocker, challenger, claimed, ChallengeResult.FAILED, now)
        return (
            ResolutionOutcome.BLOCK_UPHELD,
            f"{blocker.display_name} revealed {claimed.value}. Block stands. "
            f"{challenger.display_name} loses influence.",
        )

    state.annotate_claim(blocker.player_id, claimed, action.kind, ChallengeResult.SUCCESS)
    lose_influence(state, blocker, now)
    _record_challenge(state, blocker, challenger, claimed, ChallengeResult.SUCCESS, now)
    effect = apply_action_effect(state, action, now)
    return (
        ResolutionOutcome.BLOCK_BLUFF_CAUGHT,
        f"{blocker.display_name} caught bluffing a {claimed.value} block! "
        f"{blocker.display_name} loses influence. {effect}",
    )


def _record_challenge(
    state: GameState,
    claimant: Player,
    challenger: Player,
    claimed: CardKind,
    result: ChallengeResult,
    now: datetime,
) -> None:
    state.record_event(
        GameEventType.CHALLENGE_RESOLVED,
        {
            "claimant_id": claimant.player_id,
            "challenger_id": challenger.player_id,
            "claimed_card": claimed.value,
            "result": result.value,
        },
        now=now,
    )


__all__ = [
    "ACTION_EFFECTS",
    "apply_action_effect",
    "lose_influence",
    "refund_prepaid_cost",
    "replace_revealed_card",
    "resolve_pending",
]

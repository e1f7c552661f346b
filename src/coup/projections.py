"""Read-only views of a game for observers, seated players and agents.

None of these functions mutate the state they read. Public views never
expose hand contents; private views expose only the requesting player's hand.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from .cards import Card
from .config import GameConfig
from .enums import ActionKind, CardKind, PlayerType, ReactionKind
from .events import GameEvent
from .game_state import (
    Claim,
    GamePhase,
    GameState,
    GameStatus,
    PendingAction,
    Reaction,
    TurnRecord,
)
from .players import Player, PlayerId
from .rules import ACTION_RULES, ASSASSINATE_COST, COUP_COST, blockers_for

BLUFF_SUSPICION_DISTINCT_CLAIMS = 2
UNVERIFIED_CLAIMS_BEFORE_CHALLENGE = 2


@dataclass(frozen=True, slots=True)
class PublicPlayerView:
    """What everyone at the table can see about a seat."""

    player_id: PlayerId
    display_name: str
    player_type: PlayerType
    coins: int
    card_count: int
    influence_count: int
    eliminated: bool


@dataclass(frozen=True, slots=True)
class PublicState:
    """Observer view of a game."""

    game_id: str
    status: GameStatus
    phase: GamePhase
    current_player_id: PlayerId
    turn_number: int
    players: Tuple[PublicPlayerView, ...]
    discard_pile: Tuple[Card, ...]
    action_history: Tuple[TurnRecord, ...]
    pending_action: Optional[PendingAction]
    reactions: Tuple[Reaction, ...]
    reaction_deadline: Optional[datetime]
    winner: Optional[PlayerId]
    version: int
    period: str = ""
    character: str = ""
    action_names: Tuple[Tuple[ActionKind, str], ...] = ()


@dataclass(frozen=True, slots=True)
class PrivateState:
    """A seated player's own hand and current options."""

    player_id: PlayerId
    hand: Tuple[Card, ...]
    available_actions: Tuple[ActionKind, ...]
    can_challenge: bool
    can_block: bool
    block_cards: Tuple[CardKind, ...]
    card_history: Tuple[GameEvent, ...] = ()


@dataclass(frozen=True, slots=True)
class PendingActionView:
    kind: ActionKind
    actor_id: PlayerId
    target_id: Optional[PlayerId]
    claimed_card: Optional[CardKind]
    action_name: str
    blocker_id: Optional[PlayerId] = None
    block_card: Optional[CardKind] = None


@dataclass(frozen=True, slots=True)
class ReactionOptions:
    can_challenge: bool
    can_block: bool
    block_cards: Tuple[CardKind, ...]


@dataclass(frozen=True, slots=True)
class ClaimInsight:
    """A public claim; ``verified`` only when a challenge against it failed."""

    player_id: PlayerId
    card: CardKind
    action: ActionKind
    verified: bool


@dataclass(frozen=True, slots=True)
class SuspicionFlag:
    player_id: PlayerId
    reason: str


@dataclass(frozen=True, slots=True)
class PerceptionInsights:
    """Advisory analytics. Never authoritative for legality."""

    claims_made: Tuple[ClaimInsight, ...]
    suspicious_behaviors: Tuple[SuspicionFlag, ...]
    recommendations: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class AgentPerception:
    """Everything an automated player is allowed to know, plus heuristics."""

    game_id: str
    your_id: PlayerId
    your_name: str
    your_hand: Tuple[Card, ...]
    your_coins: int
    your_influence: int
    current_player_id: PlayerId
    is_your_turn: bool
    phase: GamePhase
    turn_number: int
    opponents: Tuple[PublicPlayerView, ...]
    pending_action: Optional[PendingActionView]
    available_actions: Tuple[ActionKind, ...]
    can_react: bool
    reaction_options: ReactionOptions
    insights: PerceptionInsights
    reaction_deadline: Optional[datetime] = None


def available_actions(player: Player, config: GameConfig) -> Tuple[ActionKind, ...]:
    """Actions ``player`` could legally announce, bluffs included."""

    if player.eliminated:
        return ()
    if player.coins >= config.forced_coup_threshold:
        return (ActionKind.COUP,)
    actions = [ActionKind.INCOME, ActionKind.FOREIGN_AID]
    if player.coins >= COUP_COST:
        actions.append(ActionKind.COUP)
    if player.coins >= ASSASSINATE_COST:
        actions.append(ActionKind.ASSASSINATE)
    actions.extend((ActionKind.TAX, ActionKind.STEAL, ActionKind.EXCHANGE))
    return tuple(actions)


def _public_player(player: Player) -> PublicPlayerView:
    return PublicPlayerView(
        player_id=player.player_id,
        display_name=player.display_name,
        player_type=player.player_type,
        coins=player.coins,
        card_count=len(player.hand),
        influence_count=player.influence_count,
        eliminated=player.eliminated,
    )


def get_public_state(state: GameState) -> PublicState:
    """Project the observer view of ``state``."""

    return PublicState(
        game_id=state.game_id,
        status=state.status,
        phase=state.phase,
        current_player_id=state.current_player.player_id,
        turn_number=state.turn_number,
        players=tuple(_public_player(player) for player in state.players),
        discard_pile=tuple(state.discard_pile),
        action_history=state.history,
        pending_action=state.pending_action,
        reactions=tuple(state.reactions),
        reaction_deadline=state.reaction_deadline,
        winner=state.winner,
        version=state.version,
        period=state.period,
        character=state.character,
        action_names=tuple(
            (action, state.action_display_name(action)) for action in ActionKind
        ),
    )


def _reaction_options(state: GameState, player: Player) -> ReactionOptions:
    pending = state.pending_action
    if (
        state.phase is not GamePhase.REACTION
        or pending is None
        or player.eliminated
        or state.has_reacted(player.player_id)
    ):
        return ReactionOptions(can_challenge=False, can_block=False, block_cards=())

    block = state.first_reaction(ReactionKind.BLOCK)
    is_actor = pending.actor_id == player.player_id
    if block is not None:
        can_challenge = block.player_id != player.player_id
    else:
        can_challenge = not is_actor and pending.claimed_card is not None

    rule = ACTION_RULES[pending.kind]
    can_block = rule.blockable and not is_actor
    return ReactionOptions(
        can_challenge=can_challenge,
        can_block=can_block,
        block_cards=blockers_for(pending.kind) if can_block else (),
    )


def get_private_state(state: GameState, player_id: PlayerId) -> PrivateState:
    """Project ``player_id``'s own view: hand, legal actions and reactions.

    ``card_history`` lists the cards this seat was dealt or drew as a
    replacement, when the game keeps an event log.
    """

    player = state.player(player_id)
    is_turn = (
        state.phase is GamePhase.ACTION and state.current_player.player_id == player_id
    )
    options = _reaction_options(state, player)
    return PrivateState(
        player_id=player_id,
        hand=tuple(player.hand),
        available_actions=available_actions(player, state.config) if is_turn else (),
        can_challenge=options.can_challenge,
        can_block=options.can_block,
        block_cards=options.block_cards,
        card_history=(
            state.event_log.card_history(player_id) if state.event_log is not None else ()
        ),
    )


def _claim_insight(claim: Claim) -> ClaimInsight:
    return ClaimInsight(
        player_id=claim.player_id,
        card=claim.claimed_card,
        action=claim.action,
        verified=claim.verified,
    )


def suspicious_behaviors(state: GameState, viewer_id: PlayerId) -> Tuple[SuspicionFlag, ...]:
    """Flag opponents who claim many characters or have been caught bluffing."""

    flags: list[SuspicionFlag] = []
    for player in state.players:
        if player.player_id == viewer_id:
            continue
        claims = state.claims_by(player.player_id)
        distinct = {claim.claimed_card for claim in claims}
        if len(distinct) > BLUFF_SUSPICION_DISTINCT_CLAIMS:
            flags.append(
                SuspicionFlag(
                    player_id=player.player_id,
                    reason=f"Claimed {len(distinct)} different cards - likely bluffing",
                )
            )
        caught = sum(1 for claim in claims if claim.caught_bluffing)
        if caught:
            flags.append(
                SuspicionFlag(
                    player_id=player.player_id,
                    reason=f"Caught bluffing {caught} time(s)",
                )
            )
    return tuple(flags)


def recommendations(state: GameState, viewer: Player) -> Tuple[str, ...]:
    """Plain-language hints for ``viewer``; advisory only."""

    advice: list[str] = []
    is_turn = state.current_player.player_id == viewer.player_id
    if is_turn and not viewer.eliminated:
        if viewer.coins >= state.config.forced_coup_threshold:
            advice.append(f"You must coup ({state.config.forced_coup_threshold}+ coins)")
        elif viewer.coins >= COUP_COST:
            advice.append("Consider coup to eliminate a strong opponent")
        elif viewer.coins >= ASSASSINATE_COST:
            advice.append("Assassinate is available")
        if viewer.holds(CardKind.DUKE):
            advice.append("You have Duke - tax for 3 coins is safe")

    pending = state.pending_action
    if pending is not None and pending.actor_id != viewer.player_id:
        actor_claims = state.claims_by(pending.actor_id)
        verified = [claim for claim in actor_claims if claim.verified]
        if not verified and len(actor_claims) > UNVERIFIED_CLAIMS_BEFORE_CHALLENGE:
            advice.append("Actor has made multiple unverified claims - consider challenging")
    return tuple(advice)


def get_agent_perception(state: GameState, agent_id: PlayerId) -> AgentPerception:
    """Project the private view of ``agent_id`` enriched with heuristics."""

    agent = state.player(agent_id)
    private = get_private_state(state, agent_id)
    pending = state.pending_action
    pending_view = None
    block = state.first_reaction(ReactionKind.BLOCK)
    if pending is not None:
        pending_view = PendingActionView(
            kind=pending.kind,
            actor_id=pending.actor_id,
            target_id=pending.target_id,
            claimed_card=pending.claimed_card,
            action_name=state.action_display_name(pending.kind),
            blocker_id=block.player_id if block is not None else None,
            block_card=block.claimed_card if block is not None else None,
        )

    return AgentPerception(
        game_id=state.game_id,
        your_id=agent_id,
        your_name=agent.display_name,
        your_hand=private.hand,
        your_coins=agent.coins,
        your_influence=agent.influence_count,
        current_player_id=state.current_player.player_id,
        is_your_turn=state.current_player.player_id == agent_id,
        phase=state.phase,
        turn_number=state.turn_number,
        opponents=tuple(
            _public_player(player) for player in state.players if player.player_id != agent_id
        ),
        pending_action=pending_view,
        available_actions=private.available_actions,
        can_react=private.can_challenge or private.can_block,
        reaction_options=ReactionOptions(
            can_challenge=private.can_challenge,
            can_block=private.can_block,
            block_cards=private.block_cards,
        ),
        insights=PerceptionInsights(
            claims_made=tuple(_claim_insight(claim) for claim in state.claims),
            suspicious_behaviors=suspicious_behaviors(state, agent_id),
            recommendations=recommendations(state, agent),
        ),
        reaction_deadline=state.reaction_deadline,
    )


__all__ = [
    "AgentPerception",
    "ClaimInsight",
    "PendingActionView",
    "PerceptionInsights",
    "PrivateState",
    "PublicPlayerView",
    "PublicState",
    "ReactionOptions",
    "SuspicionFlag",
    "available_actions",
    "get_agent_perception",
    "get_private_state",
    "get_public_state",
    "recommendations",
    "suspicious_behaviors",
]

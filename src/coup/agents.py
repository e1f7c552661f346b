"""Automated players that decide from an :class:`AgentPerception`.

Agents never see a :class:`GameState` directly. :class:`AgentManager` builds
the perception for the seat it is asked about and hands it to that seat's
decision maker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional, Protocol, Tuple

from .enums import ActionKind, CardKind, ReactionKind
from .players import PlayerId
from .projections import AgentPerception, PublicPlayerView, get_agent_perception
from .rules import ACTION_RULES, blockers_for

if TYPE_CHECKING:
    from .game_state import GameState
    from .logging_manager import LoggingManager


@dataclass(frozen=True, slots=True)
class TurnDecision:
    """Agent's chosen action for its turn."""

    action: ActionKind
    target_id: Optional[PlayerId] = None
    true_reasoning: str = ""
    public_reasoning: str = ""


@dataclass(frozen=True, slots=True)
class ReactionDecision:
    """Agent's response to a pending action; ``kind=None`` means pass."""

    kind: Optional[ReactionKind] = None
    block_card: Optional[CardKind] = None
    true_reasoning: str = ""
    public_reasoning: str = ""

    @property
    def passes(self) -> bool:
        return self.kind is None


PASS = ReactionDecision(true_reasoning="No reason to react")


class AgentDecisionMaker(Protocol):
    """Protocol for automated players.

    Implementors receive a perception and return a structured decision. The
    engine still validates every decision, so a bad one surfaces as an
    :class:`~coup.exceptions.InvalidActionError` at submission.
    """

    def choose_action(self, perception: AgentPerception) -> TurnDecision:
        """Pick an action for the agent's own turn."""
        ...

    def choose_reaction(self, perception: AgentPerception) -> ReactionDecision:
        """Challenge, block or pass on the pending action."""
        ...


def _live_opponents(perception: AgentPerception) -> Tuple[PublicPlayerView, ...]:
    return tuple(opponent for opponent in perception.opponents if not opponent.eliminated)


def _strongest(opponents: Tuple[PublicPlayerView, ...]) -> Optional[PublicPlayerView]:
    if not opponents:
        return None
    return max(opponents, key=lambda view: (view.influence_count, view.coins))


def _claimed_blockers(perception: AgentPerception, action: ActionKind) -> set[PlayerId]:
    """Opponents who have claimed a card that blocks ``action``."""

    blockers = blockers_for(action)
    return {
        claim.player_id
        for claim in perception.insights.claims_made
        if claim.card in blockers and claim.player_id != perception.your_id
    }


@dataclass
class HeuristicAgent:
    """Plays honestly where it can and challenges players flagged as bluffers.

    Targets the opponent with the most influence (coins break ties). Tax is
    taken only with a Duke in hand; a lone last card is defended with a
    Contessa bluff against assassination. Steals and assassinations skip
    opponents who have already claimed the blocking card.
    """

    bluff_contessa_when_desperate: bool = True

    def choose_action(self, perception: AgentPerception) -> TurnDecision:
        available = perception.available_actions
        held = {card.kind for card in perception.your_hand}
        opponents = _live_opponents(perception)
        strongest = _strongest(opponents)

        if ActionKind.COUP in available and strongest is not None:
            return TurnDecision(
                action=ActionKind.COUP,
                target_id=strongest.player_id,
                true_reasoning="Enough coins to remove the strongest opponent",
                public_reasoning=f"{strongest.display_name} is the biggest threat",
            )

        if CardKind.ASSASSIN in held and ActionKind.ASSASSINATE in available:
            guarded = _claimed_blockers(perception, ActionKind.ASSASSINATE)
            victim = _strongest(
                tuple(opponent for opponent in opponents if opponent.player_id not in guarded)
            )
            if victim is not None:
                return TurnDecision(
                    action=ActionKind.ASSASSINATE,
                    target_id=victim.player_id,
                    true_reasoning="Holding an Assassin",
                )

        if CardKind.DUKE in held and ActionKind.TAX in available:
            return TurnDecision(action=ActionKind.TAX, true_reasoning="Holding a Duke")

        if CardKind.CAPTAIN in held and ActionKind.STEAL in available:
            guarded = _claimed_blockers(perception, ActionKind.STEAL)
            victims = [
                opponent
                for opponent in opponents
                if opponent.coins >= 2 and opponent.player_id not in guarded
            ]
            if victims:
                richest = max(victims, key=lambda view: view.coins)
                return TurnDecision(
                    action=ActionKind.STEAL,
                    target_id=richest.player_id,
                    true_reasoning="Holding a Captain",
                )

        if ActionKind.FOREIGN_AID in available and not _claimed_blockers(
            perception, ActionKind.FOREIGN_AID
        ):
            return TurnDecision(
                action=ActionKind.FOREIGN_AID,
                true_reasoning="Nobody has claimed a Duke yet",
            )
        return TurnDecision(action=ActionKind.INCOME, true_reasoning="Safe income")

    def choose_reaction(self, perception: AgentPerception) -> ReactionDecision:
        pending = perception.pending_action
        if pending is None or not perception.can_react:
            return PASS

        options = perception.reaction_options
        held = {card.kind for card in perception.your_hand}

        if options.can_challenge:
            claimant = pending.blocker_id or pending.actor_id
            flagged = {flag.player_id for flag in perception.insights.suspicious_behaviors}
            if claimant in flagged:
                return ReactionDecision(
                    kind=ReactionKind.CHALLENGE,
                    true_reasoning=f"{claimant} has been flagged as a bluffer",
                )

        if options.can_block and pending.blocker_id is None:
            targeted = pending.target_id == perception.your_id
            if targeted or pending.target_id is None:
                for card in options.block_cards:
                    if card in held:
                        return ReactionDecision(
                            kind=ReactionKind.BLOCK,
                            block_card=card,
                            true_reasoning=f"Holding a {card.value}",
                        )
            if (
                targeted
                and self.bluff_contessa_when_desperate
                and pending.kind is ActionKind.ASSASSINATE
                and perception.your_influence == 1
            ):
                return ReactionDecision(
                    kind=ReactionKind.BLOCK,
                    block_card=CardKind.CONTESSA,
                    true_reasoning="Bluffing is the only way to survive",
                )
        return PASS


@dataclass
class ScriptedAgent:
    """Deterministic agent for tests.

    Returns queued decisions in order, then falls back to a strategy function
    if one is set, then to income and passing.
    """

    actions: list[TurnDecision] | None = None
    reactions: list[ReactionDecision] | None = None
    choose_action_fn: Callable[[AgentPerception], TurnDecision] | None = None
    choose_reaction_fn: Callable[[AgentPerception], ReactionDecision] | None = None
    seen: list[AgentPerception] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._action_index = 0
        self._reaction_index = 0

    def choose_action(self, perception: AgentPerception) -> TurnDecision:
        self.seen.append(perception)
        if self.actions and self._action_index < len(self.actions):
            response = self.actions[self._action_index]
            self._action_index += 1
            return response
        if self.choose_action_fn:
            return self.choose_action_fn(perception)
        return TurnDecision(action=ActionKind.INCOME, true_reasoning="Scripted default")

    def choose_reaction(self, perception: AgentPerception) -> ReactionDecision:
        self.seen.append(perception)
        if self.reactions and self._reaction_index < len(self.reactions):
            response = self.reactions[self._reaction_index]
            self._reaction_index += 1
            return response
        if self.choose_reaction_fn:
            return self.choose_reaction_fn(perception)
        return PASS


@dataclass
class AgentManager:
    """Maps agent seats to decision makers and builds their perceptions."""

    agents: dict[PlayerId, AgentDecisionMaker]
    logging_manager: LoggingManager | None = None

    @classmethod
    def for_state(
        cls,
        state: GameState,
        factory: Callable[[PlayerId], AgentDecisionMaker] | None = None,
        logging_manager: LoggingManager | None = None,
    ) -> AgentManager:
        """Create a manager covering every agent seat in ``state``."""

        make = factory or (lambda _player_id: HeuristicAgent())
        agents = {
            player.player_id: make(player.player_id)
            for player in state.players
            if player.is_agent
        }
        return cls(agents=agents, logging_manager=logging_manager)

    def is_agent(self, player_id: PlayerId) -> bool:
        return player_id in self.agents

    def perception(self, player_id: PlayerId, state: GameState) -> AgentPerception:
        return get_agent_perception(state, player_id)

    def choose_action(self, player_id: PlayerId, state: GameState) -> TurnDecision:
        """Ask the agent seated at ``player_id`` for its turn action."""

        perception = self.perception(player_id, state)
        decision = self.agents[player_id].choose_action(perception)
        if decision.action not in ACTION_RULES:
            raise ValueError(f"Agent {player_id} returned an unknown action")
        if self.logging_manager is not None:
            self.logging_manager.log_action_decision(player_id, perception, decision)
        return decision

    def choose_reaction(self, player_id: PlayerId, state: GameState) -> ReactionDecision:
        """Ask the agent seated at ``player_id`` how it reacts to the pending action."""

        perception = self.perception(player_id, state)
        decision = self.agents[player_id].choose_reaction(perception)
        if self.logging_manager is not None:
            self.logging_manager.log_reaction_decision(player_id, perception, decision)
        return decision


__all__ = [
    "AgentDecisionMaker",
    "AgentManager",
    "HeuristicAgent",
    "PASS",
    "ReactionDecision",
    "ScriptedAgent",
    "TurnDecision",
]

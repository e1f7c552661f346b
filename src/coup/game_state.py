"""Turn, reaction and resolution management for Coup games."""

from __future__ import annotations

import copy
import random
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterator, Mapping, Optional, Tuple

from .cards import DEFAULT_THEME, Card, CardTheme, Deck
from .config import GameConfig
from .enums import ActionKind, CardKind, PlayerType, ReactionKind
from .events import EventLog, GameEventType
from .exceptions import (
    ActionNotBlockableError,
    ActionNotChallengeableError,
    AlreadyReactedError,
    ConfigurationError,
    DuplicatePlayerError,
    ForcedCoupError,
    GameFullError,
    IllegalPhaseError,
    InsufficientCardsError,
    InsufficientFundsError,
    InvalidActionError,
    InvalidBlockCardError,
    InvalidBlockerError,
    InvalidChallengerError,
    InvalidTargetError,
    InvariantViolation,
    NotEnoughPlayersError,
    NotYourTurnError,
    PlayerEliminatedError,
    ReactionWindowOpenError,
    SelfTargetForbiddenError,
    TargetEliminatedError,
    TargetRequiredError,
    UnknownPlayerError,
)
from .players import Player, PlayerId
from .rules import ACTION_RULES, ActionRule


class GamePhase(str, Enum):
    """High-level phase of the turn loop."""

    LOBBY = "lobby"
    ACTION = "action"
    REACTION = "reaction"
    RESOLUTION = "resolution"
    FINISHED = "finished"


class GameStatus(str, Enum):
    """Coarse lifecycle status derived from the phase."""

    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class ChallengeResult(str, Enum):
    """Outcome of a challenge from the challenger's point of view."""

    SUCCESS = "success"  # the claimant was bluffing
    FAILED = "failed"  # the claimant held the card


class ResolutionOutcome(str, Enum):
    """How a turn's pending action was settled."""

    SUCCEEDED = "succeeded"
    BLOCKED = "blocked"
    CHALLENGE_FAILED = "challenge_failed"
    BLUFF_CAUGHT = "bluff_caught"
    BLOCK_UPHELD = "block_upheld"
    BLOCK_BLUFF_CAUGHT = "block_bluff_caught"


@dataclass(frozen=True, slots=True)
class PendingAction:
    """The action awaiting reactions or resolution."""

    action_id: str
    kind: ActionKind
    actor_id: PlayerId
    created_at: datetime
    target_id: Optional[PlayerId] = None
    claimed_card: Optional[CardKind] = None

    @property
    def rule(self) -> ActionRule:
        return ACTION_RULES[self.kind]


@dataclass(frozen=True, slots=True)
class Reaction:
    """A challenge or block submitted against the pending action."""

    reaction_id: str
    player_id: PlayerId
    kind: ReactionKind
    created_at: datetime
    claimed_card: Optional[CardKind] = None
    challenged_player_id: Optional[PlayerId] = None


@dataclass(frozen=True, slots=True)
class Claim:
    """Durable record of a character claim; used for analytics only."""

    player_id: PlayerId
    claimed_card: CardKind
    action: ActionKind
    turn_number: int
    created_at: datetime
    challenged: bool = False
    challenge_result: Optional[ChallengeResult] = None

    @property
    def verified(self) -> bool:
        """``True`` once a challenge against this claim has failed."""

        return self.challenged and self.challenge_result is ChallengeResult.FAILED

    @property
    def caught_bluffing(self) -> bool:
        return self.challenged and self.challenge_result is ChallengeResult.SUCCESS


@dataclass(frozen=True, slots=True)
class TurnRecord:
    """Entry in the action history for one resolved turn."""

    turn_number: int
    action: PendingAction
    reactions: Tuple[Reaction, ...]
    outcome: ResolutionOutcome
    result: str
    resolved_at: datetime


_ROLLED_BACK_IN_PLACE = frozenset({"action_history", "claims", "event_log", "rng"})


def _utcnow(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(slots=True)
class GameState:
    """Canonical, mutable state of one game.

    Every public mutator validates first and then applies its changes inside
    an atomic block: on any exception all fields are restored, so a failed
    call leaves the state exactly as it was. Each successful mutation bumps
    ``version``.
    """

    game_id: str
    config: GameConfig
    players: list[Player]
    deck: Deck
    discard_pile: list[Card] = field(default_factory=list)
    phase: GamePhase = GamePhase.LOBBY
    current_player_index: int = 0
    pending_action: Optional[PendingAction] = None
    reactions: list[Reaction] = field(default_factory=list)
    reaction_deadline: Optional[datetime] = None
    claims: list[Claim] = field(default_factory=list)
    turn_number: int = 1
    action_history: list[TurnRecord] = field(default_factory=list, repr=False)
    winner: Optional[PlayerId] = None
    version: int = 0
    card_total: int = 0
    seed: Optional[int] = None
    period: str = ""
    character: str = ""
    action_names: dict[ActionKind, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_update: Optional[datetime] = None
    event_log: Optional[EventLog] = field(default=None, repr=False)
    rng: Optional[random.Random] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.rng is None:
            self.rng = random.Random(self.seed)
        ids = [player.player_id for player in self.players]
        if len(set(ids)) != len(ids):
            raise ConfigurationError("Duplicate player identifiers detected in game state")

    @classmethod
    def create_game(
        cls,
        game_id: str,
        initial_player: Player,
        deck: Deck,
        *,
        config: GameConfig | None = None,
        theme: CardTheme = DEFAULT_THEME,
        seed: Optional[int] = None,
        event_log: EventLog | None = None,
        now: datetime | None = None,
    ) -> "GameState":
        """Open a lobby seated with ``initial_player`` around an already shuffled deck."""

        game_config = config or GameConfig()
        if initial_player.hand:
            raise ConfigurationError("Players must join with an empty hand")
        if len(deck) < game_config.min_players * game_config.starting_cards:
            raise ConfigurationError(
                f"A deck of {len(deck)} cards cannot seat {game_config.min_players} players"
            )
        moment = _utcnow(now)
        initial_player.coins = game_config.starting_coins
        state = cls(
            game_id=game_id,
            config=game_config,
            players=[initial_player],
            deck=deck,
            card_total=len(deck),
            seed=seed if seed is not None else game_config.random_seed,
            period=theme.period,
            character=theme.character,
            action_names={action: theme.action_name(action) for action in ActionKind},
            created_at=moment,
            last_update=moment,
            event_log=event_log,
        )
        state.record_event(
            GameEventType.PLAYER_JOINED,
            {"player_id": initial_player.player_id, "seat": 0},
            now=moment,
        )
        return state

    # ------------------------------------------------------------------
    # Read helpers

    @property
    def status(self) -> GameStatus:
        if self.phase is GamePhase.LOBBY:
            return GameStatus.WAITING
        if self.phase is GamePhase.FINISHED:
            return GameStatus.FINISHED
        return GameStatus.PLAYING

    @property
    def players_by_id(self) -> Mapping[PlayerId, Player]:
        """Return mapping from player identifier to player object."""

        return {player.player_id: player for player in self.players}

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    @property
    def active_players(self) -> Tuple[Player, ...]:
        return tuple(player for player in self.players if not player.eliminated)

    @property
    def history(self) -> Tuple[TurnRecord, ...]:
        """Return an immutable snapshot of resolved turns."""

        return tuple(self.action_history)

    def player(self, player_id: PlayerId) -> Player:
        """Return the seated player with ``player_id``."""

        for candidate in self.players:
            if candidate.player_id == player_id:
                return candidate
        raise UnknownPlayerError(f"Unknown player id: {player_id}")

    def has_reacted(self, player_id: PlayerId) -> bool:
        return any(reaction.player_id == player_id for reaction in self.reactions)

    def first_reaction(self, kind: ReactionKind) -> Optional[Reaction]:
        """Return the earliest reaction of ``kind``; later ones are not arbitrated."""

        for reaction in self.reactions:
            if reaction.kind is kind:
                return reaction
        return None

    def claims_by(self, player_id: PlayerId) -> Tuple[Claim, ...]:
        return tuple(claim for claim in self.claims if claim.player_id == player_id)

    def next_active_index(self, from_index: int) -> int:
        """Return the seat after ``from_index`` skipping eliminated players.

        If no other seat is active the index is returned unchanged.
        """

        seat_count = len(self.players)
        index = from_index
        for _ in range(seat_count):
            index = (index + 1) % seat_count
            if not self.players[index].eliminated:
                return index
        return from_index

    def action_display_name(self, action: ActionKind) -> str:
        return self.action_names.get(action, action.value)

    # ------------------------------------------------------------------
    # Lobby operations

    def join_game(
        self,
        player_id: PlayerId,
        display_name: str,
        player_type: PlayerType = PlayerType.HUMAN,
        *,
        now: datetime | None = None,
    ) -> Player:
        """Seat a new player; deals and starts the game once enough have joined."""

        self._ensure_phase(GamePhase.LOBBY)
        if len(self.players) >= self.config.max_players:
            raise GameFullError(f"Game is full ({self.config.max_players} players)")
        if any(player.player_id == player_id for player in self.players):
            raise DuplicatePlayerError(f"Player already in game: {player_id}")
        try:
            player = Player(
                player_id=player_id,
                display_name=display_name.strip(),
                player_type=PlayerType(player_type),
                coins=self.config.starting_coins,
            )
        except ValueError as exc:
            raise InvalidActionError(str(exc)) from exc

        moment = _utcnow(now)
        with self._mutation(moment):
            self.players.append(player)
            self.record_event(
                GameEventType.PLAYER_JOINED,
                {"player_id": player_id, "seat": len(self.players) - 1},
                now=moment,
            )
            if self.config.auto_start and len(self.players) >= self.config.min_players:
                self._deal(moment)
        return player

    def deal_initial_hands(self, *, now: datetime | None = None) -> None:
        """Deal starting hands and coins in seat order and open the first turn."""

        self._ensure_phase(GamePhase.LOBBY)
        if len(self.players) < self.config.min_players:
            raise NotEnoughPlayersError(
                f"Need at least {self.config.min_players} players, have {len(self.players)}"
            )
        moment = _utcnow(now)
        with self._mutation(moment):
            self._deal(moment)

    def _deal(self, moment: datetime) -> None:
        needed = len(self.players) * self.config.starting_cards
        if len(self.deck) < needed:
            raise InsufficientCardsError(
                f"Dealing needs {needed} cards but the deck holds {len(self.deck)}"
            )
        for player in self.players:
            for _ in range(self.config.starting_cards):
                player.hand.append(self.deck.draw())
            player.coins = self.config.starting_coins
            self.record_event(
                GameEventType.HANDS_DEALT,
                {"player_id": player.player_id, "cards": [card.kind.value for card in player.hand]},
                now=moment,
                audience=[player.player_id],
            )
        self.current_player_index = 0
        self.turn_number = 1
        self._set_phase(GamePhase.ACTION, moment)

    # ------------------------------------------------------------------
    # Turn operations

    def submit_action(
        self,
        actor_id: PlayerId,
        action: ActionKind | str,
        target_id: Optional[PlayerId] = None,
        *,
        now: datetime | None = None,
    ) -> PendingAction:
        """Validate and start ``action`` for the current player."""

        self._ensure_phase(GamePhase.ACTION)
        kind = _coerce_action(action)
        actor = self.player(actor_id)
        if actor_id != self.current_player.player_id:
            raise NotYourTurnError(f"It is {self.current_player.display_name}'s turn")
        if actor.eliminated:
            raise PlayerEliminatedError(f"{actor.display_name} is eliminated")

        rule = ACTION_RULES[kind]
        if actor.coins < rule.cost:
            raise InsufficientFundsError(f"Not enough coins (need {rule.cost})")
        self._validate_target(actor, rule, target_id)
        if actor.coins >= self.config.forced_coup_threshold and kind is not ActionKind.COUP:
            raise ForcedCoupError(f"Must coup with {self.config.forced_coup_threshold}+ coins")

        moment = _utcnow(now)
        pending = PendingAction(
            action_id=_new_id(),
            kind=kind,
            actor_id=actor_id,
            target_id=target_id,
            claimed_card=rule.claimed_card,
            created_at=moment,
        )

        with self._mutation(moment):
            actor.last_action_at = moment
            self.record_event(GameEventType.ACTION_SUBMITTED, _action_payload(pending), now=moment)

            if rule.immediate:
                from .resolution import apply_action_effect

                effect = apply_action_effect(self, pending, moment)
                self._record_turn(
                    pending,
                    ResolutionOutcome.SUCCEEDED,
                    f"{actor.display_name} took {kind.value} ({effect})",
                    moment,
                )
                self._finish_turn(moment)
            elif not rule.opens_reaction_window:
                actor.coins -= rule.cost
                self.pending_action = pending
                self._set_phase(GamePhase.RESOLUTION, moment)
            else:
                if rule.prepaid:
                    actor.coins -= rule.cost
                self.pending_action = pending
                self.reactions = []
                self.reaction_deadline = moment + self.config.reaction_window
                if rule.claimed_card is not None:
                    self.claims.append(
                        Claim(
                            player_id=actor_id,
                            claimed_card=rule.claimed_card,
                            action=kind,
                            turn_number=self.turn_number,
                            created_at=moment,
                        )
                    )
                self._set_phase(GamePhase.REACTION, moment)
        return pending

    def submit_challenge(
        self,
        challenger_id: PlayerId,
        *,
        now: datetime | None = None,
    ) -> Reaction:
        """Dispute the latest claim on the table and move straight to resolution.

        With no block on the table the actor's claim is challenged; otherwise
        the first block's claim is.
        """

        self._ensure_phase(GamePhase.REACTION)
        pending = self._require_pending()
        try:
            challenger = self.player(challenger_id)
        except UnknownPlayerError as exc:
            raise InvalidChallengerError(str(exc)) from exc
        if challenger.eliminated:
            raise InvalidChallengerError(f"{challenger.display_name} is eliminated")
        if self.has_reacted(challenger_id):
            raise InvalidChallengerError(f"{challenger.display_name} already reacted")

        block = self.first_reaction(ReactionKind.BLOCK)
        if block is not None:
            challenged_id = block.player_id
        else:
            if pending.claimed_card is None:
                raise ActionNotChallengeableError(
                    f"{pending.kind.value} makes no character claim to challenge"
                )
            if challenger_id == pending.actor_id:
                raise InvalidChallengerError("Players cannot challenge their own claim")
            challenged_id = pending.actor_id

        moment = _utcnow(now)
        reaction = Reaction(
            reaction_id=_new_id(),
            player_id=challenger_id,
            kind=ReactionKind.CHALLENGE,
            created_at=moment,
            challenged_player_id=challenged_id,
        )
        with self._mutation(moment):
            self.reactions.append(reaction)
            self.reaction_deadline = None
            self.record_event(
                GameEventType.CHALLENGE_SUBMITTED,
                {"player_id": challenger_id, "challenged_player_id": challenged_id},
                now=moment,
            )
            self._set_phase(GamePhase.RESOLUTION, moment)
        return reaction

    def submit_block(
        self,
        blocker_id: PlayerId,
        claimed_card: CardKind | str,
        *,
        now: datetime | None = None,
    ) -> Reaction:
        """Counter the pending action by claiming a blocking character.

        The block is itself challengeable, so the reaction window restarts.
        """

        self._ensure_phase(GamePhase.REACTION)
        pending = self._require_pending()
        try:
            blocker = self.player(blocker_id)
        except UnknownPlayerError as exc:
            raise InvalidBlockerError(str(exc)) from exc
        if blocker.eliminated:
            raise InvalidBlockerError(f"{blocker.display_name} is eliminated")
        if blocker_id == pending.actor_id:
            raise InvalidBlockerError("Players cannot block their own action")

        rule = pending.rule
        if not rule.blockable:
            raise ActionNotBlockableError(f"{pending.kind.value} cannot be blocked")
        try:
            card = CardKind(claimed_card)
        except ValueError as exc:
            raise InvalidBlockCardError(f"Unknown card kind: {claimed_card}") from exc
        if not rule.can_be_blocked_with(card):
            raise InvalidBlockCardError(f"{card.value} cannot block {pending.kind.value}")
        if self.has_reacted(blocker_id):
            raise AlreadyReactedError(f"{blocker.display_name} already reacted")

        moment = _utcnow(now)
        reaction = Reaction(
            reaction_id=_new_id(),
            player_id=blocker_id,
            kind=ReactionKind.BLOCK,
            created_at=moment,
            claimed_card=card,
        )
        with self._mutation(moment):
            self.reactions.append(reaction)
            self.claims.append(
                Claim(
                    player_id=blocker_id,
                    claimed_card=card,
                    action=pending.kind,
                    turn_number=self.turn_number,
                    created_at=moment,
                )
            )
            self.reaction_deadline = moment + self.config.reaction_window
            self.record_event(
                GameEventType.BLOCK_SUBMITTED,
                {"player_id": blocker_id, "claimed_card": card.value},
                now=moment,
            )
        return reaction

    def resolve(self, *, now: datetime | None = None) -> TurnRecord:
        """Arbitrate reactions, apply effects and hand the turn on."""

        if self.phase not in (GamePhase.REACTION, GamePhase.RESOLUTION):
            raise IllegalPhaseError(
                f"Nothing to resolve, current phase is {self.phase.value}"
            )
        pending = self._require_pending()
        moment = _utcnow(now)
        if (
            self.phase is GamePhase.REACTION
            and self.reaction_deadline is not None
            and moment < self.reaction_deadline
        ):
            raise ReactionWindowOpenError(
                f"Reaction window open until {self.reaction_deadline.isoformat()}"
            )

        from .resolution import resolve_pending

        with self._mutation(moment):
            outcome, result = resolve_pending(self, pending, moment)
            record = self._record_turn(pending, outcome, result, moment)
            self._finish_turn(moment)
        return record

    # ------------------------------------------------------------------
    # Hooks used by the resolution engine

    def record_event(
        self,
        event_type: GameEventType,
        payload: Mapping[str, Any] | None = None,
        *,
        now: datetime,
        audience: list[PlayerId] | None = None,
    ) -> None:
        """Log an event for this turn; ``audience`` limits it to those seats."""

        if self.event_log is None:
            return
        self.event_log.record(
            event_type,
            self.turn_number,
            payload,
            timestamp=now,
            audience=audience,
        )

    def shuffle_deck(self) -> None:
        assert self.rng is not None
        self.deck.shuffle(self.rng)

    def annotate_claim(
        self,
        player_id: PlayerId,
        claimed_card: CardKind,
        action: ActionKind,
        result: ChallengeResult,
    ) -> Claim:
        """Mark this turn's open claim as challenged with ``result``."""

        for index, claim in enumerate(self.claims):
            if (
                claim.player_id == player_id
                and claim.claimed_card is claimed_card
                and claim.action is action
                and claim.turn_number == self.turn_number
                and not claim.challenged
            ):
                updated = replace(claim, challenged=True, challenge_result=result)
                self.claims[index] = updated
                return updated
        raise InvariantViolation(
            f"No open {claimed_card.value} claim by {player_id} for turn {self.turn_number}"
        )

    # ------------------------------------------------------------------
    # Invariants

    def check_invariants(self) -> None:
        """Raise :class:`InvariantViolation` if the state is internally inconsistent."""

        in_lobby = self.phase is GamePhase.LOBBY
        for player in self.players:
            if player.coins < 0:
                raise InvariantViolation(f"{player.player_id} has negative coins")
            if in_lobby:
                if player.hand or player.eliminated:
                    raise InvariantViolation(f"{player.player_id} holds cards before the deal")
            elif player.eliminated != (player.influence_count == 0):
                raise InvariantViolation(
                    f"{player.player_id} eliminated={player.eliminated} "
                    f"with {player.influence_count} influence"
                )

        counted = len(self.deck) + len(self.discard_pile)
        counted += sum(player.influence_count for player in self.players)
        if counted != self.card_total:
            raise InvariantViolation(f"Card total changed from {self.card_total} to {counted}")

        awaiting = self.phase in (GamePhase.REACTION, GamePhase.RESOLUTION)
        if awaiting != (self.pending_action is not None):
            raise InvariantViolation(
                f"Phase {self.phase.value} inconsistent with pending action presence"
            )
        if (self.phase is GamePhase.FINISHED) != (self.winner is not None):
            raise InvariantViolation("Winner must be set exactly when the game is finished")

    # ------------------------------------------------------------------
    # Internals

    @contextmanager
    def _mutation(self, moment: datetime) -> Iterator[None]:
        # History and the event log only grow, so they roll back by length.
        resolved = len(self.action_history)
        logged = len(self.event_log) if self.event_log is not None else 0
        claims = list(self.claims)
        assert self.rng is not None
        rng_state = self.rng.getstate()
        backup = {
            item.name: copy.deepcopy(getattr(self, item.name))
            for item in fields(self)
            if item.name not in _ROLLED_BACK_IN_PLACE
        }
        try:
            yield
            self.check_invariants()
        except BaseException:
            for name, value in backup.items():
                setattr(self, name, value)
            del self.action_history[resolved:]
            self.claims[:] = claims
            self.rng.setstate(rng_state)
            if self.event_log is not None:
                self.event_log.truncate(logged)
            raise
        self.version += 1
        self.last_update = moment

    def _set_phase(self, phase: GamePhase, moment: datetime) -> None:
        self.phase = phase
        self.record_event(GameEventType.PHASE_CHANGED, {"phase": phase.value}, now=moment)

    def _ensure_phase(self, expected: GamePhase) -> None:
        if self.phase is GamePhase.FINISHED:
            raise IllegalPhaseError("Game is already over")
        if self.phase is not expected:
            raise IllegalPhaseError(
                f"Action requires phase {expected.value}, current phase is {self.phase.value}"
            )

    def _require_pending(self) -> PendingAction:
        if self.pending_action is None:
            raise InvariantViolation(f"Phase {self.phase.value} has no pending action")
        return self.pending_action

    def _validate_target(
        self,
        actor: Player,
        rule: ActionRule,
        target_id: Optional[PlayerId],
    ) -> None:
        if not rule.requires_target:
            if target_id is not None:
                raise InvalidTargetError(f"{rule.action.value} does not take a target")
            return
        if target_id is None:
            raise TargetRequiredError(f"{rule.action.value} requires a target")
        try:
            target = self.player(target_id)
        except UnknownPlayerError as exc:
            raise InvalidTargetError(str(exc)) from exc
        if target.player_id == actor.player_id:
            raise SelfTargetForbiddenError("Cannot target yourself")
        if target.eliminated:
            raise TargetEliminatedError(f"{target.display_name} is eliminated")

    def _record_turn(
        self,
        pending: PendingAction,
        outcome: ResolutionOutcome,
        result: str,
        moment: datetime,
    ) -> TurnRecord:
        record = TurnRecord(
            turn_number=self.turn_number,
            action=pending,
            reactions=tuple(self.reactions),
            outcome=outcome,
            result=result,
            resolved_at=moment,
        )
        self.action_history.append(record)
        self.record_event(
            GameEventType.ACTION_RESOLVED,
            {
                "turn": record.turn_number,
                "action": pending.kind.value,
                "actor_id": pending.actor_id,
                "outcome": outcome.value,
                "result": result,
            },
            now=moment,
        )
        return record

    def _finish_turn(self, moment: datetime) -> None:
        self.pending_action = None
        self.reactions = []
        self.reaction_deadline = None

        active = self.active_players
        if not active:
            raise InvariantViolation("Every player has been eliminated")
        if len(active) == 1:
            self.winner = active[0].player_id
            self._set_phase(GamePhase.FINISHED, moment)
            self.record_event(
                GameEventType.GAME_COMPLETED,
                {"winner": self.winner, "turns": self.turn_number},
                now=moment,
            )
            return

        self.turn_number += 1
        self.current_player_index = self.next_active_index(self.current_player_index)
        self.record_event(
            GameEventType.TURN_ADVANCED,
            {"turn": self.turn_number, "player_id": self.current_player.player_id},
            now=moment,
        )
        self._set_phase(GamePhase.ACTION, moment)


def _coerce_action(action: ActionKind | str) -> ActionKind:
    try:
        return ActionKind(action)
    except ValueError as exc:
        raise InvalidActionError(f"Unknown action: {action}") from exc


def _action_payload(pending: PendingAction) -> dict[str, Any]:
    return {
        "action_id": pending.action_id,
        "action": pending.kind.value,
        "actor_id": pending.actor_id,
        "target_id": pending.target_id,
        "claimed_card": pending.claimed_card.value if pending.claimed_card else None,
    }


__all__ = [
    "ChallengeResult",
    "Claim",
    "GamePhase",
    "GameState",
    "GameStatus",
    "PendingAction",
    "Reaction",
    "ResolutionOutcome",
    "TurnRecord",
]

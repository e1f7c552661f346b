"""Terminal interaction layer for driving Coup games via prompts."""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from getpass import getpass
from typing import Callable, Protocol, Sequence, Tuple

from .agents import AgentManager, HeuristicAgent, ReactionDecision
from .cards import build_deck
from .config_loader import GameSetupConfig
from .enums import ActionKind, CardKind, ReactionKind
from .events import EventLog, EventVisibility, GameEventType
from .exceptions import InvalidActionError
from .game_state import GamePhase, GameState
from .logging_manager import LoggingManager
from .players import Player, PlayerId
from .projections import get_private_state

Clock = Callable[[], datetime]


class InteractionIO(Protocol):
    """Minimal IO surface for interactive play backends."""

    def read(self, prompt: str) -> str:
        """Return a response to a visible prompt."""
        ...

    def read_hidden(self, prompt: str) -> str:
        """Return a response to a hidden prompt (e.g., reactions)."""
        ...

    def write(self, message: str) -> None:
        """Display a message to the participant(s)."""
        ...


@dataclass
class CLIInteraction:
    """Console-backed IO using ``input`` and ``getpass``."""

    def read(self, prompt: str) -> str:
        return input(prompt)

    def read_hidden(self, prompt: str) -> str:
        return getpass(prompt)

    def write(self, message: str) -> None:
        print(message)


class InteractionEventType(str, Enum):
    """Kinds of interaction events recorded during a session."""

    PROMPT = "prompt"
    HIDDEN_PROMPT = "hidden_prompt"
    OUTPUT = "output"


@dataclass(frozen=True, slots=True)
class InteractionLogEntry:
    """Single prompt/response or output emitted during play."""

    event: InteractionEventType
    message: str
    response: str | None = None
    visibility: EventVisibility = EventVisibility.PUBLIC
    audience: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class InteractionResult:
    """Final game state paired with the interaction transcript."""

    state: GameState
    transcript: tuple[InteractionLogEntry, ...]

    def public_transcript(self) -> tuple[InteractionLogEntry, ...]:
        """Return only publicly visible transcript entries."""

        return tuple(
            entry for entry in self.transcript if entry.visibility is EventVisibility.PUBLIC
        )

    def transcript_for_player(
        self,
        player_id: str,
        *,
        include_private: bool = False,
    ) -> tuple[InteractionLogEntry, ...]:
        """Return transcript entries visible to the specified player."""

        return _filter_transcript(
            self.transcript, [player_id], include_private
        )


CHALLENGE_VALUES = {"c", "challenge"}
BLOCK_VALUES = {"b", "block"}
PASS_VALUES = {"", "p", "pass"}


def run_interactive_game(
    setup_config: GameSetupConfig,
    *,
    io: InteractionIO | None = None,
    seed: int | None = None,
    event_log: EventLog | None = None,
    agent_manager: AgentManager | None = None,
    logging_manager: LoggingManager | None = None,
    clock: Clock | None = None,
    game_id: str = "table",
) -> InteractionResult:
    """Run a Coup game loop using the provided interaction backend.

    Args:
        setup_config: Players, rules and theme loaded from YAML.
        io: Interaction backend (defaults to CLI).
        seed: Random seed for reproducible games.
        event_log: Event log for tracking game events.
        agent_manager: Decision makers for agent seats; heuristic agents by default.
        logging_manager: Optional per-player decision logs for agent seats.
        clock: Source of the current time.

    Returns:
        InteractionResult with final state and transcript.
    """

    backend = io or CLIInteraction()
    now = clock or (lambda: datetime.now(timezone.utc))
    log: list[InteractionLogEntry] = []

    state = _seat_players(
        setup_config, game_id, seed, event_log if event_log is not None else EventLog(), now()
    )
    if agent_manager is None:
        agent_manager = AgentManager.for_state(state, logging_manager=logging_manager)

    _write(backend, log, f"\n=== Coup: {state.period} ===")
    _announce_roster(state.players, backend, log)
    _deliver_hands(state, backend, log, agent_manager)

    while state.phase is not GamePhase.FINISHED:
        _announce_turn(state, backend, log)
        _handle_action(state, backend, log, agent_manager, now)
        if state.phase is GamePhase.REACTION:
            _collect_reactions(state, backend, log, agent_manager, now)
        if state.phase in (GamePhase.REACTION, GamePhase.RESOLUTION):
            _resolve(state, backend, log, agent_manager, now)

    _write(backend, log, "")
    winner = state.player(state.winner).display_name if state.winner else "Unknown"
    _write(backend, log, f"Game over: {winner} wins after {state.turn_number} turns")
    return InteractionResult(state=state, transcript=tuple(log))


def _seat_players(
    setup_config: GameSetupConfig,
    game_id: str,
    seed: int | None,
    event_log: EventLog,
    moment: datetime,
) -> GameState:
    config = setup_config.game_config.with_overrides(auto_start=False)
    game_seed = seed if seed is not None else config.random_seed
    deck = build_deck(
        setup_config.theme,
        copies_per_card=config.copies_per_card,
        rng=random.Random(game_seed),
    )
    first, *rest = setup_config.registrations
    state = GameState.create_game(
        game_id,
        Player(
            player_id=first.resolved_id(0),
            display_name=first.display_name,
            player_type=first.player_type,
        ),
        deck,
        config=config,
        theme=setup_config.theme,
        seed=game_seed,
        event_log=event_log,
        now=moment,
    )
    for seat, registration in enumerate(rest, start=1):
        state.join_game(
            registration.resolved_id(seat),
            registration.display_name,
            registration.player_type,
            now=moment,
        )
    state.deal_initial_hands(now=moment)
    return state


def _announce_roster(
    players: Sequence[Player], backend: InteractionIO, log: list[InteractionLogEntry]
) -> None:
    _write(backend, log, "\nRoster:")
    for player in players:
        kind = "agent" if player.is_agent else "human"
        _write(backend, log, f"  {player.player_id}: {player.display_name} ({kind})")


def _deliver_hands(
    state: GameState,
    backend: InteractionIO,
    log: list[InteractionLogEntry],
    agent_manager: AgentManager,
) -> None:
    for player in state.players:
        if agent_manager.is_agent(player.player_id):
            continue
        _write(
            backend,
            log,
            f"Private hand for {player.display_name}: {_describe_hand(player)}",
            visibility=EventVisibility.PRIVATE,
            audience=[player.player_id],
        )


def _describe_hand(player: Player) -> str:
    return ", ".join(f"{card.name} ({card.kind.value})" for card in player.hand) or "no cards"


def _announce_turn(
    state: GameState,
    backend: InteractionIO,
    log: list[InteractionLogEntry],
) -> None:
    standings = " | ".join(
        f"{player.display_name}: {player.coins}c/{player.influence_count}i"
        + (" (out)" if player.eliminated else "")
        for player in state.players
    )
    _write(backend, log, f"\nTurn {state.turn_number} - {standings}")
    _write(backend, log, f"{state.current_player.display_name} to act")


def _handle_action(
    state: GameState,
    backend: InteractionIO,
    log: list[InteractionLogEntry],
    agent_manager: AgentManager,
    now: Clock,
) -> None:
    actor = state.current_player

    if agent_manager.is_agent(actor.player_id):
        decision = agent_manager.choose_action(actor.player_id, state)
        if decision.public_reasoning:
            _write(backend, log, f'  {actor.display_name} says: "{decision.public_reasoning}"')
        try:
            state.submit_action(actor.player_id, decision.action, decision.target_id, now=now())
        except InvalidActionError as exc:
            _write(backend, log, f"Agent error: {exc}. Falling back to a heuristic move.")
            perception = agent_manager.perception(actor.player_id, state)
            fallback = HeuristicAgent().choose_action(perception)
            state.submit_action(actor.player_id, fallback.action, fallback.target_id, now=now())
            decision = fallback
        _announce_action(state, backend, log, actor, decision.action, decision.target_id)
        return

    private = get_private_state(state, actor.player_id)
    _write(
        backend,
        log,
        f"Your hand: {_describe_hand(actor)}",
        visibility=EventVisibility.PRIVATE,
        audience=[actor.player_id],
    )
    options = ", ".join(action.value for action in private.available_actions)
    while True:
        entry = _read(
            backend,
            log,
            f"{actor.display_name}, choose an action [{options}] and optional target id: \n",
        ).strip()
        parsed = _parse_action(entry)
        if parsed is None:
            _write(backend, log, "Please enter an action name, e.g. 'steal p2'.")
            continue
        action, target_id = parsed
        try:
            state.submit_action(actor.player_id, action, target_id, now=now())
        except InvalidActionError as exc:
            _write(backend, log, f"Invalid action: {exc}")
            continue
        _announce_action(state, backend, log, actor, action, target_id)
        return


def _announce_action(
    state: GameState,
    backend: InteractionIO,
    log: list[InteractionLogEntry],
    actor: Player,
    action: ActionKind,
    target_id: PlayerId | None,
) -> None:
    label = state.action_display_name(ActionKind(action))
    target = f" on {state.player(target_id).display_name}" if target_id else ""
    _write(backend, log, f"{actor.display_name} declares {label}{target}")
    if state.phase is GamePhase.ACTION or state.phase is GamePhase.FINISHED:
        # Income resolves on submission.
        _write(backend, log, state.action_history[-1].result)


def _parse_action(entry: str) -> tuple[ActionKind, PlayerId | None] | None:
    tokens = [token for token in entry.replace(",", " ").split(" ") if token]
    if not tokens:
        return None
    try:
        action = ActionKind(tokens[0].lower())
    except ValueError:
        return None
    return action, tokens[1] if len(tokens) > 1 else None


def _reaction_order(state: GameState) -> list[Player]:
    """Seats after the actor in turn order, ending with the actor."""

    index = state.current_player_index
    seats = len(state.players)
    return [state.players[(index + offset) % seats] for offset in range(1, seats + 1)]


def _collect_reactions(
    state: GameState,
    backend: InteractionIO,
    log: list[InteractionLogEntry],
    agent_manager: AgentManager,
    now: Clock,
) -> None:
    """Poll each eligible seat once; a block reopens the poll for challenges."""

    blocked = False
    while state.phase is GamePhase.REACTION:
        reacted = False
        for player in _reaction_order(state):
            private = get_private_state(state, player.player_id)
            can_block = private.can_block and not blocked
            if not (private.can_challenge or can_block):
                continue
            if agent_manager.is_agent(player.player_id):
                decision = agent_manager.choose_reaction(player.player_id, state)
            else:
                decision = _prompt_reaction(state, backend, log, player, can_block)
            if decision.passes or (decision.kind is ReactionKind.BLOCK and not can_block):
                continue
            if _submit_reaction(state, backend, log, player, decision, now):
                reacted = True
                blocked = blocked or decision.kind is ReactionKind.BLOCK
                break
        if not reacted:
            return


def _prompt_reaction(
    state: GameState,
    backend: InteractionIO,
    log: list[InteractionLogEntry],
    player: Player,
    can_block: bool,
) -> ReactionDecision:
    private = get_private_state(state, player.player_id)
    choices = []
    if private.can_challenge:
        choices.append("c=challenge")
    if can_block:
        choices.append("b <card>=block with " + "/".join(c.value for c in private.block_cards))
    choices.append("enter=pass")
    audience = [player.player_id]
    while True:
        tokens = (
            _read_hidden(
                backend,
                log,
                f"{player.display_name}, react? ({', '.join(choices)}): \n",
                audience=audience,
            )
            .strip()
            .lower()
            .split()
        )
        head = tokens[0] if tokens else ""
        if head in PASS_VALUES:
            return ReactionDecision()
        if head in CHALLENGE_VALUES and private.can_challenge:
            return ReactionDecision(kind=ReactionKind.CHALLENGE)
        if head in BLOCK_VALUES and can_block:
            card = _parse_block_card(tokens[1:], private.block_cards)
            if card is not None:
                return ReactionDecision(kind=ReactionKind.BLOCK, block_card=card)
        _write(
            backend,
            log,
            "Please answer c, b <card> or press enter.",
            visibility=EventVisibility.PRIVATE,
            audience=audience,
        )


def _parse_block_card(tokens: list[str], allowed: Tuple[CardKind, ...]) -> CardKind | None:
    if not tokens:
        return allowed[0] if len(allowed) == 1 else None
    try:
        card = CardKind(tokens[0])
    except ValueError:
        return None
    return card if card in allowed else None


def _submit_reaction(
    state: GameState,
    backend: InteractionIO,
    log: list[InteractionLogEntry],
    player: Player,
    decision: ReactionDecision,
    now: Clock,
) -> bool:
    try:
        if decision.kind is ReactionKind.CHALLENGE:
            reaction = state.submit_challenge(player.player_id, now=now())
            challenged = (
                state.player(reaction.challenged_player_id).display_name
                if reaction.challenged_player_id
                else "the claim"
            )
            _write(backend, log, f"{player.display_name} challenges {challenged}!")
        else:
            card = decision.block_card or CardKind.CONTESSA
            state.submit_block(player.player_id, card, now=now())
            _write(backend, log, f"{player.display_name} blocks with {card.value}")
    except InvalidActionError as exc:
        _write(backend, log, f"Reaction rejected: {exc}")
        return False
    if decision.public_reasoning:
        _write(backend, log, f'  {player.display_name} says: "{decision.public_reasoning}"')
    return True


def _resolve(
    state: GameState,
    backend: InteractionIO,
    log: list[InteractionLogEntry],
    agent_manager: AgentManager,
    now: Clock,
) -> None:
    moment = now()
    # Every eligible seat has passed, so the window is closed at its deadline.
    if state.reaction_deadline is not None and moment < state.reaction_deadline:
        moment = state.reaction_deadline
    record = state.resolve(now=moment)
    _write(backend, log, record.result)
    _announce_replacements(state, record.turn_number, backend, log, agent_manager)


def _announce_replacements(
    state: GameState,
    turn_number: int,
    backend: InteractionIO,
    log: list[InteractionLogEntry],
    agent_manager: AgentManager,
) -> None:
    if state.event_log is None:
        return
    for player in state.players:
        if agent_manager.is_agent(player.player_id):
            continue
        for event in state.event_log.card_history(player.player_id):
            if event.type is not GameEventType.CARD_REPLACED or event.turn_number != turn_number:
                continue
            _write(
                backend,
                log,
                f"{player.display_name} shuffled {event.payload['revealed']} back "
                f"and drew {event.payload['drawn']}",
                visibility=EventVisibility.PRIVATE,
                audience=[player.player_id],
            )


def _read(
    backend: InteractionIO,
    log: list[InteractionLogEntry],
    prompt: str,
    *,
    visibility: EventVisibility = EventVisibility.PUBLIC,
    audience: Sequence[str] | None = None,
) -> str:
    response = backend.read(prompt)
    log.append(
        InteractionLogEntry(
            event=InteractionEventType.PROMPT,
            message=prompt,
            response=response,
            visibility=visibility,
            audience=_audience_tuple(audience),
        )
    )
    return response


def _read_hidden(
    backend: InteractionIO,
    log: list[InteractionLogEntry],
    prompt: str,
    *,
    audience: Sequence[str] | None = None,
) -> str:
    response = backend.read_hidden(prompt)
    log.append(
        InteractionLogEntry(
            event=InteractionEventType.HIDDEN_PROMPT,
            message=prompt,
            response=response,
            visibility=EventVisibility.PRIVATE,
            audience=_audience_tuple(audience),
        )
    )
    return response


def _write(
    backend: InteractionIO,
    log: list[InteractionLogEntry],
    message: str,
    *,
    visibility: EventVisibility = EventVisibility.PUBLIC,
    audience: Sequence[str] | None = None,
) -> None:
    backend.write(message)
    log.append(
        InteractionLogEntry(
            event=InteractionEventType.OUTPUT,
            message=message,
            visibility=visibility,
            audience=_audience_tuple(audience),
        )
    )


def _filter_transcript(
    entries: Sequence[InteractionLogEntry],
    audience_tags: Sequence[str],
    include_private: bool,
) -> tuple[InteractionLogEntry, ...]:
    allowed = set(audience_tags)
    matched: list[InteractionLogEntry] = []
    for entry in entries:
        if entry.visibility is EventVisibility.PUBLIC:
            matched.append(entry)
            continue
        if include_private:
            matched.append(entry)
            continue
        if any(tag in allowed for tag in entry.audience):
            matched.append(entry)
    return tuple(matched)


def _audience_tuple(audience: Sequence[str] | None) -> Tuple[str, ...]:
    return tuple(audience or ())


def main() -> None:  # pragma: no cover - CLI entry point
    """Run the interactive Coup CLI from a YAML config file."""
    import sys

    from .config_loader import load_config_file

    backend = CLIInteraction()
    args = [arg for arg in sys.argv[1:] if arg not in ("--config", "-c")]
    if not args:
        backend.write("Usage: python -m coup.interaction <config-file>")
        sys.exit(1)

    try:
        setup_config = load_config_file(args[0])
    except (FileNotFoundError, ValueError) as exc:
        backend.write(f"Error loading config: {exc}")
        sys.exit(1)

    backend.write(f"Loaded configuration from {args[0]}")
    run_interactive_game(setup_config, io=backend, seed=setup_config.game_config.random_seed)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()


__all__ = [
    "CLIInteraction",
    "InteractionEventType",
    "InteractionIO",
    "InteractionLogEntry",
    "InteractionResult",
    "main",
    "run_interactive_game",
]

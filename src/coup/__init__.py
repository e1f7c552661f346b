"""Coup game engine package."""

from .agents import (
    AgentDecisionMaker,
    AgentManager,
    HeuristicAgent,
    ReactionDecision,
    ScriptedAgent,
    TurnDecision,
)
from .cards import DEFAULT_THEME, Card, CardTemplate, CardTheme, Deck, build_deck, stacked_deck
from .config import GameConfig
from .enums import ActionKind, CardKind, PlayerType, ReactionKind
from .events import (
    EventLog,
    EventVisibility,
    GameEvent,
    GameEventType,
)
from .exceptions import (
    ConfigurationError,
    GameNotFoundError,
    InvalidActionError,
    InvariantViolation,
    VersionConflictError,
)
from .game_state import (
    ChallengeResult,
    Claim,
    GamePhase,
    GameState,
    GameStatus,
    PendingAction,
    Reaction,
    ResolutionOutcome,
    TurnRecord,
)
from .interaction import (
    CLIInteraction,
    InteractionEventType,
    InteractionIO,
    InteractionLogEntry,
    InteractionResult,
    run_interactive_game,
)
from .persistence import GameStateSnapshot, restore_game_state, snapshot_game_state
from .players import Player, PlayerId, PlayerRegistration
from .projections import (
    AgentPerception,
    PrivateState,
    PublicState,
    get_agent_perception,
    get_private_state,
    get_public_state,
)
from .rules import ACTION_RULES, CARD_DEFINITIONS, ActionRule, CardDefinition, blockers_for
from .service import GameService
from .store import GameStore, InMemoryGameStore, JsonFileGameStore

__all__ = [
    "ACTION_RULES",
    "ActionKind",
    "ActionRule",
    "AgentDecisionMaker",
    "AgentManager",
    "AgentPerception",
    "CARD_DEFINITIONS",
    "CLIInteraction",
    "Card",
    "CardDefinition",
    "CardKind",
    "CardTemplate",
    "CardTheme",
    "ChallengeResult",
    "Claim",
    "ConfigurationError",
    "DEFAULT_THEME",
    "Deck",
    "EventLog",
    "EventVisibility",
    "GameConfig",
    "GameEvent",
    "GameEventType",
    "GameNotFoundError",
    "GamePhase",
    "GameService",
    "GameState",
    "GameStateSnapshot",
    "GameStatus",
    "GameStore",
    "HeuristicAgent",
    "InMemoryGameStore",
    "InteractionEventType",
    "InteractionIO",
    "InteractionLogEntry",
    "InteractionResult",
    "InvalidActionError",
    "InvariantViolation",
    "JsonFileGameStore",
    "PendingAction",
    "Player",
    "PlayerId",
    "PlayerRegistration",
    "PlayerType",
    "PrivateState",
    "PublicState",
    "Reaction",
    "ReactionDecision",
    "ReactionKind",
    "ResolutionOutcome",
    "ScriptedAgent",
    "TurnDecision",
    "TurnRecord",
    "VersionConflictError",
    "blockers_for",
    "build_deck",
    "get_agent_perception",
    "get_private_state",
    "get_public_state",
    "restore_game_state",
    "run_interactive_game",
    "snapshot_game_state",
    "stacked_deck",
]

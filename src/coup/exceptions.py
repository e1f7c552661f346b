"""Custom exception types for Coup configuration and game flow.

Validation failures derive from :class:`InvalidActionError` and are safe to
report back to the caller; the game state is left untouched. An
:class:`InvariantViolation` signals a bug and must not be retried.
"""


class ConfigurationError(ValueError):
    """Raised when game configuration data is inconsistent or unsupported."""


class InvalidActionError(RuntimeError):
    """Raised when a submission violates the current rules or phase."""

    code = "InvalidAction"


class IllegalPhaseError(InvalidActionError):
    code = "IllegalPhase"


class NotYourTurnError(InvalidActionError):
    code = "NotYourTurn"


class PlayerEliminatedError(InvalidActionError):
    code = "PlayerEliminated"


class UnknownPlayerError(InvalidActionError):
    code = "UnknownPlayer"


class InsufficientFundsError(InvalidActionError):
    code = "InsufficientFunds"


class TargetRequiredError(InvalidActionError):
    code = "TargetRequired"


class InvalidTargetError(InvalidActionError):
    code = "InvalidTarget"


class SelfTargetForbiddenError(InvalidActionError):
    code = "SelfTargetForbidden"


class TargetEliminatedError(InvalidActionError):
    code = "TargetEliminated"


class ForcedCoupError(InvalidActionError):
    code = "ForcedCoup"


class InvalidChallengerError(InvalidActionError):
    code = "InvalidChallenger"


class ActionNotChallengeableError(InvalidActionError):
    code = "ActionNotChallengeable"


class ActionNotBlockableError(InvalidActionError):
    code = "ActionNotBlockable"


class InvalidBlockCardError(InvalidActionError):
    code = "InvalidBlockCard"


class InvalidBlockerError(InvalidActionError):
    code = "InvalidBlocker"


class AlreadyReactedError(InvalidActionError):
    code = "AlreadyReacted"


class ReactionWindowOpenError(InvalidActionError):
    code = "ReactionWindowOpen"


class GameFullError(InvalidActionError):
    code = "GameFull"


class DuplicatePlayerError(InvalidActionError):
    code = "DuplicatePlayer"


class NotEnoughPlayersError(InvalidActionError):
    code = "NotEnoughPlayers"


class InsufficientCardsError(InvalidActionError):
    code = "InsufficientCards"


class InvariantViolation(RuntimeError):
    """Raised when the engine detects internally inconsistent state."""

    code = "InvariantViolation"


class GameNotFoundError(KeyError):
    """Raised by a game store when no game exists for an identifier."""


class VersionConflictError(RuntimeError):
    """Raised when saving a game whose stored version moved underneath the caller."""

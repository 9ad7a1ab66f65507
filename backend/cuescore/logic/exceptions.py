"""Typed domain exceptions for game rule violations.

All domain-level rule violations use subclasses of GameRuleError
rather than raw ValueError. The session store catches GameRuleError,
logs it and keeps the previous snapshot. UnsupportedGameTypeError is a
programming error and is never caught.
"""


class GameRuleError(Exception):
    """Base exception for game rule violations.

    Raised by engines and scoring helpers when an action violates the
    rules of the active game type. Caught at the session boundary.
    """


class InvalidActionError(GameRuleError):
    """Action or its payload is not valid in the current game state."""


class InvalidBallError(GameRuleError):
    """Ball number is not part of the engine's ball set."""


class InvalidRollError(GameRuleError):
    """Pin count cannot be recorded for the current bowling frame."""


class InvalidSetupError(GameRuleError):
    """Player setups cannot start a game of the requested type."""


class UnsupportedSettingsError(GameRuleError):
    """Game settings contain values the engine does not support."""


class UnsupportedGameTypeError(Exception):
    """Raised when no engine is registered for a game type tag.

    Attributes:
        game_type: The tag that was requested.

    """

    def __init__(self, game_type: object) -> None:
        self.game_type = game_type
        super().__init__(f"unsupported game type: {game_type!r}")

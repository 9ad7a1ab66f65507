"""
String enum definitions for cue-sport and bowling game concepts.
"""

from enum import StrEnum


class GameType(StrEnum):
    """Supported game variants."""

    SET_MATCH = "set_match"
    ROTATION = "rotation"
    BOWLARD = "bowlard"
    JAPAN = "japan"


class GameStatus(StrEnum):
    """Lifecycle status of a game."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class GameAction(StrEnum):
    """Type-specific actions dispatched to an engine's custom-action handler."""

    WIN_SET = "win_set"
    RESET_RACK = "reset_rack"
    ADD_PINS = "add_pins"
    UNDO_BOWLING_ROLL = "undo_bowling_roll"
    UNDO_LAST_SHOT = "undo_last_shot"
    NEXT_RACK = "next_rack"
    PLAYER_ORDER_CHANGE = "player_order_change"
    SET_MULTIPLIER = "set_multiplier"
    APPLY_DEDUCTION = "apply_deduction"


class ShotKind(StrEnum):
    """Tag of the custom payload carried by a shot."""

    BALL_CLICK = "ball_click"
    RACK_COMPLETE = "rack_complete"
    MULTIPLIER = "multiplier"
    DEDUCTION = "deduction"
    GAME_COMPLETE = "game_complete"


class RollMark(StrEnum):
    """Display symbol classes for a bowling roll."""

    STRIKE = "X"
    SPARE = "/"
    GUTTER = "G"
    MISS = "-"

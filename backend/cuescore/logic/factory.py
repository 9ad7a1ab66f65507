"""Engine lookup by game type. Engines are stateless, so one instance per type is shared."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cuescore.logic.bowlard import BowlardEngine
from cuescore.logic.enums import GameType
from cuescore.logic.exceptions import UnsupportedGameTypeError
from cuescore.logic.japan import JapanEngine
from cuescore.logic.rotation import RotationEngine
from cuescore.logic.set_match import SetMatchEngine

if TYPE_CHECKING:
    from cuescore.logic.engine import GameEngine

_ENGINE_CLASSES: dict[GameType, type[GameEngine]] = {
    GameType.SET_MATCH: SetMatchEngine,
    GameType.ROTATION: RotationEngine,
    GameType.BOWLARD: BowlardEngine,
    GameType.JAPAN: JapanEngine,
}

_engines: dict[GameType, GameEngine] = {}


def get_engine(game_type: GameType | str) -> GameEngine:
    """
    Return the shared engine for a game type.

    Raises:
        UnsupportedGameTypeError: If no engine exists for game_type

    """
    try:
        key = GameType(game_type)
        engine_cls = _ENGINE_CLASSES[key]
    except (ValueError, KeyError):
        raise UnsupportedGameTypeError(game_type) from None
    engine = _engines.get(key)
    if engine is None:
        engine = engine_cls()
        _engines[key] = engine
    return engine


def supported_game_types() -> tuple[GameType, ...]:
    return tuple(_ENGINE_CLASSES)


def is_supported(game_type: GameType | str) -> bool:
    try:
        return GameType(game_type) in _ENGINE_CLASSES
    except ValueError:
        return False


def clear_engines() -> None:
    """Drop cached engines (tests)."""
    _engines.clear()

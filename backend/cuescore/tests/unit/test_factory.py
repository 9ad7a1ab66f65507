import pytest

from cuescore.logic.bowlard import BowlardEngine
from cuescore.logic.enums import GameType
from cuescore.logic.exceptions import UnsupportedGameTypeError
from cuescore.logic.factory import clear_engines, get_engine, is_supported, supported_game_types
from cuescore.logic.japan import JapanEngine
from cuescore.logic.rotation import RotationEngine
from cuescore.logic.set_match import SetMatchEngine


class TestGetEngine:
    @pytest.mark.parametrize(
        ("game_type", "engine_cls"),
        [
            (GameType.SET_MATCH, SetMatchEngine),
            (GameType.ROTATION, RotationEngine),
            (GameType.BOWLARD, BowlardEngine),
            (GameType.JAPAN, JapanEngine),
        ],
    )
    def test_engine_per_type(self, game_type, engine_cls):
        engine = get_engine(game_type)
        assert isinstance(engine, engine_cls)
        assert engine.game_type == game_type

    def test_accepts_tag_string(self):
        assert isinstance(get_engine("rotation"), RotationEngine)

    def test_engine_is_shared(self):
        assert get_engine(GameType.JAPAN) is get_engine("japan")

    def test_clear_engines_builds_new_instance(self):
        before = get_engine(GameType.SET_MATCH)
        clear_engines()
        assert get_engine(GameType.SET_MATCH) is not before

    def test_unknown_tag(self):
        with pytest.raises(UnsupportedGameTypeError, match="unsupported game type: 'snooker'") as exc_info:
            get_engine("snooker")
        assert exc_info.value.game_type == "snooker"


class TestSupportedTypes:
    def test_every_game_type_has_engine(self):
        assert set(supported_game_types()) == set(GameType)

    def test_is_supported(self):
        assert is_supported("bowlard")
        assert is_supported(GameType.SET_MATCH)
        assert not is_supported("snooker")

"""
Behaviour every engine shares: undo reverses a single action, repeated
pocketing is idempotent where balls are unique, and unknown actions leave
the snapshot alone.
"""

import pytest

from cuescore.logic.enums import GameAction, GameType
from cuescore.logic.factory import get_engine
from cuescore.tests.helpers.builders import start_game

_NAMES = {
    GameType.SET_MATCH: ("Alice", "Bob"),
    GameType.ROTATION: ("Alice", "Bob"),
    GameType.BOWLARD: ("Alice",),
    GameType.JAPAN: ("Alice", "Bob", "Cleo"),
}


def _fresh(game_type):
    return start_game(game_type, *_NAMES[game_type])


class TestUndoRoundTrip:
    @pytest.mark.parametrize("game_type", [GameType.SET_MATCH, GameType.ROTATION, GameType.JAPAN])
    @pytest.mark.parametrize("ball", [1, 5, 9])
    def test_pocket_then_undo(self, game_type, ball):
        engine = get_engine(game_type)
        game = _fresh(game_type)
        pocketed = engine.handle_pocket_ball(game, ball)
        assert pocketed != game
        assert engine.handle_custom_action(pocketed, GameAction.UNDO_LAST_SHOT) == game

    @pytest.mark.parametrize("pins", [0, 4, 10])
    def test_bowlard_roll_then_undo(self, pins):
        engine = get_engine(GameType.BOWLARD)
        game = _fresh(GameType.BOWLARD)
        rolled = engine.handle_custom_action(game, GameAction.ADD_PINS, {"pins": pins})
        assert engine.handle_custom_action(rolled, GameAction.UNDO_LAST_SHOT) == game

    def test_bowlard_pocket_then_undo_is_fresh_game(self):
        engine = get_engine(GameType.BOWLARD)
        game = _fresh(GameType.BOWLARD)
        assert engine.handle_undo(engine.handle_pocket_ball(game, 1)) == game

    @pytest.mark.parametrize("game_type", list(GameType))
    def test_undo_on_fresh_game_is_noop(self, game_type):
        game = _fresh(game_type)
        assert get_engine(game_type).handle_undo(game) == game


class TestPocketIdempotence:
    @pytest.mark.parametrize("game_type", [GameType.SET_MATCH, GameType.ROTATION])
    def test_second_pocket_changes_nothing(self, game_type):
        engine = get_engine(game_type)
        once = engine.handle_pocket_ball(_fresh(game_type), 3)
        assert engine.handle_pocket_ball(once, 3) == once

    def test_bowlard_pocket_changes_nothing(self):
        game = _fresh(GameType.BOWLARD)
        assert get_engine(GameType.BOWLARD).handle_pocket_ball(game, 3) == game


class TestUnknownActions:
    @pytest.mark.parametrize(
        ("game_type", "action"),
        [
            (GameType.SET_MATCH, GameAction.NEXT_RACK),
            (GameType.ROTATION, GameAction.WIN_SET),
            (GameType.BOWLARD, GameAction.SET_MULTIPLIER),
            (GameType.JAPAN, GameAction.ADD_PINS),
        ],
    )
    def test_returns_snapshot_unchanged(self, game_type, action):
        game = _fresh(game_type)
        assert get_engine(game_type).handle_custom_action(game, action, {"anything": 1}) is game


class TestInitialState:
    @pytest.mark.parametrize("game_type", list(GameType))
    def test_fresh_game(self, game_type):
        game = _fresh(game_type)
        assert game.type == game_type
        assert game.current_rack == 1
        assert game.total_racks == 1
        assert game.rack_in_progress
        assert game.shot_history == ()
        assert game.score_history == ()
        assert all(p.score == 0 and p.sets_won == 0 for p in game.players)

import pytest

from cuescore.logic.enums import GameType
from cuescore.logic.japan import JapanEngine
from cuescore.logic.japan_scoring import (
    calculate_rack_results,
    current_rack_points,
    current_rack_shots,
    earned_points,
    has_current_rack_clicks,
    previous_rack_total_points,
)
from cuescore.logic.settings import JapanSettings
from cuescore.tests.helpers.builders import start_game


@pytest.fixture
def engine():
    return JapanEngine()


def _click_for(engine, game, index, times):
    game = game.model_copy(update={"current_player_index": index})
    for _ in range(times):
        game = engine.handle_pocket_ball(game, 1)
    return game


class TestCurrentRackShots:
    def test_only_shots_after_last_completion(self, engine):
        game = _click_for(engine, start_game(GameType.JAPAN), 0, 2)
        game = _click_for(engine, engine.next_rack(game), 1, 1)
        shots = current_rack_shots(game)
        assert len(shots) == 1
        assert shots[0].player_id == "player-2"

    def test_clicks_detected(self, engine):
        game = start_game(GameType.JAPAN)
        assert not has_current_rack_clicks(game)
        assert not has_current_rack_clicks(engine.set_multiplier(game, 2))
        assert has_current_rack_clicks(engine.handle_pocket_ball(game, 3))


class TestEarnedPoints:
    def test_multiplier_applies_to_every_player(self, engine):
        game = _click_for(engine, start_game(GameType.JAPAN, "A", "B", "C"), 0, 2)
        game = engine.set_multiplier(_click_for(engine, game, 2, 1), 4)
        assert earned_points(game) == {"player-1": 8, "player-2": 0, "player-3": 4}
        assert current_rack_points(game, "player-3") == 4
        assert current_rack_points(game, "missing") == 0

    def test_deduction_reduces_base_points(self, engine):
        settings = JapanSettings(deduction_enabled=True)
        game = _click_for(engine, start_game(GameType.JAPAN, japan_settings=settings), 0, 3)
        game = engine.apply_deduction(game, 1)
        assert earned_points(game)["player-1"] == 2


class TestRackResults:
    @pytest.mark.parametrize(
        ("clicks", "deltas"),
        [
            ((1, 0), (1, -1)),
            ((3, 1, 0), (5, -1, -4)),
            ((2, 2, 2, 2), (0, 0, 0, 0)),
            ((4, 0, 1, 0), (11, -5, -1, -5)),
        ],
    )
    def test_deltas_sum_to_zero(self, engine, clicks, deltas):
        names = [f"P{i}" for i in range(len(clicks))]
        game = start_game(GameType.JAPAN, *names)
        for index, times in enumerate(clicks):
            game = _click_for(engine, game, index, times)
        results = calculate_rack_results(game)
        assert tuple(r.delta_points for r in results.player_results) == deltas
        assert sum(deltas) == 0

    def test_total_builds_on_previous_rack(self, engine):
        game = engine.next_rack(_click_for(engine, start_game(GameType.JAPAN), 0, 2))
        assert previous_rack_total_points(game, "player-1") == 2
        assert previous_rack_total_points(game, "player-2") == -2
        game = _click_for(engine, game, 1, 1)
        results = calculate_rack_results(game)
        assert [r.total_points for r in results.player_results] == [1, -1]
        assert results.rack_number == 2

    def test_no_history_means_zero_total(self):
        assert previous_rack_total_points(start_game(GameType.JAPAN), "player-1") == 0

import pytest

from cuescore.logic.enums import GameAction, GameStatus, GameType
from cuescore.logic.exceptions import InvalidBallError
from cuescore.logic.rotation import RotationEngine
from cuescore.tests.helpers.builders import pocket_all, start_game


@pytest.fixture
def engine():
    return RotationEngine()


@pytest.fixture
def game():
    return start_game(GameType.ROTATION, target_score=120)


class TestPocketBall:
    def test_ball_scores_its_number(self, engine, game):
        updated = engine.handle_pocket_ball(game, 15)
        assert updated.players[0].score == 15
        entry = updated.score_history[-1]
        assert (entry.player_id, entry.score, entry.ball_number) == ("player-1", 15, 15)

    def test_pocketing_twice_is_ignored(self, engine, game):
        once = engine.handle_pocket_ball(game, 2)
        assert engine.handle_pocket_ball(once, 2) is once
        assert len(once.score_history) == 1

    def test_rejects_unknown_ball(self, engine, game):
        with pytest.raises(InvalidBallError):
            engine.handle_pocket_ball(game, 16)

    def test_credits_current_player_after_switch(self, engine, game):
        updated = engine.handle_pocket_ball(engine.handle_switch_player(game), 6)
        assert updated.players[1].score == 6
        assert updated.players[0].score == 0


class TestVictory:
    def test_reaching_target_wins(self, engine):
        game = pocket_all(start_game(GameType.ROTATION, target_score=20), [15, 5])
        victory = engine.check_victory_condition(game)
        assert victory.is_game_over
        assert victory.winner_id == "player-1"

    def test_below_target_continues(self, engine, game):
        assert not engine.check_victory_condition(pocket_all(game, [15, 14])).is_game_over

    def test_remaining_score(self, game):
        player = pocket_all(game, [15]).players[0]
        assert RotationEngine.remaining_score(player) == 105
        assert RotationEngine.remaining_score(game.players[0].model_copy(update={"target_score": None})) == 0


class TestResetRack:
    def test_keeps_scores_and_advances_rack(self, engine, game):
        cleared = pocket_all(game, range(1, 16))
        assert engine.check_all_balls_pocketed(cleared)
        updated = engine.handle_custom_action(cleared, GameAction.RESET_RACK)
        assert updated.players[0].score == 120
        assert updated.players[0].balls_pocketed == ()
        assert updated.shot_history == ()
        assert updated.current_rack == 2
        assert updated.total_racks == 2
        assert not engine.check_all_balls_pocketed(updated)


class TestSwitchPlayer:
    def test_wraps_around(self, engine):
        game = start_game(GameType.ROTATION, "Alice", "Bob", "Cleo")
        for expected in (1, 2, 0):
            game = engine.handle_switch_player(game)
            assert game.current_player_index == expected
            assert [p.is_active for p in game.players].count(True) == 1
            assert game.players[expected].is_active


class TestUndo:
    def test_undo_restores_previous_snapshot(self, engine, game):
        pocketed = engine.handle_pocket_ball(game, 7)
        assert engine.handle_undo(pocketed) == game

    def test_undo_only_touches_last_shooter(self, engine, game):
        updated = engine.handle_pocket_ball(game, 3)
        updated = engine.handle_pocket_ball(engine.handle_switch_player(updated), 4)
        undone = engine.handle_undo(updated)
        assert undone.players[1].score == 0
        assert undone.players[0].score == 3
        assert undone.players[0].balls_pocketed == (3,)
        assert [e.ball_number for e in undone.score_history] == [3]

    def test_undo_of_winning_pocket_reopens_game(self, engine):
        game = start_game(GameType.ROTATION, target_score=20)
        finished = engine.complete_if_won(pocket_all(game, [15, 5]))
        assert finished.status == GameStatus.COMPLETED

        undone = engine.handle_undo(finished)
        assert undone.players[0].score == 15
        assert undone.status == GameStatus.IN_PROGRESS
        assert undone.winner is None
        assert undone.end_time is None

    def test_undo_keeps_game_completed_while_target_still_reached(self, engine):
        game = start_game(GameType.ROTATION, target_score=20)
        finished = engine.complete_if_won(pocket_all(game, [15, 9, 1]))
        undone = engine.handle_undo(finished)
        assert undone.players[0].score == 24
        assert undone.status == GameStatus.COMPLETED
        assert undone.winner == "player-1"


class TestCompleteIfWon:
    def test_stamps_winner(self, engine):
        game = pocket_all(start_game(GameType.ROTATION, target_score=20), [15, 5])
        completed = engine.complete_if_won(game)
        assert completed.status == GameStatus.COMPLETED
        assert completed.winner == "player-1"
        assert completed.end_time is not None

    def test_below_target_unchanged(self, engine, game):
        pocketed = engine.handle_pocket_ball(game, 7)
        assert engine.complete_if_won(pocketed) is pocketed

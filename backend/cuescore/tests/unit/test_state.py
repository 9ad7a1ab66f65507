"""
Unit tests for frozen game state models.

Covers immutability, structural validators, and the tagged shot payload
surviving a JSON round trip.
"""

import pytest
from pydantic import ValidationError

from cuescore.logic.enums import GameType, ShotKind
from cuescore.logic.state import (
    BallClickData,
    BowlingFrame,
    DeductionData,
    Game,
    Player,
    PlayerSetup,
    PlayerSnapshot,
    RackCompleteData,
    Shot,
)


def _game(**updates):
    fields = {
        "id": "game-1",
        "type": GameType.ROTATION,
        "players": (Player(id="player-1", name="Alice", is_active=True), Player(id="player-2", name="Bob")),
    }
    fields.update(updates)
    return Game(**fields)


class TestImmutability:
    def test_player_rejects_mutation(self):
        player = Player(id="player-1", name="Alice")
        with pytest.raises(ValidationError):
            player.score = 5

    def test_game_rejects_mutation(self):
        game = _game()
        with pytest.raises(ValidationError):
            game.current_rack = 2

    def test_shot_rejects_mutation(self):
        shot = Shot(player_id="player-1", ball_number=3, is_sunk=True)
        with pytest.raises(ValidationError):
            shot.is_sunk = False

    def test_model_copy_leaves_original_untouched(self):
        game = _game()
        copied = game.model_copy(update={"current_rack": 5})
        assert game.current_rack == 1
        assert copied.current_rack == 5


class TestGameValidation:
    def test_requires_players(self):
        with pytest.raises(ValidationError, match="at least one player"):
            _game(players=())

    def test_rejects_two_active_players(self):
        players = (
            Player(id="player-1", name="Alice", is_active=True),
            Player(id="player-2", name="Bob", is_active=True),
        )
        with pytest.raises(ValidationError, match="at most one player"):
            _game(players=players)

    def test_allows_no_active_player(self):
        players = (Player(id="player-1", name="Alice"), Player(id="player-2", name="Bob"))
        assert _game(players=players).current_player.id == "player-1"

    @pytest.mark.parametrize("index", [-1, 2])
    def test_rejects_out_of_range_current_player(self, index):
        with pytest.raises(ValidationError, match="current_player_index"):
            _game(current_player_index=index)

    def test_player_lookup(self):
        game = _game()
        assert game.get_player("player-2").name == "Bob"
        assert game.get_player("missing") is None
        assert game.player_index("player-2") == 1
        assert game.player_index("missing") is None


class TestPlayerSetup:
    def test_strips_name(self):
        assert PlayerSetup(name="  Alice ").name == "Alice"

    def test_rejects_blank_name(self):
        with pytest.raises(ValidationError, match="must not be empty"):
            PlayerSetup(name="   ")

    def test_rejects_non_positive_targets(self):
        with pytest.raises(ValidationError):
            PlayerSetup(name="Alice", target_score=0)
        with pytest.raises(ValidationError):
            PlayerSetup(name="Alice", target_sets=0)


class TestBowlingFrame:
    def test_rejects_pin_count_above_ten(self):
        with pytest.raises(ValidationError, match="roll must be in"):
            BowlingFrame(frame_number=1, rolls=(11,))

    @pytest.mark.parametrize("number", [0, 11])
    def test_rejects_frame_number_outside_game(self, number):
        with pytest.raises(ValidationError):
            BowlingFrame(frame_number=number)


class TestSerialization:
    def test_game_json_round_trip(self):
        snapshot = PlayerSnapshot(id="player-1", balls_pocketed=(1, 2), score=2)
        shots = (
            Shot(player_id="player-1", ball_number=1, is_sunk=True, custom_data=BallClickData(points=1)),
            Shot(player_id="player-1", is_foul=True, custom_data=DeductionData(value=3, applied=2)),
            Shot(
                player_id="player-1",
                custom_data=RackCompleteData(
                    previous_rack=1,
                    previous_multiplier=2,
                    previous_player_states=(snapshot,),
                ),
            ),
        )
        game = _game(type=GameType.JAPAN, shot_history=shots)
        restored = Game.model_validate_json(game.model_dump_json())
        assert restored == game

    def test_custom_data_is_resolved_by_tag(self):
        dumped = {"player_id": "player-1", "custom_data": {"type": "deduction", "value": 2, "applied": 1}}
        shot = Shot.model_validate(dumped)
        assert isinstance(shot.custom_data, DeductionData)
        assert shot.custom_data.type == ShotKind.DEDUCTION

    def test_unknown_tag_is_rejected(self):
        with pytest.raises(ValidationError):
            Shot.model_validate({"player_id": "player-1", "custom_data": {"type": "teleport"}})

    def test_json_dump_uses_plain_values(self):
        dumped = _game().model_dump(mode="json")
        assert dumped["type"] == "rotation"
        assert dumped["status"] == "in_progress"
        assert isinstance(dumped["players"], list)

"""
Bowlard rules: solo ten-frame bowling scored with pocketed balls standing in for pins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from cuescore.logic import bowling
from cuescore.logic.actions import AddPinsData, parse_action_data
from cuescore.logic.engine import GameEngine
from cuescore.logic.enums import GameAction, GameType
from cuescore.logic.exceptions import InvalidSetupError
from cuescore.logic.state import Game, Player, VictoryResult
from cuescore.logic.state_utils import update_player

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from cuescore.logic.state import BowlingFrame, PlayerSetup


class BowlardEngine(GameEngine):
    game_type: ClassVar[GameType] = GameType.BOWLARD

    def initialize_players(self, setups: Sequence[PlayerSetup]) -> tuple[Player, ...]:
        if len(setups) != 1:
            raise InvalidSetupError(f"bowlard is played solo, got {len(setups)} players")
        (player,) = super().initialize_players(setups)
        return (player.model_copy(update={"bowling_frames": bowling.init_frames()}),)

    def handle_pocket_ball(self, game: Game, ball_number: int) -> Game:  # noqa: ARG002
        return game

    def handle_switch_player(self, game: Game) -> Game:
        return game

    def check_victory_condition(self, game: Game) -> VictoryResult:
        player = game.players[0]
        frames = player.bowling_frames
        if frames and frames[bowling.LAST_FRAME_INDEX].is_complete:
            return VictoryResult(is_game_over=True, winner_id=player.id)
        return VictoryResult(is_game_over=False)

    def handle_custom_action(
        self,
        game: Game,
        action: GameAction,
        data: Mapping[str, Any] | None = None,
    ) -> Game:
        if action == GameAction.ADD_PINS:
            payload = parse_action_data(AddPinsData, data)
            return self.add_pins(game, payload.pins)
        if action == GameAction.UNDO_BOWLING_ROLL:
            return self.handle_undo(game)
        return super().handle_custom_action(game, action, data)

    def add_pins(self, game: Game, pins: int) -> Game:
        """Record a roll. A finished game is returned unchanged."""
        frames = game.players[0].bowling_frames
        if frames is None:
            return game
        return self._with_frames(game, bowling.add_roll(frames, pins))

    def handle_undo(self, game: Game) -> Game:
        frames = game.players[0].bowling_frames
        if frames is None:
            return game
        return self.reopen_if_undecided(self._with_frames(game, bowling.undo_roll(frames)))

    @staticmethod
    def _with_frames(game: Game, frames: tuple[BowlingFrame, ...]) -> Game:
        return update_player(game, 0, bowling_frames=frames, score=bowling.total_score(frames))

"""
Rotation rules: fifteen balls, each worth its own number, scores carry across racks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from cuescore.logic.engine import GameEngine
from cuescore.logic.enums import GameAction, GameType
from cuescore.logic.state import Game, Player, ScoreHistoryEntry, VictoryResult
from cuescore.logic.state_utils import append_score_entry, reset_rack_state

if TYPE_CHECKING:
    from collections.abc import Mapping


class RotationEngine(GameEngine):
    game_type: ClassVar[GameType] = GameType.ROTATION
    ball_numbers: ClassVar[tuple[int, ...]] = tuple(range(1, 16))
    auto_reset_rack: ClassVar[bool] = True

    def ball_score(self, ball_number: int) -> int:
        return ball_number

    def handle_pocket_ball(self, game: Game, ball_number: int) -> Game:
        updated = self.pocket_for_current_player(game, ball_number)
        if updated is game:
            return game
        shooter = game.current_player
        return append_score_entry(
            updated,
            ScoreHistoryEntry(player_id=shooter.id, score=self.ball_score(ball_number), ball_number=ball_number),
        )

    def check_victory_condition(self, game: Game) -> VictoryResult:
        for player in game.players:
            if player.target_score is not None and player.score >= player.target_score:
                return VictoryResult(is_game_over=True, winner_id=player.id)
        return VictoryResult(is_game_over=False)

    def handle_custom_action(
        self,
        game: Game,
        action: GameAction,
        data: Mapping[str, Any] | None = None,
    ) -> Game:
        if action == GameAction.RESET_RACK:
            return self.reset_rack(game)
        return super().handle_custom_action(game, action, data)

    def reset_rack(self, game: Game) -> Game:
        """Rack the balls again. Cumulative scores are kept."""
        return reset_rack_state(game, reset_score=False).model_copy(
            update={
                "shot_history": (),
                "current_rack": game.current_rack + 1,
                "total_racks": game.total_racks + 1,
            },
        )

    @staticmethod
    def remaining_score(player: Player) -> int:
        """Points still needed to reach the player's target (0 without a target)."""
        if player.target_score is None:
            return 0
        return max(0, player.target_score - player.score)

"""
Japan rules: multi-player point transfer settled at the end of every rack.

Ball clicks earn points for the shooter during a rack; completing the rack
settles those points against every opponent (see japan_scoring), records
the result in rack history and starts a fresh rack. The seating can be
reshuffled every order_change_interval racks. A Japan game never ends on
its own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

import structlog

from cuescore.logic.actions import (
    ApplyDeductionData,
    PlayerOrderChangeData,
    SetMultiplierData,
    parse_action_data,
)
from cuescore.logic.engine import GameEngine
from cuescore.logic.enums import GameAction, GameType
from cuescore.logic.exceptions import InvalidActionError
from cuescore.logic.japan_scoring import calculate_rack_results, has_current_rack_clicks
from cuescore.logic.japan_undo import undo_japan_shot
from cuescore.logic.player_order import calculate_new_player_order
from cuescore.logic.settings import JAPAN_BALL_NUMBERS, JapanSettings, clamp_multiplier, validate_japan_settings
from cuescore.logic.state import (
    BallClickData,
    DeductionData,
    Game,
    GameCompleteData,
    JapanPlayerOrder,
    MultiplierData,
    PlayerSnapshot,
    RackCompleteData,
    Shot,
    VictoryResult,
)
from cuescore.logic.state_utils import append_shot, reset_rack_state, update_player

if TYPE_CHECKING:
    import random
    from collections.abc import Mapping, Sequence

    from cuescore.logic.settings import ChessClockSettings
    from cuescore.logic.state import PlayerSetup

logger = structlog.get_logger()

BALL_CLICK_POINTS = 1
_MIN_PLAYERS_FOR_ORDER_CHANGE = 3


def _settings(game: Game) -> JapanSettings:
    return game.japan_settings or JapanSettings()


class JapanEngine(GameEngine):
    game_type: ClassVar[GameType] = GameType.JAPAN
    ball_numbers: ClassVar[tuple[int, ...]] = JAPAN_BALL_NUMBERS

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng

    def initialize_game(
        self,
        setups: Sequence[PlayerSetup],
        *,
        game_id: str | None = None,
        chess_clock: ChessClockSettings | None = None,
        japan_settings: JapanSettings | None = None,
    ) -> Game:
        settings = japan_settings or JapanSettings()
        validate_japan_settings(settings)
        game = super().initialize_game(setups, game_id=game_id, chess_clock=chess_clock)
        first_period = JapanPlayerOrder(
            from_rack=1,
            to_rack=settings.order_change_interval,
            player_order=tuple(p.id for p in game.players),
        )
        return game.model_copy(
            update={
                "japan_settings": settings,
                "japan_current_multiplier": 1,
                "japan_player_order_history": (first_period,),
            },
        )

    def handle_pocket_ball(self, game: Game, ball_number: int) -> Game:
        """Credit a ball click to the current player. The same ball may be clicked repeatedly."""
        self.validate_ball(ball_number)
        index = game.current_player_index
        shooter = game.players[index]
        updated = update_player(
            game,
            index,
            score=shooter.score + BALL_CLICK_POINTS,
            balls_pocketed=(*shooter.balls_pocketed, ball_number),
        )
        shot = Shot(
            player_id=shooter.id,
            ball_number=ball_number,
            is_sunk=True,
            custom_data=BallClickData(points=BALL_CLICK_POINTS),
        )
        return append_shot(updated, shot)

    def check_victory_condition(self, game: Game) -> VictoryResult:  # noqa: ARG002
        return VictoryResult(is_game_over=False)

    def handle_custom_action(
        self,
        game: Game,
        action: GameAction,
        data: Mapping[str, Any] | None = None,
    ) -> Game:
        if action == GameAction.NEXT_RACK:
            return self.next_rack(game)
        if action == GameAction.PLAYER_ORDER_CHANGE:
            order_change = parse_action_data(PlayerOrderChangeData, data)
            return self.change_player_order(game, order_change.selected_player_id)
        if action == GameAction.SET_MULTIPLIER:
            multiplier = parse_action_data(SetMultiplierData, data)
            return self.set_multiplier(game, multiplier.value)
        if action == GameAction.APPLY_DEDUCTION:
            deduction = parse_action_data(ApplyDeductionData, data)
            return self.apply_deduction(game, deduction.value)
        return super().handle_custom_action(game, action, data)

    def handle_undo(self, game: Game) -> Game:
        return undo_japan_shot(game)

    def next_rack(self, game: Game) -> Game:
        """
        Complete the current rack and start the next one.

        The completing shot carries the pre-rack player states, rack number
        and multiplier so the completion can be undone exactly.
        """
        results = calculate_rack_results(game)
        shot = Shot(
            player_id=game.current_player.id,
            custom_data=RackCompleteData(
                previous_rack=game.current_rack,
                previous_multiplier=game.japan_current_multiplier,
                previous_player_states=tuple(
                    PlayerSnapshot(id=p.id, balls_pocketed=p.balls_pocketed, score=p.score) for p in game.players
                ),
                rack_results=results.player_results,
            ),
        )
        updated = append_shot(reset_rack_state(game, reset_score=True), shot)
        return updated.model_copy(
            update={
                "current_rack": game.current_rack + 1,
                "japan_rack_history": (*game.japan_rack_history, results),
                "japan_current_multiplier": 1,
            },
        )

    def set_multiplier(self, game: Game, value: int) -> Game:
        """Set the multiplier for the current rack, clamped to the supported range."""
        clamped = clamp_multiplier(value)
        shot = Shot(
            player_id=game.current_player.id,
            custom_data=MultiplierData(value=clamped, previous_multiplier=game.japan_current_multiplier),
        )
        return append_shot(game, shot).model_copy(update={"japan_current_multiplier": clamped})

    def apply_deduction(self, game: Game, value: int) -> Game:
        """
        Deduct points from the current player's rack score.

        The score never drops below zero; the shot records how much was
        actually taken so undo can give back exactly that.
        """
        if not _settings(game).deduction_enabled:
            raise InvalidActionError("deductions are disabled for this game")
        index = game.current_player_index
        shooter = game.players[index]
        applied = min(value, shooter.score)
        updated = update_player(game, index, score=shooter.score - applied)
        shot = Shot(
            player_id=shooter.id,
            is_foul=True,
            custom_data=DeductionData(value=value, applied=applied),
        )
        return append_shot(updated, shot)

    def change_player_order(
        self,
        game: Game,
        selected_player_id: str,
        rng: random.Random | None = None,
    ) -> Game:
        """
        Reseat players with selected_player_id breaking first.

        The new order applies from the next rack for one interval and is
        appended to the player order history. Unknown ids are ignored.
        """
        if game.get_player(selected_player_id) is None:
            logger.warning("order change for unknown player", game_id=game.id, player_id=selected_player_id)
            return game
        new_order = calculate_new_player_order(game.players, selected_player_id, rng or self._rng)
        interval = _settings(game).order_change_interval
        period = JapanPlayerOrder(
            from_rack=game.current_rack + 1,
            to_rack=game.current_rack + interval,
            player_order=tuple(p.id for p in new_order),
        )
        players = tuple(p.model_copy(update={"is_active": i == 0}) for i, p in enumerate(new_order))
        return game.model_copy(
            update={
                "players": players,
                "current_player_index": 0,
                "japan_player_order_history": (*game.japan_player_order_history, period),
            },
        )

    def should_change_order(self, game: Game) -> bool:
        """Check whether the table should be offered an order change at this rack."""
        settings = _settings(game)
        if len(game.players) < _MIN_PLAYERS_FOR_ORDER_CHANGE or not settings.order_change_enabled:
            return False
        return game.current_rack > 0 and game.current_rack % settings.order_change_interval == 0

    def racks_until_order_change(self, game: Game) -> int | None:
        settings = _settings(game)
        if not settings.order_change_enabled:
            return None
        return settings.order_change_interval - (game.current_rack % settings.order_change_interval)

    def finalize_game(self, game: Game) -> Game:
        """Settle a partly played final rack without starting another one."""
        if not has_current_rack_clicks(game):
            return game
        results = calculate_rack_results(game)
        shot = Shot(
            player_id=game.current_player.id,
            custom_data=GameCompleteData(final_rack=game.current_rack, rack_results=results.player_results),
        )
        return append_shot(game, shot).model_copy(
            update={"japan_rack_history": (*game.japan_rack_history, results)},
        )

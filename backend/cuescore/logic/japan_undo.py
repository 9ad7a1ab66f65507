"""
Undo for Japan games.

The last shot's payload selects the strategy. Rack completion is reversed
from the player snapshot embedded in the shot that completed the rack,
since rack history only keeps aggregated points.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cuescore.logic.state import (
    BallClickData,
    DeductionData,
    GameCompleteData,
    MultiplierData,
    RackCompleteData,
)
from cuescore.logic.state_utils import pop_last_shot, update_player_by_id

if TYPE_CHECKING:
    from cuescore.logic.state import Game, Shot


def undo_japan_shot(game: Game) -> Game:
    """Reverse the most recent Japan event. Empty history is a no-op."""
    if not game.shot_history:
        return game
    last_shot = game.shot_history[-1]
    data = last_shot.custom_data
    if isinstance(data, BallClickData):
        return _undo_ball_click(game, last_shot, data)
    if isinstance(data, RackCompleteData):
        return _undo_rack_complete(game, data)
    if isinstance(data, MultiplierData):
        return pop_last_shot(game).model_copy(update={"japan_current_multiplier": data.previous_multiplier})
    if isinstance(data, DeductionData):
        return _undo_deduction(game, last_shot, data)
    if isinstance(data, GameCompleteData):
        return pop_last_shot(game).model_copy(update={"japan_rack_history": game.japan_rack_history[:-1]})
    return pop_last_shot(game)


def _undo_ball_click(game: Game, shot: Shot, data: BallClickData) -> Game:
    player = game.get_player(shot.player_id)
    updated = pop_last_shot(game)
    if player is None:
        return updated
    # most recent pocket, matching shot chronology rather than ball identity
    return update_player_by_id(
        updated,
        player.id,
        score=max(0, player.score - data.points),
        balls_pocketed=player.balls_pocketed[:-1],
    )


def _undo_rack_complete(game: Game, data: RackCompleteData) -> Game:
    previous = {state.id: state for state in data.previous_player_states}
    players = tuple(
        player.model_copy(
            update={
                "balls_pocketed": previous[player.id].balls_pocketed if player.id in previous else (),
                "score": previous[player.id].score if player.id in previous else player.score,
            },
        )
        for player in game.players
    )
    return pop_last_shot(game).model_copy(
        update={
            "players": players,
            "current_rack": data.previous_rack,
            "japan_current_multiplier": data.previous_multiplier,
            "japan_rack_history": game.japan_rack_history[:-1],
        },
    )


def _undo_deduction(game: Game, shot: Shot, data: DeductionData) -> Game:
    player = game.get_player(shot.player_id)
    updated = pop_last_shot(game)
    if player is None:
        return updated
    return update_player_by_id(updated, player.id, score=player.score + data.applied)

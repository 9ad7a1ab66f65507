"""
Japan point-transfer arithmetic.

Within a rack each player earns points from ball clicks (less any
deductions), scaled by the rack multiplier. When the rack closes every
player collects their earned points from each opponent and pays each
opponent what that opponent earned, so deltas always sum to zero.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cuescore.logic.enums import ShotKind
from cuescore.logic.state import BallClickData, DeductionData, JapanPlayerRackResult, JapanRackResult

if TYPE_CHECKING:
    from cuescore.logic.state import Game, Shot


def current_rack_shots(game: Game) -> tuple[Shot, ...]:
    """Shots recorded since the last rack completion."""
    for i in range(len(game.shot_history) - 1, -1, -1):
        data = game.shot_history[i].custom_data
        if data is not None and data.type == ShotKind.RACK_COMPLETE:
            return game.shot_history[i + 1 :]
    return game.shot_history


def has_current_rack_clicks(game: Game) -> bool:
    return any(isinstance(shot.custom_data, BallClickData) for shot in current_rack_shots(game))


def _base_points(game: Game) -> dict[str, int]:
    points = {player.id: 0 for player in game.players}
    for shot in current_rack_shots(game):
        if shot.player_id not in points:
            continue
        if isinstance(shot.custom_data, BallClickData):
            points[shot.player_id] += shot.custom_data.points
        elif isinstance(shot.custom_data, DeductionData):
            points[shot.player_id] -= shot.custom_data.applied
    return points


def earned_points(game: Game) -> dict[str, int]:
    """Points each player has earned this rack, multiplier applied."""
    return {player_id: base * game.japan_current_multiplier for player_id, base in _base_points(game).items()}


def current_rack_points(game: Game, player_id: str) -> int:
    return earned_points(game).get(player_id, 0)


def previous_rack_total_points(game: Game, player_id: str) -> int:
    """Cumulative total at the end of the last completed rack (0 before the first)."""
    if not game.japan_rack_history:
        return 0
    for result in game.japan_rack_history[-1].player_results:
        if result.player_id == player_id:
            return result.total_points
    return 0


def calculate_rack_results(game: Game) -> JapanRackResult:
    """Settle the current rack into per-player earned, delta and running total points."""
    earned = earned_points(game)
    opponents = len(game.players) - 1
    everyone = sum(earned.values())
    results = []
    for player in game.players:
        mine = earned[player.id]
        delta = mine * opponents - (everyone - mine)
        results.append(
            JapanPlayerRackResult(
                player_id=player.id,
                earned_points=mine,
                delta_points=delta,
                total_points=previous_rack_total_points(game, player.id) + delta,
            ),
        )
    return JapanRackResult(rack_number=game.current_rack, player_results=tuple(results))

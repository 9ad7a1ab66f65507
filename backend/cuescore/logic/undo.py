"""
Default last-shot undo shared by ball-pocketing engines.

Engines opt into this by calling undo_last_shot from handle_undo; the
function only knows how to reverse a plain pocketed-ball shot.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cuescore.logic.state_utils import pop_last_shot, remove_last_occurrence, update_player_by_id

if TYPE_CHECKING:
    from collections.abc import Callable

    from cuescore.logic.state import Game


def undo_last_shot(game: Game, ball_score: Callable[[int], int]) -> Game:
    """
    Reverse the most recent shot.

    Pops the shot; if it sank a ball, removes that ball from the shooter and
    subtracts its value (never below zero). A trailing score-history entry
    recorded for the same shot is dropped too. Empty history is a no-op.
    """
    if not game.shot_history:
        return game
    last_shot = game.shot_history[-1]
    value = ball_score(last_shot.ball_number)
    updated = pop_last_shot(game)

    if updated.score_history:
        entry = updated.score_history[-1]
        if (
            entry.player_id == last_shot.player_id
            and entry.score == value
            and entry.ball_number == last_shot.ball_number
        ):
            updated = updated.model_copy(update={"score_history": updated.score_history[:-1]})

    if not last_shot.is_sunk:
        return updated
    shooter = updated.get_player(last_shot.player_id)
    if shooter is None:
        return updated
    return update_player_by_id(
        updated,
        shooter.id,
        balls_pocketed=remove_last_occurrence(shooter.balls_pocketed, last_shot.ball_number),
        score=max(0, shooter.score - value),
    )

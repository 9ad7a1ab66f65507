"""
Immutable state update utilities using Pydantic model_copy.

Provides helper functions for common immutable state updates on frozen
Pydantic models. These functions never mutate the input state - they
always return new state objects with the requested changes applied.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cuescore.logic.state import Game, Player, ScoreHistoryEntry, Shot

if TYPE_CHECKING:
    from collections.abc import Callable

_PLAYER_FIELDS = set(Player.model_fields)


def update_player(
    game: Game,
    index: int,
    **updates: object,
) -> Game:
    """
    Return new game with updated player at index.

    Args:
        game: Current game
        index: Player position in game.players
        **updates: Fields to update on the player

    Returns:
        New Game with updated player

    Raises:
        ValueError: If index is out of bounds or update fields are invalid

    """
    if not (0 <= index < len(game.players)):
        raise ValueError(f"Invalid player index {index}, expected 0-{len(game.players) - 1}")
    invalid_fields = set(updates) - _PLAYER_FIELDS
    if invalid_fields:
        raise ValueError(f"Invalid player fields: {invalid_fields}")
    players = list(game.players)
    players[index] = game.players[index].model_copy(update=updates)
    return game.model_copy(update={"players": tuple(players)})


def update_player_by_id(game: Game, player_id: str, **updates: object) -> Game:
    """Return new game with the player matching player_id updated. Unknown ids are ignored."""
    index = game.player_index(player_id)
    if index is None:
        return game
    return update_player(game, index, **updates)


def map_players(game: Game, fn: Callable[[Player], Player]) -> Game:
    """Return new game with fn applied to every player."""
    return game.model_copy(update={"players": tuple(fn(p) for p in game.players)})


def reset_rack_state(game: Game, *, reset_score: bool) -> Game:
    """Return new game with every player's pocketed balls cleared (and score zeroed if requested)."""
    updates: dict[str, object] = {"balls_pocketed": ()}
    if reset_score:
        updates["score"] = 0
    return map_players(game, lambda p: p.model_copy(update=updates))


def activate_player(game: Game, index: int) -> Game:
    """
    Return new game with exactly the player at index active.

    Out-of-range indexes return the game unchanged.
    """
    if not (0 <= index < len(game.players)):
        return game
    players = tuple(p.model_copy(update={"is_active": i == index}) for i, p in enumerate(game.players))
    return game.model_copy(update={"players": players, "current_player_index": index})


def append_shot(game: Game, shot: Shot) -> Game:
    return game.model_copy(update={"shot_history": (*game.shot_history, shot)})


def append_score_entry(game: Game, entry: ScoreHistoryEntry) -> Game:
    return game.model_copy(update={"score_history": (*game.score_history, entry)})


def pop_last_shot(game: Game) -> Game:
    """Return new game without its last shot. Empty history is a no-op."""
    if not game.shot_history:
        return game
    return game.model_copy(update={"shot_history": game.shot_history[:-1]})


def remove_last_occurrence(values: tuple[int, ...], value: int) -> tuple[int, ...]:
    """Return values without the last occurrence of value (unchanged if absent)."""
    for i in range(len(values) - 1, -1, -1):
        if values[i] == value:
            return values[:i] + values[i + 1 :]
    return values


def is_ball_pocketed(game: Game, ball_number: int) -> bool:
    """Check whether any player has pocketed ball_number in the current rack."""
    return any(ball_number in p.balls_pocketed for p in game.players)


def pocketed_balls(game: Game) -> set[int]:
    return {ball for p in game.players for ball in p.balls_pocketed}

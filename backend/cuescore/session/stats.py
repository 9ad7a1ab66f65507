"""Aggregate win/loss statistics keyed by player display name."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cuescore.logic.state import Game

logger = structlog.get_logger()


class PlayerStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    total_wins: int = Field(default=0, ge=0)
    total_games: int = Field(default=0, ge=0)


def parse_player_stats(records: Iterable[dict[str, Any]]) -> tuple[PlayerStats, ...]:
    """Validate persisted stats records. Any malformed record discards the whole list."""
    try:
        return tuple(PlayerStats.model_validate(record) for record in records)
    except ValidationError:
        logger.exception("malformed player stats, starting empty")
        return ()


def record_game_result(stats: Iterable[PlayerStats], game: Game) -> tuple[PlayerStats, ...]:
    """
    Return stats updated with a finished game.

    Every player in the game gets one more game played; the winner also
    gets one more win. Players seen for the first time are appended.
    """
    by_name = {entry.name: entry for entry in stats}
    winner = game.get_player(game.winner) if game.winner else None
    for player in game.players:
        entry = by_name.get(player.name) or PlayerStats(name=player.name)
        won = winner is not None and winner.id == player.id
        by_name[player.name] = entry.model_copy(
            update={
                "total_games": entry.total_games + 1,
                "total_wins": entry.total_wins + (1 if won else 0),
            },
        )
    return tuple(by_name.values())


def win_rate(entry: PlayerStats) -> float:
    if entry.total_games == 0:
        return 0.0
    return entry.total_wins / entry.total_games

"""
Player order rotation for Japan games.

After every order-change interval the table picks a player to break and
the remaining seating is rearranged: fixed tables for three players, a
random reshuffle for four or more that must change at least one
"who plays after whom" pairing.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cuescore.logic.state import Player

logger = structlog.get_logger()

MAX_SHUFFLE_ATTEMPTS = 100
_THREE_PLAYERS = 3

# original seat index of the selected player -> new seating as original indexes
_THREE_PLAYER_ORDERS: dict[int, tuple[int, int, int]] = {
    0: (0, 2, 1),
    1: (1, 0, 2),
    2: (2, 1, 0),
}


def successor_map(players: Sequence[Player]) -> dict[str, str]:
    """Map each player id to the id of the player who follows them around the table."""
    return {player.id: players[(i + 1) % len(players)].id for i, player in enumerate(players)}


def is_same_cycle(first: Sequence[Player], second: Sequence[Player]) -> bool:
    """Check whether two seatings give every player the same successor."""
    if len(first) != len(second):
        return False
    return successor_map(first) == successor_map(second)


def calculate_new_player_order(
    players: Sequence[Player],
    selected_player_id: str,
    rng: random.Random | None = None,
) -> tuple[Player, ...]:
    """
    Return the new seating with the selected player first.

    Two players (or fewer) keep their order. Three players follow a fixed
    table keyed by the selected player's seat. Four or more shuffle the
    others until the cycle differs from the current one, falling back to
    reversing the others after MAX_SHUFFLE_ATTEMPTS tries.

    Raises:
        ValueError: If selected_player_id is not seated

    """
    index = next((i for i, p in enumerate(players) if p.id == selected_player_id), None)
    if index is None:
        raise ValueError(f"Unknown player {selected_player_id!r}")

    if len(players) < _THREE_PLAYERS:
        return tuple(players)
    if len(players) == _THREE_PLAYERS:
        return tuple(players[i] for i in _THREE_PLAYER_ORDERS[index])

    selected = players[index]
    others = [p for p in players if p.id != selected_player_id]
    rng = rng or random.Random()  # noqa: S311
    for _ in range(MAX_SHUFFLE_ATTEMPTS):
        shuffled = list(others)
        rng.shuffle(shuffled)
        candidate = (selected, *shuffled)
        if not is_same_cycle(players, candidate):
            return candidate

    logger.warning("player order shuffle exhausted, reversing", player_count=len(players))
    return (selected, *reversed(others))

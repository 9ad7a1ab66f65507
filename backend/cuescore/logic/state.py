"""
Immutable game state models.

Every model is a frozen Pydantic model; engines never mutate a snapshot and
instead return new ones built with model_copy. Sequences are tuples so a
snapshot can be shared between the session store, its listeners and the
undo stack without defensive copies. model_dump(mode="json") produces a
lossless, acyclic representation suitable for persistence.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from cuescore.logic.enums import GameStatus, GameType, ShotKind
from cuescore.logic.settings import ChessClockSettings, JapanSettings

NUM_BOWLING_FRAMES = 10
MAX_PINS = 10


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class BowlingFrame(BaseModel):
    """One bowling frame. score is cumulative and None until it can be resolved."""

    model_config = ConfigDict(frozen=True)

    frame_number: int = Field(ge=1, le=NUM_BOWLING_FRAMES)
    rolls: tuple[int, ...] = ()
    is_strike: bool = False
    is_spare: bool = False
    is_complete: bool = False
    score: int | None = None

    @field_validator("rolls")
    @classmethod
    def _validate_rolls(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        for pins in v:
            if not (0 <= pins <= MAX_PINS):
                raise ValueError(f"roll must be in [0, {MAX_PINS}], got {pins}")
        return v


class Player(BaseModel):
    """A player seated in a game."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    score: int = 0
    balls_pocketed: tuple[int, ...] = ()  # pocket order
    is_active: bool = False
    target_score: int | None = None
    target_sets: int | None = None
    sets_won: int = 0
    bowling_frames: tuple[BowlingFrame, ...] | None = None


class PlayerSetup(BaseModel):
    """Starting parameters for one player."""

    model_config = ConfigDict(frozen=True)

    name: str
    target_score: int | None = Field(default=None, ge=1)
    target_sets: int | None = Field(default=None, ge=1)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, v: str) -> str:
        name = v.strip()
        if not name:
            raise ValueError("player name must not be empty")
        return name


class PlayerSnapshot(BaseModel):
    """Rack state of one player captured before a Japan rack completes."""

    model_config = ConfigDict(frozen=True)

    id: str
    balls_pocketed: tuple[int, ...]
    score: int


class JapanPlayerRackResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    earned_points: int
    delta_points: int
    total_points: int


class JapanRackResult(BaseModel):
    """Per-player point transfer for one completed Japan rack."""

    model_config = ConfigDict(frozen=True)

    rack_number: int
    player_results: tuple[JapanPlayerRackResult, ...]


class JapanPlayerOrder(BaseModel):
    """Player order in effect for a span of racks (inclusive)."""

    model_config = ConfigDict(frozen=True)

    from_rack: int
    to_rack: int
    player_order: tuple[str, ...]


# ---------------------------------------------------------------------------
# Shot payloads
# ---------------------------------------------------------------------------


class BallClickData(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal[ShotKind.BALL_CLICK] = ShotKind.BALL_CLICK
    points: int


class RackCompleteData(BaseModel):
    """Inverse of a Japan rack completion, embedded in the shot that caused it."""

    model_config = ConfigDict(frozen=True)

    type: Literal[ShotKind.RACK_COMPLETE] = ShotKind.RACK_COMPLETE
    previous_rack: int
    previous_multiplier: int
    previous_player_states: tuple[PlayerSnapshot, ...]
    rack_results: tuple[JapanPlayerRackResult, ...] = ()


class MultiplierData(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal[ShotKind.MULTIPLIER] = ShotKind.MULTIPLIER
    value: int
    previous_multiplier: int


class DeductionData(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal[ShotKind.DEDUCTION] = ShotKind.DEDUCTION
    value: int
    applied: int  # amount actually subtracted after clamping at zero


class GameCompleteData(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal[ShotKind.GAME_COMPLETE] = ShotKind.GAME_COMPLETE
    final_rack: int
    rack_results: tuple[JapanPlayerRackResult, ...] = ()


ShotData = Annotated[
    BallClickData | RackCompleteData | MultiplierData | DeductionData | GameCompleteData,
    Field(discriminator="type"),
]


class Shot(BaseModel):
    """One atomic event in a game. ball_number is 0 when no ball is involved."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    ball_number: int = 0
    is_sunk: bool = False
    is_foul: bool = False
    timestamp: datetime = Field(default_factory=utc_now)
    custom_data: ShotData | None = None


class ScoreHistoryEntry(BaseModel):
    """Coarse score progression entry. Rotation stores deltas, Set-Match stores 1 per set won."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    score: int
    timestamp: datetime = Field(default_factory=utc_now)
    ball_number: int | None = None


class VictoryResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_game_over: bool
    winner_id: str | None = None


class Game(BaseModel):
    """
    Complete snapshot of one game.

    Invariants: players is non-empty, current_player_index indexes a live
    player, and at most one player is active (Set-Match starts with none).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: GameType
    status: GameStatus = GameStatus.IN_PROGRESS
    players: tuple[Player, ...]
    current_player_index: int = 0
    start_time: datetime = Field(default_factory=utc_now)
    end_time: datetime | None = None
    winner: str | None = None
    total_racks: int = 0
    current_rack: int = 1
    rack_in_progress: bool = False
    shot_history: tuple[Shot, ...] = ()
    score_history: tuple[ScoreHistoryEntry, ...] = ()
    chess_clock: ChessClockSettings | None = None

    # Japan extension state
    japan_settings: JapanSettings | None = None
    japan_rack_history: tuple[JapanRackResult, ...] = ()
    japan_player_order_history: tuple[JapanPlayerOrder, ...] = ()
    japan_current_multiplier: int = 1

    @field_validator("players")
    @classmethod
    def _validate_players(cls, v: tuple[Player, ...]) -> tuple[Player, ...]:
        if not v:
            raise ValueError("game must have at least one player")
        if sum(1 for p in v if p.is_active) > 1:
            raise ValueError("at most one player can be active")
        return v

    @model_validator(mode="after")
    def _validate_current_player_index(self) -> Game:
        if not (0 <= self.current_player_index < len(self.players)):
            raise ValueError(
                f"current_player_index {self.current_player_index} out of range for {len(self.players)} players",
            )
        return self

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    def get_player(self, player_id: str) -> Player | None:
        """Return the player with the given id, or None."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def player_index(self, player_id: str) -> int | None:
        for index, player in enumerate(self.players):
            if player.id == player_id:
                return index
        return None

"""Game rule settings carried on a Game: Japan rules and chess clock options."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from cuescore.logic.exceptions import UnsupportedSettingsError

MIN_MULTIPLIER = 1
MAX_MULTIPLIER = 100
JAPAN_BALL_NUMBERS = tuple(range(1, 11))
# at least one of these has to be a handicap ball
JAPAN_REQUIRED_HANDICAP_BALLS = frozenset({9, 10})


class JapanMultiplier(BaseModel):
    """A multiplier button offered during a Japan rack."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: int


class JapanDeduction(BaseModel):
    """A deduction button offered during a Japan rack."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: int


class JapanSettings(BaseModel):
    """
    Rules for a Japan game.

    Defaults match a freshly configured table: handicap balls 5 and 9,
    order change every 10 racks (disabled), one x2 multiplier (disabled).
    """

    model_config = ConfigDict(frozen=True)

    handicap_balls: tuple[int, ...] = (5, 9)
    multipliers: tuple[JapanMultiplier, ...] = (JapanMultiplier(label="x2", value=2),)
    multipliers_enabled: bool = False
    deduction_enabled: bool = False
    deductions: tuple[JapanDeduction, ...] = ()
    order_change_interval: int = 10
    order_change_enabled: bool = False


class ChessClockSettings(BaseModel):
    """Chess clock options. Carried through games and rematches unmodified."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    individual_time: bool = False
    time_limit_minutes: int = Field(default=30, ge=1)
    warning_enabled: bool = False
    warning_minutes: int = Field(default=3, ge=0)
    player_time_limits: tuple[int, ...] = ()


def validate_japan_settings(settings: JapanSettings) -> None:
    """Validate that Japan settings can be played.

    Raises UnsupportedSettingsError listing every problem found.
    """
    errors: list[str] = []

    if settings.order_change_interval < 1:
        errors.append(f"order_change_interval={settings.order_change_interval} must be at least 1")

    unknown_balls = sorted(set(settings.handicap_balls) - set(JAPAN_BALL_NUMBERS))
    if unknown_balls:
        errors.append(f"handicap_balls contains unknown balls {unknown_balls}")

    if len(set(settings.handicap_balls)) != len(settings.handicap_balls):
        errors.append("handicap_balls contains duplicates")

    if not JAPAN_REQUIRED_HANDICAP_BALLS.intersection(settings.handicap_balls):
        errors.append("handicap_balls must include ball 9 or ball 10")

    errors.extend(
        f"multiplier {multiplier.label!r} value {multiplier.value} is outside {MIN_MULTIPLIER}-{MAX_MULTIPLIER}"
        for multiplier in settings.multipliers
        if not (MIN_MULTIPLIER <= multiplier.value <= MAX_MULTIPLIER)
    )

    errors.extend(
        f"deduction {deduction.label!r} value {deduction.value} must be positive"
        for deduction in settings.deductions
        if deduction.value < 1
    )

    if errors:
        raise UnsupportedSettingsError("; ".join(errors))


def clamp_multiplier(value: int) -> int:
    """Clamp a multiplier value into the supported range."""
    return max(MIN_MULTIPLIER, min(MAX_MULTIPLIER, value))

"""
Bowling frame bookkeeping and score calculation.

Frames 1-9 carry a cumulative score only once every roll their bonus
depends on has been thrown; frame 10 has nothing after it and reports
previous cumulative plus whatever it has rolled so far. Scores are
recomputed from scratch on every change because a single roll can resolve
bonuses several frames back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cuescore.logic.enums import RollMark
from cuescore.logic.exceptions import InvalidRollError
from cuescore.logic.state import MAX_PINS, NUM_BOWLING_FRAMES, BowlingFrame

if TYPE_CHECKING:
    from collections.abc import Sequence

LAST_FRAME_INDEX = NUM_BOWLING_FRAMES - 1
PERFECT_GAME = 300


def init_frames() -> tuple[BowlingFrame, ...]:
    """Return ten empty frames."""
    return tuple(BowlingFrame(frame_number=i + 1) for i in range(NUM_BOWLING_FRAMES))


def update_frame_status(frame: BowlingFrame, frame_index: int) -> BowlingFrame:
    """
    Return frame with strike/spare/complete flags derived from its rolls.

    Frames 1-9 complete on a strike or after two rolls. Frame 10 needs a
    third roll when it opens with a strike or a spare, otherwise two.
    """
    rolls = frame.rolls
    is_strike = len(rolls) >= 1 and rolls[0] == MAX_PINS
    is_spare = not is_strike and len(rolls) >= 2 and rolls[0] + rolls[1] == MAX_PINS  # noqa: PLR2004
    if frame_index < LAST_FRAME_INDEX:
        is_complete = is_strike or len(rolls) >= 2  # noqa: PLR2004
    else:
        needed = 3 if is_strike or is_spare else 2
        is_complete = len(rolls) >= needed
    return frame.model_copy(update={"is_strike": is_strike, "is_spare": is_spare, "is_complete": is_complete})


def _rolls_after(frames: Sequence[BowlingFrame], frame_index: int) -> list[int]:
    return [pins for frame in frames[frame_index + 1 :] for pins in frame.rolls]


def _bonus_roll_count(frame: BowlingFrame) -> int:
    if frame.is_strike:
        return 2
    if frame.is_spare:
        return 1
    return 0


def _frame_points(frames: Sequence[BowlingFrame], frame_index: int) -> int | None:
    """Points earned by a single frame, or None while they cannot be resolved."""
    frame = frames[frame_index]
    if frame_index == LAST_FRAME_INDEX:
        return sum(frame.rolls) if frame.rolls else None
    if not frame.is_complete:
        return None
    # a strike followed by a strike chains into the frame after, which the
    # flattened roll sequence handles naturally
    needed = _bonus_roll_count(frame)
    bonus = _rolls_after(frames, frame_index)[:needed]
    if len(bonus) < needed:
        return None
    return sum(frame.rolls) + sum(bonus)


def calculate_scores(frames: Sequence[BowlingFrame]) -> tuple[BowlingFrame, ...]:
    """
    Return frames with cumulative scores filled in.

    A frame's score stays None until its own bonus is known and every
    earlier frame is scored. The input is not modified.
    """
    result: list[BowlingFrame] = []
    running = 0
    resolved = True
    for index, frame in enumerate(frames):
        points = _frame_points(frames, index) if resolved else None
        if points is None:
            resolved = False
            result.append(frame.model_copy(update={"score": None}))
            continue
        running += points
        result.append(frame.model_copy(update={"score": running}))
    return tuple(result)


def is_score_finalized(frame_index: int, frames: Sequence[BowlingFrame]) -> bool:
    """
    Check whether the score shown for a frame can no longer change.

    Agrees with calculate_scores: a complete frame is final exactly when it
    and every frame before it can be resolved from the rolls thrown so far.
    """
    if not frames[frame_index].is_complete:
        return False
    return all(_frame_points(frames, i) is not None for i in range(frame_index + 1))


def total_score(frames: Sequence[BowlingFrame]) -> int:
    """Return the last resolved cumulative score (0 before any frame is scored)."""
    total = 0
    for frame in frames:
        if frame.score is None:
            break
        total = frame.score
    return total


def current_frame_index(frames: Sequence[BowlingFrame]) -> int | None:
    """Index of the first incomplete frame, None once the game is over."""
    for index, frame in enumerate(frames):
        if not frame.is_complete:
            return index
    return None


def _open_first_roll(rolls: Sequence[int]) -> int | None:
    """First roll of the current sub-frame when it still has a ball to come, else None."""
    first: int | None = None
    for pins in rolls:
        if first is None:
            if pins != MAX_PINS:
                first = pins
        else:
            first = None
    return first


def standing_pins(frame: BowlingFrame) -> int:
    """Pins standing for the next ball in this frame."""
    first = _open_first_roll(frame.rolls)
    return MAX_PINS if first is None else MAX_PINS - first


def add_roll(frames: Sequence[BowlingFrame], pins: int) -> tuple[BowlingFrame, ...]:
    """
    Record a roll on the first incomplete frame and rescore.

    Raises:
        InvalidRollError: If pins is outside 0-10 or exceeds the standing pins

    """
    if not (0 <= pins <= MAX_PINS):
        raise InvalidRollError(f"pins must be in [0, {MAX_PINS}], got {pins}")
    index = current_frame_index(frames)
    if index is None:
        return tuple(frames)
    frame = frames[index]
    standing = standing_pins(frame)
    if pins > standing:
        raise InvalidRollError(f"only {standing} pins standing in frame {frame.frame_number}, got {pins}")
    updated = update_frame_status(frame.model_copy(update={"rolls": (*frame.rolls, pins)}), index)
    return calculate_scores((*frames[:index], updated, *frames[index + 1 :]))


def undo_roll(frames: Sequence[BowlingFrame]) -> tuple[BowlingFrame, ...]:
    """
    Drop the most recent roll and rescore every frame.

    Flags of the affected frame are rederived from its remaining rolls and
    scores from that frame on are cleared before the full recompute.
    No rolls at all is a no-op.
    """
    last_index = next((i for i in range(len(frames) - 1, -1, -1) if frames[i].rolls), None)
    if last_index is None:
        return tuple(frames)
    frame = frames[last_index]
    trimmed = update_frame_status(frame.model_copy(update={"rolls": frame.rolls[:-1]}), last_index)
    cleared = [
        f.model_copy(update={"score": None}) if i >= last_index else f
        for i, f in enumerate((*frames[:last_index], trimmed, *frames[last_index + 1 :]))
    ]
    return calculate_scores(cleared)


def roll_marks(frame: BowlingFrame) -> tuple[str, ...]:
    """
    Display marks for each roll in a frame.

    X is a strike and / a spare. 0 shows as G on the first ball of a
    sub-frame and - on the second. In frame 10 every ball after a strike
    or a completed spare starts a fresh sub-frame.
    """
    marks: list[str] = []
    first: int | None = None
    for pins in frame.rolls:
        if first is None:
            if pins == MAX_PINS:
                marks.append(RollMark.STRIKE)
                continue
            marks.append(RollMark.GUTTER if pins == 0 else str(pins))
            first = pins
            continue
        if first + pins == MAX_PINS:
            marks.append(RollMark.SPARE)
        else:
            marks.append(RollMark.MISS if pins == 0 else str(pins))
        first = None
    return tuple(marks)

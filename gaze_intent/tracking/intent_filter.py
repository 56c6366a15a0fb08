"""
Time-windowed dominant direction for the interactive selection loop.

Unlike TemporalSmoother the window is measured in wall-clock milliseconds, so
a slow camera still averages over the same duration as a fast one.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional, Sequence

from gaze_intent import constants as const
from gaze_intent.constants import GazeDirection, IntentDirection
from gaze_intent.tracking.classifier import GazeOutput
from gaze_intent.tracking.smoothing import majority_with_recency


@dataclass(frozen=True)
class IntentSample:
    at_ms: float
    direction: IntentDirection


def dominant_intent_direction(directions: Sequence[IntentDirection]) -> IntentDirection:
    return majority_with_recency(directions, IntentDirection.NONE)


def append_and_get_dominant_intent_direction(
    samples: Deque[IntentSample],
    next_direction: IntentDirection,
    now_ms: float,
    window_ms: int = const.DEFAULT_INTENT_WINDOW_MS,
) -> IntentDirection:
    """
    Append a sample, evict samples older than now_ms - window_ms, vote.

    samples is modified in place; the caller owns it.
    """
    window_ms = max(1, int(window_ms))
    cutoff = now_ms - window_ms

    samples.append(IntentSample(at_ms=now_ms, direction=next_direction))
    while samples and samples[0].at_ms < cutoff:
        samples.popleft()

    return dominant_intent_direction([s.direction for s in samples])


def intent_direction_from_output(
    output: Optional[GazeOutput],
    min_side_confidence: float = const.DEFAULT_MIN_SIDE_CONFIDENCE,
) -> IntentDirection:
    """
    Translate a classifier output into the selection loop's vocabulary.

    Low-confidence LEFT/RIGHT and lost tracking both become NONE.
    """
    if output is None:
        return IntentDirection.NONE
    if output.direction in (GazeDirection.LEFT, GazeDirection.RIGHT):
        if output.confidence >= min_side_confidence:
            return IntentDirection(output.direction.value)
        return IntentDirection.NONE
    if output.direction == GazeDirection.CENTER:
        return IntentDirection.CENTER
    return IntentDirection.NONE


class IntentFilter:
    """Owns a sample list and applies append_and_get_dominant_intent_direction"""

    def __init__(self, window_ms: int = const.DEFAULT_INTENT_WINDOW_MS):
        self.window_ms = max(1, int(window_ms))
        self.samples: Deque[IntentSample] = deque()

    def update(self, direction: IntentDirection, now_ms: float) -> IntentDirection:
        return append_and_get_dominant_intent_direction(
            self.samples, direction, now_ms, self.window_ms
        )

    def reset(self):
        self.samples.clear()

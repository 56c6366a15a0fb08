"""
Post-calibration validation scoring.

Frames are classifier predictions recorded while the user looked at known
validation targets. CENTER accuracy is gated separately because spurious
LEFT/RIGHT at rest interferes with confirm gestures more than LEFT/RIGHT
confusion does.
"""

from dataclasses import dataclass
from typing import Sequence

from gaze_intent import constants as const
from gaze_intent.constants import CalibrationLabel, GazeDirection


@dataclass(frozen=True)
class ValidationFrame:
    point_id: str
    expected: CalibrationLabel
    predicted: GazeDirection

    @property
    def correct(self) -> bool:
        return self.predicted.value == self.expected.value


@dataclass(frozen=True)
class ValidationMetrics:
    passed: bool
    frame_count: int
    center_frame_count: int
    overall_accuracy: float
    center_accuracy: float


def evaluate_validation_frames(
    frames: Sequence[ValidationFrame],
    center_point_id: str = const.DEFAULT_CENTER_POINT_ID,
    min_overall_accuracy: float = const.DEFAULT_MIN_OVERALL_ACCURACY,
    min_center_accuracy: float = const.DEFAULT_MIN_CENTER_ACCURACY,
) -> ValidationMetrics:
    """
    Score validation frames against both accuracy gates.

    No frames, or no frames at the center target, scores 0 rather than
    passing on an empty ratio.
    """
    if len(frames) == 0:
        return ValidationMetrics(
            passed=False,
            frame_count=0,
            center_frame_count=0,
            overall_accuracy=0.0,
            center_accuracy=0.0,
        )

    correct = 0
    center_correct = 0
    center_total = 0

    for frame in frames:
        if frame.correct:
            correct += 1
        if frame.point_id == center_point_id:
            center_total += 1
            if frame.predicted == GazeDirection.CENTER:
                center_correct += 1

    overall_accuracy = correct / len(frames)
    center_accuracy = center_correct / center_total if center_total > 0 else 0.0
    passed = overall_accuracy >= min_overall_accuracy and center_accuracy >= min_center_accuracy

    return ValidationMetrics(
        passed=passed,
        frame_count=len(frames),
        center_frame_count=center_total,
        overall_accuracy=overall_accuracy,
        center_accuracy=center_accuracy,
    )

"""
Live direction classification against a calibration profile.
"""

from dataclasses import dataclass
from typing import Optional

from gaze_intent import constants as const
from gaze_intent.calibration.profile_builder import CalibrationProfile
from gaze_intent.constants import GazeDirection
from gaze_intent.data_acquisition.feature_extractor import GazeFeatures
from gaze_intent.utils.stats import clamp


@dataclass(frozen=True)
class GazeOutput:
    """What the UI / interaction layer receives each frame"""
    direction: GazeDirection
    confidence: float
    features: Optional[GazeFeatures] = None


def classify_direction(features: GazeFeatures, profile: CalibrationProfile) -> GazeOutput:
    """
    Map a feature to LEFT / RIGHT / CENTER.

    Inside the deadzone the confidence is a flat 0.5; it does not rank how
    centered the gaze is. Outside, confidence ramps linearly from the deadzone
    edge (0) to a score magnitude of 1 (1).
    """
    score = profile.score(features.x)
    abs_score = abs(score)
    deadzone = profile.deadzone_score

    if abs_score <= deadzone:
        return GazeOutput(GazeDirection.CENTER, const.CENTER_CONFIDENCE)

    confidence = clamp((abs_score - deadzone) / (1 - deadzone), 0.0, 1.0)
    direction = GazeDirection.LEFT if score < 0 else GazeDirection.RIGHT
    return GazeOutput(direction, confidence)

"""
Static calibration and validation targets.

Screen positions are percentages of the viewport. Three physical points share
each class label; their cleaned samples are pooled per label when fitting.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from gaze_intent.constants import CalibrationLabel


@dataclass(frozen=True)
class CalibrationPointDef:
    point_id: str
    class_label: CalibrationLabel
    label: str
    hint: str
    x_pct: float
    y_pct: float


@dataclass(frozen=True)
class ValidationPointDef:
    point_id: str
    expected: CalibrationLabel
    label: str
    x_pct: float
    y_pct: float


CALIBRATION_POINTS: Tuple[CalibrationPointDef, ...] = (
    CalibrationPointDef("center-mid", CalibrationLabel.CENTER, "Center",
                        "Look at the center dot.", 50, 50),
    CalibrationPointDef("left-mid", CalibrationLabel.LEFT, "Left",
                        "Move eyes left (not your head).", 18, 50),
    CalibrationPointDef("right-mid", CalibrationLabel.RIGHT, "Right",
                        "Move eyes right (not your head).", 82, 50),
    CalibrationPointDef("left-top", CalibrationLabel.LEFT, "Left Top",
                        "Look at the top-left dot.", 18, 28),
    CalibrationPointDef("center-top", CalibrationLabel.CENTER, "Center Top",
                        "Look at the top-center dot.", 50, 28),
    CalibrationPointDef("right-top", CalibrationLabel.RIGHT, "Right Top",
                        "Look at the top-right dot.", 82, 28),
    CalibrationPointDef("right-bottom", CalibrationLabel.RIGHT, "Right Bottom",
                        "Look at the bottom-right dot.", 82, 72),
    CalibrationPointDef("center-bottom", CalibrationLabel.CENTER, "Center Bottom",
                        "Look at the bottom-center dot.", 50, 72),
    CalibrationPointDef("left-bottom", CalibrationLabel.LEFT, "Left Bottom",
                        "Look at the bottom-left dot.", 18, 72),
)

VALIDATION_POINTS: Tuple[ValidationPointDef, ...] = (
    ValidationPointDef("validation-left", CalibrationLabel.LEFT, "Validation Left", 30, 40),
    ValidationPointDef("validation-center", CalibrationLabel.CENTER, "Validation Center", 50, 60),
    ValidationPointDef("validation-right", CalibrationLabel.RIGHT, "Validation Right", 70, 40),
)

CALIBRATION_POINT_BY_ID: Dict[str, CalibrationPointDef] = {
    point.point_id: point for point in CALIBRATION_POINTS
}

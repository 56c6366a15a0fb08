"""
Shared labels and default tuning values for the gaze intent engine.
"""

from enum import Enum


class GazeDirection(str, Enum):
    """Live output label of the classifier / smoother."""
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    CENTER = "CENTER"
    NO_FACE = "NO_FACE"
    NO_IRIS = "NO_IRIS"


class CalibrationLabel(str, Enum):
    """Class label attached to a calibration or validation target."""
    LEFT = "LEFT"
    CENTER = "CENTER"
    RIGHT = "RIGHT"


class IntentDirection(str, Enum):
    """Direction vocabulary of the interactive selection loop."""
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    CENTER = "CENTER"
    NONE = "NONE"


class QualityReason(str, Enum):
    OK = "OK"
    LOW_SAMPLE_COUNT = "LOW_SAMPLE_COUNT"
    JITTER_X = "JITTER_X"
    JITTER_Y = "JITTER_Y"


class BuildFailureReason(str, Enum):
    INSUFFICIENT_CLEAN_SAMPLES = "INSUFFICIENT_CLEAN_SAMPLES"


class AttemptStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


# Regression targets per class label
LABEL_TARGETS = {
    CalibrationLabel.LEFT: -1.0,
    CalibrationLabel.CENTER: 0.0,
    CalibrationLabel.RIGHT: 1.0,
}

# Landmark geometry
FACE_MESH_WITH_IRIS_LANDMARKS = 478
IRIS_POINTS_PER_EYE = 5

# Point quality gate
DEFAULT_MIN_SAMPLES = 20
DEFAULT_MAX_STDDEV_X = 0.03
DEFAULT_MAX_STDDEV_Y = 0.04

# Outlier trimming
DEFAULT_MAD_MULTIPLIER = 2.5
MIN_TRIM_TOLERANCE = 1e-4

# Profile fitting
PROFILE_VERSION = 2
DEFAULT_RIDGE_LAMBDA = 0.25
DEFAULT_DEADZONE_MULTIPLIER = 2.0
DEFAULT_MIN_SAMPLES_PER_BUCKET = 25
MIN_DEADZONE_SCORE = 0.05
MAX_DEADZONE_SCORE = 0.9
DEADZONE_MAD_FACTOR = 2.0
CENTER_CONFIDENCE = 0.5

# Session queue
DEFAULT_MAX_RETRIES = 4

# Temporal filtering
DEFAULT_SMOOTHING_WINDOW = 7
DEFAULT_INTENT_WINDOW_MS = 2000
DEFAULT_MIN_SIDE_CONFIDENCE = 0.45

# Validation
DEFAULT_CENTER_POINT_ID = "validation-center"
DEFAULT_MIN_OVERALL_ACCURACY = 0.8
DEFAULT_MIN_CENTER_ACCURACY = 0.7

# Persistence
ATTEMPT_RECORD_VERSION = 1

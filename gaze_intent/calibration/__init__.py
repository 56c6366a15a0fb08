"""
Calibration Module

Includes:
- Static 9-point calibration and 3-point validation targets
- Point quality gate and MAD outlier trimming
- Ridge-regression profile builder
- Profile / attempt-record persistence

The session queue and run driver live in gaze_intent.calibration.session.
"""

from gaze_intent.calibration.points import (
    CALIBRATION_POINTS,
    VALIDATION_POINTS,
    CalibrationPointDef,
    ValidationPointDef,
)
from gaze_intent.calibration.quality import (
    CalibrationSample,
    PointQualityResult,
    evaluate_point_quality,
    trim_outliers_by_mad,
)
from gaze_intent.calibration.profile_builder import (
    CalibrationProfile,
    ProfileBuildResult,
    RegressionParams,
    build_calibration_profile,
    build_calibration_profile_from_point_samples,
)
from gaze_intent.calibration.storage import CalibrationAttemptRecord, CalibrationStore

__all__ = [
    'CALIBRATION_POINTS',
    'VALIDATION_POINTS',
    'CalibrationPointDef',
    'ValidationPointDef',
    'CalibrationSample',
    'PointQualityResult',
    'evaluate_point_quality',
    'trim_outliers_by_mad',
    'CalibrationProfile',
    'ProfileBuildResult',
    'RegressionParams',
    'build_calibration_profile',
    'build_calibration_profile_from_point_samples',
    'CalibrationAttemptRecord',
    'CalibrationStore',
]

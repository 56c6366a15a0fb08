"""
Metrics Module

Includes:
- Post-calibration validation scoring (overall and center accuracy gates)
"""

from gaze_intent.metrics.validation import (
    ValidationFrame,
    ValidationMetrics,
    evaluate_validation_frames
)

__all__ = [
    'ValidationFrame',
    'ValidationMetrics',
    'evaluate_validation_frames'
]

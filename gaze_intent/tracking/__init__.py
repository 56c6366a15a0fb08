"""
Live Tracking Module

Includes:
- Direction classifier (profile + feature -> direction, confidence)
- Temporal smoother (count-windowed majority vote)
- Intent filter (time-windowed dominant direction)
- Per-frame pipeline tying detection output to a smoothed direction
"""

from gaze_intent.tracking.classifier import GazeOutput, classify_direction
from gaze_intent.tracking.smoothing import TemporalSmoother, majority_vote
from gaze_intent.tracking.intent_filter import (
    IntentFilter,
    IntentSample,
    append_and_get_dominant_intent_direction,
    dominant_intent_direction,
    intent_direction_from_output,
)
from gaze_intent.tracking.pipeline import GazePipeline

__all__ = [
    'GazeOutput',
    'classify_direction',
    'TemporalSmoother',
    'majority_vote',
    'IntentFilter',
    'IntentSample',
    'append_and_get_dominant_intent_direction',
    'dominant_intent_direction',
    'intent_direction_from_output',
    'GazePipeline',
]

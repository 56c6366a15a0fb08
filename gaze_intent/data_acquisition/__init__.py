"""
Data Acquisition Module
Turns externally detected face landmarks into per-frame gaze features
"""

from gaze_intent.data_acquisition.landmarks import (
    Landmark,
    coerce_landmarks,
    select_largest_face,
)
from gaze_intent.data_acquisition.feature_extractor import (
    EyeFeatures,
    GazeFeatures,
    FeatureExtraction,
    extract_gaze_features,
)

__all__ = [
    'Landmark',
    'coerce_landmarks',
    'select_largest_face',
    'EyeFeatures',
    'GazeFeatures',
    'FeatureExtraction',
    'extract_gaze_features',
]

"""
Per-frame gaze pipeline: detected faces -> features -> smoothed direction.

Called once per processed video frame by the rendering loop. Losing the face
or the iris, or running without a profile, clears the smoothing window so no
stale votes leak into the next tracked frame.
"""

from typing import Any, Optional, Sequence

from gaze_intent import constants as const
from gaze_intent.calibration.profile_builder import CalibrationProfile
from gaze_intent.constants import GazeDirection
from gaze_intent.data_acquisition.feature_extractor import FeatureExtraction, extract_gaze_features
from gaze_intent.data_acquisition.landmarks import select_largest_face
from gaze_intent.tracking.classifier import GazeOutput, classify_direction
from gaze_intent.tracking.smoothing import TemporalSmoother


class GazePipeline:
    def __init__(
        self,
        profile: Optional[CalibrationProfile] = None,
        smoothing_window: int = const.DEFAULT_SMOOTHING_WINDOW,
    ):
        self.profile = profile
        self.smoother = TemporalSmoother(smoothing_window)
        self.has_face = False
        self.has_iris = False

    def set_profile(self, profile: Optional[CalibrationProfile]):
        self.profile = profile
        self.smoother.reset()

    def set_smoothing_window(self, window_size: int):
        self.smoother.resize(window_size)

    def process(self, faces: Sequence[Sequence[Any]]) -> GazeOutput:
        """
        Classify one frame.

        Args:
            faces: Landmark lists for every face the detector found

        Returns:
            GazeOutput with the smoothed direction and the raw frame confidence
        """
        selected = select_largest_face(faces)
        if selected is None:
            return self.process_extraction(None)
        return self.process_extraction(extract_gaze_features(selected))

    def process_extraction(self, extraction: Optional[FeatureExtraction]) -> GazeOutput:
        """Classify an already extracted frame; None means no face was found"""
        if extraction is None:
            self.has_face = self.has_iris = False
            self.smoother.reset()
            return GazeOutput(GazeDirection.NO_FACE, 0.0)

        self.has_face = True
        self.has_iris = extraction.has_iris

        if not extraction.has_iris:
            self.smoother.reset()
            return GazeOutput(GazeDirection.NO_IRIS, 0.0, extraction.features)

        if self.profile is None:
            self.smoother.reset()
            return GazeOutput(GazeDirection.CENTER, 0.0, extraction.features)

        classified = classify_direction(extraction.features, self.profile)
        smoothed = self.smoother.push(classified.direction)
        return GazeOutput(smoothed, classified.confidence, extraction.features)

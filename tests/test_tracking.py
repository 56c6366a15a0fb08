"""
Tests for direction classification, temporal smoothing, the intent filter
and the per-frame pipeline
"""

from collections import deque

import pytest

from gaze_intent.calibration.profile_builder import CalibrationProfile, RegressionParams
from gaze_intent.constants import GazeDirection, IntentDirection
from gaze_intent.data_acquisition.feature_extractor import FeatureExtraction, GazeFeatures
from gaze_intent.tracking.classifier import GazeOutput, classify_direction
from gaze_intent.tracking.intent_filter import (
    IntentFilter,
    IntentSample,
    append_and_get_dominant_intent_direction,
    dominant_intent_direction,
    intent_direction_from_output,
)
from gaze_intent.tracking.pipeline import GazePipeline
from gaze_intent.tracking.smoothing import TemporalSmoother, majority_vote

LEFT = GazeDirection.LEFT
RIGHT = GazeDirection.RIGHT
CENTER = GazeDirection.CENTER


@pytest.fixture
def profile():
    """score = 4x - 2, so x = 0.5 sits at zero"""
    return CalibrationProfile(
        created_at="2024-01-01T00:00:00.000Z",
        regression=RegressionParams(w=4.0, b=-2.0, lam=0.25),
        deadzone_score=0.15,
    )


def feature(x):
    return FeatureExtraction(has_iris=True, features=GazeFeatures(x=x, y=0.5))


class TestClassifyDirection:
    """Tests for classify_direction"""

    def test_inside_deadzone_is_center(self, profile):
        output = classify_direction(GazeFeatures(x=0.5), profile)
        assert output.direction == CENTER
        assert output.confidence == 0.5

    def test_left_confidence_ramp(self, profile):
        output = classify_direction(GazeFeatures(x=0.35), profile)
        assert output.direction == LEFT
        assert output.confidence == pytest.approx(0.45 / 0.85)

    def test_right_confidence_ramp(self, profile):
        output = classify_direction(GazeFeatures(x=0.7), profile)
        assert output.direction == RIGHT
        assert output.confidence == pytest.approx(0.65 / 0.85)

    def test_confidence_clamped_to_one(self, profile):
        assert classify_direction(GazeFeatures(x=1.0), profile).confidence == 1.0
        assert classify_direction(GazeFeatures(x=-1.0), profile).confidence == 1.0


class TestTemporalSmoother:
    """Tests for majority_vote and TemporalSmoother"""

    def test_empty_vote_is_no_face(self):
        assert majority_vote([]) == GazeDirection.NO_FACE

    def test_majority_wins(self):
        assert majority_vote([LEFT, LEFT, RIGHT]) == LEFT

    def test_tie_goes_to_most_recent(self):
        assert majority_vote([LEFT, RIGHT]) == RIGHT
        assert majority_vote([RIGHT, LEFT, LEFT, RIGHT, CENTER]) == RIGHT

    def test_window_bounded(self):
        smoother = TemporalSmoother(window_size=3)
        for label in [LEFT, LEFT, LEFT, RIGHT, RIGHT]:
            result = smoother.push(label)
        assert len(smoother) == 3
        assert result == RIGHT

    def test_reset_and_resize(self):
        smoother = TemporalSmoother(window_size=5)
        smoother.push(LEFT)
        smoother.reset()
        assert smoother.current() == GazeDirection.NO_FACE

        smoother.push(LEFT)
        smoother.resize(2)
        assert len(smoother) == 0
        assert smoother.window_size == 2

    def test_window_size_at_least_one(self):
        smoother = TemporalSmoother(window_size=0)
        assert smoother.window_size == 1
        smoother.push(LEFT)
        assert smoother.push(RIGHT) == RIGHT


class TestIntentFilter:
    """Tests for the time-windowed intent filter"""

    def test_dominant_of_nothing_is_none(self):
        assert dominant_intent_direction([]) == IntentDirection.NONE

    def test_evicts_samples_outside_window(self):
        samples = deque()
        append_and_get_dominant_intent_direction(samples, IntentDirection.LEFT, 0, window_ms=1000)
        append_and_get_dominant_intent_direction(samples, IntentDirection.LEFT, 100, window_ms=1000)
        result = append_and_get_dominant_intent_direction(samples, IntentDirection.RIGHT, 1050, window_ms=1000)
        assert [s.at_ms for s in samples] == [100, 1050]
        assert result == IntentDirection.RIGHT

    def test_whole_window_evicted(self):
        """Only the new sample survives when every older one is stale"""
        samples = deque()
        append_and_get_dominant_intent_direction(samples, IntentDirection.LEFT, 0, window_ms=300)
        append_and_get_dominant_intent_direction(samples, IntentDirection.LEFT, 100, window_ms=300)
        result = append_and_get_dominant_intent_direction(samples, IntentDirection.RIGHT, 450, window_ms=300)
        assert list(samples) == [IntentSample(450, IntentDirection.RIGHT)]
        assert result == IntentDirection.RIGHT

    def test_boundary_sample_is_kept(self):
        samples = deque([IntentSample(0, IntentDirection.LEFT)])
        result = append_and_get_dominant_intent_direction(samples, IntentDirection.NONE, 2000)
        assert len(samples) == 2
        assert result == IntentDirection.NONE

    def test_filter_majority_over_window(self):
        intent = IntentFilter(window_ms=2000)
        for t in range(0, 500, 100):
            intent.update(IntentDirection.LEFT, t)
        assert intent.update(IntentDirection.CENTER, 600) == IntentDirection.LEFT
        intent.reset()
        assert intent.update(IntentDirection.CENTER, 700) == IntentDirection.CENTER

    def test_direction_from_output(self):
        assert intent_direction_from_output(None) == IntentDirection.NONE
        assert intent_direction_from_output(GazeOutput(LEFT, 0.6)) == IntentDirection.LEFT
        assert intent_direction_from_output(GazeOutput(RIGHT, 0.45)) == IntentDirection.RIGHT
        assert intent_direction_from_output(GazeOutput(RIGHT, 0.3)) == IntentDirection.NONE
        assert intent_direction_from_output(GazeOutput(CENTER, 0.5)) == IntentDirection.CENTER
        assert intent_direction_from_output(GazeOutput(GazeDirection.NO_IRIS, 0.0)) == IntentDirection.NONE


class TestGazePipeline:
    """Tests for GazePipeline"""

    def test_no_face(self, profile):
        pipeline = GazePipeline(profile)
        output = pipeline.process([])
        assert output.direction == GazeDirection.NO_FACE
        assert output.confidence == 0.0
        assert pipeline.has_face is False

    def test_no_iris(self, profile, face_factory):
        pipeline = GazePipeline(profile)
        output = pipeline.process([face_factory(with_iris=False)])
        assert output.direction == GazeDirection.NO_IRIS
        assert pipeline.has_face is True
        assert pipeline.has_iris is False

    def test_uncalibrated_reads_center(self, face_factory):
        pipeline = GazePipeline(None)
        output = pipeline.process([face_factory(left_iris=(0.62, 0.40))])
        assert output.direction == CENTER
        assert output.confidence == 0.0
        assert output.features.x == pytest.approx(0.35)

    def test_classifies_face(self, profile, face_factory):
        pipeline = GazePipeline(profile)
        output = pipeline.process([face_factory(left_iris=(0.62, 0.40))])
        assert output.direction == LEFT
        assert output.confidence == pytest.approx(0.45 / 0.85)

        output = pipeline.process([face_factory(right_iris=(0.38, 0.40), left_iris=(0.68, 0.40))])
        assert output.features.x == pytest.approx(0.8)

    def test_smoothed_direction_with_raw_confidence(self, profile):
        pipeline = GazePipeline(profile, smoothing_window=5)
        pipeline.process_extraction(feature(0.35))
        pipeline.process_extraction(feature(0.35))
        output = pipeline.process_extraction(feature(0.5))
        assert output.direction == LEFT
        assert output.confidence == 0.5

    def test_tracking_loss_clears_history(self, profile):
        pipeline = GazePipeline(profile, smoothing_window=5)
        pipeline.process_extraction(feature(0.35))
        pipeline.process_extraction(feature(0.35))
        pipeline.process_extraction(None)
        assert pipeline.process_extraction(feature(0.5)).direction == CENTER

        pipeline.process_extraction(feature(0.35))
        pipeline.process_extraction(FeatureExtraction(has_iris=False, features=GazeFeatures()))
        assert pipeline.process_extraction(feature(0.5)).direction == CENTER

    def test_profile_change_resets_smoother(self, profile):
        pipeline = GazePipeline(profile, smoothing_window=5)
        pipeline.process_extraction(feature(0.35))
        pipeline.set_profile(profile)
        assert len(pipeline.smoother) == 0

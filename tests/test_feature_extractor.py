"""
Tests for landmark handling and gaze feature extraction
"""

import math

import pytest

from gaze_intent.data_acquisition.feature_extractor import extract_gaze_features
from gaze_intent.data_acquisition.landmarks import Landmark, select_largest_face


class TestExtractGazeFeatures:
    """Tests for extract_gaze_features"""

    def test_partial_mesh_has_no_iris(self, face_factory):
        """Fewer than 468 landmarks yields the neutral feature"""
        result = extract_gaze_features(face_factory(size=300))
        assert result.has_iris is False
        assert result.features.x == 0.5
        assert result.features.y == 0.5

    def test_mesh_without_iris_points(self, face_factory):
        """A 468-point mesh has no iris refinement"""
        result = extract_gaze_features(face_factory(with_iris=False))
        assert result.has_iris is False
        assert (result.features.x, result.features.y) == (0.5, 0.5)
        assert result.features.left_eye is None

    def test_combined_feature_is_mean_of_eyes(self, face_factory):
        """Right iris centred (0.5), left iris at 20% of its eye (0.2)"""
        result = extract_gaze_features(face_factory(right_iris=(0.35, 0.40), left_iris=(0.62, 0.40)))
        assert result.has_iris is True
        assert result.features.right_eye.x_ratio == pytest.approx(0.5)
        assert result.features.left_eye.x_ratio == pytest.approx(0.2)
        assert result.features.x == pytest.approx(0.35)
        assert result.features.y == pytest.approx(0.5)

    def test_corners_and_lids_are_ordered(self, face_factory):
        """Swapped corner/lid indices give the same ratios"""
        face = face_factory(right_iris=(0.32, 0.39))
        face[33], face[133] = face[133], face[33]
        face[159], face[145] = face[145], face[159]
        eye = extract_gaze_features(face).features.right_eye
        assert eye.left_corner == pytest.approx((0.30, 0.40))
        assert eye.upper_lid == pytest.approx((0.35, 0.38))
        assert eye.x_ratio == pytest.approx(0.2)
        assert eye.y_ratio == pytest.approx(0.25)

    def test_degenerate_span_returns_half(self, face_factory):
        """Zero-width eye collapses to exactly 0.5"""
        face = face_factory(right_iris=(0.9, 0.9))
        face[133] = Landmark(0.30, 0.40)
        eye = extract_gaze_features(face).features.right_eye
        assert eye.x_ratio == 0.5

    def test_non_finite_geometry_returns_half(self, face_factory):
        """NaN iris coordinates do not leak into the feature"""
        face = face_factory(right_iris=(math.nan, math.nan))
        result = extract_gaze_features(face)
        assert result.features.right_eye.x_ratio == 0.5
        assert result.features.right_eye.y_ratio == 0.5
        assert math.isfinite(result.features.x)

    def test_accepts_tuples_and_dicts(self, face_factory):
        """Landmarks given as tuples or dicts are coerced"""
        face = face_factory()
        as_tuples = [(p.x, p.y) for p in face]
        as_dicts = [{'x': p.x, 'y': p.y, 'z': 0.0} for p in face]
        expected = extract_gaze_features(face).features.x
        assert extract_gaze_features(as_tuples).features.x == pytest.approx(expected)
        assert extract_gaze_features(as_dicts).features.x == pytest.approx(expected)

    def test_deterministic(self, face_factory):
        """Identical geometry gives identical features"""
        face = face_factory(right_iris=(0.33, 0.41))
        assert extract_gaze_features(face) == extract_gaze_features(list(face))


class TestSelectLargestFace:
    """Tests for select_largest_face"""

    def test_no_faces(self):
        assert select_largest_face([]) is None

    def test_picks_largest_bounding_box(self):
        small = [(0.4, 0.4), (0.5, 0.5)]
        large = [(0.1, 0.1), (0.9, 0.8)]
        selected = select_largest_face([small, large])
        assert selected == [Landmark(0.1, 0.1), Landmark(0.9, 0.8)]

"""
Iris-ratio gaze features from face mesh landmarks.

For each eye the iris centre is expressed as a ratio of the eye opening:
  x_ratio = (iris.x - left_corner.x) / (right_corner.x - left_corner.x)
  y_ratio = (iris.y - upper_lid.y) / (lower_lid.y - upper_lid.y)
The combined feature is the mean of both eyes. Degenerate spans (closed eye,
bad detection) collapse to 0.5 instead of producing inf/NaN.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from gaze_intent import constants as const
from gaze_intent.data_acquisition.landmarks import Landmark, coerce_landmarks

Point2 = Tuple[float, float]

# Face mesh indices
RIGHT_EYE_OUTER = 33
RIGHT_EYE_INNER = 133
LEFT_EYE_OUTER = 362
LEFT_EYE_INNER = 263

RIGHT_UPPER_LID = 159
RIGHT_LOWER_LID = 145
LEFT_UPPER_LID = 386
LEFT_LOWER_LID = 374

SAFE_RATIO_EPSILON = 1e-6


@dataclass(frozen=True)
class EyeFeatures:
    """Per-eye geometry, kept for diagnostic overlays only"""
    iris: Point2
    x_ratio: float
    y_ratio: float
    left_corner: Point2
    right_corner: Point2
    upper_lid: Point2
    lower_lid: Point2


@dataclass(frozen=True)
class GazeFeatures:
    x: float = 0.5
    y: float = 0.5
    left_eye: Optional[EyeFeatures] = None
    right_eye: Optional[EyeFeatures] = None


@dataclass(frozen=True)
class FeatureExtraction:
    has_iris: bool
    features: GazeFeatures


def _avg_point(points: Sequence[Landmark]) -> Point2:
    n = len(points)
    return (sum(p.x for p in points) / n, sum(p.y for p in points) / n)


def _safe_ratio(numerator: float, denominator: float) -> float:
    if (not math.isfinite(numerator) or not math.isfinite(denominator)
            or abs(denominator) < SAFE_RATIO_EPSILON):
        return 0.5
    return numerator / denominator


def _build_eye_features(iris: Point2, corner_a: Point2, corner_b: Point2,
                        lid_a: Point2, lid_b: Point2) -> EyeFeatures:
    left_corner, right_corner = (corner_a, corner_b) if corner_a[0] <= corner_b[0] else (corner_b, corner_a)
    upper_lid, lower_lid = (lid_a, lid_b) if lid_a[1] <= lid_b[1] else (lid_b, lid_a)

    x_ratio = _safe_ratio(iris[0] - left_corner[0], right_corner[0] - left_corner[0])
    y_ratio = _safe_ratio(iris[1] - upper_lid[1], lower_lid[1] - upper_lid[1])

    return EyeFeatures(
        iris=iris,
        x_ratio=x_ratio,
        y_ratio=y_ratio,
        left_corner=left_corner,
        right_corner=right_corner,
        upper_lid=upper_lid,
        lower_lid=lower_lid,
    )


def _xy(landmark: Landmark) -> Point2:
    return (landmark.x, landmark.y)


def extract_gaze_features(landmarks: Sequence[Any]) -> FeatureExtraction:
    """
    Reduce one face's landmarks to a normalized (x, y) gaze feature.

    Args:
        landmarks: Face mesh landmarks in canonical order (478 with iris refinement)

    Returns:
        FeatureExtraction; has_iris is False (with the neutral 0.5/0.5 feature)
        when the mesh is incomplete or carries no iris points.
    """
    base = GazeFeatures()

    # Partial mesh (< 468) or a full mesh without iris refinement (< 478):
    # face present, iris unknown
    if len(landmarks) < const.FACE_MESH_WITH_IRIS_LANDMARKS:
        return FeatureExtraction(has_iris=False, features=base)

    points = coerce_landmarks(landmarks)
    iris_points = points[-2 * const.IRIS_POINTS_PER_EYE:]
    right_iris = _avg_point(iris_points[:const.IRIS_POINTS_PER_EYE])
    left_iris = _avg_point(iris_points[const.IRIS_POINTS_PER_EYE:])

    right_eye = _build_eye_features(
        iris=right_iris,
        corner_a=_xy(points[RIGHT_EYE_OUTER]),
        corner_b=_xy(points[RIGHT_EYE_INNER]),
        lid_a=_xy(points[RIGHT_UPPER_LID]),
        lid_b=_xy(points[RIGHT_LOWER_LID]),
    )
    left_eye = _build_eye_features(
        iris=left_iris,
        corner_a=_xy(points[LEFT_EYE_OUTER]),
        corner_b=_xy(points[LEFT_EYE_INNER]),
        lid_a=_xy(points[LEFT_UPPER_LID]),
        lid_b=_xy(points[LEFT_LOWER_LID]),
    )

    return FeatureExtraction(
        has_iris=True,
        features=GazeFeatures(
            x=(right_eye.x_ratio + left_eye.x_ratio) / 2,
            y=(right_eye.y_ratio + left_eye.y_ratio) / 2,
            left_eye=left_eye,
            right_eye=right_eye,
        ),
    )

"""
Shared fixtures: synthetic face meshes and calibration samples
"""

import pytest

from gaze_intent.calibration.points import CALIBRATION_POINTS
from gaze_intent.calibration.quality import CalibrationSample
from gaze_intent.constants import CalibrationLabel
from gaze_intent.data_acquisition.landmarks import Landmark

CLASS_BASE_X = {
    CalibrationLabel.LEFT: 0.35,
    CalibrationLabel.CENTER: 0.5,
    CalibrationLabel.RIGHT: 0.65,
}


def build_face(right_iris=(0.35, 0.40), left_iris=(0.65, 0.40), with_iris=True, size=None):
    """
    Face mesh with eye corners/lids at fixed places and both irises at the
    given centres. Right eye spans x 0.30-0.40, left eye 0.60-0.70,
    lids at y 0.38 / 0.42.
    """
    points = [Landmark(0.5, 0.5) for _ in range(468)]
    points[33] = Landmark(0.30, 0.40)
    points[133] = Landmark(0.40, 0.40)
    points[159] = Landmark(0.35, 0.38)
    points[145] = Landmark(0.35, 0.42)
    points[362] = Landmark(0.60, 0.40)
    points[263] = Landmark(0.70, 0.40)
    points[386] = Landmark(0.65, 0.38)
    points[374] = Landmark(0.65, 0.42)

    if with_iris:
        points.extend(Landmark(*right_iris) for _ in range(5))
        points.extend(Landmark(*left_iris) for _ in range(5))

    if size is not None:
        points = points[:size]
    return points


def steady_samples(base_x, count=30, base_y=0.5, jitter_x=0.006, jitter_y=0.004):
    """Alternating +/- jitter around a base point"""
    return [
        CalibrationSample(
            base_x + (jitter_x if i % 2 == 0 else -jitter_x),
            base_y + (jitter_y if i % 2 == 0 else -jitter_y),
        )
        for i in range(count)
    ]


@pytest.fixture
def face_factory():
    return build_face


@pytest.fixture
def sample_factory():
    return steady_samples


@pytest.fixture
def clean_point_samples():
    """30 steady samples per calibration point at its class's base x"""
    return {
        point.point_id: steady_samples(CLASS_BASE_X[point.class_label])
        for point in CALIBRATION_POINTS
    }

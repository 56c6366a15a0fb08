"""
Landmark types and face selection.

Landmarks come from an external face/iris detector (MediaPipe FaceLandmarker
or compatible). Coordinates are normalized to [0, 1] relative to the frame.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence


@dataclass(frozen=True)
class Landmark:
    x: float
    y: float
    z: Optional[float] = None

    @classmethod
    def coerce(cls, value: Any) -> "Landmark":
        """
        Accept a Landmark, an object with x/y(/z) attributes (e.g. a MediaPipe
        NormalizedLandmark), a mapping, or an (x, y[, z]) sequence.
        """
        if isinstance(value, Landmark):
            return value
        if isinstance(value, dict):
            return cls(float(value['x']), float(value['y']),
                       None if value.get('z') is None else float(value['z']))
        if hasattr(value, 'x') and hasattr(value, 'y'):
            z = getattr(value, 'z', None)
            return cls(float(value.x), float(value.y), None if z is None else float(z))
        if len(value) == 2:
            return cls(float(value[0]), float(value[1]))
        return cls(float(value[0]), float(value[1]), float(value[2]))


def coerce_landmarks(points: Sequence[Any]) -> List[Landmark]:
    return [Landmark.coerce(p) for p in points]


def select_largest_face(faces: Sequence[Sequence[Any]]) -> Optional[List[Landmark]]:
    """
    Pick the face whose landmark bounding box covers the largest area.

    Returns None when no faces were detected. Ties keep the earliest face.
    """
    if len(faces) == 0:
        return None

    best: Optional[List[Landmark]] = None
    best_area = -1.0

    for face in faces:
        points = coerce_landmarks(face)
        if not points:
            area = 0.0
        else:
            xs = [p.x for p in points]
            ys = [p.y for p in points]
            area = max(0.0, max(xs) - min(xs)) * max(0.0, max(ys) - min(ys))
        if area > best_area:
            best = points
            best_area = area

    return best

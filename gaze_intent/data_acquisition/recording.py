"""
Recorded sessions for offline calibration and replay.

Calibration recording (YAML or JSON):

    points:                  # first-pass samples per calibration point
      center-mid: [[0.50, 0.49], [0.51, 0.50], ...]
    retries:                 # optional, samples served when a point is retried
      left-top: [[0.36, 0.50], ...]
    validation:              # samples per validation target
      validation-center: [[0.50, 0.52], ...]

Frame recording:

    frames:
      - {t_ms: 0, x: 0.41, y: 0.52}
      - {t_ms: 33, face: false}       # no face detected
      - {t_ms: 66, iris: false}       # face without iris landmarks
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from gaze_intent.calibration.points import ValidationPointDef
from gaze_intent.calibration.quality import CalibrationSample
from gaze_intent.data_acquisition.feature_extractor import FeatureExtraction, GazeFeatures

logger = logging.getLogger(__name__)


def _read_document(path: str) -> Dict[str, Any]:
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Recording not found: {path}")
    # YAML is a superset of JSON, so one loader serves both
    with open(file_path, 'r') as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Recording {path} must contain a mapping at the top level")
    return data


def _parse_samples(raw: Optional[Sequence[Any]]) -> List[CalibrationSample]:
    samples = []
    for entry in raw or []:
        if isinstance(entry, dict):
            samples.append(CalibrationSample(float(entry['x']), float(entry['y'])))
        else:
            samples.append(CalibrationSample(float(entry[0]), float(entry[1])))
    return samples


class RecordedSessionSampler:
    """
    Serves recorded samples to CalibrationRunner.

    The first request for a point returns its first-pass samples; later
    requests return the retry samples when recorded, else the same samples.
    """

    def __init__(
        self,
        points: Dict[str, List[CalibrationSample]],
        validation: Dict[str, List[CalibrationSample]],
        retries: Optional[Dict[str, List[CalibrationSample]]] = None,
    ):
        self.points = points
        self.validation = validation
        self.retries = retries or {}
        self._served: Dict[str, int] = {}

    @classmethod
    def from_file(cls, path: str) -> "RecordedSessionSampler":
        data = _read_document(path)
        sampler = cls(
            points={k: _parse_samples(v) for k, v in (data.get('points') or {}).items()},
            validation={k: _parse_samples(v) for k, v in (data.get('validation') or {}).items()},
            retries={k: _parse_samples(v) for k, v in (data.get('retries') or {}).items()},
        )
        logger.info(
            f"Loaded session recording {path}: {len(sampler.points)} points, "
            f"{len(sampler.validation)} validation targets"
        )
        return sampler

    def __call__(self, target: Any, token: Any = None) -> List[CalibrationSample]:
        point_id = target.point_id
        if isinstance(target, ValidationPointDef):
            return list(self.validation.get(point_id, []))

        served = self._served.get(point_id, 0)
        self._served[point_id] = served + 1
        if served > 0 and point_id in self.retries:
            return list(self.retries[point_id])
        return list(self.points.get(point_id, []))


def load_frame_recording(path: str) -> List[Tuple[float, Optional[FeatureExtraction]]]:
    """
    Load recorded frames as (t_ms, extraction) pairs.

    extraction is None for frames without a face; frames with iris: false
    carry has_iris=False and the neutral feature.
    """
    data = _read_document(path)
    frames = []
    for entry in data.get('frames') or []:
        t_ms = float(entry.get('t_ms', 0.0))
        if not entry.get('face', True):
            frames.append((t_ms, None))
        elif not entry.get('iris', True):
            frames.append((t_ms, FeatureExtraction(has_iris=False, features=GazeFeatures())))
        else:
            features = GazeFeatures(x=float(entry['x']), y=float(entry.get('y', 0.5)))
            frames.append((t_ms, FeatureExtraction(has_iris=True, features=features)))
    return frames

"""
Calibration persistence.

Serialized shapes (JSON, camelCase keys):

  profile  {version: 2, createdAt, regression: {w, b, lambda}, deadzoneScore}
  attempt  {version: 1, attemptedAt, status, reason, profile?, pointSampleCounts,
            retryCount, failedPointIds, bucketCounts?, validation?}

CalibrationStore keeps a primary and a backup copy of each record. Reads never
raise: anything missing, corrupt or failing validation loads as None.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dateutil.parser import isoparse

from gaze_intent import constants as const
from gaze_intent.calibration.profile_builder import CalibrationProfile, RegressionParams
from gaze_intent.constants import AttemptStatus, CalibrationLabel
from gaze_intent.metrics.validation import ValidationMetrics


PROFILE_FILE = "gaze_calibration_v2.json"
PROFILE_BACKUP_FILE = "gaze_calibration_v2_backup.json"
ATTEMPT_FILE = "gaze_calibration_attempt_v1.json"
ATTEMPT_BACKUP_FILE = "gaze_calibration_attempt_v1_backup.json"


@dataclass(frozen=True)
class CalibrationAttemptRecord:
    """Diagnostic summary of one calibration run"""
    attempted_at: str
    status: AttemptStatus
    reason: str
    point_sample_counts: Dict[str, int]
    retry_count: int
    failed_point_ids: List[str] = field(default_factory=list)
    profile: Optional[CalibrationProfile] = None
    bucket_counts: Optional[Dict[CalibrationLabel, int]] = None
    validation: Optional[ValidationMetrics] = None
    version: int = const.ATTEMPT_RECORD_VERSION


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _is_finite_number(value: Any) -> bool:
    # bool is an int subclass; JSON true/false is not a number here
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int beyond float range
        return False


def _is_non_negative_number(value: Any) -> bool:
    return _is_finite_number(value) and value >= 0


def _is_timestamp(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        isoparse(value)
    except ValueError:
        return False
    return True


def is_valid_profile_dict(data: Any) -> bool:
    if not isinstance(data, dict):
        return False
    if data.get('version') != const.PROFILE_VERSION:
        return False
    if not _is_timestamp(data.get('createdAt')):
        return False
    regression = data.get('regression')
    if not isinstance(regression, dict):
        return False
    if not all(_is_finite_number(regression.get(k)) for k in ('w', 'b', 'lambda')):
        return False
    return _is_finite_number(data.get('deadzoneScore'))


def is_valid_attempt_dict(data: Any) -> bool:
    if not isinstance(data, dict):
        return False
    if data.get('version') != const.ATTEMPT_RECORD_VERSION:
        return False
    if not _is_timestamp(data.get('attemptedAt')):
        return False
    if data.get('status') not in {s.value for s in AttemptStatus}:
        return False
    if not isinstance(data.get('reason'), str) or not data['reason']:
        return False
    if 'profile' in data and not is_valid_profile_dict(data['profile']):
        return False

    counts = data.get('pointSampleCounts')
    if not isinstance(counts, dict):
        return False
    if not all(_is_non_negative_number(v) for v in counts.values()):
        return False
    if not _is_non_negative_number(data.get('retryCount')):
        return False
    failed = data.get('failedPointIds')
    if not isinstance(failed, list) or not all(isinstance(p, str) for p in failed):
        return False

    if 'bucketCounts' in data:
        buckets = data['bucketCounts']
        if not isinstance(buckets, dict):
            return False
        if not all(_is_non_negative_number(buckets.get(label.value)) for label in CalibrationLabel):
            return False

    if 'validation' in data:
        validation = data['validation']
        if not isinstance(validation, dict):
            return False
        if not isinstance(validation.get('passed'), bool):
            return False
        if not _is_finite_number(validation.get('overallAccuracy')):
            return False
        if not _is_finite_number(validation.get('centerAccuracy')):
            return False
        if not _is_non_negative_number(validation.get('frameCount')):
            return False
        if not _is_non_negative_number(validation.get('centerFrameCount')):
            return False

    return True


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

def profile_to_dict(profile: CalibrationProfile) -> Dict[str, Any]:
    return {
        'version': profile.version,
        'createdAt': profile.created_at,
        'regression': {
            'w': profile.regression.w,
            'b': profile.regression.b,
            'lambda': profile.regression.lam,
        },
        'deadzoneScore': profile.deadzone_score,
    }


def profile_from_dict(data: Any) -> Optional[CalibrationProfile]:
    """Parse a serialized profile; None if it does not match the contract"""
    if not is_valid_profile_dict(data):
        return None
    regression = data['regression']
    return CalibrationProfile(
        created_at=data['createdAt'],
        regression=RegressionParams(
            w=float(regression['w']),
            b=float(regression['b']),
            lam=float(regression['lambda']),
        ),
        deadzone_score=float(data['deadzoneScore']),
        version=int(data['version']),
    )


def attempt_to_dict(attempt: CalibrationAttemptRecord) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        'version': attempt.version,
        'attemptedAt': attempt.attempted_at,
        'status': attempt.status.value,
        'reason': attempt.reason,
        'pointSampleCounts': dict(attempt.point_sample_counts),
        'retryCount': attempt.retry_count,
        'failedPointIds': list(attempt.failed_point_ids),
    }
    if attempt.profile is not None:
        data['profile'] = profile_to_dict(attempt.profile)
    if attempt.bucket_counts is not None:
        data['bucketCounts'] = {
            label.value: attempt.bucket_counts.get(label, 0) for label in CalibrationLabel
        }
    if attempt.validation is not None:
        data['validation'] = {
            'passed': attempt.validation.passed,
            'overallAccuracy': attempt.validation.overall_accuracy,
            'centerAccuracy': attempt.validation.center_accuracy,
            'frameCount': attempt.validation.frame_count,
            'centerFrameCount': attempt.validation.center_frame_count,
        }
    return data


def attempt_from_dict(data: Any) -> Optional[CalibrationAttemptRecord]:
    """Parse a serialized attempt record; None if it does not match the contract"""
    if not is_valid_attempt_dict(data):
        return None

    bucket_counts = None
    if 'bucketCounts' in data:
        bucket_counts = {
            label: int(data['bucketCounts'][label.value]) for label in CalibrationLabel
        }

    validation = None
    if 'validation' in data:
        v = data['validation']
        validation = ValidationMetrics(
            passed=v['passed'],
            frame_count=int(v['frameCount']),
            center_frame_count=int(v['centerFrameCount']),
            overall_accuracy=float(v['overallAccuracy']),
            center_accuracy=float(v['centerAccuracy']),
        )

    return CalibrationAttemptRecord(
        attempted_at=data['attemptedAt'],
        status=AttemptStatus(data['status']),
        reason=data['reason'],
        point_sample_counts={k: int(v) for k, v in data['pointSampleCounts'].items()},
        retry_count=int(data['retryCount']),
        failed_point_ids=list(data['failedPointIds']),
        profile=profile_from_dict(data['profile']) if 'profile' in data else None,
        bucket_counts=bucket_counts,
        validation=validation,
    )


# ---------------------------------------------------------------------------
# File store
# ---------------------------------------------------------------------------

class CalibrationStore:
    """
    JSON file store for the active profile and the last attempt record.

    Each save writes a primary and a backup file and reports success if
    either write landed.
    """

    def __init__(self, directory: str = "config/calibration"):
        self.directory = Path(directory)
        self.logger = logging.getLogger(__name__)

    def _path(self, name: str) -> Path:
        return self.directory / name

    def _read_json(self, name: str) -> Any:
        path = self._path(name)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            self.logger.warning(f"Could not read {path}: {e}")
            return None

    def _write_json(self, name: str, data: Dict[str, Any]) -> bool:
        path = self._path(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2), encoding='utf-8')
            return True
        except OSError as e:
            self.logger.error(f"Could not write {path}: {e}")
            return False

    def _write_pair(self, primary: str, backup: str, data: Dict[str, Any]) -> bool:
        wrote_primary = self._write_json(primary, data)
        wrote_backup = self._write_json(backup, data)
        return wrote_primary or wrote_backup

    # -- profile -------------------------------------------------------------

    def save_profile(self, profile: CalibrationProfile) -> bool:
        data = profile_to_dict(profile)
        if not is_valid_profile_dict(data):
            self.logger.error("Refusing to save a calibration profile with non-finite values")
            return False
        return self._write_pair(PROFILE_FILE, PROFILE_BACKUP_FILE, data)

    def load_profile(self) -> Optional[CalibrationProfile]:
        """
        Load the active profile.

        Falls back to the backup copy, then to the profile embedded in the
        last attempt record; a recovered profile is written back to the
        primary location.
        """
        primary = profile_from_dict(self._read_json(PROFILE_FILE))
        if primary is not None:
            return primary

        backup = profile_from_dict(self._read_json(PROFILE_BACKUP_FILE))
        if backup is not None:
            self.logger.info("Recovered calibration profile from backup")
            self._write_json(PROFILE_FILE, profile_to_dict(backup))
            return backup

        for name in (ATTEMPT_FILE, ATTEMPT_BACKUP_FILE):
            attempt = attempt_from_dict(self._read_json(name))
            if attempt is not None and attempt.profile is not None:
                self.logger.info("Recovered calibration profile from attempt record")
                self._write_pair(PROFILE_FILE, PROFILE_BACKUP_FILE, profile_to_dict(attempt.profile))
                return attempt.profile

        return None

    # -- attempt record ------------------------------------------------------

    def save_attempt(self, attempt: CalibrationAttemptRecord) -> bool:
        data = attempt_to_dict(attempt)
        if not is_valid_attempt_dict(data):
            self.logger.error("Refusing to save an invalid calibration attempt record")
            return False
        return self._write_pair(ATTEMPT_FILE, ATTEMPT_BACKUP_FILE, data)

    def load_attempt(self) -> Optional[CalibrationAttemptRecord]:
        primary = attempt_from_dict(self._read_json(ATTEMPT_FILE))
        if primary is not None:
            return primary

        backup = attempt_from_dict(self._read_json(ATTEMPT_BACKUP_FILE))
        if backup is not None:
            self._write_json(ATTEMPT_FILE, attempt_to_dict(backup))
        return backup

    def clear(self):
        for name in (PROFILE_FILE, PROFILE_BACKUP_FILE, ATTEMPT_FILE, ATTEMPT_BACKUP_FILE):
            path = self._path(name)
            if path.exists():
                path.unlink()

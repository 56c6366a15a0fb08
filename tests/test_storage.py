"""
Tests for calibration persistence
"""

import json
import math

import pytest

from gaze_intent.calibration.profile_builder import CalibrationProfile, RegressionParams
from gaze_intent.calibration.storage import (
    ATTEMPT_BACKUP_FILE,
    ATTEMPT_FILE,
    PROFILE_BACKUP_FILE,
    PROFILE_FILE,
    CalibrationAttemptRecord,
    CalibrationStore,
    attempt_from_dict,
    attempt_to_dict,
    is_valid_profile_dict,
    profile_to_dict,
)
from gaze_intent.constants import AttemptStatus, CalibrationLabel
from gaze_intent.metrics.validation import ValidationMetrics


@pytest.fixture
def profile():
    return CalibrationProfile(
        created_at="2024-05-01T12:30:00.123Z",
        regression=RegressionParams(w=6.25, b=-3.1, lam=0.25),
        deadzone_score=0.15,
    )


@pytest.fixture
def attempt(profile):
    return CalibrationAttemptRecord(
        attempted_at="2024-05-01T12:31:00.000Z",
        status=AttemptStatus.FAILED,
        reason="VALIDATION_FAILED",
        point_sample_counts={'center-mid': 31, 'left-mid': 0},
        retry_count=2,
        failed_point_ids=['left-mid'],
        profile=profile,
        bucket_counts={CalibrationLabel.LEFT: 60, CalibrationLabel.CENTER: 90, CalibrationLabel.RIGHT: 90},
        validation=ValidationMetrics(
            passed=False, frame_count=60, center_frame_count=20,
            overall_accuracy=0.75, center_accuracy=0.5,
        ),
    )


@pytest.fixture
def store(tmp_path):
    return CalibrationStore(str(tmp_path))


class TestSerialization:
    """Tests for the JSON contract"""

    def test_profile_keys(self, profile):
        data = profile_to_dict(profile)
        assert data == {
            'version': 2,
            'createdAt': "2024-05-01T12:30:00.123Z",
            'regression': {'w': 6.25, 'b': -3.1, 'lambda': 0.25},
            'deadzoneScore': 0.15,
        }

    def test_attempt_keys(self, attempt):
        data = attempt_to_dict(attempt)
        assert data['bucketCounts'] == {'LEFT': 60, 'CENTER': 90, 'RIGHT': 90}
        assert data['validation']['centerFrameCount'] == 20
        assert data['failedPointIds'] == ['left-mid']
        assert attempt_from_dict(data) == attempt

    @pytest.mark.parametrize("mutate", [
        lambda d: d.update(version=1),
        lambda d: d.update(createdAt="yesterday"),
        lambda d: d.update(deadzoneScore=True),
        lambda d: d['regression'].pop('lambda'),
        lambda d: d['regression'].update(w=math.inf),
    ])
    def test_invalid_profiles_rejected(self, profile, mutate):
        data = profile_to_dict(profile)
        mutate(data)
        assert is_valid_profile_dict(data) is False

    def test_invalid_attempts_rejected(self, attempt):
        data = attempt_to_dict(attempt)
        data['bucketCounts']['LEFT'] = -1
        assert attempt_from_dict(data) is None

        data = attempt_to_dict(attempt)
        data['status'] = "PARTIAL"
        assert attempt_from_dict(data) is None


class TestCalibrationStore:
    """Tests for CalibrationStore"""

    def test_round_trip(self, store, profile, attempt, tmp_path):
        assert store.save_profile(profile) is True
        assert store.save_attempt(attempt) is True
        assert (tmp_path / PROFILE_FILE).exists()
        assert (tmp_path / PROFILE_BACKUP_FILE).exists()
        assert store.load_profile() == profile
        assert store.load_attempt() == attempt

    def test_missing_files_load_none(self, store):
        assert store.load_profile() is None
        assert store.load_attempt() is None

    def test_corrupt_primary_falls_back_to_backup(self, store, profile, tmp_path):
        store.save_profile(profile)
        (tmp_path / PROFILE_FILE).write_text("{not json", encoding='utf-8')

        assert store.load_profile() == profile
        restored = json.loads((tmp_path / PROFILE_FILE).read_text(encoding='utf-8'))
        assert restored == profile_to_dict(profile)

    def test_profile_recovered_from_attempt(self, store, attempt, tmp_path):
        store.save_attempt(attempt)
        assert store.load_profile() == attempt.profile
        assert (tmp_path / PROFILE_FILE).exists()
        assert (tmp_path / PROFILE_BACKUP_FILE).exists()

    def test_attempt_backup_fallback(self, store, attempt, tmp_path):
        store.save_attempt(attempt)
        (tmp_path / ATTEMPT_FILE).unlink()
        assert store.load_attempt() == attempt
        assert (tmp_path / ATTEMPT_FILE).exists()

    def test_refuses_non_finite_profile(self, store, tmp_path):
        bad = CalibrationProfile(
            created_at="2024-05-01T12:30:00.123Z",
            regression=RegressionParams(w=math.nan, b=0.0, lam=0.25),
            deadzone_score=0.15,
        )
        assert store.save_profile(bad) is False
        assert not (tmp_path / PROFILE_FILE).exists()

    def test_oversized_integer_falls_back_to_backup(self, store, profile, tmp_path):
        """An integer beyond float range is invalid, not an error"""
        store.save_profile(profile)
        data = profile_to_dict(profile)
        data['regression']['w'] = 10 ** 400
        (tmp_path / PROFILE_FILE).write_text(json.dumps(data), encoding='utf-8')

        assert store.load_profile() == profile

    def test_oversized_count_in_attempt_falls_back_to_backup(self, store, attempt, tmp_path):
        store.save_attempt(attempt)
        data = attempt_to_dict(attempt)
        data['pointSampleCounts']['center-mid'] = 10 ** 400
        (tmp_path / ATTEMPT_FILE).write_text(json.dumps(data), encoding='utf-8')

        assert store.load_attempt() == attempt

    def test_invalid_stored_profile_ignored(self, store, profile, tmp_path):
        data = profile_to_dict(profile)
        data['createdAt'] = "not a date"
        (tmp_path / PROFILE_FILE).write_text(json.dumps(data), encoding='utf-8')
        assert store.load_profile() is None

    def test_clear(self, store, profile, attempt, tmp_path):
        store.save_profile(profile)
        store.save_attempt(attempt)
        store.clear()
        for name in (PROFILE_FILE, PROFILE_BACKUP_FILE, ATTEMPT_FILE, ATTEMPT_BACKUP_FILE):
            assert not (tmp_path / name).exists()
        assert store.load_profile() is None

"""
Calibration profile fitting.

Model: a one-dimensional ridge regression of the class target on the gaze
feature x,
  score = w * x + b,   targets LEFT = -1, CENTER = 0, RIGHT = +1
  w = Sxy / (Sxx + lambda),   b = y_bar - w * x_bar
The CENTER deadzone is sized from the spread (MAD) of the CENTER samples'
scores, so a user with steady fixation gets a narrow deadzone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np

from gaze_intent import constants as const
from gaze_intent.calibration.points import CALIBRATION_POINTS, CalibrationPointDef
from gaze_intent.calibration.quality import (
    CalibrationSample,
    finite_samples,
    trim_outliers_by_mad,
)
from gaze_intent.constants import BuildFailureReason, CalibrationLabel
from gaze_intent.utils.stats import clamp, mad, median

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegressionParams:
    w: float
    b: float
    lam: float


@dataclass(frozen=True)
class CalibrationProfile:
    """Fitted per-user profile; read-only once built"""
    created_at: str
    regression: RegressionParams
    deadzone_score: float
    version: int = const.PROFILE_VERSION

    def score(self, x: float) -> float:
        return self.regression.w * x + self.regression.b


@dataclass(frozen=True)
class ProfileBuildResult:
    """
    Outcome of building from 9-point collections.

    profile is None exactly when ok is False; the counts are filled either way
    so callers can record why a run failed.
    """
    ok: bool
    bucket_counts: Dict[CalibrationLabel, int]
    point_counts: Dict[str, int]
    profile: Optional[CalibrationProfile] = None
    reason: Optional[BuildFailureReason] = None


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision"""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def build_calibration_profile(
    center: Sequence[CalibrationSample],
    left: Sequence[CalibrationSample],
    right: Sequence[CalibrationSample],
    deadzone_multiplier: float = const.DEFAULT_DEADZONE_MULTIPLIER,
    lam: float = const.DEFAULT_RIDGE_LAMBDA,
) -> CalibrationProfile:
    """
    Fit a profile from three labeled sample pools.

    Args:
        center: CENTER-labeled samples
        left: LEFT-labeled samples
        right: RIGHT-labeled samples
        deadzone_multiplier: Stability knob scaling the deadzone width
        lam: Ridge penalty added to Sxx

    Returns:
        CalibrationProfile timestamped now. With no samples at all the fit
        degenerates to w = 0, b = 0 and the minimum deadzone (every frame
        classifies as CENTER).
    """
    center = finite_samples(center)
    left = finite_samples(left)
    right = finite_samples(right)

    pools = (
        (left, const.LABEL_TARGETS[CalibrationLabel.LEFT]),
        (center, const.LABEL_TARGETS[CalibrationLabel.CENTER]),
        (right, const.LABEL_TARGETS[CalibrationLabel.RIGHT]),
    )
    xs = np.array([s.x for pool, _ in pools for s in pool], dtype=float)
    targets = np.array([t for pool, t in pools for _ in pool], dtype=float)

    n = xs.size
    if n == 0:
        logger.warning("Fitting calibration profile with no samples; profile will be neutral")

    x_bar = float(xs.sum()) / max(1, n)
    y_bar = float(targets.sum()) / max(1, n)
    dx = xs - x_bar
    sxx = float(np.dot(dx, dx))
    sxy = float(np.dot(dx, targets - y_bar))

    w = sxy / (sxx + lam)
    b = y_bar - w * x_bar

    center_scores = [w * s.x + b for s in center]
    center_score_mad = mad(center_scores, median(center_scores))
    deadzone_score = clamp(
        max(const.MIN_DEADZONE_SCORE,
            deadzone_multiplier * const.DEADZONE_MAD_FACTOR * center_score_mad),
        const.MIN_DEADZONE_SCORE,
        const.MAX_DEADZONE_SCORE,
    )

    logger.debug(
        f"Fitted profile: n={n} w={w:.4f} b={b:.4f} "
        f"center_mad={center_score_mad:.4f} deadzone={deadzone_score:.4f}"
    )

    return CalibrationProfile(
        created_at=utc_timestamp(),
        regression=RegressionParams(w=w, b=b, lam=lam),
        deadzone_score=deadzone_score,
    )


def build_calibration_profile_from_point_samples(
    point_samples: Mapping[str, Sequence[CalibrationSample]],
    deadzone_multiplier: float = const.DEFAULT_DEADZONE_MULTIPLIER,
    points: Sequence[CalibrationPointDef] = CALIBRATION_POINTS,
    lam: float = const.DEFAULT_RIDGE_LAMBDA,
    min_samples_per_bucket: int = const.DEFAULT_MIN_SAMPLES_PER_BUCKET,
    mad_multiplier: float = const.DEFAULT_MAD_MULTIPLIER,
) -> ProfileBuildResult:
    """
    Trim each point's raw samples, pool them by class label, then fit.

    Args:
        point_samples: Raw samples keyed by point id (missing ids count as empty)
        deadzone_multiplier: Stability knob scaling the deadzone width
        points: Point definitions supplying each id's class label
        lam: Ridge penalty
        min_samples_per_bucket: Pooled clean samples required per label
        mad_multiplier: Outlier trimming multiplier

    Returns:
        ProfileBuildResult; INSUFFICIENT_CLEAN_SAMPLES if any bucket is short
    """
    buckets: Dict[CalibrationLabel, List[CalibrationSample]] = {
        label: [] for label in CalibrationLabel
    }
    point_counts: Dict[str, int] = {}

    for point in points:
        cleaned = trim_outliers_by_mad(point_samples.get(point.point_id, []), mad_multiplier)
        buckets[point.class_label].extend(cleaned)
        point_counts[point.point_id] = len(cleaned)

    bucket_counts = {label: len(samples) for label, samples in buckets.items()}

    short = [label.value for label, count in bucket_counts.items() if count < min_samples_per_bucket]
    if short:
        counts_text = ", ".join(f"{label.value}={count}" for label, count in bucket_counts.items())
        logger.warning(
            f"Insufficient clean samples for {', '.join(short)} "
            f"(need {min_samples_per_bucket} per bucket; {counts_text})"
        )
        return ProfileBuildResult(
            ok=False,
            bucket_counts=bucket_counts,
            point_counts=point_counts,
            reason=BuildFailureReason.INSUFFICIENT_CLEAN_SAMPLES,
        )

    profile = build_calibration_profile(
        center=buckets[CalibrationLabel.CENTER],
        left=buckets[CalibrationLabel.LEFT],
        right=buckets[CalibrationLabel.RIGHT],
        deadzone_multiplier=deadzone_multiplier,
        lam=lam,
    )

    return ProfileBuildResult(
        ok=True,
        bucket_counts=bucket_counts,
        point_counts=point_counts,
        profile=profile,
    )

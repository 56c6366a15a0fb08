"""
Per-point sample quality gate and MAD outlier trimming.

The quality gate only decides whether a point should be retried; the samples
used for fitting are cleaned separately by trim_outliers_by_mad.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from gaze_intent import constants as const
from gaze_intent.constants import QualityReason
from gaze_intent.utils.stats import all_finite, mad, median, population_stddev


@dataclass(frozen=True)
class CalibrationSample:
    x: float
    y: float

    def is_finite(self) -> bool:
        return all_finite((self.x, self.y))


@dataclass(frozen=True)
class PointQualityMetrics:
    sample_count: int
    stddev_x: float
    stddev_y: float


@dataclass(frozen=True)
class PointQualityResult:
    accepted: bool
    reason: QualityReason
    metrics: PointQualityMetrics


def finite_samples(samples: Iterable[CalibrationSample]) -> List[CalibrationSample]:
    return [s for s in samples if s.is_finite()]


def evaluate_point_quality(
    samples: Sequence[CalibrationSample],
    min_samples: int = const.DEFAULT_MIN_SAMPLES,
    max_stddev_x: float = const.DEFAULT_MAX_STDDEV_X,
    max_stddev_y: float = const.DEFAULT_MAX_STDDEV_Y,
) -> PointQualityResult:
    """
    Accept or reject the samples gathered during one point's window.

    Checks run in order (sample count, x jitter, y jitter) and the first
    failing check names the rejection reason.
    """
    clean = finite_samples(samples)
    metrics = PointQualityMetrics(
        sample_count=len(clean),
        stddev_x=population_stddev([s.x for s in clean]),
        stddev_y=population_stddev([s.y for s in clean]),
    )

    if metrics.sample_count < min_samples:
        return PointQualityResult(False, QualityReason.LOW_SAMPLE_COUNT, metrics)
    if metrics.stddev_x > max_stddev_x:
        return PointQualityResult(False, QualityReason.JITTER_X, metrics)
    if metrics.stddev_y > max_stddev_y:
        return PointQualityResult(False, QualityReason.JITTER_Y, metrics)

    return PointQualityResult(True, QualityReason.OK, metrics)


def trim_outliers_by_mad(
    samples: Sequence[CalibrationSample],
    multiplier: float = const.DEFAULT_MAD_MULTIPLIER,
) -> List[CalibrationSample]:
    """
    Keep samples whose x lies within multiplier * MAD of the median x.

    Only x is inspected; it is the axis that separates LEFT from RIGHT.
    The tolerance floor keeps a near-constant point from collapsing to the
    samples that exactly equal the median.
    """
    clean = finite_samples(samples)
    if not clean:
        return []

    xs = [s.x for s in clean]
    center = median(xs)
    spread = mad(xs, center)
    tolerance = max(multiplier * spread, const.MIN_TRIM_TOLERANCE)

    return [s for s in clean if abs(s.x - center) <= tolerance]

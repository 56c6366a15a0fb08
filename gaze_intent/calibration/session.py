"""
Calibration session: bounded-retry point queue and the run driver.

The queue state is an immutable value; apply_point_result returns a new state
and never touches the one it was given. Completed tasks are not removed: the
caller walks the queue by index, and retries appended during the walk are
reached because they extend the same queue.

CalibrationRunner drives one complete run (points, fit, validation, attempt
record) over a caller-supplied sampler. It never starts timers; the sampler
owns collection timing and should check the CancellationToken each tick.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

from gaze_intent import constants as const
from gaze_intent.calibration.points import (
    CALIBRATION_POINTS,
    VALIDATION_POINTS,
    CalibrationPointDef,
    ValidationPointDef,
)
from gaze_intent.calibration.profile_builder import (
    CalibrationProfile,
    ProfileBuildResult,
    build_calibration_profile_from_point_samples,
    utc_timestamp,
)
from gaze_intent.calibration.quality import (
    CalibrationSample,
    evaluate_point_quality,
    finite_samples,
)
from gaze_intent.calibration.storage import CalibrationAttemptRecord, CalibrationStore
from gaze_intent.constants import AttemptStatus
from gaze_intent.data_acquisition.feature_extractor import GazeFeatures
from gaze_intent.metrics.validation import (
    ValidationFrame,
    ValidationMetrics,
    evaluate_validation_frames,
)
from gaze_intent.tracking.classifier import classify_direction
from gaze_intent.utils.config_loader import EngineSettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Queue state machine
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CalibrationQueueItem:
    point_id: str
    is_retry: bool = False


@dataclass(frozen=True)
class CalibrationQueueState:
    queue: Tuple[CalibrationQueueItem, ...]
    retry_count: int
    max_retries: int
    scheduled_retry_point_ids: FrozenSet[str] = frozenset()
    failed_point_ids: FrozenSet[str] = frozenset()

    def task_at(self, index: int) -> Optional[CalibrationQueueItem]:
        if 0 <= index < len(self.queue):
            return self.queue[index]
        return None

    def is_exhausted(self, index: int) -> bool:
        """True once the walk index has passed the last task"""
        return index >= len(self.queue)


def create_calibration_queue(
    point_ids: Sequence[str],
    max_retries: int = const.DEFAULT_MAX_RETRIES,
) -> CalibrationQueueState:
    """One first-pass task per point; max_retries is shared by the whole run"""
    return CalibrationQueueState(
        queue=tuple(CalibrationQueueItem(point_id) for point_id in point_ids),
        retry_count=0,
        max_retries=max_retries,
    )


def apply_point_result(
    state: CalibrationQueueState,
    point_id: str,
    is_retry: bool,
    accepted: bool,
) -> CalibrationQueueState:
    """
    Fold one point's quality verdict into the queue state.

    A rejected first attempt earns a single retry appended to the queue while
    the run's retry budget lasts; otherwise the point is marked failed and the
    run continues with whatever samples it gathered.
    """
    if accepted:
        return replace(state, failed_point_ids=state.failed_point_ids - {point_id})

    can_schedule_retry = (
        not is_retry
        and point_id not in state.scheduled_retry_point_ids
        and state.retry_count < state.max_retries
    )

    if can_schedule_retry:
        return replace(
            state,
            queue=state.queue + (CalibrationQueueItem(point_id, is_retry=True),),
            retry_count=state.retry_count + 1,
            scheduled_retry_point_ids=state.scheduled_retry_point_ids | {point_id},
        )

    return replace(state, failed_point_ids=state.failed_point_ids | {point_id})


# ---------------------------------------------------------------------------
# Run driver
# ---------------------------------------------------------------------------

class CancellationToken:
    """Cancellation flag for one run; safe to cancel from another thread"""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class RunnerStatus(str, Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    VALIDATING = "VALIDATING"
    DONE = "DONE"
    CANCELLED = "CANCELLED"


Target = Union[CalibrationPointDef, ValidationPointDef]
Sampler = Callable[[Target, CancellationToken], Sequence[CalibrationSample]]


@dataclass(frozen=True)
class CalibrationRunResult:
    profile: CalibrationProfile
    attempt: CalibrationAttemptRecord
    validation: ValidationMetrics
    queue_state: CalibrationQueueState
    build: ProfileBuildResult
    point_samples: Dict[str, List[CalibrationSample]] = field(default_factory=dict)
    profile_saved: bool = False
    attempt_saved: bool = False

    @property
    def recalibration_recommended(self) -> bool:
        return self.attempt.status != AttemptStatus.SUCCESS


class CalibrationRunner:
    """
    Runs one calibration: every queued point, the profile fit, validation.

    A fresh runner (or a fresh token) supersedes an abandoned run; a cancelled
    run returns None and persists nothing.
    """

    def __init__(
        self,
        sampler: Sampler,
        settings: Optional[EngineSettings] = None,
        store: Optional[CalibrationStore] = None,
        points: Sequence[CalibrationPointDef] = CALIBRATION_POINTS,
        validation_points: Sequence[ValidationPointDef] = VALIDATION_POINTS,
    ):
        """
        Args:
            sampler: Collects samples for one target, returning when its window ends
            settings: Engine tuning (defaults when None)
            store: Where to persist the profile and attempt record (optional)
            points: Calibration targets, in collection order
            validation_points: Validation targets, in collection order
        """
        self.sampler = sampler
        self.settings = settings or EngineSettings()
        self.store = store
        self.points = tuple(points)
        self.validation_points = tuple(validation_points)
        self._point_by_id = {p.point_id: p for p in self.points}

        self.status = RunnerStatus.IDLE
        self.queue_state: Optional[CalibrationQueueState] = None

    def _cancelled(self, token: CancellationToken) -> bool:
        if token.cancelled:
            self.status = RunnerStatus.CANCELLED
            logger.info("Calibration run cancelled")
            return True
        return False

    def run(self, token: Optional[CancellationToken] = None) -> Optional[CalibrationRunResult]:
        token = token or CancellationToken()
        settings = self.settings

        self.status = RunnerStatus.RUNNING
        state = create_calibration_queue([p.point_id for p in self.points], settings.max_retries)
        self.queue_state = state
        point_samples: Dict[str, List[CalibrationSample]] = {p.point_id: [] for p in self.points}
        logger.info(f"Calibration started: {len(self.points)} points, retry budget {settings.max_retries}")

        index = 0
        while not state.is_exhausted(index):
            if self._cancelled(token):
                return None

            item = state.task_at(index)
            point = self._point_by_id.get(item.point_id)
            if point is None:
                index += 1
                continue

            samples = list(self.sampler(point, token))
            if self._cancelled(token):
                return None

            quality = evaluate_point_quality(
                samples,
                min_samples=settings.min_samples,
                max_stddev_x=settings.max_stddev_x,
                max_stddev_y=settings.max_stddev_y,
            )
            # Latest attempt wins so a retry replaces the rejected samples
            point_samples[item.point_id] = samples

            previous_retries = state.retry_count
            state = apply_point_result(state, item.point_id, item.is_retry, quality.accepted)
            self.queue_state = state

            logger.debug(
                f"Point {item.point_id}{' (retry)' if item.is_retry else ''}: "
                f"{quality.reason.value} n={quality.metrics.sample_count} "
                f"sx={quality.metrics.stddev_x:.4f} sy={quality.metrics.stddev_y:.4f}"
            )
            if state.retry_count > previous_retries:
                logger.info(f"Retry scheduled for {item.point_id} ({quality.reason.value})")
            elif item.point_id in state.failed_point_ids:
                logger.warning(f"Point {item.point_id} failed ({quality.reason.value})")

            index += 1

        build = build_calibration_profile_from_point_samples(
            point_samples,
            deadzone_multiplier=settings.deadzone_multiplier,
            points=self.points,
            lam=settings.ridge_lambda,
            min_samples_per_bucket=settings.min_samples_per_bucket,
            mad_multiplier=settings.mad_multiplier,
        )
        if build.ok:
            profile = build.profile
        else:
            # Degraded profile from whatever survived trimming
            degraded = build_calibration_profile_from_point_samples(
                point_samples,
                deadzone_multiplier=settings.deadzone_multiplier,
                points=self.points,
                lam=settings.ridge_lambda,
                min_samples_per_bucket=0,
                mad_multiplier=settings.mad_multiplier,
            )
            profile = degraded.profile

        validation = self._validate(profile, token)
        if validation is None:
            return None

        if not build.ok:
            status, reason = AttemptStatus.FAILED, build.reason.value
        elif not validation.passed:
            status, reason = AttemptStatus.FAILED, "VALIDATION_FAILED"
        else:
            status, reason = AttemptStatus.SUCCESS, "OK"

        attempt = CalibrationAttemptRecord(
            attempted_at=utc_timestamp(),
            status=status,
            reason=reason,
            point_sample_counts={pid: len(s) for pid, s in point_samples.items()},
            retry_count=state.retry_count,
            failed_point_ids=sorted(state.failed_point_ids),
            profile=profile,
            bucket_counts=dict(build.bucket_counts),
            validation=validation,
        )

        profile_saved = attempt_saved = False
        if self.store is not None:
            profile_saved = self.store.save_profile(profile)
            attempt_saved = self.store.save_attempt(attempt)
            if not profile_saved:
                logger.warning("Calibration profile could not be saved")
            if not attempt_saved:
                logger.warning("Calibration run details could not be saved")

        if status == AttemptStatus.SUCCESS:
            logger.info(
                f"Calibration complete: overall {validation.overall_accuracy:.0%}, "
                f"center {validation.center_accuracy:.0%}"
            )
        else:
            logger.warning(
                f"Calibration quality low ({reason}): overall {validation.overall_accuracy:.0%}, "
                f"center {validation.center_accuracy:.0%}. Rerun recommended."
            )

        self.status = RunnerStatus.DONE
        return CalibrationRunResult(
            profile=profile,
            attempt=attempt,
            validation=validation,
            queue_state=state,
            build=build,
            point_samples=point_samples,
            profile_saved=profile_saved,
            attempt_saved=attempt_saved,
        )

    def _validate(self, profile: CalibrationProfile, token: CancellationToken) -> Optional[ValidationMetrics]:
        """Classify live samples at each validation target and score them"""
        self.status = RunnerStatus.VALIDATING
        frames: List[ValidationFrame] = []

        for point in self.validation_points:
            if self._cancelled(token):
                return None
            samples = self.sampler(point, token)
            if self._cancelled(token):
                return None

            for sample in finite_samples(samples):
                output = classify_direction(GazeFeatures(x=sample.x, y=sample.y), profile)
                frames.append(ValidationFrame(point.point_id, point.expected, output.direction))

        return evaluate_validation_frames(
            frames,
            center_point_id=self.settings.center_point_id,
            min_overall_accuracy=self.settings.min_overall_accuracy,
            min_center_accuracy=self.settings.min_center_accuracy,
        )

"""
Main entry point for the gaze intent engine.

GazeIntentEngine wires configuration, logging, the stored calibration profile,
the per-frame pipeline and the intent filter together. The command line
entry points replay recorded sessions through it:

    python main.py --frames recording.yaml
    python calibrate.py --session session.yaml
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple

from gaze_intent.calibration.profile_builder import CalibrationProfile
from gaze_intent.calibration.session import (
    CalibrationRunner,
    CalibrationRunResult,
    CancellationToken,
    Sampler,
)
from gaze_intent.calibration.storage import CalibrationStore
from gaze_intent.constants import IntentDirection
from gaze_intent.data_acquisition.feature_extractor import FeatureExtraction
from gaze_intent.data_acquisition.recording import RecordedSessionSampler, load_frame_recording
from gaze_intent.tracking.classifier import GazeOutput
from gaze_intent.tracking.intent_filter import IntentFilter, intent_direction_from_output
from gaze_intent.tracking.pipeline import GazePipeline
from gaze_intent.utils.config_loader import EngineSettings, load_config
from gaze_intent.utils.logger import setup_logger

# Project root; keeps default config/storage paths stable regardless of cwd
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class GazeIntentEngine:
    """
    Live classification plus calibration for one user.
    """

    def __init__(self, config_path: str = "config/config.yaml", storage_dir: Optional[str] = None):
        """
        Initialize the engine

        Args:
            config_path: Path to configuration YAML file
            storage_dir: Calibration storage directory (overrides config)
        """
        try:
            self.config = load_config(config_path)
        except FileNotFoundError:
            print(f"Warning: Config file not found at {config_path}, using defaults")
            self.config = {}

        logging_config = self.config.get('logging', {}) or {}
        self.logger = setup_logger(
            name="gaze_intent",
            log_level=logging_config.get('level', 'INFO'),
            log_dir=logging_config.get('log_directory', None),
            log_file=logging_config.get('log_file', None),
            console_output=True
        )

        self.settings = EngineSettings.from_config(self.config)
        if storage_dir is not None:
            self.settings.storage_dir = storage_dir
        self.store = CalibrationStore(self.settings.storage_dir)

        self.profile: Optional[CalibrationProfile] = self.store.load_profile()
        if self.profile is None:
            self.logger.warning("No calibration profile found; directions will read CENTER until calibrated")
        else:
            self.logger.info(f"Loaded calibration profile from {self.profile.created_at}")

        self.pipeline = GazePipeline(self.profile, self.settings.smoothing_window)
        self.intent_filter = IntentFilter(self.settings.intent_window_ms)
        self.frame_count = 0

    def set_profile(self, profile: Optional[CalibrationProfile]):
        self.profile = profile
        self.pipeline.set_profile(profile)
        self.intent_filter.reset()

    def set_smoothing_window(self, window_size: int):
        self.settings.smoothing_window = max(1, int(window_size))
        self.pipeline.set_smoothing_window(self.settings.smoothing_window)

    def _update_intent(self, output: GazeOutput, now_ms: float) -> IntentDirection:
        self.frame_count += 1
        direction = intent_direction_from_output(output, self.settings.min_side_confidence)
        if self.profile is None:
            direction = IntentDirection.NONE
        return self.intent_filter.update(direction, now_ms)

    def process_faces(self, faces: Sequence[Sequence[Any]], now_ms: float) -> Tuple[GazeOutput, IntentDirection]:
        """Process one frame of detector output"""
        output = self.pipeline.process(faces)
        return output, self._update_intent(output, now_ms)

    def process_extraction(
        self, extraction: Optional[FeatureExtraction], now_ms: float
    ) -> Tuple[GazeOutput, IntentDirection]:
        """Process one frame whose features were already extracted"""
        output = self.pipeline.process_extraction(extraction)
        return output, self._update_intent(output, now_ms)

    def calibrate(self, sampler: Sampler, token: Optional[CancellationToken] = None) -> Optional[CalibrationRunResult]:
        """
        Run a full calibration and activate the resulting profile.

        A low-quality run still activates its profile; the result flags that
        recalibration is recommended.
        """
        runner = CalibrationRunner(sampler, settings=self.settings, store=self.store)
        result = runner.run(token)
        if result is not None:
            self.set_profile(result.profile)
        return result

    def reset_calibration(self):
        self.store.clear()
        self.set_profile(None)
        self.logger.info("Calibration cleared")


def _build_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--config",
        type=str,
        default=str(PROJECT_ROOT / "config" / "config.yaml"),
        help="Path to configuration file (default: config/config.yaml)"
    )
    parser.add_argument(
        "--storage-dir",
        type=str,
        default=None,
        help="Calibration storage directory (overrides config)"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Replay a recorded frame stream and print smoothed + intent directions"""
    parser = _build_parser("Replay recorded gaze frames through the classifier")
    parser.add_argument("--frames", type=str, required=True, help="Frame recording (YAML/JSON)")
    args = parser.parse_args(argv)

    engine = GazeIntentEngine(config_path=args.config, storage_dir=args.storage_dir)
    try:
        frames = load_frame_recording(args.frames)
    except (FileNotFoundError, ValueError) as e:
        engine.logger.error(str(e))
        return 1

    for t_ms, extraction in frames:
        output, intent = engine.process_extraction(extraction, t_ms)
        print(f"{t_ms:>8.0f} ms  {output.direction.value:<8} conf={output.confidence:.2f}  intent={intent.value}")

    engine.logger.info(f"Processed {engine.frame_count} frames")
    return 0


def calibrate_main(argv: Optional[Sequence[str]] = None) -> int:
    """Run a calibration from a recorded session and store the profile"""
    parser = _build_parser("Run a 9-point calibration from a recorded session")
    parser.add_argument("--session", type=str, required=True, help="Session recording (YAML/JSON)")
    args = parser.parse_args(argv)

    engine = GazeIntentEngine(config_path=args.config, storage_dir=args.storage_dir)
    try:
        sampler = RecordedSessionSampler.from_file(args.session)
    except (FileNotFoundError, ValueError) as e:
        engine.logger.error(str(e))
        return 1

    result = engine.calibrate(sampler)
    if result is None:
        print("Calibration cancelled.")
        return 1

    regression = result.profile.regression
    print(f"Status: {result.attempt.status.value} ({result.attempt.reason})")
    print(f"w={regression.w:.3f} b={regression.b:.3f} deadzone={result.profile.deadzone_score:.3f}")
    print(
        f"Validation: overall {result.validation.overall_accuracy:.0%}, "
        f"center {result.validation.center_accuracy:.0%} "
        f"({result.validation.frame_count} frames)"
    )
    print(f"Retries used: {result.queue_state.retry_count}; failed points: "
          f"{', '.join(result.attempt.failed_point_ids) or 'none'}")
    if result.recalibration_recommended:
        print("Calibration quality low. Rerun recommended.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

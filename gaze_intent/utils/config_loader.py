"""
Configuration loader utility
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from gaze_intent import constants as const


def load_config(config_path: str = 'config/config.yaml') -> Dict[str, Any]:
    """
    Load configuration from YAML file

    Args:
        config_path: Path to configuration file

    Returns:
        Dictionary with configuration values (empty for an empty file)
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_file, 'r') as f:
        config = yaml.safe_load(f)

    return config or {}


@dataclass
class EngineSettings:
    """Tuning values for one engine instance, all optional in the YAML file"""

    # Point quality gate
    min_samples: int = const.DEFAULT_MIN_SAMPLES
    max_stddev_x: float = const.DEFAULT_MAX_STDDEV_X
    max_stddev_y: float = const.DEFAULT_MAX_STDDEV_Y

    # Outlier trimming
    mad_multiplier: float = const.DEFAULT_MAD_MULTIPLIER

    # Profile fitting
    deadzone_multiplier: float = const.DEFAULT_DEADZONE_MULTIPLIER
    ridge_lambda: float = const.DEFAULT_RIDGE_LAMBDA
    min_samples_per_bucket: int = const.DEFAULT_MIN_SAMPLES_PER_BUCKET

    # Session
    max_retries: int = const.DEFAULT_MAX_RETRIES

    # Live filtering
    smoothing_window: int = const.DEFAULT_SMOOTHING_WINDOW
    intent_window_ms: int = const.DEFAULT_INTENT_WINDOW_MS
    min_side_confidence: float = const.DEFAULT_MIN_SIDE_CONFIDENCE

    # Validation
    center_point_id: str = const.DEFAULT_CENTER_POINT_ID
    min_overall_accuracy: float = const.DEFAULT_MIN_OVERALL_ACCURACY
    min_center_accuracy: float = const.DEFAULT_MIN_CENTER_ACCURACY

    # Storage
    storage_dir: str = "config/calibration"

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "EngineSettings":
        """Build settings from a loaded config dict, falling back to defaults per key"""
        config = config or {}
        quality_cfg = config.get('quality', {}) or {}
        trimming_cfg = config.get('trimming', {}) or {}
        profile_cfg = config.get('profile', {}) or {}
        session_cfg = config.get('session', {}) or {}
        smoothing_cfg = config.get('smoothing', {}) or {}
        intent_cfg = config.get('intent', {}) or {}
        validation_cfg = config.get('validation', {}) or {}
        storage_cfg = config.get('storage', {}) or {}

        return cls(
            min_samples=int(quality_cfg.get('min_samples', const.DEFAULT_MIN_SAMPLES)),
            max_stddev_x=float(quality_cfg.get('max_stddev_x', const.DEFAULT_MAX_STDDEV_X)),
            max_stddev_y=float(quality_cfg.get('max_stddev_y', const.DEFAULT_MAX_STDDEV_Y)),
            mad_multiplier=float(trimming_cfg.get('mad_multiplier', const.DEFAULT_MAD_MULTIPLIER)),
            deadzone_multiplier=float(profile_cfg.get('deadzone_multiplier', const.DEFAULT_DEADZONE_MULTIPLIER)),
            ridge_lambda=float(profile_cfg.get('ridge_lambda', const.DEFAULT_RIDGE_LAMBDA)),
            min_samples_per_bucket=int(profile_cfg.get('min_samples_per_bucket', const.DEFAULT_MIN_SAMPLES_PER_BUCKET)),
            max_retries=int(session_cfg.get('max_retries', const.DEFAULT_MAX_RETRIES)),
            smoothing_window=int(smoothing_cfg.get('window_size', const.DEFAULT_SMOOTHING_WINDOW)),
            intent_window_ms=int(intent_cfg.get('window_ms', const.DEFAULT_INTENT_WINDOW_MS)),
            min_side_confidence=float(intent_cfg.get('min_side_confidence', const.DEFAULT_MIN_SIDE_CONFIDENCE)),
            center_point_id=str(validation_cfg.get('center_point_id', const.DEFAULT_CENTER_POINT_ID)),
            min_overall_accuracy=float(validation_cfg.get('min_overall_accuracy', const.DEFAULT_MIN_OVERALL_ACCURACY)),
            min_center_accuracy=float(validation_cfg.get('min_center_accuracy', const.DEFAULT_MIN_CENTER_ACCURACY)),
            storage_dir=str(storage_cfg.get('directory', "config/calibration")),
        )

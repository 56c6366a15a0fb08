"""
Standalone calibration utility.

Usage:
  python calibrate.py --session session.yaml

Replays a recorded 9-point session (plus validation targets) and writes the
profile and attempt record to the calibration storage directory.
"""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from gaze_intent.main import calibrate_main

if __name__ == "__main__":
    sys.exit(calibrate_main())

"""
Gaze intent engine: calibrated LEFT / RIGHT / CENTER direction from eye landmarks.
"""

__version__ = '1.0.0'

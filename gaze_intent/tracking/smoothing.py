"""
Count-windowed majority vote over discrete direction labels.

The window holds the last N classifier outputs; push() returns the label seen
most often, with ties going to whichever tied label occurred most recently.
"""

from __future__ import annotations

from collections import Counter, deque
from typing import Deque, Hashable, Sequence, TypeVar

from gaze_intent.constants import GazeDirection

L = TypeVar('L', bound=Hashable)


def majority_with_recency(labels: Sequence[L], empty: L) -> L:
    """Most frequent label; ties resolved by the latest occurrence"""
    if len(labels) == 0:
        return empty

    counts = Counter(labels)
    best_count = max(counts.values())
    # Scan from the end so the most recent tied label wins
    for label in reversed(labels):
        if counts[label] == best_count:
            return label
    return empty


def majority_vote(labels: Sequence[GazeDirection]) -> GazeDirection:
    """Majority direction; NO_FACE (no signal) for an empty window"""
    return majority_with_recency(labels, GazeDirection.NO_FACE)


class TemporalSmoother:
    """
    Bounded window of recent labels.

    Call reset() whenever tracking is lost; stale history is discarded rather
    than carried across the gap.
    """

    def __init__(self, window_size: int = 7):
        self.window_size = max(1, int(window_size))
        self._window: Deque[GazeDirection] = deque(maxlen=self.window_size)

    def push(self, label: GazeDirection) -> GazeDirection:
        self._window.append(label)
        return majority_vote(list(self._window))

    def current(self) -> GazeDirection:
        return majority_vote(list(self._window))

    def reset(self):
        self._window.clear()

    def resize(self, window_size: int):
        """Change the window size; history is dropped, not truncated"""
        self.window_size = max(1, int(window_size))
        self._window = deque(maxlen=self.window_size)

    def __len__(self) -> int:
        return len(self._window)

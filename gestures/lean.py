"""
Lean detector - turns the spine lean angle into LeanLeft / LeanRight observations

The angle is measured in the sensor's X-Z plane between the spine base and
spine mid joints. Upright sits near 90 degrees; leaning towards one side
pushes it towards 180 (left) or 0 (right).
"""

from collections import deque

import numpy as np

from gestures.types import GestureClass, GestureObservation

LEAN_LEFT_THRESHOLD = 160.0   # degrees, above = leaning left
LEAN_RIGHT_THRESHOLD = 20.0   # degrees, below = leaning right
LEAN_STABLE_FRAMES = 3        # consecutive frames before a lean is asserted


def lean_angle(spine_base, spine_mid):
    """
    Absolute lean angle in degrees.

    Args:
        spine_base: [x, y, z] of the spine base joint
        spine_mid: [x, y, z] of the spine mid joint

    Returns:
        float in [0, 180]
    """
    base = np.asarray(spine_base, dtype=float)
    mid = np.asarray(spine_mid, dtype=float)
    delta = mid - base
    return float(abs(np.degrees(np.arctan2(delta[2], delta[0]))))


class LeanDetector:
    """
    Classifies lean direction for one actor with temporal smoothing.

    Keep one detector per actor and call `reset` when that actor is lost.
    """

    def __init__(self, left_threshold=LEAN_LEFT_THRESHOLD,
                 right_threshold=LEAN_RIGHT_THRESHOLD,
                 stable_frames=LEAN_STABLE_FRAMES):
        if not right_threshold < left_threshold:
            raise ValueError("right_threshold must be below left_threshold")
        if stable_frames < 1:
            raise ValueError("stable_frames must be at least 1")
        self.left_threshold = left_threshold
        self.right_threshold = right_threshold
        self.stable_frames = stable_frames
        self.lean_history = deque(maxlen=stable_frames)

    def classify(self, angle):
        """Raw direction for a single angle: 'left', 'right' or None."""
        if angle > self.left_threshold:
            return 'left'
        if angle < self.right_threshold:
            return 'right'
        return None

    def detect(self, spine_base, spine_mid):
        """
        Detect lean from the two spine joints.

        Returns:
            [GestureObservation(LeanLeft), GestureObservation(LeanRight)]
        """
        if spine_base is None or spine_mid is None:
            self.lean_history.clear()
            lean = None
        else:
            self.lean_history.append(self.classify(lean_angle(spine_base, spine_mid)))
            lean = None
            if len(self.lean_history) == self.stable_frames and len(set(self.lean_history)) == 1:
                lean = self.lean_history[-1]

        return [
            GestureObservation(
                GestureClass.LEAN_LEFT.value, detected=lean == 'left', confidence=1.0 if lean == 'left' else 0.0,
            ),
            GestureObservation(
                GestureClass.LEAN_RIGHT.value, detected=lean == 'right', confidence=1.0 if lean == 'right' else 0.0,
            ),
        ]

    def reset(self):
        """Reset lean detector state."""
        self.lean_history.clear()

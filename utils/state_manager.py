"""
State manager for per-slot gesture latches, confidences and progress values
"""

import logging
import math
from typing import Dict, Iterable, List

from gestures.config import EngineConfig, PROGRESS_HOLD, PROGRESS_ZERO
from gestures.exceptions import MalformedObservation, UnknownActorOnUpdate
from gestures.types import ActorGestureState, ClassState, GestureObservation

logger = logging.getLogger(__name__)


def _unit_interval(value):
    """Return value as a float in [0, 1], or None if it is not one."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or value < 0.0 or value > 1.0:
        return None
    return value


class GestureStateTracker:
    """
    Holds one ActorGestureState per bound slot and folds incoming
    observations into it.

    Latches are sticky: a class set by a qualifying observation stays latched
    until arbitration consumes it or the slot is reset. Observations below the
    threshold only refresh the stored confidence.
    """

    def __init__(self, config: EngineConfig = None):
        """
        Args:
            config: EngineConfig (defaults if None)
        """
        self.config = config or EngineConfig()
        self._names = self.config.name_table()
        self._states: Dict[int, ActorGestureState] = {}

    def bind(self, slot: int) -> ActorGestureState:
        """Create the initial record for a slot; returns the existing one if already bound."""
        state = self._states.get(slot)
        if state is None:
            state = ActorGestureState(
                slot=slot,
                classes={cfg.gesture: ClassState() for cfg in self.config.gesture_classes},
            )
            self._states[slot] = state
        return state

    def is_bound(self, slot: int) -> bool:
        return slot in self._states

    def state(self, slot: int) -> ActorGestureState:
        """
        Get the live record for a slot.

        Raises:
            UnknownActorOnUpdate: If the slot was never bound
        """
        state = self._states.get(slot)
        if state is None:
            raise UnknownActorOnUpdate(slot)
        return state

    def update(self, slot: int, observations: Iterable[GestureObservation]) -> List[MalformedObservation]:
        """
        Fold one frame of observations into the slot's record.

        A bad observation is skipped (or clamped) on its own; the rest of the
        frame is still applied.

        Args:
            slot: Slot previously bound with `bind`
            observations: Observations for this tick

        Returns:
            List of MalformedObservation describing every rejected or clamped field

        Raises:
            UnknownActorOnUpdate: If the slot was never bound
        """
        state = self.state(slot)
        problems = []

        for observation in observations:
            cfg = self._names.get(observation.gesture)
            if cfg is None:
                problems.append(MalformedObservation(observation.gesture, "unknown gesture class"))
                continue

            confidence = _unit_interval(observation.confidence)
            if confidence is None:
                problems.append(MalformedObservation(
                    observation.gesture,
                    f"confidence {observation.confidence!r} outside [0, 1], treated as 0",
                ))
                confidence = 0.0

            class_state = state[cfg.gesture]
            if cfg.continuous:
                problem = self._update_progress(class_state, observation, confidence, cfg.threshold)
                if problem is not None:
                    problems.append(problem)
                continue

            if observation.detected and confidence >= cfg.threshold:
                class_state.latched = True
            class_state.confidence = confidence

        for problem in problems:
            logger.debug("Slot %d: %s", slot, problem.message)
        return problems

    def _update_progress(self, class_state, observation, confidence, threshold):
        class_state.confidence = confidence
        if observation.progress is None:
            return MalformedObservation(observation.gesture, "continuous gesture without a progress value")

        try:
            progress = float(observation.progress)
        except (TypeError, ValueError):
            return MalformedObservation(observation.gesture, f"progress {observation.progress!r} is not a number")
        if math.isnan(progress):
            return MalformedObservation(observation.gesture, "progress is NaN")

        if confidence < threshold:
            policy = self.config.low_confidence_progress
            if policy == PROGRESS_HOLD:
                return None
            if policy == PROGRESS_ZERO:
                class_state.progress = 0.0
                return None

        class_state.progress = min(1.0, max(0.0, progress))
        return None

    def reset(self, slot: int):
        """Clear every class of a bound slot back to its initial values."""
        self.state(slot).reset()
        logger.debug("Slot %d gesture state reset", slot)

    def discard(self, slot: int):
        self._states.pop(slot, None)

    def bound_slots(self):
        return sorted(self._states)

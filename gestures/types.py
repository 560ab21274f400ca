"""
Data carriers passed between the sensor side, the arbitration core and the sinks
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Hashable, Mapping, Optional, Tuple

# Progress value meaning "no continuous signal"
PROGRESS_SENTINEL = -1.0


class GestureClass(str, Enum):
    """Gesture vocabulary understood by the tracker."""

    PUNCH = "Punch"
    KICK = "Kick"
    SPECIAL_MOVE = "SpecialMove"
    JUMPING_JACKS = "JumpingJacks"

    PUNCH_PROGRESS = "PunchProgress"
    KICK_PROGRESS = "KickProgress"
    SPECIAL_MOVE_PROGRESS = "SpecialMoveProgress"

    LEAN_LEFT = "LeanLeft"
    LEAN_RIGHT = "LeanRight"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class GestureObservation:
    """
    One classifier result for one gesture, one actor, one tick.

    `gesture` is the name reported by the classifier; it is resolved against
    the configured gesture table by the tracker (unknown names are rejected there).
    """
    gesture: str
    detected: bool = False
    confidence: float = 0.0
    progress: Optional[float] = None


@dataclass(frozen=True)
class GestureFrame:
    """Immutable snapshot of every observation for one actor at one tick."""
    actor_id: Hashable
    observations: Tuple[GestureObservation, ...] = ()
    timestamp: Optional[float] = None

    @classmethod
    def from_mapping(cls, actor_id, results: Mapping[str, Any], timestamp=None):
        """
        Build a frame from a plain mapping.

        Args:
            actor_id: Sensor tracking id
            results: {gesture_name: {'detected': bool, 'confidence': float, 'progress': float}}
                A bare number is accepted as a continuous progress value.
            timestamp: Optional capture time

        Returns:
            GestureFrame
        """
        observations = []
        for name, value in results.items():
            if isinstance(value, Mapping):
                observations.append(GestureObservation(
                    gesture=str(name),
                    detected=bool(value.get('detected', False)),
                    confidence=value.get('confidence', 0.0),
                    progress=value.get('progress'),
                ))
            else:
                observations.append(GestureObservation(
                    gesture=str(name), detected=False, confidence=1.0, progress=value
                ))
        return cls(actor_id=actor_id, observations=tuple(observations), timestamp=timestamp)


@dataclass
class ClassState:
    latched: bool = False
    confidence: float = 0.0
    progress: float = PROGRESS_SENTINEL

    def clear(self):
        self.latched = False
        self.confidence = 0.0
        self.progress = PROGRESS_SENTINEL


@dataclass
class ActorGestureState:
    """
    Mutable per-slot record, one ClassState per configured gesture class.
    Owned exclusively by the slot it was created for.
    """
    slot: int
    classes: Dict[GestureClass, ClassState] = field(default_factory=dict)

    def __getitem__(self, gesture):
        return self.classes[gesture]

    def __contains__(self, gesture):
        return gesture in self.classes

    def reset(self):
        for class_state in self.classes.values():
            class_state.clear()

    def latched(self):
        return {gesture: s.latched for gesture, s in self.classes.items()}

    def progress(self):
        return {gesture: s.progress for gesture, s in self.classes.items()}

    def confidence(self):
        return {gesture: s.confidence for gesture, s in self.classes.items()}


@dataclass(frozen=True)
class ActionFired:
    slot: int
    gesture: GestureClass
    confidence: float = 0.0
    actor_id: Optional[Hashable] = None


@dataclass(frozen=True)
class TrackingStatus:
    """Full snapshot of one slot, emitted after every cycle for display/diagnostics."""
    slot: int
    is_tracked: bool
    latched: Dict[GestureClass, bool]
    progress: Dict[GestureClass, float]
    confidence: Dict[GestureClass, float] = field(default_factory=dict)
    actor_id: Optional[Hashable] = None

    @classmethod
    def from_state(cls, state: ActorGestureState, is_tracked=True, actor_id=None):
        return cls(
            slot=state.slot,
            is_tracked=is_tracked,
            latched=state.latched(),
            progress=state.progress(),
            confidence=state.confidence(),
            actor_id=actor_id,
        )


@dataclass(frozen=True)
class DiagnosticEvent:
    """Error surfaced to the sink instead of being raised ('capacity_exceeded', 'malformed_observation')."""
    kind: str
    message: str
    actor_id: Optional[Hashable] = None
    slot: Optional[int] = None

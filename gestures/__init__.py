"""
Gesture arbitration core.
"""

from .arbitration import ArbitrationEngine
from .config import EngineConfig, GestureClassConfig, ContestRule, load_config
from .exceptions import (
    GestureError, CapacityExceeded, MalformedObservation, UnknownActorOnUpdate, ConfigurationError,
)
from .slot_mapper import ActorSlotMapper
from .types import (
    GestureClass, GestureObservation, GestureFrame, ActorGestureState, ActionFired, TrackingStatus,
    PROGRESS_SENTINEL,
)

__version__ = "1.0.0"
__all__ = [
    "ArbitrationEngine", "EngineConfig", "GestureClassConfig", "ContestRule", "load_config",
    "GestureError", "CapacityExceeded", "MalformedObservation", "UnknownActorOnUpdate", "ConfigurationError",
    "ActorSlotMapper", "GestureClass", "GestureObservation", "GestureFrame", "ActorGestureState",
    "ActionFired", "TrackingStatus", "PROGRESS_SENTINEL",
]

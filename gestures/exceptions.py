"""
Custom exceptions for gesture arbitration.
"""

from typing import Any, Optional


class GestureError(Exception):
    """Base exception for all gesture arbitration errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class CapacityExceeded(GestureError):
    """Raised when a new actor must be bound but every slot is taken."""

    def __init__(self, actor_id, capacity: int):
        message = f"No free slot for actor {actor_id!r} (capacity {capacity})"
        super().__init__(message, details={'actor_id': actor_id, 'capacity': capacity})
        self.actor_id = actor_id
        self.capacity = capacity


class MalformedObservation(GestureError):
    """Raised (or reported) for an observation with a bad field or unknown gesture name."""

    def __init__(self, gesture, reason: str):
        message = f"Malformed observation for {gesture!r}: {reason}"
        super().__init__(message, details={'gesture': gesture, 'reason': reason})
        self.gesture = gesture
        self.reason = reason


class UnknownActorOnUpdate(GestureError):
    """Raised when a slot is used before an actor has been resolved onto it."""

    def __init__(self, slot):
        message = f"Slot {slot!r} has no bound actor"
        super().__init__(message, details={'slot': slot})
        self.slot = slot


class ConfigurationError(GestureError):
    """Raised when the static gesture configuration is invalid."""
    pass

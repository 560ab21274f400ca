"""
Per-tick state tracking and coordination.
"""

from .state_manager import GestureStateTracker
from .action_coordinator import ActionCoordinator

__all__ = ["GestureStateTracker", "ActionCoordinator"]

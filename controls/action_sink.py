"""
Action sinks - receivers for fired actions, tracking snapshots and diagnostics
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class ActionSink(ABC):
    """
    Abstract base class for everything downstream of arbitration.
    Notifications are fire-and-forget and must not block.
    """

    @abstractmethod
    def action_fired(self, event):
        """
        Called exactly once per winning arbitration.

        Args:
            event: ActionFired
        """
        pass

    @abstractmethod
    def tracking_status(self, status):
        """
        Called after every update/arbitrate cycle and after every tracking-lost reset.

        Args:
            status: TrackingStatus snapshot
        """
        pass

    def diagnostic(self, event):
        """Called for dropped frames and malformed observations."""
        logger.warning("[%s] %s", event.kind, event.message)


class RecordingActionSink(ActionSink):
    """Keeps every notification in memory (tests, debug overlays)."""

    def __init__(self):
        self.actions = []
        self.statuses = []
        self.diagnostics = []

    def action_fired(self, event):
        self.actions.append(event)

    def tracking_status(self, status):
        self.statuses.append(status)

    def diagnostic(self, event):
        self.diagnostics.append(event)

    def last_status(self, slot=None):
        """Most recent snapshot, optionally for one slot only."""
        for status in reversed(self.statuses):
            if slot is None or status.slot == slot:
                return status
        return None

    def clear(self):
        self.actions.clear()
        self.statuses.clear()
        self.diagnostics.clear()


class LoggingActionSink(ActionSink):
    """Dry-run sink: logs what would have been sent."""

    def __init__(self):
        self._tracked = {}

    def action_fired(self, event):
        logger.info("Player %d: %s (confidence %.2f)", event.slot + 1, event.gesture, event.confidence)

    def tracking_status(self, status):
        # Only log tracking transitions, snapshots arrive every frame
        if self._tracked.get(status.slot) != status.is_tracked:
            self._tracked[status.slot] = status.is_tracked
            logger.info(
                "Player %d %s (actor %r)",
                status.slot + 1, "tracked" if status.is_tracked else "not tracked", status.actor_id,
            )

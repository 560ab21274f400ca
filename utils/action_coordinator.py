"""
Action Coordinator - runs each sensor tick through slot mapping, latching and arbitration
"""

import logging
import threading

from gestures.arbitration import ArbitrationEngine
from gestures.config import EngineConfig
from gestures.exceptions import CapacityExceeded
from gestures.slot_mapper import ActorSlotMapper
from gestures.types import DiagnosticEvent, TrackingStatus
from utils.state_manager import GestureStateTracker

logger = logging.getLogger(__name__)


class ActionCoordinator:
    """
    Coordinates classifier frames with the action sink.

    Two entry points, called by whatever loop owns the sensor:
    - on_frame(frame): resolve slot, update latches, arbitrate, notify
    - on_tracking_lost(actor_id): free the slot, reset its state, notify

    Each call runs to completion under one lock, so a tracking loss never
    interleaves with an update or arbitration for the same slot.
    """

    def __init__(self, sink, config=None, slot_mapper=None, tracker=None, engine=None):
        """
        Initialize the action coordinator.

        Args:
            sink: ActionSink receiving actions, snapshots and diagnostics
            config: EngineConfig (defaults if None)
            slot_mapper: ActorSlotMapper (creates one sized from config if None)
            tracker: GestureStateTracker (creates new one if None)
            engine: ArbitrationEngine (creates new one if None)
        """
        self.config = config or EngineConfig()
        self.sink = sink
        self.slot_mapper = slot_mapper or ActorSlotMapper(self.config.max_concurrent_actors)
        self.tracker = tracker or GestureStateTracker(self.config)
        self.engine = engine or ArbitrationEngine(self.config)
        self._lock = threading.RLock()

    def on_frame(self, frame):
        """
        Process one actor's observations for one tick.

        Args:
            frame: GestureFrame

        Returns:
            ActionFired if a gesture fired this tick, otherwise None
        """
        with self._lock:
            try:
                slot = self.slot_mapper.resolve(frame.actor_id)
            except CapacityExceeded as e:
                # Drop the frame, bound slots are untouched
                logger.warning("Dropping frame: %s", e.message)
                self.sink.diagnostic(DiagnosticEvent(
                    kind='capacity_exceeded', message=e.message, actor_id=frame.actor_id,
                ))
                return None

            self.tracker.bind(slot)
            problems = self.tracker.update(slot, frame.observations)
            for problem in problems:
                self.sink.diagnostic(DiagnosticEvent(
                    kind='malformed_observation', message=problem.message,
                    actor_id=frame.actor_id, slot=slot,
                ))

            state = self.tracker.state(slot)
            fired = self.engine.arbitrate(slot, state, actor_id=frame.actor_id)
            if fired is not None:
                self.sink.action_fired(fired)

            self.sink.tracking_status(TrackingStatus.from_state(state, is_tracked=True, actor_id=frame.actor_id))
            return fired

    def on_tracking_lost(self, actor_id):
        """
        Release an actor's slot and publish the cleared snapshot.

        Args:
            actor_id: Tracking id reported lost by the sensor

        Returns:
            The freed slot, or None if the actor was not bound
        """
        with self._lock:
            slot = self.slot_mapper.release(actor_id)
            if slot is None:
                logger.debug("Tracking lost for unbound actor %r, ignoring", actor_id)
                return None

            self.tracker.reset(slot)
            status = TrackingStatus.from_state(self.tracker.state(slot), is_tracked=False, actor_id=actor_id)
            self.tracker.discard(slot)

            logger.info("Actor %r lost, slot %d freed", actor_id, slot)
            self.sink.tracking_status(status)
            return slot

    def status(self, slot):
        """Current snapshot for a bound slot (for debugging/display)."""
        with self._lock:
            actor_id = self.slot_mapper.actor_of(slot)
            return TrackingStatus.from_state(
                self.tracker.state(slot), is_tracked=actor_id is not None, actor_id=actor_id,
            )

    def reset(self):
        """Drop every bound actor through the tracking-lost path."""
        with self._lock:
            for actor_id in list(self.slot_mapper.bound_slots().values()):
                self.on_tracking_lost(actor_id)

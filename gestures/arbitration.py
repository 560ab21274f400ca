"""
Arbitration engine - picks at most one gesture to fire per slot per tick
"""

import logging
from typing import Optional

from gestures.config import EngineConfig
from gestures.exceptions import UnknownActorOnUpdate
from gestures.types import ActionFired, ActorGestureState

logger = logging.getLogger(__name__)


class ArbitrationEngine:
    """
    Selects the winning gesture from a slot's latched state.

    Logic:
    - Discrete classes are checked highest priority first
    - A latched class with a contest rule yields to a latched rival that is
      more confident, and the search continues down the list
    - The winner is consumed: latch cleared, confidence zeroed, and the classes
      it `clears` lose their confidence (and progress, if continuous)
    - Nothing else is touched, so unfired latches carry over to the next tick

    The engine keeps no per-slot state; everything it reads and writes is the
    ActorGestureState passed in.
    """

    def __init__(self, config: EngineConfig = None):
        self.config = config or EngineConfig()
        self._order = self.config.priority_order()
        self._continuous = {c.gesture for c in self.config.gesture_classes if c.continuous}

    def select(self, state: ActorGestureState):
        """
        Find the class that would fire, without consuming it.

        Returns:
            GestureClassConfig of the winner, or None
        """
        for cfg in self._order:
            class_state = state[cfg.gesture]
            if not class_state.latched:
                continue

            contest = cfg.contest
            if contest is not None:
                rival = state[contest.rival]
                if rival.latched and not contest.allows(class_state.confidence, rival.confidence):
                    logger.debug(
                        "Slot %d: %s (%.2f) yields to %s (%.2f)",
                        state.slot, cfg.gesture, class_state.confidence,
                        contest.rival, rival.confidence,
                    )
                    continue

            return cfg
        return None

    def arbitrate(self, slot: int, state: Optional[ActorGestureState], actor_id=None) -> Optional[ActionFired]:
        """
        Fire at most one gesture for a slot.

        Args:
            slot: Slot the state belongs to
            state: The slot's ActorGestureState
            actor_id: Actor bound to the slot, carried into the event

        Returns:
            ActionFired for the winner, or None when nothing is latched

        Raises:
            UnknownActorOnUpdate: If no state is bound for the slot
        """
        if state is None:
            raise UnknownActorOnUpdate(slot)

        winner = self.select(state)
        if winner is None:
            return None

        class_state = state[winner.gesture]
        event = ActionFired(
            slot=slot,
            gesture=winner.gesture,
            confidence=class_state.confidence,
            actor_id=actor_id,
        )

        class_state.latched = False
        class_state.confidence = 0.0
        for other in winner.clears:
            cleared = state[other]
            cleared.confidence = 0.0
            if other in self._continuous:
                cleared.progress = 0.0

        logger.info("Slot %d fired %s (confidence %.2f)", slot, winner.gesture, event.confidence)
        return event

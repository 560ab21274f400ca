"""
Actor slot mapper - binds sensor tracking ids to stable player slots
"""

import logging
import threading
from typing import Dict, Hashable, List, Optional

from gestures.exceptions import CapacityExceeded

logger = logging.getLogger(__name__)


class ActorSlotMapper:
    """
    Assigns each distinct actor id a small integer slot (0..capacity-1).

    A slot stays bound to its actor until `release` is called for that actor.
    Freed slots are handed out again lowest-number first.
    """

    def __init__(self, capacity: int):
        """
        Args:
            capacity: Maximum number of concurrently bound actors
        """
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._slots: List[Optional[Hashable]] = [None] * capacity
        self._by_actor: Dict[Hashable, int] = {}
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_full(self) -> bool:
        with self._lock:
            return len(self._by_actor) >= self._capacity

    def resolve(self, actor_id) -> int:
        """
        Return the slot bound to `actor_id`, binding a free one on first sighting.

        Raises:
            CapacityExceeded: If the actor is new and no slot is free
        """
        if actor_id is None:
            raise ValueError("actor_id must not be None")

        with self._lock:
            slot = self._by_actor.get(actor_id)
            if slot is not None:
                return slot

            for candidate, owner in enumerate(self._slots):
                if owner is None:
                    self._slots[candidate] = actor_id
                    self._by_actor[actor_id] = candidate
                    logger.debug("Bound actor %r to slot %d", actor_id, candidate)
                    return candidate

        raise CapacityExceeded(actor_id, self._capacity)

    def release(self, actor_id) -> Optional[int]:
        """
        Free the slot held by `actor_id`.

        Returns:
            The freed slot, or None if the actor was not bound
        """
        with self._lock:
            slot = self._by_actor.pop(actor_id, None)
            if slot is None:
                return None
            self._slots[slot] = None

        logger.debug("Released slot %d from actor %r", slot, actor_id)
        return slot

    def slot_of(self, actor_id) -> Optional[int]:
        with self._lock:
            return self._by_actor.get(actor_id)

    def actor_of(self, slot: int):
        with self._lock:
            if 0 <= slot < self._capacity:
                return self._slots[slot]
            return None

    def bound_slots(self) -> Dict[int, Hashable]:
        """Snapshot of {slot: actor_id} for every bound slot."""
        with self._lock:
            return {slot: actor for slot, actor in enumerate(self._slots) if actor is not None}

    def clear(self):
        with self._lock:
            self._slots = [None] * self._capacity
            self._by_actor.clear()

    def __len__(self):
        with self._lock:
            return len(self._by_actor)

    def __contains__(self, actor_id):
        with self._lock:
            return actor_id in self._by_actor

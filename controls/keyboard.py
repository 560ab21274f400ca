"""
Keyboard sink - turns fired gestures into emulated key taps
"""

import logging
import time

from controls.action_sink import ActionSink

logger = logging.getLogger(__name__)

# Try to import pynput for cross-platform support
try:
    from pynput.keyboard import Controller as KeyboardController, Key
    PYNPUT_AVAILABLE = True
except ImportError:
    PYNPUT_AVAILABLE = False
    logger.warning("pynput not available. Install with: pip install pynput")


class KeyboardActionSink(ActionSink):
    """
    Taps the key bound to a gesture whenever it fires for a slot.

    Each slot (player) has its own binding table, so two actors doing the same
    gesture press different keys.
    """

    def __init__(self, key_bindings, keyboard=None, tap_duration=0.0):
        """
        Args:
            key_bindings: {slot: {GestureClass: key_name}}
            keyboard: Object with press/release (creates a pynput Controller if None)
            tap_duration: How long to hold a tapped key (seconds). 0 taps without
                blocking; a positive hold stalls the caller of on_frame.
        """
        if keyboard is None:
            if not PYNPUT_AVAILABLE:
                raise ImportError("pynput is required. Install with: pip install pynput")
            keyboard = KeyboardController()

        self.keyboard = keyboard
        self.key_bindings = {slot: dict(keys) for slot, keys in key_bindings.items()}
        self.tap_duration = tap_duration

        # Keys currently held down, per slot
        self.pressed_keys = {}

    def _resolve_key(self, key_name):
        """Single characters are sent as-is, longer names map to pynput's Key enum."""
        if len(key_name) == 1 or not PYNPUT_AVAILABLE:
            return key_name
        return getattr(Key, key_name, key_name)

    def key_for(self, slot, gesture):
        return self.key_bindings.get(slot, {}).get(gesture)

    def press_key(self, slot, key_name):
        """
        Press and hold a key on behalf of a slot.

        Args:
            slot: Slot the key belongs to
            key_name: Name of the key (e.g., 'k', 'space')
        """
        held = self.pressed_keys.setdefault(slot, set())
        if key_name in held:
            return  # Already pressed

        try:
            self.keyboard.press(self._resolve_key(key_name))
            held.add(key_name)
        except Exception as e:
            logger.error("Error pressing key %s: %s", key_name, e)

    def release_key(self, slot, key_name):
        held = self.pressed_keys.get(slot, set())
        if key_name not in held:
            return  # Not currently pressed

        try:
            self.keyboard.release(self._resolve_key(key_name))
        except Exception as e:
            logger.error("Error releasing key %s: %s", key_name, e)
        held.discard(key_name)

    def tap_key(self, slot, key_name):
        self.press_key(slot, key_name)
        if self.tap_duration:
            time.sleep(self.tap_duration)
        self.release_key(slot, key_name)

    def release_slot(self, slot):
        for key_name in list(self.pressed_keys.get(slot, ())):
            self.release_key(slot, key_name)

    def release_all(self):
        """Release every key still held for any slot."""
        for slot in list(self.pressed_keys):
            self.release_slot(slot)

    def get_pressed_keys(self, slot=None):
        if slot is not None:
            return sorted(self.pressed_keys.get(slot, ()))
        return sorted(k for keys in self.pressed_keys.values() for k in keys)

    def action_fired(self, event):
        key_name = self.key_for(event.slot, event.gesture)
        if key_name is None:
            logger.debug("No key bound to %s for slot %d", event.gesture, event.slot)
            return
        self.tap_key(event.slot, key_name)

    def tracking_status(self, status):
        if not status.is_tracked:
            self.release_slot(status.slot)

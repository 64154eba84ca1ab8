"""
Gesture detection for link capture.

Provides the double-tap state machine and the mapping from raw pynput
keys to the events it consumes.
"""

from .detector import (
    DOUBLE_TAP_WINDOW,
    GestureState,
    KeyAction,
    KeyEvent,
    KeyKind,
    on_key_event,
)

from .keys import classify_key, to_key_event

__all__ = [
    "DOUBLE_TAP_WINDOW",
    "GestureState",
    "KeyAction",
    "KeyEvent",
    "KeyKind",
    "on_key_event",
    "classify_key",
    "to_key_event",
]

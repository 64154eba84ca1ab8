"""
Translation from pynput key objects to detector key kinds.

pynput reports special keys as ``Key`` enum members (with a ``name``) and
printable keys as ``KeyCode`` objects (with ``char`` and ``vk``). The
lookup is done by attribute so this module never imports pynput and the
detector stays importable on machines without an input backend.
"""

from typing import Any, Optional

from .detector import KeyAction, KeyEvent, KeyKind

MODIFIER_NAMES = frozenset({"ctrl", "ctrl_l", "ctrl_r"})

TRIGGER_CHARS = frozenset({"c", "C", "\x03"})  # \x03 is Ctrl+C on some backends

# Virtual key codes for the C key: macOS, Windows, X11 keysyms (c / C)
TRIGGER_VKS = frozenset({8, 0x43, 0x63})


def classify_key(key: Any) -> KeyKind:
    """Classify a pynput key as modifier, trigger or other."""
    if key is None:
        return KeyKind.OTHER

    name = getattr(key, "name", None)
    if isinstance(name, str) and name in MODIFIER_NAMES:
        return KeyKind.MODIFIER

    char = getattr(key, "char", None)
    if char is not None:
        return KeyKind.TRIGGER if char in TRIGGER_CHARS else KeyKind.OTHER

    vk = getattr(key, "vk", None)
    if isinstance(vk, int) and vk in TRIGGER_VKS:
        return KeyKind.TRIGGER

    return KeyKind.OTHER


def to_key_event(action: KeyAction, key: Any, timestamp: float) -> Optional[KeyEvent]:
    """Build a KeyEvent, or None when the key is irrelevant to the gesture."""
    kind = classify_key(key)
    if kind is KeyKind.OTHER:
        return None
    return KeyEvent(action=action, kind=kind, time=timestamp)

"""
Double-tap gesture detection.

Turns a stream of key press/release events into a single trigger when the
trigger key is pressed twice within DOUBLE_TAP_WINDOW seconds while the
modifier is held. The detector is a plain function over an explicit state
object so it can be fed synthetic event sequences without an input hook.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Maximum gap between the two presses, in seconds
DOUBLE_TAP_WINDOW = 0.6


class KeyAction(Enum):
    PRESS = "press"
    RELEASE = "release"


class KeyKind(Enum):
    """What a physical key means to the detector."""
    MODIFIER = "modifier"
    TRIGGER = "trigger"
    OTHER = "other"


@dataclass(frozen=True)
class KeyEvent:
    """A single key transition."""
    action: KeyAction
    kind: KeyKind
    time: float  # monotonic seconds


@dataclass
class GestureState:
    """Modifier and timing state, owned by whoever feeds the detector."""
    modifier_held: bool = False
    last_press_time: Optional[float] = None

    def reset(self) -> None:
        self.modifier_held = False
        self.last_press_time = None


def on_key_event(state: GestureState, event: KeyEvent) -> bool:
    """
    Apply one key event to the gesture state.

    Args:
        state: Detector state, mutated in place
        event: The key transition to apply

    Returns:
        True if this event completes a double tap, False otherwise
    """
    if event.kind is KeyKind.MODIFIER:
        state.modifier_held = event.action is KeyAction.PRESS
        return False

    if event.kind is not KeyKind.TRIGGER or event.action is not KeyAction.PRESS:
        return False

    if not state.modifier_held:
        return False

    previous = state.last_press_time
    if previous is not None and event.time - previous <= DOUBLE_TAP_WINDOW:
        # Consumed; the next press starts a new pair
        state.last_press_time = None
        return True

    state.last_press_time = event.time
    return False

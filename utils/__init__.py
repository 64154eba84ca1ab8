"""
Utility modules for link capture: events, metrics and the hotkey listener.
"""

from .hotkey_manager import HotKeyManager
from .metrics import timer, log_latency

__all__ = [
    "HotKeyManager",
    "timer",
    "log_latency",
]

"""
Event types and queues connecting the hotkey thread to the capture workers.

Keeps the queue definitions in one place so the hotkey manager and the
orchestrator do not import each other.
"""
from dataclasses import dataclass
from typing import Optional
import asyncio


@dataclass
class TriggerEvent:
    """A detected double-tap gesture."""
    timestamp: float


@dataclass
class CaptureEvent:
    """A link that was written to a canvas file."""
    url: str
    node_id: str
    timestamp: float


@dataclass
class ErrorEvent:
    """Error information for diagnostics."""
    stage: str  # "capture", "hotkey"
    error: Exception
    timestamp: float
    recoverable: bool = True


# Global event queues
trigger_queue: Optional[asyncio.Queue] = None
capture_queue: Optional[asyncio.Queue] = None
error_queue: Optional[asyncio.Queue] = None


def initialize_queues(max_size: int = 10) -> None:
    """Initialize all queues with bounded size."""
    global trigger_queue, capture_queue, error_queue

    trigger_queue = asyncio.Queue(maxsize=max_size)
    capture_queue = asyncio.Queue(maxsize=max_size * 5)
    error_queue = asyncio.Queue(maxsize=max_size * 5)  # More room for errors


def clear_queues() -> None:
    """Clear all queues during shutdown."""
    for queue in [trigger_queue, capture_queue, error_queue]:
        if queue:
            while not queue.empty():
                try:
                    queue.get_nowait()
                except asyncio.QueueEmpty:
                    break

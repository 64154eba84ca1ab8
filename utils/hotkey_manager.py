#!/usr/bin/env python3
"""
Global hotkey manager for the double Ctrl+C gesture.

Runs a pynput keyboard listener on a wrapper thread and feeds every key
transition through the gesture detector. Detector state is guarded by a
lock held only for the state update; the trigger callback runs after the
lock is released so slow handlers never delay the next key event.
"""

import logging
import threading
import time
from typing import Callable, Optional

from core.gesture import GestureState, KeyAction, on_key_event, to_key_event

logger = logging.getLogger(__name__)


class HotKeyManager:
    """
    Double-tap hotkey listener.

    Args:
        on_trigger: Called from the listener thread for each detected gesture
        on_listener_exit: Called once when the listener thread ends on its
            own, with the error that ended it (or None)
        clock: Monotonic time source, in seconds
    """

    def __init__(self,
                 on_trigger: Callable[[], None],
                 on_listener_exit: Optional[Callable[[Optional[BaseException]], None]] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.on_trigger = on_trigger
        self.on_listener_exit = on_listener_exit
        self._clock = clock

        self.state = GestureState()
        self._lock = threading.Lock()

        self.listener = None          # pynput listener
        self.thread = None            # wrapper thread
        self._running = False
        self._stopping = False

    def _on_key_press(self, key):
        self._handle(KeyAction.PRESS, key)

    def _on_key_release(self, key):
        self._handle(KeyAction.RELEASE, key)

    def _handle(self, action: KeyAction, key) -> None:
        event = to_key_event(action, key, self._clock())
        if event is None:
            return

        with self._lock:
            fired = on_key_event(self.state, event)

        if not fired:
            return

        logger.debug("🔥 double tap detected")
        try:
            self.on_trigger()
        except Exception as e:
            # Never let a handler failure kill the pynput thread
            logger.error(f"Error in hotkey trigger callback: {e}")

    def _run_listener(self):
        """
        Listener thread main function.
        Blocks until stop() is called or the listener fails.
        """
        error = None
        try:
            from pynput import keyboard

            logger.debug("Starting pynput keyboard listener")
            listener = keyboard.Listener(
                on_press=self._on_key_press,
                on_release=self._on_key_release
            )
            # macOS reports a missing accessibility grant here instead of failing
            if getattr(listener, "IS_TRUSTED", True) is False:
                raise PermissionError(
                    "process is not trusted for input monitoring; "
                    "grant accessibility permission and restart"
                )

            self.listener = listener
            listener.start()
            if self._stopping:
                listener.stop()
            self._running = True
            # A backend that dies before it is ready never unblocks an unbounded join
            while listener.is_alive():
                listener.join(0.5)  # re-raises errors from the callbacks

            if not self._stopping:
                raise RuntimeError("keyboard listener stopped unexpectedly")
        except Exception as e:
            error = e
            logger.error(f"Hotkey listener error: {e}")
        finally:
            self._running = False
            self.listener = None
            logger.debug("Hotkey listener thread ended")

        if self.on_listener_exit and not self._stopping:
            self.on_listener_exit(error)

    def start(self):
        """Start the hotkey listener in a background thread."""
        if self.thread and self.thread.is_alive():
            logger.debug("Hotkey listener already running")
            return

        self._stopping = False
        with self._lock:
            self.state.reset()

        self.thread = threading.Thread(
            target=self._run_listener,
            name="HotKeyListener",
            daemon=True
        )
        self.thread.start()
        logger.info("Global hot-key listener started (Ctrl+C twice)")

    def stop(self):
        """Stop the hotkey listener gracefully."""
        self._stopping = True
        listener = self.listener
        if listener is not None:
            logger.debug("Stopping hotkey listener")
            listener.stop()

        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=1.0)

        self._running = False
        logger.info("Hotkey listener stopped")

    def is_running(self) -> bool:
        """Check if the hotkey listener is currently running."""
        return bool(self._running and self.thread and self.thread.is_alive())

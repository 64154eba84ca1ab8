#!/usr/bin/env python3
"""
1cmdcc - Link Capture Orchestrator

Wires the pipeline together:
- Global double Ctrl+C gesture via pynput
- Clipboard read via pyperclip
- URL check
- Append to the daily canvas file (~/notes/1cmdcc/YYYY-MM-DD.canvas)

The hotkey thread only detects the gesture and hands it to the asyncio loop;
clipboard and file work run in the default executor so key delivery is never
held up. A failed capture is logged and the listener keeps running.
"""

import argparse
import asyncio
import logging
import signal
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from config.settings import ClipperConfig, load_config
from core.canvas import CanvasStore, LinkNode
from core.clipboard import ClipboardGateway, is_url
from core.errors import ClipperError
from utils.events import (
    initialize_queues, clear_queues,
    TriggerEvent, CaptureEvent, ErrorEvent
)
import utils.events as events
from utils.metrics import timer, log_latency
from utils.hotkey_manager import HotKeyManager

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False, quiet: bool = False,
                      log_file: Optional[Path] = None) -> None:
    """Configure root logging to stderr and, optionally, a log file."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        except OSError as e:
            print(f"Cannot open log file {log_file}: {e}", file=sys.stderr)

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


class LinkClipper:
    """
    Main orchestrator for link capture.

    Gesture → Clipboard → URL check → Canvas append → Confirmation
    """

    def __init__(self,
                 config: ClipperConfig,
                 clipboard: Optional[ClipboardGateway] = None,
                 store: Optional[CanvasStore] = None,
                 now: Optional[Callable[[], datetime]] = None,
                 quiet: bool = False):
        self.config = config
        self.quiet = quiet

        self.clipboard = clipboard or ClipboardGateway()
        self.store = store or CanvasStore(config.notes_path)
        self._now = now or (lambda: datetime.now().astimezone())

        self.hotkey_manager: Optional[HotKeyManager] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

        # Task management
        self.tasks = []
        self.shutdown_event = asyncio.Event()
        self.is_running = False
        self.listener_failed = False

        self.capture_count = 0

    def capture_link(self) -> Optional[LinkNode]:
        """
        Run one capture: read the clipboard and append it if it is a URL.

        Returns:
            The saved node, or None if the clipboard does not hold a URL

        Raises:
            ClipperError: If the clipboard or the canvas file fails
        """
        with timer("clipboard"):
            text = self.clipboard.read_text()

        if not is_url(text):
            logger.debug("Clipboard does not hold a URL, ignoring")
            return None

        with timer("canvas_append"):
            return self.store.append_link(text, self._now())

    async def start(self) -> bool:
        """Start the listener and the worker tasks."""
        if self.is_running:
            return True

        self._loop = asyncio.get_running_loop()
        initialize_queues()

        logger.info(f"Saving links to {self.store.base_directory}")

        self.hotkey_manager = HotKeyManager(
            on_trigger=self._on_trigger,
            on_listener_exit=self._on_listener_exit
        )
        self.hotkey_manager.start()

        self.tasks = [
            asyncio.create_task(self._capture_worker(), name="capture_worker"),
            asyncio.create_task(self._report_worker(), name="report_worker"),
            asyncio.create_task(self._error_handler(), name="error_handler"),
        ]

        self.is_running = True

        if not self.quiet:
            print("\n" + "=" * 60)
            print("🔗 1CMDCC READY")
            print("=" * 60)
            print("📋 Copy a link, then press Ctrl+C twice to save it")
            print(f"📁 Notes: {self.store.base_directory}")
            print("🛑 Press Ctrl+C in this terminal to quit")
            print("=" * 60 + "\n")

        return True

    async def stop(self):
        """Stop the listener and workers."""
        if not self.is_running:
            return

        logger.info("🔻 Shutting down 1cmdcc...")

        self.shutdown_event.set()

        if self.hotkey_manager:
            self.hotkey_manager.stop()

        for task in self.tasks:
            if not task.done():
                task.cancel()

        if self.tasks:
            await asyncio.gather(*self.tasks, return_exceptions=True)

        clear_queues()

        if not self.quiet:
            log_latency()

        self.is_running = False
        logger.info(f"1cmdcc stopped ({self.capture_count} links saved)")

    # Listener thread callbacks

    def _on_trigger(self):
        """Called on the hotkey thread; hands the gesture to the event loop."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._enqueue_trigger, TriggerEvent(timestamp=time.time()))

    def _on_listener_exit(self, error: Optional[BaseException]):
        """Called on the hotkey thread when the listener ends unexpectedly."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        event = ErrorEvent(
            stage="hotkey",
            error=error or RuntimeError("keyboard listener stopped"),
            timestamp=time.time(),
            recoverable=False
        )
        loop.call_soon_threadsafe(self._report_error, event)

    def _enqueue_trigger(self, event: TriggerEvent):
        try:
            events.trigger_queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning("Trigger queue full – dropping gesture")

    def _report_error(self, event: ErrorEvent):
        """Queue an error for the error handler."""
        try:
            events.error_queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.error(f"Error in {event.stage}: {event.error}")

    # Workers

    async def _capture_worker(self):
        """Capture worker: run the capture pipeline for each trigger."""
        logger.info("📋 Capture worker started")
        loop = asyncio.get_running_loop()

        try:
            while not self.shutdown_event.is_set():
                try:
                    trigger = await asyncio.wait_for(
                        events.trigger_queue.get(),
                        timeout=1.0
                    )
                except asyncio.TimeoutError:
                    continue

                try:
                    with timer("capture"):
                        node = await loop.run_in_executor(None, self.capture_link)
                except ClipperError as e:
                    self._report_error(ErrorEvent(stage="capture", error=e, timestamp=time.time()))
                    continue
                except Exception as e:
                    logger.exception("Unexpected capture failure")
                    self._report_error(ErrorEvent(stage="capture", error=e, timestamp=time.time()))
                    continue

                if node is None:
                    continue

                await events.capture_queue.put(CaptureEvent(
                    url=node.url,
                    node_id=node.id,
                    timestamp=trigger.timestamp
                ))

        except asyncio.CancelledError:
            logger.info("Capture worker cancelled")

    async def _report_worker(self):
        """Confirm each saved link to the user."""
        try:
            while not self.shutdown_event.is_set():
                try:
                    capture = await asyncio.wait_for(
                        events.capture_queue.get(),
                        timeout=1.0
                    )
                except asyncio.TimeoutError:
                    continue

                self.capture_count += 1
                logger.info(f"Saved link {capture.node_id}: {capture.url}")
                if not self.quiet:
                    print(f"🔗 Link saved: {capture.url}")

        except asyncio.CancelledError:
            logger.info("Report worker cancelled")

    async def _error_handler(self):
        """Log pipeline errors; stop on unrecoverable ones."""
        try:
            while not self.shutdown_event.is_set():
                try:
                    error_event = await asyncio.wait_for(
                        events.error_queue.get(),
                        timeout=1.0
                    )
                except asyncio.TimeoutError:
                    continue

                if error_event.recoverable:
                    logger.error(f"Failed to save link: {error_event.error}")
                else:
                    logger.critical(f"Unrecoverable error in {error_event.stage}: "
                                    f"{error_event.error}")
                    self.listener_failed = True
                    self.shutdown_event.set()

        except asyncio.CancelledError:
            logger.info("Error handler cancelled")


# CLI and Main Entry Point

def setup_signal_handlers(clipper: LinkClipper):
    """Setup graceful shutdown on SIGINT/SIGTERM."""
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, clipper.shutdown_event.set)
        except (NotImplementedError, RuntimeError):
            # Windows: SIGINT still arrives as KeyboardInterrupt
            logger.debug(f"Signal handler for {signum} not supported")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="1cmdcc",
        description="Press Ctrl+C twice to save the copied URL to today's canvas"
    )
    parser.add_argument("--path", type=Path, metavar="PATH",
                        help="Path to save notes (default: ~/notes/1cmdcc)")
    parser.add_argument("--config", metavar="PATH",
                        help="Config file (default: ~/.1cmdcc/config.toml)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Quiet mode")
    return parser


async def main(argv=None):
    """Main entry point for 1cmdcc."""
    args = build_parser().parse_args(argv)

    configure_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        config = load_config(args.config)
        if args.path is not None:
            config.notes["path"] = str(args.path)
        notes_path = config.notes_path
        log_path = config.log_path
    except RuntimeError as e:
        # Path.expanduser() cannot resolve the home directory
        logger.error(f"Cannot resolve notes directory: {e}")
        return 1

    verbose = args.verbose or bool(config.ui.get("verbose"))
    quiet = args.quiet or bool(config.ui.get("quiet"))
    configure_logging(verbose=verbose, quiet=quiet, log_file=log_path)

    clipper = LinkClipper(config, store=CanvasStore(notes_path), quiet=quiet)

    try:
        if await clipper.start():
            setup_signal_handlers(clipper)
            await clipper.shutdown_event.wait()

    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        return 1
    finally:
        await clipper.stop()

    if clipper.listener_failed:
        logger.error("Keyboard listener could not run; check input monitoring permissions")

    return 0


def run():
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    run()

"""
Tests for the LinkClipper orchestrator with fake clipboard and store.
"""

import asyncio
import time
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock, patch

import pytest

import utils.events as events
from clipper import LinkClipper, build_parser, main
from config.settings import ClipperConfig, DEFAULT_CONFIG
from core.canvas import CanvasStore, canvas_filename
from core.errors import ClipboardUnavailable, MalformedCanvasFile
from utils.events import ErrorEvent, TriggerEvent, initialize_queues, clear_queues

NOW = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone(timedelta(hours=2)))


class FakeClipboard:
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error

    def read_text(self):
        if self.error:
            raise self.error
        return self.text


@pytest.fixture
def config(tmp_path):
    cfg = ClipperConfig(**{k: dict(v) for k, v in DEFAULT_CONFIG.items()})
    cfg.notes["path"] = str(tmp_path / "notes")
    return cfg


def make_clipper(config, text="", error=None, store=None):
    return LinkClipper(
        config,
        clipboard=FakeClipboard(text, error),
        store=store,
        now=lambda: NOW,
        quiet=True
    )


class TestCaptureLink:
    """Test the synchronous capture pipeline."""

    def test_url_is_saved(self, config, tmp_path):
        clipper = make_clipper(config, "https://example.com/a")

        node = clipper.capture_link()

        assert node.url == "https://example.com/a"
        assert (tmp_path / "notes" / canvas_filename(NOW)).exists()

    def test_non_url_is_ignored(self, config, tmp_path):
        clipper = make_clipper(config, "just some text")

        assert clipper.capture_link() is None
        assert not (tmp_path / "notes").exists()

    def test_clipboard_error_propagates(self, config):
        clipper = make_clipper(config, error=ClipboardUnavailable("no clipboard"))

        with pytest.raises(ClipboardUnavailable):
            clipper.capture_link()

    def test_store_defaults_to_configured_notes_path(self, config, tmp_path):
        clipper = LinkClipper(config, clipboard=FakeClipboard(), quiet=True)
        assert clipper.store.base_directory == tmp_path / "notes"


class TestWorkers:
    """Test the async workers without a real keyboard listener."""

    @pytest.fixture(autouse=True)
    def queues(self):
        yield
        clear_queues()

    async def _run_workers(self, clipper, triggers, until):
        initialize_queues()
        tasks = [
            asyncio.create_task(clipper._capture_worker()),
            asyncio.create_task(clipper._report_worker()),
            asyncio.create_task(clipper._error_handler()),
        ]
        for _ in range(triggers):
            await events.trigger_queue.put(TriggerEvent(timestamp=time.time()))

        deadline = time.monotonic() + 5.0
        while not until() and time.monotonic() < deadline:
            await asyncio.sleep(0.02)

        clipper.shutdown_event.set()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    @pytest.mark.asyncio
    async def test_trigger_saves_link(self, config):
        clipper = make_clipper(config, "https://example.com/a")

        await self._run_workers(clipper, triggers=2,
                                 until=lambda: clipper.capture_count == 2)

        assert clipper.capture_count == 2
        assert clipper.listener_failed is False

    @pytest.mark.asyncio
    async def test_capture_failure_keeps_running(self, config):
        store = Mock(spec=CanvasStore)
        store.append_link.side_effect = [
            MalformedCanvasFile("x.canvas", "bad json"),
            Mock(url="https://example.com/a", id="0123456789abcdef"),
        ]
        clipper = make_clipper(config, "https://example.com/a", store=store)

        with patch("clipper.logger") as mock_logger:
            await self._run_workers(
                clipper, triggers=2,
                until=lambda: clipper.capture_count == 1 and mock_logger.error.called
            )

        assert store.append_link.call_count == 2
        assert clipper.capture_count == 1
        assert clipper.listener_failed is False
        mock_logger.error.assert_called()

    @pytest.mark.asyncio
    async def test_unrecoverable_error_requests_shutdown(self, config):
        clipper = make_clipper(config)
        initialize_queues()
        handler = asyncio.create_task(clipper._error_handler())

        clipper._report_error(ErrorEvent(
            stage="hotkey",
            error=PermissionError("not trusted"),
            timestamp=time.time(),
            recoverable=False
        ))
        await asyncio.wait_for(clipper.shutdown_event.wait(), timeout=2.0)
        handler.cancel()
        await asyncio.gather(handler, return_exceptions=True)

        assert clipper.listener_failed is True

    @pytest.mark.asyncio
    async def test_trigger_from_listener_thread(self, config):
        clipper = make_clipper(config)
        clipper._loop = asyncio.get_running_loop()
        initialize_queues()

        await asyncio.to_thread(clipper._on_trigger)
        event = await asyncio.wait_for(events.trigger_queue.get(), timeout=1.0)

        assert isinstance(event, TriggerEvent)

    @pytest.mark.asyncio
    async def test_full_trigger_queue_drops_gesture(self, config):
        clipper = make_clipper(config)
        initialize_queues(max_size=1)
        clipper._enqueue_trigger(TriggerEvent(timestamp=1.0))
        clipper._enqueue_trigger(TriggerEvent(timestamp=2.0))

        assert events.trigger_queue.qsize() == 1


class TestCLI:
    """Test argument parsing and startup."""

    def test_path_flag(self, tmp_path):
        args = build_parser().parse_args(["--path", str(tmp_path)])
        assert args.path == tmp_path

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.path is None
        assert args.config is None
        assert args.verbose is False
        assert args.quiet is False

    @pytest.mark.asyncio
    async def test_listener_failure_exits_cleanly(self, tmp_path):
        notes = tmp_path / "notes"
        config_file = tmp_path / "config.toml"
        config_file.write_text('[logging]\nfile = ""\n', encoding="utf-8")

        def failing_start(manager):
            manager.on_listener_exit(ImportError("no input backend"))

        with patch("clipper.HotKeyManager.start", failing_start), \
                patch("clipper.configure_logging"):
            code = await asyncio.wait_for(
                main(["--path", str(notes), "--config", str(config_file), "-q"]),
                timeout=5.0
            )

        assert code == 0

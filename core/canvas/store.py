"""
Canvas persistence: load the day's canvas, place a new link node, save.

One file per local calendar day, ``<notes-dir>/YYYY-MM-DD.canvas``. The
canvas is read fresh for every append and never cached between triggers.
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from core.errors import FileSystemError, MalformedCanvasFile, SerializationError

from .layout import cell_to_pixels, next_cell
from .models import Canvas, LinkNode

logger = logging.getLogger(__name__)

CANVAS_SUFFIX = ".canvas"


def canvas_filename(now: datetime) -> str:
    """Daily canvas file name for the local date of ``now``."""
    return now.astimezone().strftime("%Y-%m-%d") + CANVAS_SUFFIX


class CanvasStore:
    """
    Append-only access to the daily canvas files in one notes directory.

    Not safe against other processes writing the same directory: two
    instances racing on one day file lose whichever write lands first.
    """

    def __init__(self, base_directory: Union[str, Path]):
        self.base_directory = Path(base_directory)

    def path_for(self, now: datetime) -> Path:
        return self.base_directory / canvas_filename(now)

    def load(self, path: Path) -> Canvas:
        """
        Load a canvas file, or an empty canvas if it does not exist.

        Raises:
            FileSystemError: If the file exists but cannot be read
            MalformedCanvasFile: If the file is not a valid canvas document
        """
        if not path.exists():
            logger.debug(f"No canvas at {path}, starting empty")
            return Canvas()

        try:
            raw = path.read_bytes()
        except OSError as e:
            raise FileSystemError(f"Failed to read {path}: {e}") from e

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedCanvasFile(path, str(e)) from e

        try:
            return Canvas.from_dict(data)
        except ValueError as e:
            raise MalformedCanvasFile(path, str(e)) from e

    def save(self, path: Path, canvas: Canvas) -> None:
        """
        Write a canvas back to disk, replacing the file atomically.

        Raises:
            SerializationError: If the canvas cannot be encoded as JSON
            FileSystemError: If the file cannot be written
        """
        try:
            content = json.dumps(canvas.to_dict(), indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to encode canvas: {e}") from e

        # Write beside the target so the rename stays on one filesystem
        temp_path = path.with_name(path.name + ".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, path)
        except OSError as e:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                logger.debug(f"Could not remove {temp_path}")
            raise FileSystemError(f"Failed to write {path}: {e}") from e

    def append_link(self, url: str, now: Optional[datetime] = None) -> LinkNode:
        """
        Append a link node to the canvas for ``now``'s local date.

        Args:
            url: Captured URL
            now: Creation time (defaults to the current local time)

        Returns:
            The node that was written

        Raises:
            FileSystemError, MalformedCanvasFile, SerializationError
        """
        if now is None:
            now = datetime.now().astimezone()
        elif now.tzinfo is None:
            now = now.astimezone()

        try:
            self.base_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(
                f"Failed to create notes directory {self.base_directory}: {e}"
            ) from e

        path = self.path_for(now)
        canvas = self.load(path)

        row, col = next_cell(canvas.last_node, now)
        x, y = cell_to_pixels(row, col)

        node = LinkNode(url=url, x=x, y=y, date=now.isoformat())
        canvas.append(node)

        self.save(path, canvas)
        logger.debug(f"Placed {node.id} at cell ({row}, {col}) in {path.name}")
        return node


def append_link(url: str, base_directory: Union[str, Path],
                now: Optional[datetime] = None) -> LinkNode:
    """Append a link node to the daily canvas in ``base_directory``."""
    return CanvasStore(base_directory).append_link(url, now)

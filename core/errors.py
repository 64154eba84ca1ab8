"""
Error types raised along the link capture path.

Everything raised while handling a trigger derives from ClipperError so the
orchestrator can catch one type at its boundary and keep the listener alive.
"""


class ClipperError(Exception):
    """Base class for link capture failures."""
    pass


class ClipboardUnavailable(ClipperError):
    """The system clipboard could not be opened or read."""
    pass


class FileSystemError(ClipperError):
    """Creating the notes directory, or reading/writing a canvas file, failed."""
    pass


class MalformedCanvasFile(ClipperError):
    """An existing canvas file could not be parsed as a canvas document."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed canvas file {path}: {reason}")


class SerializationError(ClipperError):
    """The in-memory canvas could not be encoded."""
    pass

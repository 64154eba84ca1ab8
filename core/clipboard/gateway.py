"""
System clipboard access via pyperclip.
"""

import logging

import pyperclip

from core.errors import ClipboardUnavailable

logger = logging.getLogger(__name__)


class ClipboardGateway:
    """Text-only read access to the system clipboard."""

    def read_text(self) -> str:
        """
        Read the current clipboard text.

        Returns:
            Clipboard contents, or an empty string when it holds no text

        Raises:
            ClipboardUnavailable: If no clipboard mechanism is available
                or the read fails
        """
        try:
            text = pyperclip.paste()
        except pyperclip.PyperclipException as e:
            raise ClipboardUnavailable(f"Clipboard unavailable: {e}") from e

        if text is None:
            return ""

        logger.debug(f"Read {len(text)} characters from clipboard")
        return text

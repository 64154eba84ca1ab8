"""
URL classification for clipboard text.
"""

import re

# Whole-string match; no trimming or case folding before matching
URL_PATTERN = re.compile(r"(https?|ftp)://[^\s/$.?#]\S[^\s]*")


def is_url(text: str) -> bool:
    """Return True if the entire text is an http, https or ftp URL."""
    if not isinstance(text, str):
        return False
    return URL_PATTERN.fullmatch(text) is not None

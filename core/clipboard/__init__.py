"""
Clipboard access and classification.
"""

from .classifier import URL_PATTERN, is_url
from .gateway import ClipboardGateway

__all__ = ["URL_PATTERN", "is_url", "ClipboardGateway"]

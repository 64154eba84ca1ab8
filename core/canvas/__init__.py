"""
Daily canvas files: document model, grid layout and the append operation.
"""

from .models import (
    LINK_NODE_TYPE,
    NODE_HEIGHT,
    NODE_WIDTH,
    Canvas,
    LinkNode,
    random_node_id,
)

from .layout import (
    BLOCK_GAP,
    cell_to_pixels,
    grid_cell_of,
    is_same_block,
    next_cell,
    parse_rfc3339,
)

from .store import CanvasStore, append_link, canvas_filename

__all__ = [
    "LINK_NODE_TYPE",
    "NODE_HEIGHT",
    "NODE_WIDTH",
    "Canvas",
    "LinkNode",
    "random_node_id",
    "BLOCK_GAP",
    "cell_to_pixels",
    "grid_cell_of",
    "is_same_block",
    "next_cell",
    "parse_rfc3339",
    "CanvasStore",
    "append_link",
    "canvas_filename",
]

"""
Grid placement for new canvas nodes.

Nodes sit on an implicit grid of 960x780 pixel cells anchored so that cell
(0, 0) is at (-400, -180). Captures less than BLOCK_GAP apart form a time
block and grow a row to the right; a longer gap starts a new row.
"""

import re
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

ORIGIN_X = -400
ORIGIN_Y = -180
COLUMN_STEP = 960
ROW_STEP = 780

BLOCK_GAP = timedelta(minutes=5)

# date-time from RFC 3339 section 5.6; seconds and the offset are mandatory
RFC3339_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})"
)


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def cell_to_pixels(row: int, col: int) -> Tuple[int, int]:
    """Top-left pixel position of a grid cell."""
    return ORIGIN_X + col * COLUMN_STEP, ORIGIN_Y + row * ROW_STEP


def grid_cell_of(node: Dict[str, Any]) -> Tuple[int, int]:
    """Recover the (row, col) a node was placed in from its pixel position."""
    row = _trunc_div(node["y"] - ORIGIN_Y, ROW_STEP)
    col = _trunc_div(node["x"] - ORIGIN_X, COLUMN_STEP)
    return row, col


def parse_rfc3339(value: Any) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp, returning None if it is not one."""
    if not isinstance(value, str) or RFC3339_PATTERN.fullmatch(value) is None:
        return None
    try:
        return datetime.fromisoformat(value.upper())
    except ValueError:
        # Well-formed but out of range, e.g. month 13
        return None


def is_same_block(last_date: Any, now: datetime) -> bool:
    """True if ``now`` falls within BLOCK_GAP of a node's stored date."""
    parsed = parse_rfc3339(last_date)
    if parsed is None:
        return False
    return now - parsed.astimezone(now.tzinfo) < BLOCK_GAP


def next_cell(last_node: Optional[Dict[str, Any]], now: datetime) -> Tuple[int, int]:
    """
    Pick the grid cell for a node created at ``now``.

    Args:
        last_node: The most recently appended node, or None for an empty canvas
        now: Timezone-aware creation time of the new node

    Returns:
        (row, col) of the new node
    """
    if last_node is None:
        return 0, 0

    last_row, last_col = grid_cell_of(last_node)
    if is_same_block(last_node.get("date"), now):
        return last_row, last_col + 1
    return last_row + 1, 0

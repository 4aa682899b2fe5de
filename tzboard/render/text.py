# tzboard/render/text.py
from __future__ import annotations

from typing import List

from tzboard.model import Board, BoardRow

_CELL_W = 6


def _cell_text(row: BoardRow) -> str:
    parts = []
    for c in row.cells:
        txt = c.date_label if c.date_label else c.label
        parts.append(txt.rjust(_CELL_W))
    return "".join(parts)


def _row_title(row: BoardRow, *, show_utc_offset: bool) -> str:
    e = row.entry
    title = e.label or e.name
    if e.is_home:
        title = f"* {title}"
    if show_utc_offset:
        title = f"{title} ({row.utc_offset})"
    return title


def render_board(board: Board, *, show_utc_offset: bool = False) -> str:
    """Plain-text grid; one line per row, the 0h cell shows its date."""
    if not board.rows:
        return "No timezones added yet. Add one with `tzboard add <Area/City>`."

    titles = [_row_title(r, show_utc_offset=show_utc_offset) for r in board.rows]
    title_w = max(len(t) for t in titles)
    time_w = max(len(r.formatted_time) for r in board.rows)
    date_w = max(len(r.display_date) for r in board.rows)

    lines: List[str] = []
    for title, row in zip(titles, board.rows):
        lines.append(
            f"{title.ljust(title_w)}  {row.formatted_time.rjust(time_w)}  "
            f"{row.display_date.ljust(date_w)} |{_cell_text(row)}"
        )
    return "\n".join(lines)

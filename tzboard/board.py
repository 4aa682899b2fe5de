# tzboard/board.py
from __future__ import annotations

import datetime as dt
import os
from typing import List, Optional, Sequence

from .model import (
    HOURS_PER_DAY,
    Board,
    BoardCell,
    BoardRow,
    BoardTimezone,
    TimeScaleConfig,
    TimeRange,
    UserPreferences,
)
from .resolve import resolve_local_time
from .scale import calculate_time_scale_config, hour_at_position
from .selection import time_range
from .util.timeparse import parse_time_string
from .util.tz import (
    format_utc_offset,
    local_time,
    timezone_abbreviation,
    timezone_offset_hours,
    to_utc,
    utc_now,
    utc_offset_hours,
)

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

DAY_START_HOUR = 6
DAY_END_HOUR = 17


def default_preferences() -> UserPreferences:
    raw = (os.getenv("TZBOARD_HOUR_FORMAT", "") or "").strip()
    return UserPreferences(hour_format="12" if raw == "12" else "24")


def sort_entries(entries: Sequence[BoardTimezone]) -> List[BoardTimezone]:
    return sorted(entries, key=lambda e: e.order if e.order is not None else 0)


def reference_timezone(entries: Sequence[BoardTimezone]) -> Optional[str]:
    """Home entry's timezone, else the first entry's."""
    if not entries:
        return None
    for e in entries:
        if e.is_home:
            return e.timezone
    return entries[0].timezone


def is_day_time(hour: int) -> bool:
    return DAY_START_HOUR <= hour <= DAY_END_HOUR


def to_12_hour(hour24: int) -> tuple[int, str]:
    if hour24 == 0:
        return 12, "AM"
    if hour24 == 12:
        return 12, "PM"
    if hour24 < 12:
        return hour24, "AM"
    return hour24 - 12, "PM"


def hour_label(hour: int, hour_format: str) -> str:
    if hour_format == "12":
        h, ampm = to_12_hour(hour)
        return f"{h} {ampm}"
    return str(hour)


def format_clock(local: dt.datetime, hour_format: str) -> str:
    """"HH:mm" (24h) or "h:mm AM" (12h)."""
    if hour_format == "12":
        h, ampm = to_12_hour(local.hour)
        return f"{h}:{local.minute:02d} {ampm}"
    return f"{local.hour:02d}:{local.minute:02d}"


def format_display_date(local: dt.datetime) -> str:
    """"Thu, Jan 29"."""
    return f"{WEEKDAY_NAMES[local.weekday()][:3]}, {MONTH_ABBR[local.month - 1]} {local.day}"


def marker_label(md: str) -> Optional[str]:
    """"1/29" -> "Jan 29"."""
    try:
        month_s, day_s = md.split("/", 1)
        return f"{MONTH_ABBR[int(month_s) - 1]} {int(day_s)}"
    except (ValueError, IndexError):
        return None


def build_cells(config: TimeScaleConfig, hour_format: str) -> tuple[BoardCell, ...]:
    zero_marker = next((m for m in config.date_markers if m.hour == 0), None)
    cells = []
    for pos in range(HOURS_PER_DAY):
        hour = hour_at_position(pos, config.start_hour)
        date_label = None
        if hour == 0 and zero_marker is not None:
            date_label = marker_label(zero_marker.date)
        cells.append(
            BoardCell(
                position=pos,
                hour=hour,
                instant=config.instant_at(pos),
                is_day=is_day_time(hour),
                is_zero_hour=hour == 0,
                is_last_hour=hour == HOURS_PER_DAY - 1,
                label=hour_label(hour, hour_format),
                date_label=date_label,
            )
        )
    return tuple(cells)


def build_row(
    entry: BoardTimezone,
    reference: Optional[str],
    at: dt.datetime,
    hour_format: str,
) -> BoardRow:
    config = calculate_time_scale_config(entry.timezone, reference, at)
    local = local_time(at, entry.timezone)
    return BoardRow(
        entry=entry,
        config=config,
        offset_hours=timezone_offset_hours(entry.timezone, reference, at),
        utc_offset=format_utc_offset(utc_offset_hours(entry.timezone, at)),
        abbreviation=timezone_abbreviation(entry.timezone, at),
        formatted_time=format_clock(local, hour_format),
        formatted_date=local.strftime("%Y-%m-%d"),
        day_of_week=WEEKDAY_NAMES[local.weekday()],
        display_date=format_display_date(local),
        cells=build_cells(config, hour_format),
    )


def build_board(
    entries: Sequence[BoardTimezone],
    at: Optional[dt.datetime] = None,
    *,
    preferences: Optional[UserPreferences] = None,
) -> Board:
    """Rows for every entry, all anchored to the reference timezone's midnight.

    Rebuilt from scratch on every tick or edit.
    """
    at_utc = to_utc(at) if at is not None else utc_now()
    prefs = preferences or default_preferences()
    if not entries:
        return Board(at=at_utc, reference_timezone=None, preferences=prefs, rows=())

    reference = reference_timezone(entries)
    rows = tuple(build_row(e, reference, at_utc, prefs.hour_format) for e in sort_entries(entries))
    return Board(at=at_utc, reference_timezone=reference, preferences=prefs, rows=rows)


def anchor_for_custom_time(
    text: str,
    reference: Optional[str],
    at: Optional[dt.datetime] = None,
) -> Optional[dt.datetime]:
    """Instant for a typed time on the reference timezone's current date, or None."""
    parsed = parse_time_string(text)
    if parsed is None:
        return None
    at_utc = to_utc(at) if at is not None else utc_now()
    ref_local = local_time(at_utc, reference)
    return resolve_local_time(
        ref_local.year, ref_local.month, ref_local.day, parsed.hour, parsed.minute, reference, now=at_utc
    )


def time_range_for_positions(board: Board, start_position: int, end_position: int) -> Optional[TimeRange]:
    """Selected range expressed in the reference row's hours."""
    if not board.rows:
        return None
    ref_row = next(
        (r for r in board.rows if r.entry.timezone == board.reference_timezone),
        board.rows[0],
    )
    return time_range(ref_row.config, start_position, end_position)

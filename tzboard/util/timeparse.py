# tzboard/util/timeparse.py
from __future__ import annotations

import datetime as dt
import re
from typing import Any, Optional

from tzboard.model import ParsedTime

# "14:30", "2:30 PM", "2:30pm", "14:30:00"
_CLOCK_RE = re.compile(r"(\d{1,2}):(\d{2})(?::\d{2})?\s*(am|pm)?", re.ASCII | re.IGNORECASE)
# "11pm", "11 PM"
_HOUR_MERIDIEM_RE = re.compile(r"(\d{1,2})\s*(am|pm)", re.ASCII | re.IGNORECASE)


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    return dt.datetime.strptime(s, "%Y-%m-%d").date()


def _apply_meridiem(hour: int, meridiem: Optional[str]) -> int:
    # An hour above 12 is already unambiguous; the suffix is ignored.
    if not meridiem or hour > 12:
        return hour
    if meridiem == "PM" and hour != 12:
        return hour + 12
    if meridiem == "AM" and hour == 12:
        return 0
    return hour


def parse_time_string(text: Any) -> Optional[ParsedTime]:
    """Parse free-text time input into a ParsedTime.

    Accepted forms (case-insensitive meridiem):
      - "14:30", "14:30:00"        24-hour
      - "2:30 PM", "2:30pm"        12-hour
      - "11pm", "11 PM"            hour with meridiem, no minutes

    Without a meridiem "2:30" reads as 02:30. Returns None for anything else;
    never raises.
    """
    if not isinstance(text, str):
        return None
    s = text.strip()
    if not s:
        return None

    m = _CLOCK_RE.fullmatch(s)
    if m:
        hour = int(m.group(1))
        minute = int(m.group(2))
        meridiem = m.group(3)
    else:
        m = _HOUR_MERIDIEM_RE.fullmatch(s)
        if not m:
            return None
        hour = int(m.group(1))
        minute = 0
        meridiem = m.group(2)

    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None

    hour = _apply_meridiem(hour, meridiem.upper() if meridiem else None)
    if not (0 <= hour <= 23):
        return None

    return ParsedTime(hour=hour, minute=minute)


def is_time_string(text: Any) -> bool:
    """True when `text` is a time edit rather than a timezone search query."""
    return parse_time_string(text) is not None

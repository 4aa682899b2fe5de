# tzboard/model.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Optional, Tuple

HOURS_PER_DAY = 24


@dataclass(frozen=True)
class ParsedTime:
    hour: int
    minute: int


@dataclass(frozen=True)
class DateMarker:
    hour: int   # actual local hour the marker sits on (always 0), not a position
    date: str   # "M/d"


@dataclass(frozen=True)
class TimeScaleConfig:
    start_hour: int
    base_time: dt.datetime
    date_markers: Tuple[DateMarker, ...]
    start_minute: int = 0

    @property
    def zero_hour_position(self) -> int:
        return (HOURS_PER_DAY - self.start_hour) % HOURS_PER_DAY

    def instant_at(self, position: int) -> dt.datetime:
        return self.base_time + dt.timedelta(hours=int(position) % HOURS_PER_DAY)


@dataclass(frozen=True)
class BoardTimezone:
    id: str
    name: str
    timezone: str
    label: Optional[str] = None
    is_home: bool = False
    order: Optional[int] = None


@dataclass(frozen=True)
class UserPreferences:
    hour_format: str = "24"  # "12" | "24"
    show_utc_offset: bool = False


@dataclass(frozen=True)
class TimeRange:
    start_time: dt.datetime
    end_time: dt.datetime
    start_hour: int
    end_hour: int
    start_position: int
    end_position: int


@dataclass(frozen=True)
class DirectoryMatch:
    id: str
    name: str
    timezone: str


@dataclass(frozen=True)
class BoardCell:
    position: int
    hour: int
    instant: dt.datetime
    is_day: bool
    is_zero_hour: bool
    is_last_hour: bool
    label: str
    date_label: Optional[str] = None


@dataclass(frozen=True)
class BoardRow:
    entry: BoardTimezone
    config: TimeScaleConfig
    offset_hours: float
    utc_offset: str
    abbreviation: str
    formatted_time: str
    formatted_date: str
    day_of_week: str
    display_date: str
    cells: Tuple[BoardCell, ...]


@dataclass(frozen=True)
class Board:
    at: dt.datetime
    reference_timezone: Optional[str]
    preferences: UserPreferences
    rows: Tuple[BoardRow, ...] = field(default_factory=tuple)

    @property
    def base_time(self) -> Optional[dt.datetime]:
        return self.rows[0].config.base_time if self.rows else None


__all__ = [
    "HOURS_PER_DAY",
    "ParsedTime",
    "DateMarker",
    "TimeScaleConfig",
    "BoardTimezone",
    "UserPreferences",
    "TimeRange",
    "DirectoryMatch",
    "BoardCell",
    "BoardRow",
    "Board",
]

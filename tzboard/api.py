"""tzboard.api

Stable *library* entrypoint for tzboard.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from typing import List, Optional

from tzboard.board import anchor_for_custom_time, build_board
from tzboard.directory import MAX_RESULTS, TimezoneDirectory
from tzboard.model import (
    Board,
    BoardTimezone,
    DirectoryMatch,
    ParsedTime,
    TimeRange,
    TimeScaleConfig,
    UserPreferences,
)
from tzboard.payload import board_to_payload, dumps_payload
from tzboard.resolve import resolve_local_time
from tzboard.scale import align, calculate_time_scale_config, hour_at_position, position_for_hour
from tzboard.selection import SelectionMachine, position_from_pointer, time_range
from tzboard.store import StoreError, TimezoneStore
from tzboard.util.timeparse import is_time_string, parse_time_string
from tzboard.util.tz import timezone_offset_hours
from tzboard.validate import PayloadValidationError, assert_valid_board_payload, validate_board_payload


def search_timezones(
    query: str,
    directory: Optional[TimezoneDirectory] = None,
    *,
    limit: int = MAX_RESULTS,
) -> List[DirectoryMatch]:
    """Search `directory`, building a fresh one from the platform catalog when omitted.

    Long-lived callers should build a TimezoneDirectory once and pass it in.
    """
    d = directory if directory is not None else TimezoneDirectory.build()
    return d.search(query, limit=limit)


# --- Public API exports (locked by contract tests) ------------------------
# Keep changes intentional and reviewable.
# Prefer append-only unless you are intentionally reshaping the public surface.
_PUBLIC_EXPORTS = (
    "Board",
    "BoardTimezone",
    "DirectoryMatch",
    "ParsedTime",
    "PayloadValidationError",
    "SelectionMachine",
    "StoreError",
    "TimeRange",
    "TimeScaleConfig",
    "TimezoneDirectory",
    "TimezoneStore",
    "UserPreferences",
    "align",
    "anchor_for_custom_time",
    "assert_valid_board_payload",
    "board_to_payload",
    "build_board",
    "calculate_time_scale_config",
    "dumps_payload",
    "hour_at_position",
    "is_time_string",
    "parse_time_string",
    "position_for_hour",
    "position_from_pointer",
    "resolve_local_time",
    "search_timezones",
    "time_range",
    "timezone_offset_hours",
    "validate_board_payload",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------

# tzboard/scale.py
"""Shared-axis hourly scales.

Every row of a board is anchored to the same `base_time` (local midnight of
the reference timezone on the displayed date). Position p in any row is the
instant base_time + p hours; only the local hour printed on it differs.
"""
from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional, Tuple

from .model import HOURS_PER_DAY, DateMarker, TimeScaleConfig
from .resolve import resolve_local_time
from .util.tz import local_time, same_tz, to_utc, utc_now


def hour_at_position(position: int, start_hour: int) -> int:
    """Local hour (0-23) shown at scale `position` of a row starting at `start_hour`."""
    return (position + start_hour) % HOURS_PER_DAY


def position_for_hour(hour: int, start_hour: int) -> int:
    """Scale position (0-23) at which a row starting at `start_hour` shows `hour`."""
    return (hour - start_hour + HOURS_PER_DAY) % HOURS_PER_DAY


def format_month_day(d: dt.datetime) -> str:
    return f"{d.month}/{d.day}"


def reference_midnight(reference_timezone: Optional[str], at: dt.datetime) -> dt.datetime:
    """Instant of local midnight in `reference_timezone` on the date `at` falls on there."""
    ref_local = local_time(at, reference_timezone)
    return resolve_local_time(
        ref_local.year, ref_local.month, ref_local.day, 0, 0, reference_timezone, now=at
    )


def calculate_time_scale_config(
    timezone: Optional[str],
    reference_timezone: Optional[str],
    at: Optional[dt.datetime] = None,
) -> TimeScaleConfig:
    at_utc = to_utc(at) if at is not None else utc_now()
    base_time = reference_midnight(reference_timezone, at_utc)

    # The reference row starts at 0h by construction.
    if same_tz(timezone, reference_timezone):
        own_date = format_month_day(local_time(at_utc, timezone))
        return TimeScaleConfig(
            start_hour=0,
            base_time=base_time,
            date_markers=(DateMarker(hour=0, date=own_date),),
        )

    row_local = local_time(base_time, timezone)
    start_hour = row_local.hour
    zero_pos = (HOURS_PER_DAY - start_hour) % HOURS_PER_DAY
    midnight_cell = base_time + dt.timedelta(hours=zero_pos)

    return TimeScaleConfig(
        start_hour=start_hour,
        base_time=base_time,
        date_markers=(DateMarker(hour=0, date=format_month_day(local_time(midnight_cell, timezone))),),
        start_minute=row_local.minute,
    )


align = calculate_time_scale_config


def calculate_time_scale_configs(
    timezones: Iterable[str],
    reference_timezone: Optional[str],
    at: Optional[dt.datetime] = None,
) -> List[Tuple[str, TimeScaleConfig]]:
    at_utc = to_utc(at) if at is not None else utc_now()
    return [(tz, calculate_time_scale_config(tz, reference_timezone, at_utc)) for tz in timezones]

# tzboard/resolve.py
"""Wall-clock -> instant resolution.

Local time is not a fixed shift from UTC (DST, half/quarter-hour offsets,
historical LMT offsets with seconds), so resolution is a fixed-point search:
reproject a candidate into the zone and shift it by the wall-clock residual
until the residual is zero or the round cap is hit.
"""
from __future__ import annotations

import datetime as dt
import math
import os
from typing import Any, Optional, Tuple

from .util.console import eprint, obs_enabled
from .util.tz import resolve_tz, to_utc, utc_now

RESOLVE_MAX_ROUNDS = 5


def _max_rounds_default() -> int:
    raw = (os.getenv("TZBOARD_RESOLVE_MAX_ROUNDS", "") or "").strip()
    if raw:
        try:
            v = int(raw)
            if v > 0:
                return v
        except ValueError:
            pass
    return RESOLVE_MAX_ROUNDS


def _component(v: Any) -> Optional[int]:
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, float) and math.isfinite(v) and v.is_integer():
        return int(v)
    return None


def _fallback(now: Optional[dt.datetime], why: str) -> dt.datetime:
    if obs_enabled():
        eprint(f"[tzboard.resolve] WARN: {why}; using current instant")
    return to_utc(now) if now is not None else utc_now()


def resolve_local_time(
    year: Any,
    month: Any,
    day: Any,
    hour: Any,
    minute: Any,
    timezone: Optional[str],
    *,
    now: Optional[dt.datetime] = None,
    max_rounds: Optional[int] = None,
) -> dt.datetime:
    """Instant (aware UTC) that reads as the given local date/time in `timezone`.

    Invalid components (non-numbers, bools, non-finite or fractional floats,
    out-of-calendar values) return the current instant (`now` when given).
    If the search does not settle within `max_rounds`, the candidate with the
    smallest residual is returned; on ties the one whose local time is at or
    after the target wins. A wall time skipped by a DST jump therefore lands
    just after the jump, on the requested date. A repeated wall time converges
    on its first occurrence.

    Raises ValueError only for an unknown timezone identifier.
    """
    tzinfo = resolve_tz(timezone)

    parts = [_component(v) for v in (year, month, day, hour, minute)]
    if any(p is None for p in parts):
        return _fallback(now, f"non-integer time components {(year, month, day, hour, minute)!r}")
    try:
        target = dt.datetime(*parts)  # type: ignore[arg-type]
    except (ValueError, OverflowError):
        return _fallback(now, f"out-of-range time components {tuple(parts)!r}")

    rounds = max_rounds if isinstance(max_rounds, int) and max_rounds > 0 else _max_rounds_default()

    candidate = target.replace(tzinfo=dt.timezone.utc)
    best = candidate
    best_key: Optional[Tuple[dt.timedelta, bool]] = None

    for _ in range(rounds):
        try:
            local = candidate.astimezone(tzinfo).replace(tzinfo=None)
        except (OverflowError, ValueError):
            break
        residual = target - local
        if not residual:
            return candidate
        # residual > 0 means the candidate reads before the target.
        key = (abs(residual), residual > dt.timedelta(0))
        if best_key is None or key < best_key:
            best, best_key = candidate, key
        try:
            candidate = candidate + residual
        except OverflowError:
            break

    if obs_enabled():
        eprint(
            f"[tzboard.resolve] WARN: no exact match for {target.isoformat()} in {timezone!r} "
            f"after {rounds} rounds; residual={best_key[0] if best_key else None}"
        )
    return best

# tzboard/util/tz.py
from __future__ import annotations

import datetime as dt
import os
import re
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")

_HOUR_S = 3600.0

LOCALTIME_PATH = "/etc/localtime"
TIMEZONE_FILE = "/etc/timezone"
_ZONEINFO_DIR = "zoneinfo/"


def normalize_tz_name(name: Optional[str]) -> str:
    """Normalize a timezone identifier.

    Supported forms:
      - None/"" -> "local"
      - "local" / "system" -> "local" (resolve to the machine's local timezone)
      - "UTC" / "Z" / "GMT" -> "UTC"
      - IANA names, e.g. "Asia/Shanghai"
      - Fixed offsets: "+05:30", "+0530", "-03:30"

    Returned value is a stable canonical string used as the row key.
    """
    if name is None:
        return "local"
    s = str(name).strip()
    if not s:
        return "local"

    low = s.lower()
    if low in {"local", "system", "native"}:
        return "local"
    if low in {"utc", "z", "gmt", "utc0", "utc+0"}:
        return "UTC"

    # Preserve explicit identifiers (IANA, offsets, etc.) as given.
    return s


def _zone_key(raw: str) -> Optional[str]:
    """IANA key from a TZ value or a zoneinfo path, or None if it is not loadable."""
    s = raw.strip().lstrip(":")
    if _ZONEINFO_DIR in s:
        s = s.rsplit(_ZONEINFO_DIR, 1)[1]
    if not s or os.path.isabs(s):
        return None
    try:
        ZoneInfo(s)
    except (ValueError, OSError, ZoneInfoNotFoundError):
        return None
    return s


def system_timezone_key() -> Optional[str]:
    """IANA name of the host timezone, or None when it cannot be determined.

    Checked in order: $TZ, the /etc/localtime symlink target, /etc/timezone.
    """
    key = _zone_key(os.environ.get("TZ", "") or "")
    if key:
        return key

    try:
        key = _zone_key(os.readlink(LOCALTIME_PATH))
    except OSError:
        key = None
    if key:
        return key

    try:
        with open(TIMEZONE_FILE, encoding="utf-8") as f:
            return _zone_key(f.read())
    except OSError:
        return None


def user_timezone() -> str:
    """IANA name of the system timezone, or "UTC" when it cannot be determined."""
    return system_timezone_key() or "UTC"


def resolve_tz(name: Optional[str]) -> dt.tzinfo:
    """Resolve a timezone name into a tzinfo.

    For "local", resolves to the system zone as a ZoneInfo (see
    system_timezone_key); a fixed offset is used only when no IANA name exists.
    For "UTC", resolves to dt.timezone.utc.
    For IANA zone names, resolves via zoneinfo.ZoneInfo.
    For fixed offsets, resolves to dt.timezone(offset).

    Raises ValueError for invalid timezone identifiers.
    """
    tz_name = normalize_tz_name(name)

    if tz_name == "UTC":
        return dt.timezone.utc

    if tz_name == "local":
        key = system_timezone_key()
        if key:
            return ZoneInfo(key)
        # No IANA name for the host; today's fixed offset is all there is.
        tz = dt.datetime.now().astimezone().tzinfo
        return tz or dt.timezone.utc

    # Fixed offsets: +HH:MM, +HHMM, -HH:MM, -HHMM
    m = _OFFSET_RE.match(tz_name)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh = int(hh_s)
        mm = int(mm_s)
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {tz_name!r}")
        sign = 1 if sign_s == "+" else -1
        off_min = sign * (hh * 60 + mm)
        return dt.timezone(dt.timedelta(minutes=off_min))

    try:
        return ZoneInfo(tz_name)
    except Exception as ex:
        raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from ex


def same_tz(a: Optional[str], b: Optional[str]) -> bool:
    return normalize_tz_name(a) == normalize_tz_name(b)


def to_utc(at: dt.datetime) -> dt.datetime:
    """Normalize an instant to an aware UTC datetime (naive input is read as UTC)."""
    if at.tzinfo is None:
        return at.replace(tzinfo=dt.timezone.utc)
    return at.astimezone(dt.timezone.utc)


def utc_now() -> dt.datetime:
    return dt.datetime.now(tz=dt.timezone.utc)


def local_time(at: dt.datetime, tz: Optional[str]) -> dt.datetime:
    """Wall-clock representation of `at` in timezone `tz`."""
    return to_utc(at).astimezone(resolve_tz(tz))


def epoch_ms(at: dt.datetime) -> int:
    return int(to_utc(at).timestamp() * 1000)


def utc_offset_hours(tz: Optional[str], at: dt.datetime) -> float:
    off = local_time(at, tz).utcoffset() or dt.timedelta(0)
    return off.total_seconds() / _HOUR_S


def timezone_offset_hours(tz_a: Optional[str], tz_b: Optional[str], at: dt.datetime) -> float:
    """Wall-clock difference (local_a - local_b) in hours at instant `at`.

    Uses the zone rules in effect at `at`, so DST state is honoured and
    non-integer offsets come back fractional (5.5, 5.75, -3.5).
    """
    return utc_offset_hours(tz_a, at) - utc_offset_hours(tz_b, at)


def format_utc_offset(hours: float) -> str:
    """UTC+8, UTC-5, UTC+5:30, UTC-3:30, UTC+0."""
    total_min = int(round(hours * 60))
    sign = "-" if total_min < 0 else "+"
    hh, mm = divmod(abs(total_min), 60)
    if mm:
        return f"UTC{sign}{hh}:{mm:02d}"
    return f"UTC{sign}{hh}"


def timezone_abbreviation(tz: Optional[str], at: dt.datetime) -> str:
    return local_time(at, tz).tzname() or ""

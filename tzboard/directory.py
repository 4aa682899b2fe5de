# tzboard/directory.py
"""Timezone name -> identifier index used by search/autocomplete."""
from __future__ import annotations

import re
import zoneinfo
from typing import Dict, Iterable, List, Mapping, Optional

from .model import DirectoryMatch

MAX_RESULTS = 20

# Curated city/alias names for places that are not IANA zone names themselves.
CURATED_CITIES: Dict[str, str] = {
    "Beijing": "Asia/Shanghai",
    "Peking": "Asia/Shanghai",
    "Shenzhen": "Asia/Shanghai",
    "Hong Kong": "Asia/Hong_Kong",
    "Hongkong": "Asia/Hong_Kong",
    "New York": "America/New_York",
    "Boston": "America/New_York",
    "Washington": "America/New_York",
    "Los Angeles": "America/Los_Angeles",
    "San Francisco": "America/Los_Angeles",
    "Seattle": "America/Los_Angeles",
    "Mexico City": "America/Mexico_City",
    "Mumbai": "Asia/Kolkata",
    "Delhi": "Asia/Kolkata",
    "Bangalore": "Asia/Kolkata",
    "Osaka": "Asia/Tokyo",
    "Munich": "Europe/Berlin",
    "Barcelona": "Europe/Madrid",
    "UTC": "Etc/UTC",
    "GMT": "Etc/GMT",
    "GMT+0": "Etc/GMT",
    "GMT-0": "Etc/GMT",
}

# Always present even when the platform catalog omits them.
_UTC_IDS = ("Etc/UTC", "Etc/GMT")

# Used only when the platform reports no zones at all.
_FALLBACK_IDS = (
    "Etc/UTC",
    "Etc/GMT",
    "America/New_York",
    "America/Los_Angeles",
    "America/Chicago",
    "America/Denver",
    "Europe/London",
    "Europe/Paris",
    "Asia/Shanghai",
    "Asia/Tokyo",
    "Asia/Hong_Kong",
    "Australia/Sydney",
)

_STRIP_RE = re.compile(r"[\s_]")


def _normalize(s: str) -> str:
    # Keep +/- so "gmt+8" and "gmt-8" stay distinct.
    return _STRIP_RE.sub("", s.lower())


def _score(candidate: str, query: str) -> int:
    if candidate == query:
        return 3
    if candidate.startswith(query):
        return 2
    if query in candidate:
        return 1
    return 0


def format_timezone_name(timezone_id: str) -> str:
    """"America/New_York" -> "New York", "America/Argentina/Buenos_Aires" -> "Buenos Aires"."""
    return timezone_id.split("/")[-1].replace("_", " ")


def platform_timezones() -> List[str]:
    ids = set(zoneinfo.available_timezones())
    if not ids:
        ids = set(_FALLBACK_IDS)
    ids.update(_UTC_IDS)
    return sorted(ids)


class TimezoneDirectory:
    """Display name -> timezone id index.

    Built once and handed to whatever needs search; it is never mutated after
    construction.
    """

    def __init__(self, entries: Mapping[str, str]) -> None:
        self._entries: Dict[str, str] = dict(entries)
        self._normalized = [
            (name, tz_id, _normalize(name), _normalize(tz_id)) for name, tz_id in self._entries.items()
        ]

    @classmethod
    def build(
        cls,
        catalog: Optional[Iterable[str]] = None,
        curated: Optional[Mapping[str, str]] = None,
    ) -> "TimezoneDirectory":
        entries: Dict[str, str] = dict(CURATED_CITIES if curated is None else curated)
        ids = platform_timezones() if catalog is None else list(catalog)
        # Platform names go last so canonical identifiers win on name conflicts.
        for tz_id in ids:
            entries[format_timezone_name(tz_id)] = tz_id
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def lookup(self, name: str) -> Optional[str]:
        """Exact display-name lookup, falling back to a normalized comparison."""
        if name in self._entries:
            return self._entries[name]
        q = _normalize(name)
        for _name, tz_id, n_name, _n_id in self._normalized:
            if n_name == q:
                return tz_id
        return None

    def search(self, query: str, limit: int = MAX_RESULTS) -> List[DirectoryMatch]:
        if not isinstance(query, str) or not query.strip():
            return []
        q = _normalize(query)
        if not q:
            return []

        scored = []
        for name, tz_id, n_name, n_id in self._normalized:
            score = _score(n_name, q) or _score(n_id, q)
            if score:
                scored.append((score, name, tz_id))

        scored.sort(key=lambda x: (-x[0], x[1].casefold(), x[1]))

        out: List[DirectoryMatch] = []
        seen = set()
        for _score_v, name, tz_id in scored:
            if tz_id in seen:
                continue
            if len(out) >= limit:
                break
            out.append(DirectoryMatch(id=tz_id, name=name, timezone=tz_id))
            seen.add(tz_id)
        return out

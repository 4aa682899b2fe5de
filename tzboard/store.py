# tzboard/store.py
"""Member timezone list and preferences, persisted as one JSON file.

File shape:
  {"timezones": [{"id", "name", "timezone", "label", "is_home", "order"}, ...],
   "preferences": {"hour_format": "24", "show_utc_offset": false}}
"""
from __future__ import annotations

import dataclasses
import os
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import orjson

from .board import default_preferences, sort_entries
from .directory import format_timezone_name
from .model import BoardTimezone, UserPreferences
from .util.console import eprint, obs_enabled
from .util.tz import resolve_tz

StorePath = Union[str, Path]


class StoreError(ValueError):
    """Raised when the state file cannot be read or an edit is invalid."""


def default_state_path() -> Path:
    raw = (os.getenv("TZBOARD_STATE", "") or "").strip()
    if raw:
        return Path(raw).expanduser()
    return Path.home() / ".tzboard" / "state.json"


def _entry_from_dict(d: Any) -> Optional[BoardTimezone]:
    if not isinstance(d, dict):
        return None
    entry_id = d.get("id")
    tz = d.get("timezone")
    if not isinstance(entry_id, str) or not entry_id or not isinstance(tz, str) or not tz:
        return None
    name = d.get("name")
    label = d.get("label")
    order = d.get("order")
    return BoardTimezone(
        id=entry_id,
        name=name if isinstance(name, str) and name else format_timezone_name(tz),
        timezone=tz,
        label=label if isinstance(label, str) and label else None,
        is_home=d.get("is_home") is True,
        order=order if isinstance(order, int) and not isinstance(order, bool) else None,
    )


def _entry_to_dict(e: BoardTimezone) -> Dict[str, Any]:
    return dataclasses.asdict(e)


class TimezoneStore:
    def __init__(self, path: Optional[StorePath] = None) -> None:
        self.path = Path(path) if path is not None else default_state_path()

    # --- file io -------------------------------------------------------------

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = orjson.loads(self.path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as ex:
            raise StoreError(f"Cannot read state file {self.path}: {ex}") from ex
        if not isinstance(data, dict):
            raise StoreError(f"State file {self.path} must contain a JSON object; got {type(data).__name__}")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(orjson.dumps(data, option=orjson.OPT_INDENT_2))
        except OSError as ex:
            raise StoreError(f"Cannot write state file {self.path}: {ex}") from ex
        if obs_enabled():
            eprint(f"[tzboard.store] save.ok path={self.path} timezones={len(data.get('timezones') or [])}")

    def _raw_entries(self) -> List[BoardTimezone]:
        raw = self._read().get("timezones") or []
        if not isinstance(raw, list):
            return []
        out = []
        for d in raw:
            e = _entry_from_dict(d)
            if e is None:
                if obs_enabled():
                    eprint(f"[tzboard.store] WARN: skipping malformed timezone entry {d!r}")
                continue
            out.append(e)
        return out

    def _save_entries(self, entries: Sequence[BoardTimezone]) -> None:
        data = self._read()
        data["timezones"] = [_entry_to_dict(e) for e in entries]
        self._write(data)

    # --- timezone list -------------------------------------------------------

    def timezones(self) -> List[BoardTimezone]:
        """Entries sorted by order; the first becomes home when none is."""
        entries = sort_entries(self._raw_entries())
        if entries and not any(e.is_home for e in entries):
            entries[0] = dataclasses.replace(entries[0], is_home=True)
            self._save_entries(entries)
        return entries

    def add(
        self,
        timezone_id: str,
        *,
        name: Optional[str] = None,
        label: Optional[str] = None,
        is_home: bool = False,
    ) -> BoardTimezone:
        """Add a timezone by IANA id; an id already on the list is returned unchanged."""
        try:
            resolve_tz(timezone_id)
        except ValueError as ex:
            raise StoreError(str(ex)) from ex

        entries = self.timezones()
        for e in entries:
            if e.timezone == timezone_id:
                return e

        home = is_home or not entries
        if home:
            entries = [dataclasses.replace(e, is_home=False) for e in entries]

        entry = BoardTimezone(
            id=f"{timezone_id}-{int(time.time() * 1000)}",
            name=name or format_timezone_name(timezone_id),
            timezone=timezone_id,
            label=label or None,
            is_home=home,
            order=len(entries),
        )
        entries.append(entry)
        self._save_entries(entries)
        return entry

    def remove(self, entry_id: str) -> bool:
        entries = self.timezones()
        removed = next((e for e in entries if e.id == entry_id), None)
        if removed is None:
            return False
        remaining = [e for e in entries if e.id != entry_id]
        if removed.is_home and remaining:
            remaining = sort_entries(remaining)
            remaining[0] = dataclasses.replace(remaining[0], is_home=True)
        self._save_entries(remaining)
        return True

    def reorder(self, entry_ids: Sequence[str]) -> List[BoardTimezone]:
        """Listed entries first in the given order, then the rest in their current order."""
        entries = self.timezones()
        by_id = {e.id: e for e in entries}
        reordered: List[BoardTimezone] = []
        seen = set()
        for entry_id in entry_ids:
            e = by_id.get(entry_id)
            if e is None or entry_id in seen:
                continue
            reordered.append(dataclasses.replace(e, order=len(reordered)))
            seen.add(entry_id)
        for e in entries:
            if e.id not in seen:
                reordered.append(dataclasses.replace(e, order=len(reordered)))
        self._save_entries(reordered)
        return reordered

    def set_home(self, entry_id: str) -> bool:
        entries = self.timezones()
        if not any(e.id == entry_id for e in entries):
            return False
        self._save_entries([dataclasses.replace(e, is_home=e.id == entry_id) for e in entries])
        return True

    def update_label(self, entry_id: str, label: str) -> bool:
        entries = self.timezones()
        if not any(e.id == entry_id for e in entries):
            return False
        self._save_entries(
            [dataclasses.replace(e, label=label or None) if e.id == entry_id else e for e in entries]
        )
        return True

    # --- preferences ---------------------------------------------------------

    def preferences(self) -> UserPreferences:
        raw = self._read().get("preferences")
        base = default_preferences()
        if not isinstance(raw, dict):
            return base
        hf = raw.get("hour_format")
        return UserPreferences(
            hour_format=hf if hf in ("12", "24") else base.hour_format,
            show_utc_offset=raw.get("show_utc_offset") is True,
        )

    def save_preferences(self, prefs: UserPreferences) -> None:
        if prefs.hour_format not in ("12", "24"):
            raise StoreError(f"hour_format must be '12' or '24'; got {prefs.hour_format!r}")
        data = self._read()
        data["preferences"] = dataclasses.asdict(prefs)
        self._write(data)

# tzboard/payload.py
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Optional

import orjson

from .model import Board, BoardCell, BoardRow, TimeScaleConfig
from .util.tz import epoch_ms

SCHEMA_NAME = "tzboard.board"
SCHEMA_VERSION = 1


def _utc_iso_z(at: Optional[dt.datetime] = None) -> str:
    d = at or dt.datetime.now(dt.timezone.utc)
    return d.astimezone(dt.timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _config_dict(config: TimeScaleConfig) -> Dict[str, Any]:
    return {
        "start_hour": config.start_hour,
        "start_minute": config.start_minute,
        "base_ms": epoch_ms(config.base_time),
        "zero_hour_position": config.zero_hour_position,
        "date_markers": [{"hour": m.hour, "date": m.date} for m in config.date_markers],
    }


def _cell_dict(cell: BoardCell) -> Dict[str, Any]:
    return {
        "position": cell.position,
        "hour": cell.hour,
        "instant_ms": epoch_ms(cell.instant),
        "is_day": cell.is_day,
        "is_zero_hour": cell.is_zero_hour,
        "is_last_hour": cell.is_last_hour,
        "label": cell.label,
        "date_label": cell.date_label,
    }


def _row_dict(row: BoardRow) -> Dict[str, Any]:
    e = row.entry
    return {
        "id": e.id,
        "name": e.name,
        "timezone": e.timezone,
        "label": e.label,
        "is_home": e.is_home,
        "order": e.order,
        "offset_hours": row.offset_hours,
        "utc_offset": row.utc_offset,
        "abbreviation": row.abbreviation,
        "formatted_time": row.formatted_time,
        "formatted_date": row.formatted_date,
        "day_of_week": row.day_of_week,
        "display_date": row.display_date,
        "config": _config_dict(row.config),
        "cells": [_cell_dict(c) for c in row.cells],
    }


def board_to_payload(board: Board, *, generated_at: Optional[dt.datetime] = None) -> Dict[str, Any]:
    base = board.base_time
    return {
        "schema_version": SCHEMA_VERSION,
        "meta": {
            "schema": {"name": SCHEMA_NAME, "version": SCHEMA_VERSION},
            "generated_at": _utc_iso_z(generated_at),
        },
        "cfg": {
            "reference_timezone": board.reference_timezone,
            "at_ms": epoch_ms(board.at),
            "base_ms": epoch_ms(base) if base is not None else None,
            "hour_format": board.preferences.hour_format,
            "show_utc_offset": board.preferences.show_utc_offset,
        },
        "rows": [_row_dict(r) for r in board.rows],
    }


def dumps_payload(payload: Dict[str, Any], *, pretty: bool = False) -> bytes:
    if not isinstance(payload, dict):
        raise TypeError(f"payload must be dict, got {type(payload).__name__}")
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2 if pretty else 0)

"""Board payload validation helpers (library-facing)."""

from __future__ import annotations

from typing import Any, Dict, List

from tzboard.model import HOURS_PER_DAY
from tzboard.payload import SCHEMA_VERSION

HOUR_MS = 3_600_000


class PayloadValidationError(ValueError):
    """Raised when a board payload fails validation."""


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _validate_cells(row: Dict[str, Any], *, where: str, base_ms: int, start_hour: int, errs: List[str]) -> None:
    cells = row.get("cells")
    if not isinstance(cells, list) or len(cells) != HOURS_PER_DAY:
        errs.append(f"{where}.cells must be a list of {HOURS_PER_DAY}")
        return

    date_labels = 0
    for i, c in enumerate(cells):
        if not isinstance(c, dict):
            errs.append(f"{where}.cells[{i}] must be dict")
            continue
        _require(c.get("position") == i, f"{where}.cells[{i}].position must be {i}", errs)
        _require(
            c.get("hour") == (i + start_hour) % HOURS_PER_DAY,
            f"{where}.cells[{i}].hour must be (position + start_hour) % 24",
            errs,
        )
        _require(
            c.get("instant_ms") == base_ms + i * HOUR_MS,
            f"{where}.cells[{i}].instant_ms must be base_ms + {i}h",
            errs,
        )
        if c.get("date_label") is not None:
            date_labels += 1
            _require(c.get("hour") == 0, f"{where}.cells[{i}] carries a date label off the 0h cell", errs)
    _require(date_labels == 1, f"{where} has {date_labels} date labels (expected 1, on the 0h cell)", errs)


def validate_board_payload(payload: Dict[str, Any], *, label: str = "payload") -> List[str]:
    if not isinstance(payload, dict):
        return [f"{label}: payload must be a dict/object"]

    errs: List[str] = []
    _require(payload.get("schema_version") == SCHEMA_VERSION, f"{label}: schema_version must be {SCHEMA_VERSION}", errs)

    meta = payload.get("meta")
    ga = meta.get("generated_at") if isinstance(meta, dict) else None
    _require(isinstance(ga, str) and bool(ga.strip()), f"{label}: meta.generated_at must be non-empty string", errs)

    cfg = payload.get("cfg")
    rows = payload.get("rows")
    _require(isinstance(cfg, dict), f"{label}: cfg must be dict", errs)
    _require(isinstance(rows, list), f"{label}: rows must be list", errs)
    if not isinstance(cfg, dict) or not isinstance(rows, list) or not rows:
        return errs

    base_ms = cfg.get("base_ms")
    ref_tz = cfg.get("reference_timezone")
    if not _is_int(base_ms):
        errs.append(f"{label}: cfg.base_ms must be int when rows are present")
        return errs
    _require(isinstance(ref_tz, str) and bool(ref_tz), f"{label}: cfg.reference_timezone must be non-empty string", errs)

    ref_rows = 0
    for i, row in enumerate(rows):
        where = f"{label}: rows[{i}]"
        if not isinstance(row, dict):
            errs.append(f"{where} must be dict")
            continue
        tz = row.get("timezone")
        _require(isinstance(tz, str) and bool(tz), f"{where}.timezone must be non-empty string", errs)

        config = row.get("config")
        if not isinstance(config, dict):
            errs.append(f"{where}.config must be dict")
            continue
        start_hour = config.get("start_hour")
        if not _is_int(start_hour) or not (0 <= start_hour < HOURS_PER_DAY):
            errs.append(f"{where}.config.start_hour must be int 0..23")
            continue
        # Column alignment: every row is anchored to the same instant.
        _require(config.get("base_ms") == base_ms, f"{where}.config.base_ms must equal cfg.base_ms", errs)
        _require(
            config.get("zero_hour_position") == (HOURS_PER_DAY - start_hour) % HOURS_PER_DAY,
            f"{where}.config.zero_hour_position must be (24 - start_hour) % 24",
            errs,
        )
        if tz == ref_tz:
            ref_rows += 1
            _require(start_hour == 0, f"{where} is the reference row; start_hour must be 0", errs)

        _validate_cells(row, where=where, base_ms=base_ms, start_hour=start_hour, errs=errs)

    _require(ref_rows >= 1, f"{label}: no row for cfg.reference_timezone {ref_tz!r}", errs)
    _require(ref_rows <= 1, f"{label}: {ref_rows} rows for cfg.reference_timezone {ref_tz!r} (expected 1)", errs)
    return errs


def assert_valid_board_payload(payload: Dict[str, Any]) -> None:
    errs = validate_board_payload(payload, label="payload")
    if errs:
        raise PayloadValidationError(errs[0])


__all__ = [
    "PayloadValidationError",
    "assert_valid_board_payload",
    "validate_board_payload",
]

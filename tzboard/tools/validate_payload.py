#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List

import orjson

from tzboard.validate import validate_board_payload


def _die(msg: str, rc: int = 2) -> int:
    print(f"[tzboard-validate-payload] ERROR: {msg}", file=sys.stderr)
    return rc


def _load_payload_from_json(p: Path) -> Dict[str, Any]:
    obj = orjson.loads(p.read_bytes())
    if not isinstance(obj, dict):
        raise ValueError(f"payload must be a JSON object; got {type(obj).__name__}")
    return obj


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="tzboard-validate-payload",
        description="Validate board payload JSON files written by `tzboard board --json`.",
    )
    ap.add_argument("paths", nargs="+", help="Payload JSON path(s)")
    ns = ap.parse_args(argv)

    all_errs: List[str] = []
    for raw in ns.paths:
        p = Path(raw)
        if not p.exists():
            return _die(f"Missing JSON file: {p}")
        try:
            payload = _load_payload_from_json(p)
        except (OSError, ValueError) as e:
            return _die(f"Failed to load JSON payload: {p} ({e})")
        all_errs.extend(validate_board_payload(payload, label=f"json:{p}"))

    if all_errs:
        print("[tzboard-validate-payload] FAIL", file=sys.stderr)
        for e in all_errs:
            print(f"  - {e}", file=sys.stderr)
        return 3

    print("[tzboard-validate-payload] OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

import argparse
import dataclasses
import datetime as dt
import sys
from typing import List, Optional

from .board import anchor_for_custom_time, build_board, reference_timezone
from .directory import TimezoneDirectory, format_timezone_name
from .model import BoardTimezone
from .payload import board_to_payload, dumps_payload
from .render.text import render_board
from .resolve import resolve_local_time
from .store import StoreError, TimezoneStore
from .util.timeparse import parse_date_yyyy_mm_dd, parse_time_string
from .util.tz import local_time, normalize_tz_name, resolve_tz, same_tz, user_timezone, utc_now


def _store(args: argparse.Namespace) -> TimezoneStore:
    return TimezoneStore(args.state) if args.state else TimezoneStore()


def _check_tz(value: str, flag: str) -> None:
    try:
        resolve_tz(value)
    except ValueError as e:
        raise SystemExit(f"Invalid {flag} value: {e}")


def _adhoc_entries(tz_ids: List[str], home: Optional[str]) -> List[BoardTimezone]:
    # One row per zone; "UTC" and "utc" are the same row.
    seen = set()
    ids = []
    for tz in tz_ids:
        key = normalize_tz_name(tz)
        if key not in seen:
            seen.add(key)
            ids.append(tz)
    if home and normalize_tz_name(home) not in seen:
        ids.insert(0, home)
    return [
        BoardTimezone(
            id=tz,
            name=format_timezone_name(tz),
            timezone=tz,
            is_home=same_tz(tz, home) if home else i == 0,
            order=i,
        )
        for i, tz in enumerate(ids)
    ]


def _board_instant(args: argparse.Namespace, reference: Optional[str]) -> dt.datetime:
    now = utc_now()
    if args.at is not None and parse_time_string(args.at) is None:
        raise SystemExit(f"Invalid --at value: {args.at!r} (expected e.g. 14:30, 2:30 PM, 11pm)")

    if args.date is None:
        if args.at is None:
            return now
        return anchor_for_custom_time(args.at, reference, now) or now

    try:
        day = parse_date_yyyy_mm_dd(args.date)
    except ValueError:
        raise SystemExit(f"Invalid --date value: {args.date!r} (expected YYYY-MM-DD)")

    if args.at is not None:
        parsed = parse_time_string(args.at)
        hour, minute = parsed.hour, parsed.minute  # type: ignore[union-attr]
    else:
        ref_now = local_time(now, reference)
        hour, minute = ref_now.hour, ref_now.minute
    return resolve_local_time(day.year, day.month, day.day, hour, minute, reference, now=now)


def _cmd_board(args: argparse.Namespace) -> None:
    store = _store(args)
    prefs = store.preferences()
    if args.hour_format:
        prefs = dataclasses.replace(prefs, hour_format=args.hour_format)
    if args.show_utc_offset:
        prefs = dataclasses.replace(prefs, show_utc_offset=True)

    if args.home:
        _check_tz(args.home, "--home")
    if args.tz:
        for tz in args.tz:
            _check_tz(tz, "--tz")
        entries = _adhoc_entries(args.tz, args.home)
    else:
        entries = store.timezones()
        if args.home:
            if not any(e.timezone == args.home for e in entries):
                raise SystemExit(f"--home {args.home!r} is not on the timezone list")
            entries = [dataclasses.replace(e, is_home=e.timezone == args.home) for e in entries]

    at = _board_instant(args, reference_timezone(entries))
    board = build_board(entries, at, preferences=prefs)

    if args.json:
        sys.stdout.write(dumps_payload(board_to_payload(board), pretty=args.pretty).decode("utf-8") + "\n")
        return
    print(render_board(board, show_utc_offset=prefs.show_utc_offset))


def _cmd_search(args: argparse.Namespace) -> None:
    directory = TimezoneDirectory.build()
    for m in directory.search(args.query, limit=args.limit):
        print(f"{m.name}\t{m.timezone}")


def _cmd_list(args: argparse.Namespace) -> None:
    for e in _store(args).timezones():
        home = "*" if e.is_home else " "
        label = f"\t{e.label}" if e.label else ""
        print(f"{home} {e.id}\t{e.timezone}\t{e.name}{label}")


def _cmd_add(args: argparse.Namespace) -> None:
    tz_id = args.timezone or user_timezone()
    try:
        resolve_tz(tz_id)
    except ValueError:
        hit = TimezoneDirectory.build().lookup(tz_id)
        if hit is None:
            raise SystemExit(f"Unknown timezone: {tz_id!r} (try `tzboard search {tz_id}`)")
        tz_id = hit
    entry = _store(args).add(tz_id, name=args.name, label=args.label, is_home=args.home)
    print(entry.id)


def _cmd_remove(args: argparse.Namespace) -> None:
    if not _store(args).remove(args.entry_id):
        raise SystemExit(f"No timezone entry with id {args.entry_id!r}")


def _cmd_home(args: argparse.Namespace) -> None:
    if not _store(args).set_home(args.entry_id):
        raise SystemExit(f"No timezone entry with id {args.entry_id!r}")


def _cmd_label(args: argparse.Namespace) -> None:
    if not _store(args).update_label(args.entry_id, args.label):
        raise SystemExit(f"No timezone entry with id {args.entry_id!r}")


def _cmd_reorder(args: argparse.Namespace) -> None:
    for e in _store(args).reorder(args.entry_ids):
        print(e.id)


def _cmd_prefs(args: argparse.Namespace) -> None:
    store = _store(args)
    prefs = store.preferences()
    changed = False
    if args.hour_format:
        prefs = dataclasses.replace(prefs, hour_format=args.hour_format)
        changed = True
    if args.show_utc_offset is not None:
        prefs = dataclasses.replace(prefs, show_utc_offset=args.show_utc_offset)
        changed = True
    if changed:
        store.save_preferences(prefs)
    print(f"hour_format={prefs.hour_format} show_utc_offset={str(prefs.show_utc_offset).lower()}")


def _cmd_resolve(args: argparse.Namespace) -> None:
    _check_tz(args.timezone, "timezone")
    try:
        day = parse_date_yyyy_mm_dd(args.date)
    except ValueError:
        raise SystemExit(f"Invalid date: {args.date!r} (expected YYYY-MM-DD)")
    parsed = parse_time_string(args.time)
    if parsed is None:
        raise SystemExit(f"Invalid time: {args.time!r}")
    at = resolve_local_time(day.year, day.month, day.day, parsed.hour, parsed.minute, args.timezone)
    print(at.isoformat().replace("+00:00", "Z"))


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="tzboard",
        description="Multi-timezone hour board aligned to one reference timezone.",
    )
    ap.add_argument(
        "--state",
        default=None,
        help="State file with the timezone list and preferences (default: env TZBOARD_STATE or ~/.tzboard/state.json)",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("board", help="Print the aligned hour board")
    p.add_argument("--tz", action="append", default=None, help="Ad-hoc timezone (repeatable); bypasses the saved list")
    p.add_argument("--home", default=None, help="Reference timezone (default: saved home, else first row)")
    p.add_argument("--at", default=None, help="Custom time in the home timezone, e.g. 14:30 or 2:30 PM")
    p.add_argument("--date", default=None, help="Custom date YYYY-MM-DD in the home timezone")
    p.add_argument("--hour-format", choices=("12", "24"), default=None, help="Override the saved hour format")
    p.add_argument("--show-utc-offset", action="store_true", help="Show UTC offsets next to names")
    p.add_argument("--json", action="store_true", help="Emit the board payload as JSON")
    p.add_argument("--pretty", action="store_true", help="Indent JSON output")
    p.set_defaults(func=_cmd_board)

    p = sub.add_parser("search", help="Search timezone names and identifiers")
    p.add_argument("query")
    p.add_argument("--limit", type=int, default=20, help="Maximum results (default: 20)")
    p.set_defaults(func=_cmd_search)

    p = sub.add_parser("list", help="List saved timezones")
    p.set_defaults(func=_cmd_list)

    p = sub.add_parser("add", help="Add a timezone by IANA id or city name")
    p.add_argument("timezone", nargs="?", default=None, help="IANA id or city name (default: system timezone)")
    p.add_argument("--name", default=None)
    p.add_argument("--label", default=None, help="Short label, e.g. PST")
    p.add_argument("--home", action="store_true", help="Make it the home timezone")
    p.set_defaults(func=_cmd_add)

    p = sub.add_parser("remove", help="Remove a saved timezone")
    p.add_argument("entry_id")
    p.set_defaults(func=_cmd_remove)

    p = sub.add_parser("home", help="Set the home timezone")
    p.add_argument("entry_id")
    p.set_defaults(func=_cmd_home)

    p = sub.add_parser("label", help="Set a timezone's label")
    p.add_argument("entry_id")
    p.add_argument("label")
    p.set_defaults(func=_cmd_label)

    p = sub.add_parser("reorder", help="Reorder saved timezones")
    p.add_argument("entry_ids", nargs="+")
    p.set_defaults(func=_cmd_reorder)

    p = sub.add_parser("prefs", help="Show or change preferences")
    p.add_argument("--hour-format", choices=("12", "24"), default=None)
    g = p.add_mutually_exclusive_group()
    g.add_argument("--show-utc-offset", dest="show_utc_offset", action="store_true", default=None)
    g.add_argument("--hide-utc-offset", dest="show_utc_offset", action="store_false")
    p.set_defaults(func=_cmd_prefs)

    p = sub.add_parser("resolve", help="Instant (UTC) of a local date/time in a timezone")
    p.add_argument("date", help="YYYY-MM-DD")
    p.add_argument("time", help="e.g. 02:30, 2:30 PM")
    p.add_argument("timezone")
    p.set_defaults(func=_cmd_resolve)

    return ap


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    try:
        args.func(args)
    except StoreError as e:
        raise SystemExit(f"[tzboard] ERROR: {e}")


if __name__ == "__main__":
    main()

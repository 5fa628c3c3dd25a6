from __future__ import annotations

import argparse
import sys
from datetime import date, time
from typing import List, Tuple

from calfield.core.errors import CalfieldError
from calfield.core.logging import configure_logging


def _parse_ymd(s: str) -> date:
    y, m, d = map(int, s.split("-"))
    return date(y, m, d)


def _parse_hms(s: str) -> time:
    parts = [int(x) for x in s.split(":")]
    if not 2 <= len(parts) <= 3:
        raise ValueError(f"Expected HH:MM[:SS], got '{s}'")
    return time(*parts)


def _parse_pairs(items: List[str]) -> List[Tuple[object, int]]:
    """'Year=2008' or 'ISO.Year=2008' -> (rule, 2008)"""
    from calfield.rules.registry import rule_for_id, rule_for_name

    out = []
    for item in items:
        name, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"Expected NAME=VALUE, got '{item}'")
        rule = rule_for_id(name) if "." in name else rule_for_name(name)
        out.append((rule, int(value)))
    return out


def _build(args: argparse.Namespace):
    import calfield

    values = []
    for rule, value in _parse_pairs(args.fields):
        values += [rule, value]
    return calfield.Calendrical(
        calfield.FieldValueMap.of(*values),
        _parse_ymd(args.date) if args.date else None,
        _parse_hms(args.time) if args.time else None,
        calfield.ZoneOffset.parse(args.offset) if args.offset else None,
        calfield.TimeZone.region(args.zone) if args.zone else None,
    )


def _add_slot_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("fields", nargs="*", help="NAME=VALUE field pairs, e.g. Year=2008 MonthOfYear=6")
    p.add_argument("--date", help="YYYY-MM-DD")
    p.add_argument("--time", help="HH:MM[:SS]")
    p.add_argument("--offset", help="+HH:MM or Z")
    p.add_argument("--zone", help="time zone id")


def _error(ex: Exception) -> int:
    msg = ex.args[0] if isinstance(ex, KeyError) else ex
    print(f"error: {msg}", file=sys.stderr)
    return 1


def cmd_rules(args: argparse.Namespace) -> int:
    from calfield.rules.registry import all_rules

    for rule in all_rules():
        rng = f"{rule.minimum}..{rule.maximum}"
        print(f"{rule.id:<28} {rng:<16} {rule.period_unit}/{rule.period_range or '-'}")
    return 0


def cmd_resolve(args: argparse.Namespace) -> int:
    from calfield.rules.registry import rule_for_name

    try:
        cal = _build(args)
        merged = cal.merge_lenient() if args.lenient else cal.merge_strict()
        if args.field:
            print(merged.derive_value(rule_for_name(args.field)))
        else:
            print(merged)
    except (KeyError, ValueError, CalfieldError) as ex:
        return _error(ex)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    try:
        cal = _build(args)
    except (KeyError, ValueError) as ex:
        return _error(ex)
    try:
        cal.check_consistent()
    except CalfieldError as ex:
        print(f"inconsistent: {ex}", file=sys.stderr)
        return 1
    print("consistent")
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(prog="calfield", description="Calendrical field resolution toolkit CLI.")
    p.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="structured log level (DEBUG shows merge decisions)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("rules", help="List registered field rules")

    r = sub.add_parser("resolve", help="Merge fields into a date/time (strict unless --lenient)")
    _add_slot_args(r)
    r.add_argument("--lenient", action="store_true", help="roll over out-of-range values, drop stale fields")
    r.add_argument("--field", help="print only this (derived) field")

    c = sub.add_parser("check", help="Check stored fields against the date/time slots")
    _add_slot_args(c)

    args = p.parse_args(argv)

    configure_logging(level=args.log_level, json_format=False)

    if args.cmd == "rules":
        return cmd_rules(args)

    if args.cmd == "resolve":
        return cmd_resolve(args)

    if args.cmd == "check":
        return cmd_check(args)

    raise RuntimeError("unreachable")


if __name__ == "__main__":
    raise SystemExit(main())

"""
Command-line interface: fetch the TARU timetable (or read a saved response)
and export it to file.
"""
from __future__ import annotations

import argparse
import logging
import warnings

# Suppress urllib3/OpenSSL warning on systems with LibreSSL (no impact on functionality)
warnings.filterwarnings("ignore", message=".*urllib3.*OpenSSL.*", module="urllib3")
import sys
from datetime import date
from pathlib import Path

from . import __version__
from .export import export
from .fetch import fetch_timetable, validate_academic_year
from .payload import load_payload, parse_courses
from .timeslots import DEFAULT_REGIME, TIME_SLOTS, get_time_slots

NO_COURSES_MESSAGE = (
    "未找到任何课程数据，请检查所选学年学期是否正确或本学期无课，或教务系统需要二次登录。"
)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _output_path(output: str, fmt: str) -> Path:
    ext = {"ics": ".ics", "csv": ".csv", "json": ".json"}[fmt]
    return Path(output).with_suffix(ext) if Path(output).suffix else Path(output + ext)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Export the Tarim University (jwgl.taru.edu.cn) personal timetable to JSON / CSV / ICS.\n"
            "- Fetch mode: log in through a browser window, then the timetable is requested for you.\n"
            "- Saved mode: parse a response saved from the browser (JSON, or the page saved as HTML)."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-o",
        "--output",
        default="taru_timetable",
        help="Output path (without extension). Default: taru_timetable",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "csv", "ics"],
        default="json",
        help="Export format. Default: json",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--fetch",
        action="store_true",
        help="Open Chrome on the login page; after you log in and press Enter, fetch the timetable.",
    )
    mode.add_argument(
        "--json",
        metavar="PATH",
        help="Use a saved timetable response (xskbcx_cxXsgrkb) instead of fetching.",
    )
    parser.add_argument(
        "--year",
        default=str(date.today().year),
        help="(Fetch mode) Academic year, four digits, e.g. 2025. Default: current year.",
    )
    parser.add_argument(
        "--semester",
        type=int,
        choices=[1, 2],
        default=1,
        help="(Fetch mode) Term: 1 = 第一学期, 2 = 第二学期. Default: 1",
    )
    parser.add_argument(
        "--time-slots",
        choices=list(TIME_SLOTS),
        default=DEFAULT_REGIME,
        help="Section time table: standard (非夏季作息) or summer (夏季作息). Default: standard",
    )
    parser.add_argument(
        "--term-start",
        metavar="YYYY-MM-DD",
        help="(ICS only) First teaching day of the term; its week is week 1.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log skipped records and request details.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    term_start = None
    if args.term_start:
        try:
            term_start = date.fromisoformat(args.term_start)
        except ValueError:
            print(f"Error: --term-start must be YYYY-MM-DD, got {args.term_start!r}", file=sys.stderr)
            return 1
    if args.format == "ics" and term_start is None:
        print("Error: -f ics requires --term-start YYYY-MM-DD (first teaching day).", file=sys.stderr)
        return 1

    if args.fetch:
        error = validate_academic_year(args.year)
        if error:
            print(f"Error: {error}", file=sys.stderr)
            return 1
        try:
            payload = fetch_timetable(args.year, args.semester - 1)
        except (RuntimeError, ValueError) as e:
            print(f"请求或解析失败: {e}", file=sys.stderr)
            return 1
    elif args.json:
        p = Path(args.json)
        if not p.exists():
            print(f"Error: --json file not found: {p}", file=sys.stderr)
            return 1
        try:
            payload = load_payload(p)
        except (OSError, ValueError) as e:
            print(f"Error reading {p}: {e}", file=sys.stderr)
            return 1
    else:
        print(
            "No mode specified. Use --fetch to log in and fetch from the academic affairs system "
            "or --json for a saved response.",
            file=sys.stderr,
        )
        return 1

    sessions = parse_courses(payload)
    if not sessions:
        print(NO_COURSES_MESSAGE, file=sys.stderr)
        return 1

    time_slots = get_time_slots(args.time_slots)
    out_path = _output_path(args.output, args.format)
    try:
        export(sessions, out_path, args.format, time_slots=time_slots, term_start=term_start)
    except OSError as e:
        print(f"课程保存失败: {e}", file=sys.stderr)
        return 1
    print(f"Exported {len(sessions)} course(s) to {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

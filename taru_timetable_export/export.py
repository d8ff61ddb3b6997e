"""
Export normalized sessions to JSON (schedule store hand-off), CSV, and ICS.
"""
from __future__ import annotations

import csv
import hashlib
import json
import logging
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Sequence

import icalendar
import pytz

from .records import SessionEntry, sessions_to_dicts
from .timeslots import TimeSlot, time_slots_to_dicts
from .weeks import format_weeks

log = logging.getLogger(__name__)

# Beijing time, used by the university timetable
TZ_CN = "Asia/Shanghai"

CSV_FIELDS = ["name", "teacher", "position", "day", "startSection", "endSection", "weeks"]


def _week_one_monday(term_start: date) -> date:
    """Monday of the week containing the first teaching day (week 1)."""
    return term_start - timedelta(days=term_start.weekday())


def _parse_clock(day: date, hhmm: str) -> datetime:
    return datetime.combine(day, datetime.strptime(hhmm, "%H:%M").time())


def session_dates(session: SessionEntry, term_start: date) -> List[date]:
    """Calendar dates on which the session meets."""
    monday = _week_one_monday(term_start)
    return [
        monday + timedelta(weeks=w - 1, days=session.day - 1)
        for w in session.weeks
    ]


def export_json(
    sessions: Sequence[SessionEntry],
    out_path: str | Path,
    time_slots: Sequence[TimeSlot] | None = None,
) -> None:
    """Export courses and the chosen preset time slots as one JSON document."""
    document = {
        "courses": sessions_to_dicts(list(sessions)),
        "timeSlots": time_slots_to_dicts(time_slots or []),
    }
    Path(out_path).write_text(
        json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8"
    )


def export_csv(sessions: Sequence[SessionEntry], out_path: str | Path) -> None:
    """Export sessions to CSV, weeks rendered as a descriptor ('1-8周,10周')."""
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        w.writeheader()
        for s in sessions:
            row = s.to_dict()
            row["weeks"] = format_weeks(s.weeks)
            w.writerow(row)


def export_ics(
    sessions: Sequence[SessionEntry],
    out_path: str | Path,
    term_start: date,
    time_slots: Sequence[TimeSlot],
) -> None:
    """Export one calendar event per session per teaching week."""
    slots: Dict[int, TimeSlot] = {slot.number: slot for slot in time_slots}
    tz = pytz.timezone(TZ_CN)

    cal = icalendar.Calendar()
    cal.add("prodid", "-//TARU Timetable Export//EN")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("x-wr-calname", "TARU Timetable")
    cal.add("x-wr-timezone", TZ_CN)

    stamp = datetime.now(timezone.utc)
    for s in sessions:
        first = slots.get(s.start_section)
        last = slots.get(s.end_section)
        if first is None or last is None:
            log.warning("Skipping %s: sections %d-%d not in time table", s.name, s.start_section, s.end_section)
            continue

        for week, day in zip(s.weeks, session_dates(s, term_start)):
            start = _parse_clock(day, first.start_time)
            end = _parse_clock(day, last.end_time)

            event = icalendar.Event()
            uid_string = f"{s.name}-{s.teacher}-{s.location}-{start.isoformat()}"
            uid_hash = hashlib.md5(uid_string.encode("utf-8")).hexdigest()
            event.add("uid", f"{uid_hash}@taru-timetable-export")

            event.add("summary", s.name)
            event.add("description", f"教师: {s.teacher}\n第{week}周 第{s.start_section}-{s.end_section}节")
            event.add("location", s.location)
            event.add("dtstart", tz.localize(start))
            event.add("dtend", tz.localize(end))
            event.add("dtstamp", stamp)
            cal.add_component(event)

    Path(out_path).write_text(cal.to_ical().decode("utf-8"), encoding="utf-8")


def export(
    sessions: Sequence[SessionEntry],
    out_path: str | Path,
    fmt: str,
    time_slots: Sequence[TimeSlot] | None = None,
    term_start: date | None = None,
) -> None:
    """Export to the given format: json, csv, or ics."""
    fmt = fmt.lower()
    if fmt == "json":
        export_json(sessions, out_path, time_slots)
    elif fmt == "csv":
        export_csv(sessions, out_path)
    elif fmt == "ics":
        if term_start is None:
            raise ValueError("ICS export needs the first teaching day (--term-start YYYY-MM-DD).")
        export_ics(sessions, out_path, term_start, time_slots or [])
    else:
        raise ValueError(f"Unsupported format: {fmt}. Use json, csv, or ics.")

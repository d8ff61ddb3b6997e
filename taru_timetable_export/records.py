"""
Normalize raw course records from the timetable API (kbList entries) into
validated, sorted session entries.

Raw field vocabulary (Zhengfang API):
- kcmc: course name
- xm:   teacher
- cdmc: room / location
- xqj:  weekday, 1 = Monday .. 7 = Sunday
- jcs:  section range, "1-2" or "4"
- zcd:  week descriptor, e.g. "1-16周" or "1-5周(单)"
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Dict, List

from .weeks import format_weeks, parse_weeks

log = logging.getLogger(__name__)

REQUIRED_FIELDS = ("kcmc", "xm", "cdmc", "xqj", "jcs", "zcd")
TEXT_FIELDS = ("kcmc", "xm", "cdmc", "jcs", "zcd")


@dataclass(frozen=True)
class SessionEntry:
    name: str
    teacher: str
    location: str
    day: int
    start_section: int
    end_section: int
    weeks: tuple[int, ...]

    def to_dict(self) -> Dict[str, Any]:
        """Storage hand-off form (schedule store import keys)."""
        return {
            "name": self.name,
            "teacher": self.teacher,
            "position": self.location,
            "day": self.day,
            "startSection": self.start_section,
            "endSection": self.end_section,
            "weeks": list(self.weeks),
        }

    def to_raw(self) -> Dict[str, str]:
        """Same session expressed with the API's raw field names."""
        if self.start_section == self.end_section:
            sections = str(self.start_section)
        else:
            sections = f"{self.start_section}-{self.end_section}"
        return {
            "kcmc": self.name,
            "xm": self.teacher,
            "cdmc": self.location,
            "xqj": str(self.day),
            "jcs": sections,
            "zcd": format_weeks(self.weeks),
        }


def _to_int(value: Any) -> int | None:
    """Accept ints and digit strings ('3', ' 3 '); anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.isdecimal():
            return int(text)
    return None


def _missing_field(record: Dict[str, Any]) -> str | None:
    for key in REQUIRED_FIELDS:
        value = record.get(key)
        if value is None or value == "":
            return key
        if key in TEXT_FIELDS and not (isinstance(value, str) and value.strip()):
            return key
    return None


def _parse_sections(text: str) -> tuple[int | None, int | None]:
    parts = text.split("-")
    return _to_int(parts[0]), _to_int(parts[-1])


def normalize_record(record: Any) -> SessionEntry | None:
    """
    Validate one raw record. Returns None (and logs why at DEBUG) when the
    record should be discarded.
    """
    if not isinstance(record, dict):
        log.debug("Skipping non-object record: %r", record)
        return None

    missing = _missing_field(record)
    if missing:
        log.debug("Skipping record %r: missing or invalid %s", record.get("kcmc"), missing)
        return None

    weeks = parse_weeks(record["zcd"])
    if not weeks:
        log.debug("Skipping %r: no weeks in %r", record["kcmc"], record["zcd"])
        return None

    start_section, end_section = _parse_sections(record["jcs"])
    day = _to_int(record["xqj"])

    if day is None or not 1 <= day <= 7:
        log.debug("Skipping %r: bad weekday %r", record["kcmc"], record["xqj"])
        return None
    if start_section is None or end_section is None or not 1 <= start_section <= end_section:
        log.debug("Skipping %r: bad sections %r", record["kcmc"], record["jcs"])
        return None

    return SessionEntry(
        name=record["kcmc"].strip(),
        teacher=record["xm"].strip(),
        location=record["cdmc"].strip(),
        day=day,
        start_section=start_section,
        end_section=end_section,
        weeks=tuple(weeks),
    )


def normalize_courses(records: Any) -> List[SessionEntry]:
    """
    Turn raw records into session entries sorted by (day, start section, name).

    Invalid records are dropped, never raised; input that is not a sequence
    of records (None, a dict, a string) gives an empty result.
    """
    if not isinstance(records, Sequence) or isinstance(records, (str, bytes)):
        return []

    sessions = [s for s in map(normalize_record, records) if s is not None]
    sessions.sort(key=lambda s: (s.day, s.start_section, s.name))

    dropped = len(records) - len(sessions)
    if dropped:
        log.debug("Dropped %d of %d record(s)", dropped, len(records))
    return sessions


def sessions_to_dicts(sessions: List[SessionEntry]) -> List[Dict[str, Any]]:
    return [s.to_dict() for s in sessions]

"""
Preset section -> wall-clock tables. Two regimes: standard (非夏季作息)
and summer (夏季作息), 10 sections each.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Sequence

STANDARD = "standard"
SUMMER = "summer"
DEFAULT_REGIME = STANDARD


@dataclass(frozen=True)
class TimeSlot:
    number: int
    start_time: str
    end_time: str

    def to_dict(self) -> Dict[str, object]:
        return {"number": self.number, "startTime": self.start_time, "endTime": self.end_time}


def _table(*ranges: tuple[str, str]) -> tuple[TimeSlot, ...]:
    return tuple(TimeSlot(i, start, end) for i, (start, end) in enumerate(ranges, start=1))


STANDARD_TIME_SLOTS = _table(
    ("10:05", "10:50"),
    ("11:00", "11:45"),
    ("12:10", "12:55"),
    ("13:05", "13:50"),
    ("16:05", "16:50"),
    ("17:00", "17:45"),
    ("18:10", "18:55"),
    ("19:05", "19:50"),
    ("21:00", "21:45"),
    ("21:55", "22:40"),
)

SUMMER_TIME_SLOTS = _table(
    ("09:35", "10:20"),
    ("10:30", "11:15"),
    ("11:40", "12:25"),
    ("12:35", "13:20"),
    ("16:35", "17:20"),
    ("17:30", "18:15"),
    ("18:40", "19:25"),
    ("19:35", "20:20"),
    ("21:30", "22:15"),
    ("22:25", "23:10"),
)

TIME_SLOTS = MappingProxyType({
    STANDARD: STANDARD_TIME_SLOTS,
    SUMMER: SUMMER_TIME_SLOTS,
})


def get_time_slots(regime: str) -> tuple[TimeSlot, ...]:
    try:
        return TIME_SLOTS[regime]
    except KeyError:
        raise ValueError(
            f"Unknown time slot regime: {regime}. Use {' or '.join(TIME_SLOTS)}."
        ) from None


def time_slots_to_dicts(slots: Sequence[TimeSlot]) -> List[Dict[str, object]]:
    return [s.to_dict() for s in slots]

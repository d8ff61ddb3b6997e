"""
Parse week descriptors from the timetable API (zcd field), e.g.
"1-16周", "1-5周(单)", "2-8周(双),10周", into sorted week numbers.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, List

log = logging.getLogger(__name__)

ODD_MARKER = "(单)"
EVEN_MARKER = "(双)"

_RANGE_RE = re.compile(r"(\d+)-(\d+)周")
_SINGLE_RE = re.compile(r"(\d+)周(?:\((?:单|双)\))?")


def match_range(clause: str) -> tuple[int, int] | None:
    """'1-5周' or '1-5周(单)' -> (1, 5)."""
    m = _RANGE_RE.search(clause)
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


def match_single(clause: str) -> tuple[int, int] | None:
    """
    '6周' -> (6, 6). The whole clause must be one week (plus an optional
    parity marker); '6周abc' or '3周-5周' are not matched.
    """
    m = _SINGLE_RE.fullmatch(clause)
    if not m:
        return None
    n = int(m.group(1))
    return n, n


# Tried in order; a clause is handled by the first matcher that accepts it.
_MATCHERS = (match_range, match_single)


def _weeks_in_clause(clause: str) -> List[int]:
    bounds = None
    for matcher in _MATCHERS:
        bounds = matcher(clause)
        if bounds is not None:
            break
    if bounds is None:
        if clause:
            log.debug("Ignoring week clause %r", clause)
        return []

    start, end = bounds
    odd_only = ODD_MARKER in clause
    even_only = EVEN_MARKER in clause
    weeks = []
    for w in range(max(start, 1), end + 1):
        if odd_only and w % 2 == 0:
            continue
        if even_only and w % 2 != 0:
            continue
        weeks.append(w)
    return weeks


def parse_weeks(descriptor: str | None) -> List[int]:
    """
    Parse a comma-separated week descriptor into ascending, unique week numbers.

    Unrecognized clauses contribute nothing; a clause whose start is after
    its end contributes nothing. Never raises: bad input gives [].
    """
    if not descriptor or not isinstance(descriptor, str):
        return []
    weeks: set[int] = set()
    for clause in descriptor.split(","):
        weeks.update(_weeks_in_clause(clause.strip()))
    return sorted(weeks)


def format_weeks(weeks: Iterable[int]) -> str:
    """[1, 2, 3, 5, 7, 8] -> '1-3周,5周,7-8周'."""
    ordered = sorted(set(weeks))
    if not ordered:
        return ""
    parts = []
    start = prev = ordered[0]
    for w in ordered[1:] + [None]:
        if w is not None and w == prev + 1:
            prev = w
            continue
        parts.append(f"{start}周" if start == prev else f"{start}-{prev}周")
        if w is not None:
            start = prev = w
    return ",".join(parts)

"""
Decode timetable API responses (live or saved from the browser) and hand
the course list to the normalizer.

The API answers the POST with JSON whose course records sit under "kbList".
When the session has expired it answers with the login page instead.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from bs4 import BeautifulSoup  # type: ignore[import]

from .records import SessionEntry, normalize_courses

log = logging.getLogger(__name__)

COURSE_LIST_KEY = "kbList"

SESSION_EXPIRED_MESSAGE = (
    "数据返回格式错误，可能是您未成功登录或会话已过期。"
    " (Response is not JSON: not logged in or session expired.)"
)


def _unwrap_html(text: str) -> str | None:
    """
    A JSON URL opened in Chrome and saved as a web page becomes
    <html><body><pre>{...}</pre></body></html>. Return the wrapped text,
    or None when the page is something else (e.g. the login form).
    """
    soup = BeautifulSoup(text, "html.parser")
    pre = soup.find("pre")
    if pre is None:
        return None
    return pre.get_text()


def decode_response(text: str) -> Dict[str, Any]:
    """Decode a response body to a JSON object; raise ValueError if it is not one."""
    body = (text or "").strip()
    if body.startswith("<"):
        unwrapped = _unwrap_html(body)
        if unwrapped is None:
            raise ValueError(SESSION_EXPIRED_MESSAGE)
        body = unwrapped.strip()
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise ValueError(SESSION_EXPIRED_MESSAGE) from e
    if not isinstance(data, dict):
        raise ValueError(f"Unexpected response: expected a JSON object, got {type(data).__name__}.")
    return data


def load_payload(path: str | Path) -> Dict[str, Any]:
    """Read a saved response file (.json, or .html saved from the browser)."""
    text = Path(path).read_text(encoding="utf-8-sig", errors="ignore")
    return decode_response(text)


def extract_course_records(payload: Any) -> List[Any]:
    """Return payload['kbList'] if it is a list; anything else counts as no courses."""
    records = payload.get(COURSE_LIST_KEY) if isinstance(payload, dict) else None
    if not isinstance(records, list):
        log.warning("Response has no %s list; treating it as empty", COURSE_LIST_KEY)
        return []
    return records


def parse_courses(payload: Any) -> List[SessionEntry]:
    """Full pipeline: response object -> sorted session entries."""
    records = extract_course_records(payload)
    sessions = normalize_courses(records)
    log.info("Parsed %d course session(s) from %d record(s)", len(sessions), len(records))
    return sessions

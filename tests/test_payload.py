"""Tests for payload.py – response decoding and kbList extraction."""
import json

import pytest

from taru_timetable_export.payload import (
    decode_response,
    extract_course_records,
    load_payload,
    parse_courses,
)

RECORD = {
    "kcmc": "大学英语",
    "xm": "王五",
    "cdmc": "文科楼201",
    "xqj": "2",
    "jcs": "3-4",
    "zcd": "1-8周",
}


class TestExtractCourseRecords:
    def test_list(self):
        assert extract_course_records({"kbList": [RECORD]}) == [RECORD]

    def test_missing_key(self):
        assert extract_course_records({"xsxx": {}}) == []

    def test_not_a_list(self):
        assert extract_course_records({"kbList": "x"}) == []
        assert extract_course_records({"kbList": None}) == []

    def test_not_a_dict(self):
        assert extract_course_records(None) == []
        assert extract_course_records([RECORD]) == []


class TestDecodeResponse:
    def test_json(self):
        assert decode_response(json.dumps({"kbList": []})) == {"kbList": []}

    def test_browser_wrapped_json(self):
        html = (
            '<html><head></head><body><pre style="word-wrap: break-word;">'
            '{"kbList": [{"kcmc": "A&amp;B"}]}</pre></body></html>'
        )
        assert decode_response(html) == {"kbList": [{"kcmc": "A&B"}]}

    def test_login_page(self):
        html = "<!DOCTYPE html><html><body><form id='loginForm'></form></body></html>"
        with pytest.raises(ValueError, match="会话已过期"):
            decode_response(html)

    def test_garbage(self):
        with pytest.raises(ValueError):
            decode_response("not json")
        with pytest.raises(ValueError):
            decode_response("")

    def test_json_array(self):
        with pytest.raises(ValueError):
            decode_response("[1, 2]")


def test_load_payload(tmp_path):
    p = tmp_path / "kb.json"
    p.write_text(json.dumps({"kbList": [RECORD]}, ensure_ascii=False), encoding="utf-8")
    assert load_payload(p) == {"kbList": [RECORD]}


def test_parse_courses():
    bad = dict(RECORD, cdmc="")
    sessions = parse_courses({"kbList": [RECORD, bad]})
    assert len(sessions) == 1
    assert sessions[0].location == "文科楼201"
    assert sessions[0].weeks == tuple(range(1, 9))


def test_parse_courses_malformed_payload():
    assert parse_courses({"kbList": {"0": RECORD}}) == []


def test_load_payload_with_bom(tmp_path):
    p = tmp_path / "kb.json"
    p.write_bytes(b"\xef\xbb\xbf" + json.dumps({"kbList": [RECORD]}, ensure_ascii=False).encode("utf-8"))
    assert load_payload(p) == {"kbList": [RECORD]}

"""
Fetch the personal timetable: open a browser for the user to log in to the
academic affairs system, then POST the timetable query from inside the
logged-in page (so the session cookies are sent) and return the decoded JSON.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from webdriver_manager.chrome import ChromeDriverManager

from .payload import decode_response

log = logging.getLogger(__name__)

BASE_URL = "https://jwgl.taru.edu.cn/jwglxt"
LOGIN_URL = f"{BASE_URL}/xtgl/login_slogin.html"
TIMETABLE_URL = f"{BASE_URL}/kbcx/xskbcx_cxXsgrkb.html?gnmkdm=N2151"

# xqm values used by the API: first term = 3, second term = 12
FIRST_TERM_CODE = "3"
SECOND_TERM_CODE = "12"

SCRIPT_TIMEOUT = 30

_YEAR_RE = re.compile(r"^[0-9]{4}$")

# Runs in the page; the last argument is the WebDriver callback.
_POST_SCRIPT = """
const url = arguments[0];
const body = arguments[1];
const done = arguments[arguments.length - 1];
fetch(url, {
    method: "POST",
    headers: {"content-type": "application/x-www-form-urlencoded;charset=UTF-8"},
    body: body,
    credentials: "include"
}).then(r => r.text().then(t => done({status: r.status, ok: r.ok, statusText: r.statusText, text: t})))
  .catch(e => done({status: 0, ok: false, statusText: String(e), text: ""}));
"""


def semester_code(semester_index: int) -> str:
    """0 (第一学期) -> '3', anything else (第二学期) -> '12'."""
    return FIRST_TERM_CODE if semester_index == 0 else SECOND_TERM_CODE


def validate_academic_year(text: str) -> str | None:
    """Return None if text is a four-digit year, else the error message."""
    if _YEAR_RE.match(text or ""):
        return None
    return "请输入四位数字的学年！ (Academic year must be four digits, e.g. 2025.)"


def is_login_page(url: str) -> bool:
    return url == LOGIN_URL


def build_request_body(academic_year: str, semester_index: int) -> str:
    """xnm = academic year, xqm = term code."""
    return f"xnm={academic_year}&xqm={semester_code(semester_index)}"


def _create_driver() -> webdriver.Chrome:
    options = Options()
    options.add_argument("--no-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument("--window-size=1200,900")
    try:
        service = Service(ChromeDriverManager().install())
        return webdriver.Chrome(service=service, options=options)
    except Exception as e:
        raise RuntimeError(
            f"Could not start Chrome. Install Chrome and run again.\nError: {e}"
        ) from e


def _post_in_page(driver, url: str, body: str) -> Dict[str, Any]:
    driver.set_script_timeout(SCRIPT_TIMEOUT)
    try:
        return driver.execute_async_script(_POST_SCRIPT, url, body)
    except TimeoutException as e:
        raise RuntimeError(f"Timetable request timed out after {SCRIPT_TIMEOUT}s.") from e
    except WebDriverException as e:
        raise RuntimeError(f"Timetable request failed in browser: {e.msg}") from e


def fetch_timetable(
    academic_year: str,
    semester_index: int,
    driver=None,
    prompt: Callable[[str], str] = input,
) -> Dict[str, Any]:
    """
    Let the user log in, then request the timetable for the given year/term.

    :param academic_year: Four-digit academic year (xnm), e.g. '2025'.
    :param semester_index: 0 for the first term, 1 for the second.
    :param driver: Existing WebDriver; a Chrome instance is created (and quit) if omitted.
    :param prompt: Used to wait for the user; defaults to input().
    :returns: Decoded JSON response (course records under 'kbList').
    """
    error = validate_academic_year(academic_year)
    if error:
        raise ValueError(error)

    own_driver = driver is None
    if own_driver:
        driver = _create_driver()

    try:
        driver.get(LOGIN_URL)
        print()
        print("请在浏览器中完成以下操作：")
        print("  1. 登录教务系统（输入账号、密码、验证码）")
        print("  2. 等待进入系统首页")
        print("  3. 回到本终端，按回车键继续")
        print()
        prompt("登录完成后按回车键 → ")

        if is_login_page(driver.current_url):
            raise RuntimeError("导入失败：请先登录教务系统！ (Still on the login page.)")

        body = build_request_body(academic_year, semester_index)
        log.info("POST %s body=%s", TIMETABLE_URL, body)
        print("正在请求课表数据...")
        result = _post_in_page(driver, TIMETABLE_URL, body)

        if not result or not result.get("ok"):
            status = (result or {}).get("status")
            reason = (result or {}).get("statusText", "")
            raise RuntimeError(f"网络请求失败。状态码: {status} ({reason})")

        return decode_response(result.get("text", ""))
    finally:
        if own_driver:
            driver.quit()

"""Shared pytest fixtures — sample upstream bodies and a stubbed HTTP layer."""

import pytest

from holiday_calendar.loader import HolidayStore, HolidayTable

SOURCE_TEXT = (
    "国民の祝日・休日月日,国民の祝日・休日名称\r\n"
    "2025/1/1,元日\r\n"
    "2026/1/1,元日\r\n"
    "2026/1/12,成人の日\r\n"
    "not-a-date,壊れた行\r\n"
    "2026/2/11 0:00:00,建国記念の日\r\n"
    "2026/05/04,みどりの日\r\n"
    "2026-05-05,こどもの日\r\n"
    "2026/9/22,\r\n"
    "2027/1/1,元日\r\n"
)

# 0x81 is a Shift_JIS lead byte; 0x20 is not a valid trail byte.
BAD_LINE = b"2026/3/20,\x81\x20bad\r\n"


class FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200, reason: str = "OK"):
        self.content = content
        self.status_code = status_code
        self.reason = reason


@pytest.fixture
def source_bytes() -> bytes:
    return SOURCE_TEXT.encode("cp932")


@pytest.fixture
def source_bytes_with_bad_line() -> bytes:
    lines = SOURCE_TEXT.encode("cp932").splitlines(keepends=True)
    return b"".join(lines[:3] + [BAD_LINE] + lines[3:])


@pytest.fixture
def fake_get(monkeypatch):
    """Patch requests.get; returns a list of the URLs requested."""
    calls = []

    def install(content: bytes = b"", status_code: int = 200, exc: Exception = None):
        def _get(url, headers=None, timeout=None):
            calls.append({"url": url, "timeout": timeout})
            if exc is not None:
                raise exc
            return FakeResponse(content, status_code,
                                "OK" if status_code == 200 else "Error")
        monkeypatch.setattr("holiday_calendar.extractor.requests.get", _get)
        return calls

    return install


@pytest.fixture
def table() -> HolidayTable:
    return HolidayTable({
        "2026-01-01": "元日",
        "2026-01-12": "成人の日",
        "2026-05-04": "みどりの日",
    })


@pytest.fixture
def store(table) -> HolidayStore:
    return HolidayStore(table, source_path="holidays_2026.csv")

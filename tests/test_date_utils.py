from __future__ import annotations

from datetime import datetime

import pytest

from date_utils import DateParseError, parse_date, readable_format


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2024-06-03", datetime(2024, 6, 3)),
        ("  2024-06-03 16:05 ", datetime(2024, 6, 3, 16, 5)),
        ("June 3, 2024", datetime(2024, 6, 3)),
    ],
)
def test_parse_date(text: str, expected: datetime) -> None:
    assert parse_date(text) == expected


@pytest.mark.parametrize("text", ["", "soon", "not a date at all"])
def test_parse_date_rejects_garbage(text: str) -> None:
    with pytest.raises(DateParseError):
        parse_date(text)


def test_parse_date_with_timezone_is_naive() -> None:
    assert parse_date("2024-06-03T12:00:00+00:00").tzinfo is None


def test_readable_format() -> None:
    assert readable_format(datetime(2024, 6, 3, 16, 5)) == "Jun 3, 2024, 4:05 PM"
    assert readable_format(datetime(2024, 12, 25, 0, 30)) == "Dec 25, 2024, 12:30 AM"

"""Date helpers: flexible parsing of metadata dates and readable formatting."""

from __future__ import annotations

from datetime import datetime

import pandas as pd


class DateParseError(ValueError):
    pass


def parse_date(text: str) -> datetime:
    """Parse a human-written date such as '2024-06-03' or 'June 3, 2024 4pm'.

    Timezone-aware values are converted to naive local time.
    """
    try:
        stamp = pd.to_datetime(text.strip())
    except (ValueError, TypeError, OverflowError) as exc:
        raise DateParseError(f"Cannot parse date {text!r}") from exc
    if pd.isna(stamp):
        raise DateParseError(f"Cannot parse date {text!r}")
    value = stamp.to_pydatetime()
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


def from_timestamp(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds)


def readable_format(value: datetime) -> str:
    """e.g. 'Jun 3, 2024, 4:05 PM'"""
    hour = value.hour % 12 or 12
    return f"{value:%b} {value.day}, {value.year}, {hour}:{value:%M} {value:%p}"

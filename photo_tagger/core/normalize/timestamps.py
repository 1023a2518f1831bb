# photo_tagger/core/normalize/timestamps.py
"""
Filename → timestamp parsing.

Camera and phone exports name photos like `IMG_20250314_093012.jpg` or
`20250314_093012_1.jpg`. The first `YYYYMMDD_HHMMSS` run in the name is read
as naive wall-clock time and converted to epoch seconds (treated as UTC so the
value does not depend on the machine's zone).
"""

from __future__ import annotations

import calendar
import re
from datetime import datetime, timezone

from photo_tagger.core.errors import TimestampParseError

_STAMP_RE = re.compile(r"(?<!\d)(\d{8})_(\d{6})(?!\d)")


def parse_timestamp(filename: str) -> int:
    """Return epoch seconds for the stamp in `filename`; raise TimestampParseError otherwise."""
    m = _STAMP_RE.search(filename)
    if not m:
        raise TimestampParseError(f"no YYYYMMDD_HHMMSS stamp in {filename!r}")
    try:
        dt = datetime.strptime(m.group(1) + m.group(2), "%Y%m%d%H%M%S")
    except ValueError as e:
        raise TimestampParseError(f"invalid stamp in {filename!r}: {e}") from e
    return calendar.timegm(dt.timetuple())


def try_parse_timestamp(filename: str) -> int | None:
    try:
        return parse_timestamp(filename)
    except TimestampParseError:
        return None


def block_name(timestamp: int) -> str:
    """Deterministic segment label from a timestamp, e.g. `block_20250314_0930`."""
    dt = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return "block_" + dt.strftime("%Y%m%d_%H%M")

from __future__ import annotations

from .payload import extract_json_object, normalize, record_from_error
from .timestamps import block_name, parse_timestamp, try_parse_timestamp

__all__ = [
    "normalize",
    "extract_json_object",
    "record_from_error",
    "parse_timestamp",
    "try_parse_timestamp",
    "block_name",
]

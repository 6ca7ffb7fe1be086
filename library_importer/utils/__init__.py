"""Utility modules for identifiers and formatting."""

from .durations import format_duration
from .identifiers import (
    extract_year,
    get_grouping_key,
    normalize_artist_name,
    parse_position,
    sanitize_path_component,
)

__all__ = [
    "extract_year",
    "format_duration",
    "get_grouping_key",
    "normalize_artist_name",
    "parse_position",
    "sanitize_path_component",
]

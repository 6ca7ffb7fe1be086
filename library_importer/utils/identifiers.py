"""Identifier utilities and path sanitization."""

import re

# Characters that are unsafe in a single path component on common filesystems
_UNSAFE_PATH_CHARS = re.compile(r"[/\\:\x00-\x1F]")


def extract_year(date_value: str | int | None) -> int | None:
    """Extract the year as an integer from various date formats.

    Handles:
        - Integer year: 2024 -> 2024
        - String year: "2024" -> 2024
        - ISO date: "2024-01-15" -> 2024
        - Partial date: "2024-01" -> 2024

    Returns:
        The year as an integer, or None if extraction fails.
    """
    if date_value is None:
        return None

    if isinstance(date_value, int):
        return date_value

    if isinstance(date_value, str):
        date_str = date_value.strip()
        if not date_str:
            return None

        # Try to extract year from beginning of string (handles YYYY, YYYY-MM, YYYY-MM-DD)
        match = re.match(r"^(\d{4})", date_str)
        if match:
            return int(match.group(1))

    return None


def parse_position(value: str | int | tuple | list | None) -> int | None:
    """Parse a track or disc position from tag values.

    Handles:
        - Integer: 3 -> 3
        - String: "3" -> 3
        - Position with total: "3/12" -> 3
        - MP4 pair: (3, 12) -> 3

    Zero or negative positions are treated as missing.
    """
    if value is None:
        return None

    if isinstance(value, (tuple, list)):
        if not value:
            return None
        return parse_position(value[0])

    if isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value if value > 0 else None

    match = re.match(r"^\s*(\d+)", str(value))
    if not match:
        return None
    number = int(match.group(1))
    return number if number > 0 else None


def normalize_artist_name(name: str | None) -> str | None:
    """Normalize artist name by extracting first artist from multi-artist strings.

    Splits by "/" and returns the first artist, stripped of whitespace.
    Example: "Justin Timberlake/50 Cent" -> "Justin Timberlake"
    """
    if name is None:
        return None
    if not name:
        return name
    if "/" in name:
        name = name.split("/")[0]
    return name.strip()


def get_grouping_key(name: str) -> str:
    """Get case-insensitive key for matching artist names and album titles.

    Example: "Afrojack" and "afrojack" -> "afrojack"
    """
    return name.strip().casefold() if name else ""


def sanitize_path_component(name: str, fallback: str = "Unknown") -> str:
    """Sanitize a string for use as a single directory or file name.

    Path separators, colons and control characters become dashes; leading
    and trailing dots and whitespace are dropped so the result can never
    refer to a parent or hidden directory.
    """
    if not name:
        return fallback

    sanitized = _UNSAFE_PATH_CHARS.sub("-", name)
    sanitized = sanitized.strip().strip(".").strip()

    if not sanitized:
        return fallback

    return sanitized

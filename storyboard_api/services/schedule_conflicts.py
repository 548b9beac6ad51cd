"""
Schedule interval checks.

Times are "HH:MM" 24-hour strings and are always compared as minutes since
midnight. Interval boundaries are inclusive: an entry ending at 11:00
conflicts with one starting at 11:00.
"""
import re
from datetime import date as date_type
from typing import Any, Iterable, List, Optional

TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_time(value: str) -> int:
    """Convert "HH:MM" (or "H:MM") to minutes since midnight."""
    match = TIME_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_time(value: str) -> str:
    """Normalise "H:MM" to zero-padded "HH:MM" so stored times also sort as text."""
    minutes = parse_time(value)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def slot_duration(start_time: str, end_time: str) -> int:
    # Negative when end < start; the request schemas reject that case
    return parse_time(end_time) - parse_time(start_time)


def intervals_overlap(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    """
    Three-way inclusive overlap test of query interval b against existing a.
    """
    existing_start, existing_end = parse_time(a_start), parse_time(a_end)
    query_start, query_end = parse_time(b_start), parse_time(b_end)
    return (
        (existing_start <= query_start <= existing_end)
        or (existing_start <= query_end <= existing_end)
        or (query_start <= existing_start and existing_end <= query_end)
    )


def find_conflicts(
    entries: Iterable[Any],
    date: date_type,
    start_time: str,
    end_time: str,
    exclude_id: Optional[str] = None,
) -> List[Any]:
    """
    Return the entries on ``date`` whose time slot overlaps [start_time, end_time].

    Entries need ``id``, ``date``, ``start_time`` and ``end_time`` attributes.
    ``exclude_id`` drops the entry being edited from the result.
    """
    conflicts = []
    for entry in entries:
        if exclude_id is not None and str(entry.id) == str(exclude_id):
            continue
        if entry.date != date:
            continue
        if intervals_overlap(entry.start_time, entry.end_time, start_time, end_time):
            conflicts.append(entry)
    return conflicts

from __future__ import annotations

import datetime as dt
import os


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def parse_iso_date(value: str) -> dt.date:
    """Parse an ISO-8601 date or datetime string. Raises ``ValueError``."""
    value = value.strip()
    if "T" in value or " " in value:
        return dt.datetime.fromisoformat(value).date()
    return dt.date.fromisoformat(value)


def ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def display_date(value: str) -> str:
    """``"2021-03-14"`` -> ``"14th March 2021"``."""
    date = parse_iso_date(value)
    return f"{ordinal(date.day)} {date.strftime('%B')} {date.year}"


def join_url(base: str, path: str) -> str:
    base = base.rstrip("/")
    path = path.lstrip("/")
    if not path:
        return base
    return f"{base}/{path}"


def resolve_workers(value: int) -> int:
    workers = int(value or 0)
    if workers <= 0:
        workers = os.cpu_count() or 1
    return max(1, min(workers, 32))

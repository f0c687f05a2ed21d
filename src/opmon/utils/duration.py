import re
from datetime import timedelta

from ..core.config import DURATION_PATTERN


def parse_duration(value: str) -> timedelta:
    """
    Parses a Kubernetes-style duration string like '30s', '15m', '87600h' or '7d' into a timedelta.
    """
    match = re.match(DURATION_PATTERN, (value or "").strip().lower())
    if not match:
        raise ValueError(f"Invalid duration format: '{value}'. Use 's', 'm', 'h' or 'd'.")

    amount, unit = int(match.group(1)), match.group(2)
    if amount <= 0:
        raise ValueError(f"Duration must be positive: '{value}'.")
    unit_map = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}
    return timedelta(**{unit_map[unit]: amount})


def duration_to_seconds(value: str) -> int:
    """Converts a duration string to whole seconds, as expected by TokenRequest."""
    return int(parse_duration(value).total_seconds())


def humanize_duration(value: str) -> str:
    """Renders a duration string for humans, e.g. '87600h' -> '10 years'."""
    seconds = duration_to_seconds(value)
    year = 365 * 24 * 3600
    if seconds % year == 0:
        years = seconds // year
        return f"{years} year" + ("s" if years != 1 else "")
    day = 24 * 3600
    if seconds % day == 0:
        days = seconds // day
        return f"{days} day" + ("s" if days != 1 else "")
    return value

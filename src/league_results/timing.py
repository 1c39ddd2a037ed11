"""Race-clock parsing and formatting.

All arithmetic in the engine is done on integer milliseconds. Text is accepted
in the forms drivers and stewards actually type::

    1:02:03.456   hh:mm:ss.fff
    1:32.5        mm:ss.fff  (fraction right-padded: .5 -> 500 ms)
    45.123        ss.fff
    +00:01.500    leading '+' allowed for differences

Zero is the domain's "no data" marker, so it formats as a placeholder rather
than as a time.
"""

from __future__ import annotations

import re

from league_results.constants import TIME_PLACEHOLDER
from league_results.exceptions import ParseError

_MS_PER_SECOND = 1_000
_MS_PER_MINUTE = 60_000
_MS_PER_HOUR = 3_600_000

_HOURS_RE = re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})(?:\.(\d+))?$")
_MINUTES_RE = re.compile(r"^(\d{1,2}):(\d{2})(?:\.(\d+))?$")
_SECONDS_RE = re.compile(r"^(\d{1,2})\.(\d+)$")
_WHITESPACE_RE = re.compile(r"\s+")


def _fraction_to_ms(fraction: str | None) -> int:
    """Convert fractional-second digits to milliseconds, truncating past 3 digits."""
    if not fraction:
        return 0
    return int(fraction[:3].ljust(3, "0"))


def parse_time_strict(value: object) -> int | None:
    """Parse race-clock text to milliseconds.

    Returns None for empty input and raises :class:`ParseError` for anything
    that is not a recognisable clock value. Integers, and floats with no
    fractional part as JSON decoders may produce, are taken as milliseconds.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ParseError(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int):
        if value < 0:
            raise ParseError(value)
        return value
    if not isinstance(value, str):
        raise ParseError(value)

    text = _WHITESPACE_RE.sub("", value)
    if not text:
        return None
    if text.startswith("+"):
        text = text[1:]

    match = _HOURS_RE.match(text)
    if match:
        hours, minutes, seconds = (int(g) for g in match.group(1, 2, 3))
        if minutes >= 60 or seconds >= 60:
            raise ParseError(value)
        return (
            hours * _MS_PER_HOUR
            + minutes * _MS_PER_MINUTE
            + seconds * _MS_PER_SECOND
            + _fraction_to_ms(match.group(4))
        )

    match = _MINUTES_RE.match(text)
    if match:
        minutes, seconds = int(match.group(1)), int(match.group(2))
        if seconds >= 60:
            raise ParseError(value)
        return (
            minutes * _MS_PER_MINUTE
            + seconds * _MS_PER_SECOND
            + _fraction_to_ms(match.group(3))
        )

    match = _SECONDS_RE.match(text)
    if match:
        return int(match.group(1)) * _MS_PER_SECOND + _fraction_to_ms(match.group(2))

    raise ParseError(value)


def parse_time(value: object) -> int | None:
    """Parse race-clock text to milliseconds, or None if empty or invalid."""
    try:
        return parse_time_strict(value)
    except ParseError:
        return None


def _clock(ms: int) -> str:
    hours, remaining = divmod(ms, _MS_PER_HOUR)
    minutes, remaining = divmod(remaining, _MS_PER_MINUTE)
    seconds, millis = divmod(remaining, _MS_PER_SECOND)
    if hours:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"
    return f"{minutes:02d}:{seconds:02d}.{millis:03d}"


def format_time(ms: int | None) -> str:
    """Format milliseconds as mm:ss.fff (hh:mm:ss.fff past an hour), or '-'."""
    if ms is None or ms <= 0:
        return TIME_PLACEHOLDER
    return _clock(ms)


def format_gap(ms: int | None) -> str:
    """Format a gap to the leader as +mm:ss.fff, or '-' when there is none."""
    if ms is None:
        return TIME_PLACEHOLDER
    return f"+{_clock(max(ms, 0))}"


def normalize_time(text: str | None) -> str:
    """Return the canonical text for a clock value ('-' if empty or invalid)."""
    return format_time(parse_time(text))


def effective_time(raw_ms: int | None, penalty_ms: int | None) -> int | None:
    """Raw recorded time plus penalty time; None when there is no raw time.

    Penalties only ever add time.
    """
    if raw_ms is None:
        return None
    return raw_ms + max(penalty_ms or 0, 0)

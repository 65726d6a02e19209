"""Clock helpers.

Every age computation in Safeframe compares aware UTC datetimes; naive
values never enter the arithmetic.
"""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return the current time as an aware UTC datetime."""
    return dt.datetime.now(dt.UTC)


def as_utc(moment: dt.datetime) -> dt.datetime:
    """Normalize an aware datetime to UTC.

    Raises
    ------
    ValueError
        If ``moment`` carries no timezone information.

    """
    if moment.tzinfo is None or moment.utcoffset() is None:
        msg = f"expected an aware datetime, got naive value {moment.isoformat()!r}"
        raise ValueError(msg)
    return moment.astimezone(dt.UTC)


def elapsed_ms(earlier: dt.datetime, later: dt.datetime) -> int:
    """Return whole milliseconds from ``earlier`` to ``later``.

    The result is negative when ``earlier`` lies after ``later``. Partial
    milliseconds are truncated toward zero.
    """
    delta = as_utc(later) - as_utc(earlier)
    return int(delta / dt.timedelta(milliseconds=1))

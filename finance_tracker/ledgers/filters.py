"""
Search helpers shared by the ledgers.

Date bounds may be given as dates or datetimes. A plain date as the
lower bound means the start of that day; as the upper bound, the end
of that day, so a range of (d, d) covers the whole of d.
"""

from datetime import date, datetime, time
from typing import Optional, Union

DateBound = Union[date, datetime]


def lower_bound(value: Optional[DateBound]) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def upper_bound(value: Optional[DateBound]) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.combine(value, time.max)


def _comparable(moment: datetime, bound: datetime) -> tuple[datetime, datetime]:
    # naive bounds against aware records (or the reverse) compare in local time
    if (moment.tzinfo is None) != (bound.tzinfo is None):
        if bound.tzinfo is None:
            bound = bound.astimezone()
        else:
            moment = moment.astimezone()
    return moment, bound


def in_range(
    moment: datetime,
    date_from: Optional[DateBound] = None,
    date_to: Optional[DateBound] = None,
) -> bool:
    """Inclusive range check; a missing bound is open."""
    start = lower_bound(date_from)
    end = upper_bound(date_to)
    if start is not None:
        m, s = _comparable(moment, start)
        if m < s:
            return False
    if end is not None:
        m, e = _comparable(moment, end)
        if m > e:
            return False
    return True


def contains_text(haystack: str, needle: Optional[str]) -> bool:
    """Case-insensitive substring match; an empty needle matches everything."""
    if not needle:
        return True
    return needle.casefold() in haystack.casefold()

"""HTTP-date formatting for ``Expires`` attributes.

A pure function with fixed English names, so output never depends on
the process locale (``strftime("%a")`` does).
"""

from datetime import datetime

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def http_date(moment: datetime) -> str:
    """Format *moment* as ``Wed, 21 Oct 2015 07:28:00 GMT``.

    The fields of *moment* are written as-is: no timezone conversion is
    applied, so callers pass a UTC time. Microseconds are dropped.
    """
    return (
        f"{_WEEKDAYS[moment.weekday()]}, {moment.day:02d} {_MONTHS[moment.month - 1]} "
        f"{moment.year:04d} {moment.hour:02d}:{moment.minute:02d}:{moment.second:02d} GMT"
    )

"""Time range expressions for Google Trends ``time`` parameters."""

from datetime import date, datetime

from dateutil import parser
from dateutil.relativedelta import relativedelta

from trendwire.types import DateLike

_DATE_FORMAT = "%Y-%m-%d"

# Earliest date the provider holds data for.
TRENDS_EPOCH = date(2004, 1, 1)


class DateRange:
    """Dynamic date range computed at access time, not instantiation.

    Stores a ``relativedelta`` offset and recomputes start/end dates
    from ``date.today()`` on every property access, so the range never
    goes stale across long-running processes.

    Args:
        **kwargs: Keyword arguments forwarded to
            :class:`dateutil.relativedelta.relativedelta`
            (e.g. ``months=6``, ``days=30``, ``years=1``).

    Example::

        dr = DateRange(months=6)
        dr.as_trends_time_string()  # "2026-04-17 2026-10-17"
    """

    def __init__(self, **kwargs: int) -> None:
        self._delta: relativedelta = relativedelta(**kwargs)

    @property
    def end_date(self) -> str:
        """Today's date formatted as ``YYYY-MM-DD``."""
        return date.today().strftime(_DATE_FORMAT)

    @property
    def start_date(self) -> str:
        """Today minus the stored offset, formatted as ``YYYY-MM-DD``."""
        return (date.today() - self._delta).strftime(_DATE_FORMAT)

    def as_trends_time_string(self) -> str:
        """Format the range for the explore ``time`` parameter.

        Returns:
            ``"YYYY-MM-DD YYYY-MM-DD"`` (start, then end).
        """
        return f"{self.start_date} {self.end_date}"


def to_date(value: DateLike) -> date:
    """Coerce a date, datetime or ISO-8601 string to a ``date``.

    Raises:
        ValueError: If *value* is a string dateutil cannot parse.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parser.isoparse(value).date()


def time_range_string(start: DateLike, end: DateLike) -> str:
    """Format an absolute window as ``"YYYY-MM-DD YYYY-MM-DD"``.

    Args:
        start: First day of the window.
        end: Last day of the window.

    Raises:
        ValueError: If either bound is unparseable or *start* is after *end*.
    """
    start_day, end_day = to_date(start), to_date(end)
    if start_day > end_day:
        raise ValueError(f"start {start_day} is after end {end_day}")
    return (f"{start_day.strftime(_DATE_FORMAT)} "
            f"{end_day.strftime(_DATE_FORMAT)}")

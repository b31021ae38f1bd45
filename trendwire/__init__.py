"""trendwire: typed access to Google Trends web data.

Every public operation returns a :class:`~trendwire.result.Result`::

    import trendwire

    result = trendwire.daily_trends({"geo": "US"})
    if result.ok:
        for story in result.data["allTrendingStories"]:
            print(story["title"], story["traffic"])
    else:
        print(result.error.code, result.error.message)

Logging
-------
All package modules log via ``logging.getLogger(__name__)``.  A
:class:`~logging.NullHandler` is attached to the package root logger so
that log messages are silently discarded unless the calling application
configures its own handlers.

For quick console output, call :func:`setup_logging`::

    trendwire.setup_logging()          # INFO to stderr
    trendwire.setup_logging("DEBUG")   # includes skipped records
"""

import logging

from trendwire.api import (
    autocomplete,
    daily_trends,
    explore,
    interest_by_region,
    real_time_trends,
    related_data,
    related_queries,
    related_topics,
)
from trendwire.errors import (
    GoogleTrendsError,
    InvalidRequestError,
    NetworkError,
    ParseError,
)
from trendwire.result import Result
from trendwire.types import TrendingHours

__all__ = [
    "GoogleTrendsError",
    "InvalidRequestError",
    "NetworkError",
    "ParseError",
    "Result",
    "TrendingHours",
    "autocomplete",
    "daily_trends",
    "explore",
    "interest_by_region",
    "real_time_trends",
    "related_data",
    "related_queries",
    "related_topics",
    "setup_logging",
]

logger: logging.Logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def setup_logging(level: str = "INFO") -> None:
    """Configure the package logger with a console handler.

    Intended for standalone scripts, notebooks, or test sessions where
    no application logging is configured.

    Args:
        level: Logging level name (e.g. ``"DEBUG"``, ``"INFO"``,
            ``"WARNING"``).  Defaults to ``"INFO"``.
    """
    pkg_logger = logging.getLogger(__name__)
    pkg_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(
        isinstance(h, logging.StreamHandler)
        and not isinstance(h, logging.NullHandler)
        for h in pkg_logger.handlers
    ):
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        pkg_logger.addHandler(handler)

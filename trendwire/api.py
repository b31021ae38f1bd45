"""Public Google Trends operations.

Each operation builds its endpoint(s), hands them to a transport, decodes
the body and returns a :class:`~trendwire.result.Result`.  None of them
raise: failures come back as ``Result.error``.
"""

import logging
from datetime import date
from typing import List, Optional

from trendwire.config import Settings, load_settings
from trendwire.date_range import DateRange, TRENDS_EPOCH, time_range_string
from trendwire.endpoints import (
    autocomplete_endpoint,
    compared_geo_endpoint,
    explore_endpoint,
    region_request,
    related_searches_endpoint,
    trending_endpoint,
)
from trendwire.envelope import load_json, unwrap_batch_response
from trendwire.errors import InvalidRequestError, ParseError
from trendwire.normalize import (
    combine_related,
    extract_autocomplete_titles,
    extract_widgets,
    normalize_interest_by_region,
    normalize_related_queries,
    normalize_related_topics,
    normalize_trending_payload,
)
from trendwire.result import capture_errors
from trendwire.transport import RequestsTransport, Transport
from trendwire.types import (
    DailyTrendingTopics,
    DailyTrendsOptions,
    ExploreOptions,
    ExploreResponse,
    ExploreWidget,
    InterestByRegionOptions,
    InterestByRegionResponse,
    RealTimeTrendsOptions,
    RelatedData,
    RelatedQueriesResponse,
    RelatedTopicsResponse,
    TrendingHours,
)

logger = logging.getLogger(__name__)

DEFAULT_GEO = "US"
DEFAULT_LANG = "en"
DEFAULT_EXPLORE_TIME = "now 1-d"
DEFAULT_RESOLUTION = "REGION"

RELATED_TOPICS_WIDGET = "RELATED_TOPICS"
RELATED_QUERIES_WIDGET = "RELATED_QUERIES"
GEO_MAP_WIDGET = "GEO_MAP"


def _context(transport: Optional[Transport],
             settings: Optional[Settings]):
    if settings is None:
        try:
            settings = load_settings()
        except ValueError as exc:
            raise InvalidRequestError(str(exc)) from exc
    return transport or RequestsTransport(settings), settings


def _fetch_trending(geo: str, lang: str, hours: int,
                    transport: Optional[Transport],
                    settings: Optional[Settings]) -> DailyTrendingTopics:
    transport, settings = _context(transport, settings)
    text = transport.fetch(
        trending_endpoint(geo, lang, int(hours), host=settings["host"]))
    return normalize_trending_payload(unwrap_batch_response(text))


@capture_errors
def daily_trends(options: Optional[DailyTrendsOptions] = None,
                 transport: Optional[Transport] = None,
                 settings: Optional[Settings] = None) -> DailyTrendingTopics:
    """Fetch the trending searches of the last 24 hours.

    Args:
        options: ``geo`` (default ``"US"``) and ``lang`` (default ``"en"``).
        transport: Object with a ``fetch(endpoint)`` method.
        settings: Host/locale defaults; read from the environment if omitted.

    Returns:
        ``Result`` holding ``allTrendingStories`` and ``summary``.
    """
    options = options or {}
    return _fetch_trending(options.get("geo", DEFAULT_GEO),
                           options.get("lang", DEFAULT_LANG),
                           TrendingHours.ONE_DAY, transport, settings)


@capture_errors
def real_time_trends(options: RealTimeTrendsOptions,
                     transport: Optional[Transport] = None,
                     settings: Optional[Settings] = None,
                     ) -> DailyTrendingTopics:
    """Fetch trending searches over a short lookback window.

    Args:
        options: ``geo`` (required), ``trending_hours`` (default 4) and
            ``lang``.  Hours outside :class:`TrendingHours` are sent as-is;
            the provider rejects them with a network error.
        transport: Object with a ``fetch(endpoint)`` method.
        settings: Host/locale defaults.

    Returns:
        ``Result`` holding ``allTrendingStories`` and ``summary``.
    """
    geo = options.get("geo")
    if not geo:
        raise InvalidRequestError("geo is required")
    hours = options.get("trending_hours", TrendingHours.FOUR_HOURS)
    return _fetch_trending(geo, options.get("lang", DEFAULT_LANG), hours,
                           transport, settings)


@capture_errors
def autocomplete(keyword: str,
                 hl: Optional[str] = None,
                 transport: Optional[Transport] = None,
                 settings: Optional[Settings] = None) -> List[str]:
    """Return suggestion titles for a partial *keyword*.

    An empty keyword yields an empty list without contacting the provider.
    """
    if not keyword:
        return []
    transport, settings = _context(transport, settings)
    text = transport.fetch(autocomplete_endpoint(
        keyword, hl or settings["hl"], settings["tz"], settings["host"]))
    return extract_autocomplete_titles(load_json(text))


def _time_param(value) -> str:
    if isinstance(value, DateRange):
        return value.as_trends_time_string()
    return value


def _explore(keywords: List[str], options: ExploreOptions,
             transport: Transport, settings: Settings) -> List[ExploreWidget]:
    endpoint = explore_endpoint(
        keywords,
        geo=options.get("geo", DEFAULT_GEO),
        time=_time_param(options.get("time", DEFAULT_EXPLORE_TIME)),
        category=options.get("category", 0),
        property=options.get("property", ""),
        hl=options.get("hl", settings["hl"]),
        tz=options.get("timezone", settings["tz"]),
        host=settings["host"],
    )
    return extract_widgets(load_json(transport.fetch(endpoint)))


def _find_widget(widgets: List[ExploreWidget], widget_id: str) -> ExploreWidget:
    for widget in widgets:
        if widget.get("id") == widget_id:
            return widget
    for widget in widgets:
        if str(widget.get("id", "")).startswith(widget_id):
            return widget
    raise ParseError(f"No {widget_id} widget found in explore response")


def _fetch_related(widget: ExploreWidget, options: ExploreOptions,
                   transport: Transport, settings: Settings):
    endpoint = related_searches_endpoint(
        widget,
        hl=options.get("hl", settings["hl"]),
        tz=options.get("timezone", settings["tz"]),
        host=settings["host"],
    )
    return load_json(transport.fetch(endpoint))


@capture_errors
def explore(options: ExploreOptions,
            transport: Optional[Transport] = None,
            settings: Optional[Settings] = None) -> ExploreResponse:
    """Fetch the explore-page widgets for ``options["keyword"]``."""
    keyword = options.get("keyword")
    if not keyword:
        raise InvalidRequestError("keyword is required")
    transport, settings = _context(transport, settings)
    return {"widgets": _explore([keyword], options, transport, settings)}


@capture_errors
def related_topics(options: ExploreOptions,
                   transport: Optional[Transport] = None,
                   settings: Optional[Settings] = None,
                   ) -> RelatedTopicsResponse:
    """Fetch topics related to ``options["keyword"]``, grouped by rank tier.

    Returns:
        ``Result`` whose error is :class:`InvalidRequestError` for an empty
        keyword and :class:`ParseError` when the explore page carries no
        related-topics widget.
    """
    keyword = options.get("keyword")
    if not keyword:
        raise InvalidRequestError("keyword is required")
    transport, settings = _context(transport, settings)
    widgets = _explore([keyword], options, transport, settings)
    widget = _find_widget(widgets, RELATED_TOPICS_WIDGET)
    return normalize_related_topics(
        _fetch_related(widget, options, transport, settings))


@capture_errors
def related_queries(options: ExploreOptions,
                    transport: Optional[Transport] = None,
                    settings: Optional[Settings] = None,
                    ) -> RelatedQueriesResponse:
    """Fetch search queries related to ``options["keyword"]``.

    An empty keyword is reported as :class:`ParseError`, the classification
    the provider's empty explore page produces, without any request.
    """
    keyword = options.get("keyword")
    if not keyword:
        raise ParseError("keyword is required to locate related queries")
    transport, settings = _context(transport, settings)
    widgets = _explore([keyword], options, transport, settings)
    widget = _find_widget(widgets, RELATED_QUERIES_WIDGET)
    return normalize_related_queries(
        _fetch_related(widget, options, transport, settings))


@capture_errors
def related_data(options: ExploreOptions,
                 transport: Optional[Transport] = None,
                 settings: Optional[Settings] = None) -> RelatedData:
    """Fetch related topics and related queries in one explore session.

    One explore call supplies both widgets; each widget's data is fetched
    and decoded on its own, then the flattened lists are combined.
    """
    keyword = options.get("keyword")
    if not keyword:
        raise ParseError("keyword is required to locate related data")
    transport, settings = _context(transport, settings)
    widgets = _explore([keyword], options, transport, settings)
    topics_widget = _find_widget(widgets, RELATED_TOPICS_WIDGET)
    queries_widget = _find_widget(widgets, RELATED_QUERIES_WIDGET)

    topics = normalize_related_topics(
        _fetch_related(topics_widget, options, transport, settings))
    queries = normalize_related_queries(
        _fetch_related(queries_widget, options, transport, settings))
    return combine_related(topics, queries)


@capture_errors
def interest_by_region(options: InterestByRegionOptions,
                       transport: Optional[Transport] = None,
                       settings: Optional[Settings] = None,
                       ) -> InterestByRegionResponse:
    """Fetch interest per geography for one or more keywords.

    Args:
        options: ``keyword`` (str or list), ``start_time`` (default
            2004-01-01), ``end_time`` (default today), ``date_range`` (a
            :class:`DateRange` used instead of the two bounds), ``geo``
            (str or list; the first entry is used), ``resolution``
            (``COUNTRY``, ``REGION``, ``CITY`` or ``DMA``), ``hl``,
            ``timezone`` and ``category``.
        transport: Object with a ``fetch(endpoint)`` method.
        settings: Host/locale defaults.

    Returns:
        ``Result`` holding ``default.geoMapData``, one row per geography
        with one value per keyword.
    """
    raw_keywords = options.get("keyword") or []
    keywords = [raw_keywords] if isinstance(raw_keywords, str) else raw_keywords
    if not isinstance(keywords, (list, tuple)) or not all(
            isinstance(k, str) for k in keywords):
        raise InvalidRequestError(
            "keyword must be a string or a list of strings")
    keywords = [k for k in keywords if k]
    if not keywords:
        raise InvalidRequestError("keyword is required")

    raw_geo = options.get("geo", DEFAULT_GEO)
    geos = [raw_geo] if isinstance(raw_geo, str) else list(raw_geo)
    geo = geos[0] if geos else ""

    if "date_range" in options:
        time = _time_param(options["date_range"])
    else:
        try:
            time = time_range_string(options.get("start_time", TRENDS_EPOCH),
                                     options.get("end_time", date.today()))
        except ValueError as exc:
            raise InvalidRequestError(f"Invalid time range: {exc}") from exc

    transport, settings = _context(transport, settings)
    hl = options.get("hl", settings["hl"])
    tz = options.get("timezone", settings["tz"])
    category = options.get("category", 0)

    explore_options: ExploreOptions = {
        "geo": geo, "time": time, "category": category,
        "hl": hl, "timezone": tz,
    }
    widgets = _explore(keywords, explore_options, transport, settings)
    widget = _find_widget(widgets, GEO_MAP_WIDGET)

    req = region_request(keywords, geo, time,
                         options.get("resolution", DEFAULT_RESOLUTION),
                         hl, category, widget.get("request"))
    text = transport.fetch(compared_geo_endpoint(
        req, widget.get("token", ""), hl, tz, settings["host"]))
    return normalize_interest_by_region(load_json(text))

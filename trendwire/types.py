"""Shared type aliases and typed dictionaries for the trendwire package."""

from datetime import date
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Dict, List, TypedDict, Union

if TYPE_CHECKING:
    from trendwire.date_range import DateRange

Json = Dict[str, Any]
"""A JSON-like dictionary with string keys and arbitrary values."""

Payload = List[Any]
"""A decoded provider array: positional, heterogeneous, schemaless."""

DateLike = Union[date, str]
"""A calendar date, a datetime, or an ISO-8601 date string."""


class TrendingHours(IntEnum):
    """Lookback windows accepted by the realtime trending endpoint."""

    FOUR_HOURS = 4
    ONE_DAY = 24
    TWO_DAYS = 48
    SEVEN_DAYS = 168


# --- request options ---------------------------------------------------------


class DailyTrendsOptions(TypedDict, total=False):
    """Options for :func:`trendwire.api.daily_trends`."""

    geo: str
    lang: str


class RealTimeTrendsOptions(TypedDict, total=False):
    """Options for :func:`trendwire.api.real_time_trends`."""

    geo: str
    lang: str
    trending_hours: int


class ExploreOptions(TypedDict, total=False):
    """Options for the explore-based operations."""

    keyword: str
    geo: str
    time: Union[str, "DateRange"]
    category: int
    property: str
    hl: str
    timezone: int


class InterestByRegionOptions(TypedDict, total=False):
    """Options for :func:`trendwire.api.interest_by_region`."""

    keyword: Union[str, List[str]]
    start_time: DateLike
    end_time: DateLike
    date_range: "DateRange"
    geo: Union[str, List[str]]
    resolution: str
    hl: str
    timezone: int
    category: int


# --- trending stories --------------------------------------------------------


class ArticleRef(TypedDict):
    """A news article attached to a trending story."""

    title: str
    url: str
    source: str
    time: str
    snippet: str


class TrendImage(TypedDict):
    """Lead image of a trending story."""

    newsUrl: str
    source: str
    imageUrl: str


class _TrendingTopicRequired(TypedDict):
    title: str
    traffic: str
    articles: List[ArticleRef]
    startTime: int


class TrendingTopic(_TrendingTopicRequired, total=False):
    """Summary view of a trending story (no share URL, no image)."""

    endTime: int


class _TrendingStoryRequired(_TrendingTopicRequired):
    shareUrl: str


class TrendingStory(_TrendingStoryRequired, total=False):
    """A single trending search with its articles and time window."""

    endTime: int
    image: TrendImage


class DailyTrendingTopics(TypedDict):
    """Full and summary views decoded from one trending response."""

    allTrendingStories: List[TrendingStory]
    summary: List[TrendingTopic]


# --- explore -----------------------------------------------------------------


class ExploreWidget(TypedDict, total=False):
    """An explore-page widget; ``request`` and ``token`` are opaque."""

    id: str
    title: str
    type: str
    request: Json
    token: str


class ExploreResponse(TypedDict):
    """Widgets returned by the explore endpoint."""

    widgets: List[ExploreWidget]


# --- related topics / queries ------------------------------------------------


class TopicInfo(TypedDict):
    """Knowledge-graph identity of a related topic."""

    mid: str
    title: str
    type: str


class RelatedTopic(TypedDict):
    """A ranked related topic."""

    topic: TopicInfo
    value: Union[int, float]
    formattedValue: str
    hasData: bool
    link: str


class RelatedQuery(TypedDict):
    """A ranked related search query."""

    query: str
    value: Union[int, float]
    formattedValue: str
    hasData: bool
    link: str


class RankedTopicList(TypedDict):
    rankedKeyword: List[RelatedTopic]


class RankedQueryList(TypedDict):
    rankedKeyword: List[RelatedQuery]


class RelatedTopicsDefault(TypedDict):
    rankedList: List[RankedTopicList]


class RelatedQueriesDefault(TypedDict):
    rankedList: List[RankedQueryList]


class RelatedTopicsResponse(TypedDict):
    """Decoded ``relatedsearches`` response for the topics widget."""

    default: RelatedTopicsDefault


class RelatedQueriesResponse(TypedDict):
    """Decoded ``relatedsearches`` response for the queries widget."""

    default: RelatedQueriesDefault


class RelatedData(TypedDict):
    """Topics and queries for one keyword, each in provider rank order."""

    topics: List[RelatedTopic]
    queries: List[RelatedQuery]


# --- interest by region ------------------------------------------------------


class Coordinates(TypedDict):
    lat: float
    lng: float


class _InterestByRegionRequired(TypedDict):
    geoCode: str
    geoName: str
    value: List[Union[int, float]]
    formattedValue: List[str]
    maxValueIndex: int
    hasData: List[bool]


class InterestByRegionData(_InterestByRegionRequired, total=False):
    """Interest for one geography, one value per compared keyword."""

    coordinates: Coordinates


class InterestByRegionDefault(TypedDict):
    geoMapData: List[InterestByRegionData]


class InterestByRegionResponse(TypedDict):
    """Decoded ``comparedgeo`` response."""

    default: InterestByRegionDefault

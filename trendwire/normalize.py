"""Decode positional provider records into typed trend objects.

Every index into a provider record lives in one of the field tables below.
Records are decoded best effort: a missing or mistyped slot falls back to
``0`` / ``""`` / ``[]`` and a record that is not a sequence at all is
skipped.  Containers are strict: a payload that is not the expected list or
object raises :class:`~trendwire.errors.ParseError`.

Trending story record (``batchexecute`` ``i0OFE``)::

    0   title
    1   null | [newsUrl, source, imageUrl, [article, ...]]
    2   country code
    3   [start epoch seconds]
    4   null | [end epoch seconds]
    6   search volume
    9   related searches
    12  share URL / canonical keyword
"""

import logging
import math
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from trendwire.errors import ParseError
from trendwire.types import (
    ArticleRef,
    Coordinates,
    DailyTrendingTopics,
    InterestByRegionData,
    InterestByRegionResponse,
    Json,
    RankedQueryList,
    RankedTopicList,
    RelatedData,
    RelatedQueriesResponse,
    RelatedQuery,
    RelatedTopic,
    RelatedTopicsResponse,
    TopicInfo,
    TrendImage,
    TrendingStory,
    TrendingTopic,
)

logger = logging.getLogger(__name__)

# Trending story slots.
STORY_TITLE = 0
STORY_MEDIA = 1
STORY_START_TIME = 3
STORY_END_TIME = 4
STORY_TRAFFIC = 6
STORY_SHARE_URL = 12

# Slots inside the STORY_MEDIA block.
MEDIA_NEWS_URL = 0
MEDIA_SOURCE = 1
MEDIA_IMAGE_URL = 2
MEDIA_ARTICLES = 3

ARTICLE_FIELDS: Tuple[str, ...] = ("title", "url", "source", "time", "snippet")
"""Article tuple layout; tuples shorter than this are ignored."""


# --- slot coercion -----------------------------------------------------------


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def _slot(record: Any, key: str, position: int) -> Any:
    """Read a field by name from an object record or by index from a tuple."""
    if isinstance(record, dict):
        return record.get(key)
    if isinstance(record, list) and 0 <= position < len(record):
        return record[position]
    return None


def _as_text(value: Any, default: str = "") -> str:
    if isinstance(value, str):
        return value if value else default
    if _is_number(value):
        if not value:
            return default
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return str(value)
    return default


def _as_number(value: Any) -> Any:
    return value if _is_number(value) else 0


def _as_int(value: Any) -> int:
    return int(value) if _is_number(value) else 0


def _as_bool(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _first_number(value: Any) -> Optional[int]:
    """Return the epoch held in a single-element array, if numeric."""
    if isinstance(value, list) and value and _is_number(value[0]):
        return int(value[0])
    return None


# --- trending stories --------------------------------------------------------


def _decode_articles(media: List[Any]) -> List[ArticleRef]:
    if len(media) <= MEDIA_ARTICLES or not isinstance(media[MEDIA_ARTICLES], list):
        return []
    articles: List[ArticleRef] = []
    for entry in media[MEDIA_ARTICLES]:
        if not isinstance(entry, list) or len(entry) < len(ARTICLE_FIELDS):
            logger.debug("Skipping short article tuple: %r", entry)
            continue
        articles.append({
            "title": _as_text(entry[0]),
            "url": _as_text(entry[1]),
            "source": _as_text(entry[2]),
            "time": _as_text(entry[3]),
            "snippet": _as_text(entry[4]),
        })
    return articles


def _decode_image(media: List[Any]) -> Optional[TrendImage]:
    if len(media) <= MEDIA_IMAGE_URL:
        return None
    return {
        "newsUrl": _as_text(media[MEDIA_NEWS_URL]),
        "source": _as_text(media[MEDIA_SOURCE]),
        "imageUrl": _as_text(media[MEDIA_IMAGE_URL]),
    }


def decode_trending_story(record: List[Any]) -> TrendingStory:
    """Decode one positional trending record.

    ``startTime`` is always set (``0`` when absent, non-numeric or
    negative).  ``endTime`` and ``image`` are left out entirely when the
    provider did not supply them.  ``endTime > startTime`` is not checked.

    Args:
        record: A single element of the trending payload array.

    Returns:
        The decoded story.
    """

    def at(position: int) -> Any:
        return record[position] if position < len(record) else None

    media = _as_list(at(STORY_MEDIA))

    start_time = _first_number(at(STORY_START_TIME))
    end_time = _first_number(at(STORY_END_TIME))

    story: TrendingStory = {
        "title": _as_text(at(STORY_TITLE)),
        "traffic": _as_text(at(STORY_TRAFFIC), default="0"),
        "articles": _decode_articles(media),
        "shareUrl": _as_text(at(STORY_SHARE_URL)),
        "startTime": start_time if start_time and start_time > 0 else 0,
    }
    if end_time and end_time > 0:
        story["endTime"] = end_time

    image = _decode_image(media)
    if image is not None:
        story["image"] = image
    return story


def summarize_story(story: TrendingStory) -> TrendingTopic:
    """Project a story onto its summary view, dropping share URL and image."""
    topic: TrendingTopic = {
        "title": story["title"],
        "traffic": story["traffic"],
        "articles": story["articles"],
        "startTime": story["startTime"],
    }
    if "endTime" in story:
        topic["endTime"] = story["endTime"]
    return topic


def normalize_trending_payload(payload: Any) -> DailyTrendingTopics:
    """Fold a trending payload array into full and summary views.

    Non-array entries are skipped; provider order is kept.

    Args:
        payload: ``level2[1]`` from
            :func:`~trendwire.envelope.unwrap_batch_response`.

    Returns:
        ``allTrendingStories`` and ``summary`` with the same length and
        order.

    Raises:
        ParseError: If *payload* is not a list.
    """
    if not isinstance(payload, list):
        raise ParseError("Invalid data format: expected array")

    stories: List[TrendingStory] = []
    summary: List[TrendingTopic] = []
    skipped = 0
    for item in payload:
        if not isinstance(item, list):
            skipped += 1
            continue
        story = decode_trending_story(item)
        stories.append(story)
        summary.append(summarize_story(story))

    if skipped:
        logger.debug("Skipped %d non-array trending record(s)", skipped)
    logger.info("Decoded %d trending stories", len(stories))
    return {"allTrendingStories": stories, "summary": summary}


# --- keyed / positional record tables ----------------------------------------

FieldSpec = Tuple[str, str, int, Callable[[Any], Any]]
"""(output field, provider key, tuple position, coercer)."""


def _decode_topic_info(value: Any) -> TopicInfo:
    return {
        "mid": _as_text(_slot(value, "mid", 0)),
        "title": _as_text(_slot(value, "title", 1)),
        "type": _as_text(_slot(value, "type", 2)),
    }


def _decode_coordinates(value: Any) -> Optional[Coordinates]:
    lat = _slot(value, "lat", 0)
    lng = _slot(value, "lng", 1)
    if not (_is_number(lat) and _is_number(lng)):
        return None
    return {"lat": lat, "lng": lng}


RELATED_TOPIC_FIELDS: Tuple[FieldSpec, ...] = (
    ("topic", "topic", 0, _decode_topic_info),
    ("value", "value", 1, _as_number),
    ("formattedValue", "formattedValue", 2, _as_text),
    ("hasData", "hasData", 3, _as_bool),
    ("link", "link", 4, _as_text),
)

RELATED_QUERY_FIELDS: Tuple[FieldSpec, ...] = (
    ("query", "query", 0, _as_text),
    ("value", "value", 1, _as_number),
    ("formattedValue", "formattedValue", 2, _as_text),
    ("hasData", "hasData", 3, _as_bool),
    ("link", "link", 4, _as_text),
)

REGION_FIELDS: Tuple[FieldSpec, ...] = (
    ("geoCode", "geoCode", 0, _as_text),
    ("geoName", "geoName", 1, _as_text),
    ("value", "value", 2,
     lambda v: [_as_number(x) for x in _as_list(v)]),
    ("formattedValue", "formattedValue", 3,
     lambda v: [_as_text(x) for x in _as_list(v)]),
    ("maxValueIndex", "maxValueIndex", 4, _as_int),
    ("hasData", "hasData", 5,
     lambda v: [_as_bool(x) for x in _as_list(v)]),
)

_REGION_COORDINATES = ("coordinates", 6)


def _decode_record(record: Any, fields: Sequence[FieldSpec]) -> Optional[Json]:
    """Apply a field table to a keyed or positional record.

    Returns ``None`` for records that are neither a dict nor a list.
    """
    if not isinstance(record, (dict, list)):
        return None
    return {name: coerce(_slot(record, key, position))
            for name, key, position, coerce in fields}


def decode_related_topic(record: Any) -> Optional[RelatedTopic]:
    return _decode_record(record, RELATED_TOPIC_FIELDS)


def decode_related_query(record: Any) -> Optional[RelatedQuery]:
    return _decode_record(record, RELATED_QUERY_FIELDS)


def decode_region(record: Any) -> Optional[InterestByRegionData]:
    """Decode one geography row; ``coordinates`` only when both are numeric."""
    row = _decode_record(record, REGION_FIELDS)
    if row is None:
        return None
    key, position = _REGION_COORDINATES
    coordinates = _decode_coordinates(_slot(record, key, position))
    if coordinates is not None:
        row["coordinates"] = coordinates
    return row


# --- containers --------------------------------------------------------------


def _default_section(document: Any, member: str) -> List[Any]:
    """Return ``document["default"][member]`` or raise ParseError."""
    default = document.get("default") if isinstance(document, dict) else None
    section = default.get(member) if isinstance(default, dict) else None
    if not isinstance(section, list):
        raise ParseError("Invalid response format: missing "
                         f"default.{member}")
    return section


def _decode_ranked_lists(
    document: Any,
    decode: Callable[[Any], Optional[Json]],
) -> List[Json]:
    ranked_lists: List[Json] = []
    for ranked in _default_section(document, "rankedList"):
        keywords = ranked.get("rankedKeyword") if isinstance(ranked, dict) else None
        if not isinstance(keywords, list):
            logger.debug("Skipping malformed ranked list: %r", ranked)
            continue
        decoded = [rec for rec in map(decode, keywords) if rec is not None]
        ranked_lists.append({"rankedKeyword": decoded})
    return ranked_lists


def normalize_related_topics(document: Any) -> RelatedTopicsResponse:
    """Decode a ``relatedsearches`` document for the topics widget.

    Raises:
        ParseError: If ``default.rankedList`` is missing or not a list.
    """
    ranked: List[RankedTopicList] = _decode_ranked_lists(
        document, decode_related_topic)
    return {"default": {"rankedList": ranked}}


def normalize_related_queries(document: Any) -> RelatedQueriesResponse:
    """Decode a ``relatedsearches`` document for the queries widget.

    Raises:
        ParseError: If ``default.rankedList`` is missing or not a list.
    """
    ranked: List[RankedQueryList] = _decode_ranked_lists(
        document, decode_related_query)
    return {"default": {"rankedList": ranked}}


def flatten_ranked(response: Dict[str, Any]) -> List[Json]:
    """Concatenate every ranked list's keywords in provider order."""
    return [keyword
            for ranked in response["default"]["rankedList"]
            for keyword in ranked["rankedKeyword"]]


def combine_related(
    topics: RelatedTopicsResponse,
    queries: RelatedQueriesResponse,
) -> RelatedData:
    """Merge two independent decodes without dedup or reordering."""
    return {
        "topics": flatten_ranked(topics),
        "queries": flatten_ranked(queries),
    }


def normalize_interest_by_region(document: Any) -> InterestByRegionResponse:
    """Decode a ``comparedgeo`` document into per-geography rows.

    Raises:
        ParseError: If ``default.geoMapData`` is missing or not a list.
    """
    rows: List[InterestByRegionData] = []
    for record in _default_section(document, "geoMapData"):
        row = decode_region(record)
        if row is None:
            logger.debug("Skipping malformed region row: %r", record)
            continue
        rows.append(row)
    logger.info("Decoded %d region rows", len(rows))
    return {"default": {"geoMapData": rows}}


def extract_autocomplete_titles(document: Any) -> List[str]:
    """Return suggestion titles from an autocomplete document.

    Raises:
        ParseError: If ``default.topics`` is missing or not a list.
    """
    titles: List[str] = []
    for topic in _default_section(document, "topics"):
        title = _as_text(_slot(topic, "title", 1))
        if title:
            titles.append(title)
    return titles


def extract_widgets(document: Any) -> List[Json]:
    """Return the widget list from an explore document.

    Raises:
        ParseError: If ``widgets`` is missing or not a list.
    """
    widgets = document.get("widgets") if isinstance(document, dict) else None
    if not isinstance(widgets, list):
        raise ParseError("Invalid response format: missing widgets")
    return [w for w in widgets if isinstance(w, dict)]

"""Flatten decoded trends into DataFrames and write them to CSV."""

import logging
from pathlib import Path
from typing import List, Sequence

import pandas as pd

from trendwire.types import InterestByRegionData, TrendingStory

logger = logging.getLogger(__name__)

STORY_COLUMNS: List[str] = [
    "title", "traffic", "startTime", "endTime", "shareUrl",
    "imageUrl", "articleCount", "topArticleUrl",
]

REGION_COLUMNS: List[str] = [
    "geoCode", "geoName", "keywordIndex", "value", "formattedValue",
    "hasData", "isMax", "lat", "lng",
]


def stories_to_frame(stories: Sequence[TrendingStory]) -> pd.DataFrame:
    """One row per story, provider order kept.

    ``endTime`` is ``<NA>`` for stories without one; articles are reduced to a
    count and the first article's URL.

    Args:
        stories: ``allTrendingStories`` from a trending result.

    Returns:
        A DataFrame with :data:`STORY_COLUMNS`.
    """
    rows = []
    for story in stories:
        articles = story["articles"]
        rows.append({
            "title": story["title"],
            "traffic": story["traffic"],
            "startTime": story["startTime"],
            "endTime": story.get("endTime"),
            "shareUrl": story["shareUrl"],
            "imageUrl": story.get("image", {}).get("imageUrl", ""),
            "articleCount": len(articles),
            "topArticleUrl": articles[0]["url"] if articles else "",
        })
    frame = pd.DataFrame(rows, columns=STORY_COLUMNS)
    frame["endTime"] = frame["endTime"].astype("Int64")
    return frame


def regions_to_frame(rows: Sequence[InterestByRegionData]) -> pd.DataFrame:
    """One row per (geography, compared keyword) pair.

    Args:
        rows: ``default.geoMapData`` from an interest-by-region result.

    Returns:
        A long-format DataFrame with :data:`REGION_COLUMNS`.
    """
    records = []
    for row in rows:
        coordinates = row.get("coordinates") or {}
        formatted = row["formattedValue"]
        has_data = row["hasData"]
        for index, value in enumerate(row["value"]):
            records.append({
                "geoCode": row["geoCode"],
                "geoName": row["geoName"],
                "keywordIndex": index,
                "value": value,
                "formattedValue": formatted[index] if index < len(formatted) else "",
                "hasData": has_data[index] if index < len(has_data) else False,
                "isMax": index == row["maxValueIndex"],
                "lat": coordinates.get("lat"),
                "lng": coordinates.get("lng"),
            })
    return pd.DataFrame(records, columns=REGION_COLUMNS)


def write_records_csv(
    frame: pd.DataFrame,
    output_path: Path,
    key_columns: Sequence[str],
) -> None:
    """Write *frame* to CSV with idempotent deduplication.

    If *output_path* already exists the new rows are concatenated with
    the existing data and duplicates (keyed on *key_columns*) are dropped,
    keeping the **last** occurrence.  If the file does not exist it is
    created along with any missing parent directories.

    An empty *frame* is a no-op (a warning is logged).

    Args:
        frame: Rows to persist, e.g. from :func:`stories_to_frame`.
        output_path: Destination CSV path.
        key_columns: Columns identifying a row across runs.
    """
    if frame.empty:
        logger.warning("No records to write, skipping CSV output.")
        return

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if output_path.exists():
        existing = pd.read_csv(output_path)
        combined = pd.concat([existing, frame], ignore_index=True)
        combined = combined.drop_duplicates(subset=list(key_columns),
                                            keep="last")
        combined.to_csv(output_path, index=False)
        total = len(combined)
    else:
        frame.to_csv(output_path, index=False)
        total = len(frame)

    logger.info("Wrote %d records to %s", total, output_path)

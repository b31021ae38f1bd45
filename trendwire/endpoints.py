"""Build request descriptors for each Google Trends endpoint."""

import json
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from trendwire.transport import Endpoint
from trendwire.types import Json

DEFAULT_HOST = "trends.google.com"

BATCH_EXECUTE_PATH = "/_/TrendsUi/data/batchexecute"
EXPLORE_PATH = "/trends/api/explore"
RELATED_SEARCHES_PATH = "/trends/api/widgetdata/relatedsearches"
COMPARED_GEO_PATH = "/trends/api/widgetdata/comparedgeo"
AUTOCOMPLETE_PATH = "/trends/api/autocomplete/"

TRENDING_RPC_ID = "i0OFE"

_FORM_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded;charset=UTF-8",
}


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def trending_endpoint(geo: str, lang: str, hours: int,
                      host: str = DEFAULT_HOST) -> Endpoint:
    """Describe the ``batchexecute`` call behind the Trending Now page.

    Args:
        geo: Country code, e.g. ``"US"``.
        lang: Two-letter language code.
        hours: Lookback window in hours.
        host: Provider host.

    Returns:
        A POST endpoint whose body is the form-encoded ``f.req`` envelope.
    """
    rpc_args = [None, None, geo, 0, lang, hours, 1]
    f_req = [[[TRENDING_RPC_ID, _compact(rpc_args), None, "generic"]]]
    return {
        "method": "POST",
        "host": host,
        "path": BATCH_EXECUTE_PATH,
        "headers": dict(_FORM_HEADERS),
        "params": {
            "rpcids": TRENDING_RPC_ID,
            "source-path": "/trending",
            "hl": lang,
        },
        "data": "f.req=" + quote(_compact(f_req), safe=""),
    }


def explore_endpoint(keywords: List[str],
                     geo: str,
                     time: str,
                     category: int = 0,
                     property: str = "",
                     hl: str = "en-US",
                     tz: int = 240,
                     host: str = DEFAULT_HOST) -> Endpoint:
    """Describe an explore call comparing *keywords* over one window."""
    req = {
        "comparisonItem": [
            {"keyword": keyword, "geo": geo, "time": time}
            for keyword in keywords
        ],
        "category": category,
        "property": property,
    }
    return {
        "method": "POST",
        "host": host,
        "path": EXPLORE_PATH,
        "headers": dict(_FORM_HEADERS),
        "params": {"hl": hl, "tz": str(tz), "req": _compact(req)},
    }


def related_searches_endpoint(widget: Json,
                              hl: str = "en-US",
                              tz: int = 240,
                              host: str = DEFAULT_HOST) -> Endpoint:
    """Describe the data call for a RELATED_TOPICS/RELATED_QUERIES widget."""
    return _widget_endpoint(RELATED_SEARCHES_PATH, widget.get("request", {}),
                            widget.get("token", ""), hl, tz, host)


def compared_geo_endpoint(request: Json,
                          token: str,
                          hl: str = "en-US",
                          tz: int = 240,
                          host: str = DEFAULT_HOST) -> Endpoint:
    """Describe the data call for a GEO_MAP widget."""
    return _widget_endpoint(COMPARED_GEO_PATH, request, token, hl, tz, host)


def _widget_endpoint(path: str, request: Json, token: str, hl: str,
                     tz: int, host: str) -> Endpoint:
    return {
        "method": "GET",
        "host": host,
        "path": path,
        "params": {
            "hl": hl,
            "tz": str(tz),
            "req": _compact(request),
            "token": token,
        },
    }


def autocomplete_endpoint(keyword: str,
                          hl: str = "en-US",
                          tz: int = 240,
                          host: str = DEFAULT_HOST) -> Endpoint:
    """Describe an autocomplete lookup; the keyword is part of the path."""
    return {
        "method": "GET",
        "host": host,
        "path": AUTOCOMPLETE_PATH + quote(keyword, safe=""),
        "params": {"hl": hl, "tz": str(tz)},
    }


def region_request(keywords: List[str],
                   geo: str,
                   time: str,
                   resolution: str,
                   hl: str,
                   category: int,
                   widget_request: Optional[Dict[str, Any]] = None) -> Json:
    """Build the ``req`` document for a compared-geo lookup.

    The explore widget's own request is reused when present so that any
    restriction the provider attached to it is kept; the keyword list,
    window, resolution and locale are always set from the caller.
    """
    req: Json = dict(widget_request or {})
    req.update({
        "geo": {"country": geo} if geo else {},
        "comparisonItem": [
            {
                "time": time,
                "complexKeywordsRestriction": {
                    "keyword": [{"type": "BROAD", "value": keyword}],
                },
            }
            for keyword in keywords
        ],
        "resolution": resolution,
        "locale": hl,
        "requestOptions": {"property": "", "backend": "IZG",
                           "category": category},
    })
    req.pop("userConfig", None)
    return req

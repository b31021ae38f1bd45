import json
from datetime import date
from urllib.parse import unquote

import pytest

from trendwire import api
from trendwire.config import load_settings
from trendwire.date_range import DateRange
from trendwire.errors import InvalidRequestError, NetworkError, ParseError
from trendwire.types import TrendingHours

SETTINGS = load_settings({})


class FakeTransport:
    """Return queued bodies in order and record every endpoint requested."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def fetch(self, endpoint):
        self.calls.append(endpoint)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _batch_body(payload):
    inner = json.dumps([None, payload])
    return ")]}'\n\n" + json.dumps([["wrb.fr", "i0OFE", inner, None, "generic"]])


def _json_body(document, prefix=")]}',\n"):
    return prefix + json.dumps(document)


def _story_record(title, start, end=None, traffic=1000, share_url="https://s"):
    record = [None] * 13
    record[0] = title
    record[3] = [start]
    record[4] = [end] if end is not None else None
    record[6] = traffic
    record[12] = share_url
    return record


def _explore_body(*widget_ids):
    widgets = [
        {"id": wid, "token": f"tok-{wid}",
         "request": {"restriction": {"geo": {"country": "US"}},
                     "userConfig": {"userType": "USER_TYPE_LEGIT_USER"}}}
        for wid in widget_ids
    ]
    return _json_body({"widgets": widgets}, prefix=")]}'\n")


def _ranked_body(*keyword_lists):
    return _json_body({"default": {"rankedList": [
        {"rankedKeyword": kws} for kws in keyword_lists]}})


def _topic(title):
    return {"topic": {"mid": "/m/" + title, "title": title, "type": "Topic"},
            "value": 10, "formattedValue": "10", "hasData": True,
            "link": "/trends/explore?q=" + title}


def _query(text):
    return {"query": text, "value": 10, "formattedValue": "10",
            "hasData": True, "link": "/trends/explore?q=" + text}


class TestDailyTrends:
    def test_decodes_stories_and_summary(self):
        payload = [_story_record("a", 1741599600, 1741602000),
                   _story_record("b", 1741590000)]
        transport = FakeTransport(_batch_body(payload))

        result = api.daily_trends({"geo": "GB", "lang": "en"},
                                  transport=transport, settings=SETTINGS)

        assert result.ok
        stories = result.data["allTrendingStories"]
        assert [s["title"] for s in stories] == ["a", "b"]
        assert stories[0]["endTime"] == 1741602000
        assert "endTime" not in stories[1]
        assert "shareUrl" not in result.data["summary"][0]

    def test_request_shape(self):
        transport = FakeTransport(_batch_body([]))
        api.daily_trends({"geo": "JP", "lang": "ja"}, transport=transport,
                         settings=SETTINGS)

        endpoint = transport.calls[0]
        assert endpoint["method"] == "POST"
        assert endpoint["path"] == "/_/TrendsUi/data/batchexecute"
        assert endpoint["params"]["rpcids"] == "i0OFE"
        f_req = json.loads(unquote(endpoint["data"][len("f.req="):]))
        assert json.loads(f_req[0][0][1]) == [None, None, "JP", 0, "ja", 24, 1]

    def test_defaults_to_us_english(self):
        transport = FakeTransport(_batch_body([]))
        result = api.daily_trends(transport=transport, settings=SETTINGS)
        assert result.data == {"allTrendingStories": [], "summary": []}
        f_req = json.loads(unquote(transport.calls[0]["data"][len("f.req="):]))
        assert json.loads(f_req[0][0][1])[2] == "US"

    def test_network_failure_is_returned(self):
        transport = FakeTransport(NetworkError("Request failed with status 400",
                                               status_code=400))
        result = api.daily_trends({"geo": "INVALID_GEO"}, transport=transport,
                                  settings=SETTINGS)
        assert result.data is None
        assert isinstance(result.error, NetworkError)

    def test_empty_outer_array_is_parse_error(self):
        transport = FakeTransport(")]}'\n[]")
        result = api.daily_trends({}, transport=transport, settings=SETTINGS)
        assert isinstance(result.error, ParseError)

    def test_non_array_payload_is_parse_error(self):
        transport = FakeTransport(_batch_body({"unexpected": True}))
        result = api.daily_trends({}, transport=transport, settings=SETTINGS)
        assert isinstance(result.error, ParseError)


class TestRealTimeTrends:
    def test_hours_sent_to_provider(self):
        transport = FakeTransport(_batch_body([_story_record("x", 1)]))
        result = api.real_time_trends(
            {"geo": "US", "trending_hours": TrendingHours.SEVEN_DAYS},
            transport=transport, settings=SETTINGS)

        assert result.ok
        f_req = json.loads(unquote(transport.calls[0]["data"][len("f.req="):]))
        assert json.loads(f_req[0][0][1])[5] == 168

    def test_default_window_is_four_hours(self):
        transport = FakeTransport(_batch_body([]))
        api.real_time_trends({"geo": "US"}, transport=transport,
                             settings=SETTINGS)
        f_req = json.loads(unquote(transport.calls[0]["data"][len("f.req="):]))
        assert json.loads(f_req[0][0][1])[5] == 4

    def test_missing_geo_is_invalid_request(self):
        transport = FakeTransport()
        result = api.real_time_trends({}, transport=transport, settings=SETTINGS)
        assert isinstance(result.error, InvalidRequestError)
        assert transport.calls == []


class TestAutocomplete:
    def test_returns_titles(self):
        body = _json_body({"default": {"topics": [
            {"mid": "/m/1", "title": "Bitcoin", "type": "Currency"}]}})
        transport = FakeTransport(body)
        result = api.autocomplete("bitc", "fr-FR", transport=transport,
                                  settings=SETTINGS)

        assert result.data == ["Bitcoin"]
        assert transport.calls[0]["params"]["hl"] == "fr-FR"

    def test_keyword_is_path_encoded(self):
        transport = FakeTransport(_json_body({"default": {"topics": []}}))
        api.autocomplete("c# developer", transport=transport, settings=SETTINGS)
        assert transport.calls[0]["path"] == "/trends/api/autocomplete/c%23%20developer"

    def test_empty_keyword_returns_empty_list_without_request(self):
        transport = FakeTransport()
        result = api.autocomplete("", transport=transport, settings=SETTINGS)
        assert result.data == []
        assert result.error is None
        assert transport.calls == []


class TestExplore:
    def test_returns_widgets(self):
        transport = FakeTransport(_explore_body("TIMESERIES", "GEO_MAP"))
        result = api.explore({"keyword": "bitcoin", "time": "now 7-d"},
                             transport=transport, settings=SETTINGS)

        assert [w["id"] for w in result.data["widgets"]] == ["TIMESERIES", "GEO_MAP"]
        req = json.loads(transport.calls[0]["params"]["req"])
        assert req["comparisonItem"] == [
            {"keyword": "bitcoin", "geo": "US", "time": "now 7-d"}]

    def test_date_range_rendered_as_time_window(self):
        window = DateRange(months=3)
        transport = FakeTransport(_explore_body("TIMESERIES"))
        api.explore({"keyword": "bitcoin", "time": window},
                    transport=transport, settings=SETTINGS)

        req = json.loads(transport.calls[0]["params"]["req"])
        assert req["comparisonItem"][0]["time"] == \
            f"{window.start_date} {window.end_date}"

    def test_html_response_is_parse_error(self):
        transport = FakeTransport("<html><body>unusual traffic</body></html>")
        result = api.explore({"keyword": "bitcoin"}, transport=transport,
                             settings=SETTINGS)
        assert isinstance(result.error, ParseError)


class TestBadSettings:
    def test_unreadable_environment_is_invalid_request(self, monkeypatch):
        monkeypatch.setenv("TRENDWIRE_TIMEOUT", "soon")
        transport = FakeTransport()
        result = api.daily_trends(transport=transport)

        assert isinstance(result.error, InvalidRequestError)
        assert "TRENDWIRE_TIMEOUT" in result.error.message
        assert transport.calls == []


class TestEmptyKeyword:
    @pytest.mark.parametrize("operation, error_type", [
        (api.related_topics, InvalidRequestError),
        (api.related_queries, ParseError),
        (api.related_data, ParseError),
        (api.explore, InvalidRequestError),
        (api.interest_by_region, InvalidRequestError),
    ])
    def test_rejected_before_any_request(self, operation, error_type):
        transport = FakeTransport()
        result = operation({"keyword": ""}, transport=transport,
                           settings=SETTINGS)

        assert result.data is None
        assert isinstance(result.error, error_type)
        assert transport.calls == []


class TestRelatedTopics:
    def test_fetches_widget_data(self):
        transport = FakeTransport(
            _explore_body("TIMESERIES", "RELATED_TOPICS", "RELATED_QUERIES"),
            _ranked_body([_topic("Bitcoin")], [_topic("Ethereum")]),
        )
        result = api.related_topics({"keyword": "bitcoin", "geo": "GB"},
                                    transport=transport, settings=SETTINGS)

        ranked = result.data["default"]["rankedList"]
        assert ranked[0]["rankedKeyword"][0]["topic"]["title"] == "Bitcoin"
        assert ranked[1]["rankedKeyword"][0]["topic"]["title"] == "Ethereum"

        widget_call = transport.calls[1]
        assert widget_call["path"] == "/trends/api/widgetdata/relatedsearches"
        assert widget_call["params"]["token"] == "tok-RELATED_TOPICS"

    def test_missing_widget_is_parse_error(self):
        transport = FakeTransport(_explore_body("TIMESERIES"))
        result = api.related_topics({"keyword": "bitcoin"},
                                    transport=transport, settings=SETTINGS)
        assert isinstance(result.error, ParseError)
        assert len(transport.calls) == 1


class TestRelatedQueries:
    def test_fetches_widget_data(self):
        transport = FakeTransport(
            _explore_body("RELATED_TOPICS", "RELATED_QUERIES"),
            _ranked_body([_query("bitcoin price"), _query("btc")]),
        )
        result = api.related_queries({"keyword": "bitcoin"},
                                     transport=transport, settings=SETTINGS)

        keywords = result.data["default"]["rankedList"][0]["rankedKeyword"]
        assert [q["query"] for q in keywords] == ["bitcoin price", "btc"]
        assert transport.calls[1]["params"]["token"] == "tok-RELATED_QUERIES"

    def test_malformed_widget_data_is_parse_error(self):
        transport = FakeTransport(
            _explore_body("RELATED_QUERIES"),
            _json_body({"default": {}}),
        )
        result = api.related_queries({"keyword": "bitcoin"},
                                     transport=transport, settings=SETTINGS)
        assert isinstance(result.error, ParseError)


class TestRelatedData:
    def test_combines_independent_fetches(self):
        transport = FakeTransport(
            _explore_body("RELATED_TOPICS", "RELATED_QUERIES"),
            _ranked_body([_topic("T1")], [_topic("T2")]),
            _ranked_body([_query("Q1")]),
        )
        result = api.related_data({"keyword": "bitcoin"},
                                  transport=transport, settings=SETTINGS)

        assert result.data == {
            "topics": [_topic("T1"), _topic("T2")],
            "queries": [_query("Q1")],
        }
        assert len(transport.calls) == 3

    def test_second_fetch_failure_fails_whole_call(self):
        transport = FakeTransport(
            _explore_body("RELATED_TOPICS", "RELATED_QUERIES"),
            _ranked_body([_topic("T1")]),
            NetworkError("Request failed with status 429 (rate limited)",
                         status_code=429),
        )
        result = api.related_data({"keyword": "bitcoin"},
                                  transport=transport, settings=SETTINGS)
        assert result.data is None
        assert result.error.status_code == 429


class TestInterestByRegion:
    def _region_body(self):
        return _json_body({"default": {"geoMapData": [
            {"geoCode": "US-CA", "geoName": "California", "value": [100, 20],
             "formattedValue": ["100", "20"], "maxValueIndex": 0,
             "hasData": [True, True]},
        ]}})

    def test_multiple_keywords(self):
        transport = FakeTransport(_explore_body("GEO_MAP"), self._region_body())
        result = api.interest_by_region(
            {"keyword": ["bitcoin", "ethereum"],
             "start_time": date(2024, 1, 1), "end_time": "2024-06-30",
             "geo": ["US", "GB"], "resolution": "REGION"},
            transport=transport, settings=SETTINGS)

        assert result.data["default"]["geoMapData"][0]["value"] == [100, 20]

        explore_req = json.loads(transport.calls[0]["params"]["req"])
        assert [c["keyword"] for c in explore_req["comparisonItem"]] == [
            "bitcoin", "ethereum"]
        assert explore_req["comparisonItem"][0]["time"] == "2024-01-01 2024-06-30"
        assert explore_req["comparisonItem"][0]["geo"] == "US"

        geo_call = transport.calls[1]
        assert geo_call["path"] == "/trends/api/widgetdata/comparedgeo"
        assert geo_call["params"]["token"] == "tok-GEO_MAP"
        req = json.loads(geo_call["params"]["req"])
        assert req["resolution"] == "REGION"
        assert req["geo"] == {"country": "US"}
        assert "userConfig" not in req
        assert req["restriction"] == {"geo": {"country": "US"}}
        assert len(req["comparisonItem"]) == 2

    def test_reversed_range_is_invalid_request(self):
        transport = FakeTransport()
        result = api.interest_by_region(
            {"keyword": "bitcoin", "start_time": "2024-06-01",
             "end_time": "2024-01-01"},
            transport=transport, settings=SETTINGS)
        assert isinstance(result.error, InvalidRequestError)
        assert transport.calls == []

    def test_date_range_replaces_bounds(self):
        window = DateRange(days=30)
        transport = FakeTransport(_explore_body("GEO_MAP"), self._region_body())
        result = api.interest_by_region(
            {"keyword": "bitcoin", "date_range": window},
            transport=transport, settings=SETTINGS)

        assert result.ok
        explore_req = json.loads(transport.calls[0]["params"]["req"])
        assert explore_req["comparisonItem"][0]["time"] == \
            window.as_trends_time_string()

    @pytest.mark.parametrize("keyword", [5, ["bitcoin", 7], {"q": "bitcoin"}])
    def test_non_string_keyword_is_invalid_request(self, keyword):
        transport = FakeTransport()
        result = api.interest_by_region({"keyword": keyword},
                                        transport=transport, settings=SETTINGS)
        assert isinstance(result.error, InvalidRequestError)
        assert transport.calls == []

    def test_missing_geo_map_widget_is_parse_error(self):
        transport = FakeTransport(_explore_body("TIMESERIES"))
        result = api.interest_by_region({"keyword": "bitcoin"},
                                        transport=transport, settings=SETTINGS)
        assert isinstance(result.error, ParseError)

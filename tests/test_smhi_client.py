"""Unit tests for the SMHI MetObs client."""

from datetime import datetime, timezone

import httpx
import pytest
import respx

from metobs_api.clients.exceptions import (
    UpstreamConnectionError,
    UpstreamError,
    UpstreamResponseError,
)
from metobs_api.clients.smhi import (
    PARAM_AIR_TEMPERATURE,
    PARAM_WIND_GUST,
    RANGE_LAST_DAY,
    RANGE_LAST_HOUR,
    SMHIClient,
    normalize_range,
    parse_catalog,
    parse_series,
)

from fakes import SMHI_BASE

SERIES_URL = f"{SMHI_BASE}/parameter/21/station/159880/period/latest-hour/data.json"
CATALOG_URL = f"{SMHI_BASE}/parameter/1.json"


@pytest.fixture
def smhi_client() -> SMHIClient:
    """SMHI client pointed at a mocked base URL."""
    return SMHIClient(base_url=SMHI_BASE)


class TestNormalizeRange:
    @pytest.mark.parametrize("value", ["last-hour", None, "", "   ", "last-week", "LAST-DAY", "latest-hour"])
    def test_defaults_to_last_hour(self, value):
        assert normalize_range(value) == RANGE_LAST_HOUR

    def test_last_day_kept(self):
        assert normalize_range("last-day") == RANGE_LAST_DAY
        assert normalize_range(" last-day ") == RANGE_LAST_DAY


class TestParseSeries:
    def test_numeric_and_string_values(self):
        """SMHI sends values as strings; numbers are accepted too."""
        points = parse_series({
            "value": [
                {"date": 1700000000000, "value": "12.4", "quality": "G"},
                {"date": 1700000600000, "value": 9.8},
            ]
        })

        assert len(points) == 2
        assert points[0].timestamp == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
        assert points[0].value == 12.4
        assert points[1].value == 9.8

    def test_null_and_garbage_values_become_none(self):
        """A sample without a usable value is kept with value None, never 0."""
        points = parse_series({
            "value": [
                {"date": 1700000000000, "value": None},
                {"date": 1700000600000, "value": "n/a"},
                {"date": 1700001200000},
            ]
        })

        assert [p.value for p in points] == [None, None, None]

    def test_points_without_date_are_dropped(self):
        points = parse_series({
            "value": [
                {"value": "1.0"},
                {"date": None, "value": "2.0"},
                {"date": "1700000000000", "value": "3.0"},
                "not-an-object",
            ]
        })

        assert len(points) == 1
        assert points[0].value == 3.0

    def test_millisecond_precision(self):
        points = parse_series({"value": [{"date": 1700000000123, "value": "1"}]})
        assert points[0].timestamp.microsecond == 123000

    @pytest.mark.parametrize("payload", [None, [], {}, {"value": None}, {"value": "x"}, "text"])
    def test_absent_payload_is_empty(self, payload):
        assert parse_series(payload) == []


class TestParseCatalog:
    def test_station_array(self):
        stations = parse_catalog({
            "key": "1",
            "station": [
                {"id": 159880, "name": "Luleå-Kallax Flygplats", "latitude": 65.5436, "longitude": 22.112},
                {"id": "98210", "name": "Stockholm", "latitude": 59.3417, "longitude": 18.0549},
            ],
        })

        assert [s.id for s in stations] == ["159880", "98210"]
        assert stations[0].name == "Luleå-Kallax Flygplats"
        assert stations[0].lat == pytest.approx(65.5436)
        assert stations[0].lon == pytest.approx(22.112)

    def test_stations_fallback(self):
        stations = parse_catalog({"stations": [{"id": 1, "name": "A"}]})
        assert [s.id for s in stations] == ["1"]

    def test_scans_any_array_as_last_resort(self):
        stations = parse_catalog({
            "link": [{"rel": "self", "href": "https://example"}],
            "items": [{"id": 7, "name": "Seven"}],
        })
        assert [s.id for s in stations] == ["7"]

    def test_entries_without_id_are_dropped(self):
        stations = parse_catalog({
            "station": [
                {"name": "No id"},
                {"id": None, "name": "Null id"},
                {"id": "", "name": "Empty id"},
                {"id": True, "name": "Bool id"},
                {"id": 5, "name": "Ok"},
            ]
        })
        assert [s.id for s in stations] == ["5"]

    def test_name_fallbacks(self):
        stations = parse_catalog({
            "station": [
                {"id": 1, "name_en": "English"},
                {"id": 2},
                {"id": 3, "name": "Primary", "name_en": "Secondary"},
            ]
        })
        assert [s.name for s in stations] == ["English", "Unknown", "Primary"]

    def test_coordinates_default_to_zero(self):
        stations = parse_catalog({
            "station": [
                {"id": 1},
                {"id": 2, "latitude": "north", "longitude": None},
                {"id": 3, "latitude": "59.5", "longitude": "18.25"},
            ]
        })
        assert [(s.lat, s.lon) for s in stations] == [(0.0, 0.0), (0.0, 0.0), (59.5, 18.25)]

    def test_integral_float_id(self):
        stations = parse_catalog({"station": [{"id": 159880.0}]})
        assert stations[0].id == "159880"

    def test_duplicate_ids_keep_first(self):
        stations = parse_catalog({
            "station": [{"id": 1, "name": "First"}, {"id": "1", "name": "Second"}]
        })
        assert len(stations) == 1
        assert stations[0].name == "First"

    @pytest.mark.parametrize("payload", [None, [], "text", 42, {}, {"key": "1", "title": "x"}])
    def test_malformed_catalog_is_empty(self, payload):
        assert parse_catalog(payload) == []


class TestHTTPRequests:
    def test_series_url_uses_smhi_period(self, smhi_client: SMHIClient):
        assert smhi_client.series_url("159880", PARAM_WIND_GUST, "last-hour") == SERIES_URL
        assert smhi_client.series_url("159880", PARAM_WIND_GUST, "last-day").endswith(
            "/period/latest-day/data.json"
        )
        assert smhi_client.series_url("159880", PARAM_WIND_GUST, "bogus") == SERIES_URL

    def test_catalog_url(self, smhi_client: SMHIClient):
        assert smhi_client.catalog_url(PARAM_AIR_TEMPERATURE) == CATALOG_URL

    def test_trailing_slash_in_base_url(self):
        client = SMHIClient(base_url=SMHI_BASE + "/")
        assert client.catalog_url(1) == CATALOG_URL

    @respx.mock
    async def test_fetch_series(self, smhi_client: SMHIClient):
        """Test fetching a series via HTTP."""
        respx.get(SERIES_URL).mock(
            return_value=httpx.Response(200, json={"value": [{"date": 1700000000000, "value": "12.4"}]})
        )

        points = await smhi_client.fetch_series("159880", PARAM_WIND_GUST, "last-hour")

        assert len(points) == 1
        assert points[0].value == 12.4
        await smhi_client.close()

    @respx.mock
    async def test_fetch_series_not_found_is_empty(self, smhi_client: SMHIClient):
        """A station that does not report the parameter yields no points."""
        respx.get(SERIES_URL).mock(return_value=httpx.Response(404))

        points = await smhi_client.fetch_series("159880", PARAM_WIND_GUST, "last-hour")

        assert points == []

    @respx.mock
    async def test_fetch_series_empty_payload(self, smhi_client: SMHIClient):
        respx.get(SERIES_URL).mock(return_value=httpx.Response(200, json={"value": None}))

        assert await smhi_client.fetch_series("159880", PARAM_WIND_GUST, "last-hour") == []

    @respx.mock
    async def test_fetch_series_server_error(self, smhi_client: SMHIClient):
        respx.get(SERIES_URL).mock(return_value=httpx.Response(500))

        with pytest.raises(UpstreamResponseError) as exc_info:
            await smhi_client.fetch_series("159880", PARAM_WIND_GUST, "last-hour")

        assert exc_info.value.status_code == 500

    @respx.mock
    async def test_fetch_series_timeout(self, smhi_client: SMHIClient):
        respx.get(SERIES_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(UpstreamConnectionError):
            await smhi_client.fetch_series("159880", PARAM_WIND_GUST, "last-hour")

    @respx.mock
    async def test_fetch_series_invalid_json(self, smhi_client: SMHIClient):
        respx.get(SERIES_URL).mock(return_value=httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(UpstreamError):
            await smhi_client.fetch_series("159880", PARAM_WIND_GUST, "last-hour")

    @respx.mock
    async def test_fetch_catalog(self, smhi_client: SMHIClient):
        respx.get(CATALOG_URL).mock(
            return_value=httpx.Response(200, json={"station": [{"id": 98210, "name": "Stockholm"}]})
        )

        stations = await smhi_client.fetch_catalog(PARAM_AIR_TEMPERATURE)

        assert [s.id for s in stations] == ["98210"]

    @respx.mock
    async def test_fetch_catalog_invalid_json_is_empty(self, smhi_client: SMHIClient):
        respx.get(CATALOG_URL).mock(return_value=httpx.Response(200, text="not json"))

        assert await smhi_client.fetch_catalog(PARAM_AIR_TEMPERATURE) == []

    @respx.mock
    async def test_fetch_catalog_http_error(self, smhi_client: SMHIClient):
        respx.get(CATALOG_URL).mock(return_value=httpx.Response(503))

        with pytest.raises(UpstreamResponseError):
            await smhi_client.fetch_catalog(PARAM_AIR_TEMPERATURE)

    @respx.mock
    async def test_fetch_catalog_connection_error(self, smhi_client: SMHIClient):
        respx.get(CATALOG_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(UpstreamConnectionError):
            await smhi_client.fetch_catalog(PARAM_AIR_TEMPERATURE)

"""
Unit tests for the WeatherKit client.
"""

import json

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_weather.app.adapters.weatherkit_client import WeatherKitClient
from service_weather.app.domain.coordinates import CoordinateQuery
from shared.errors import NetworkError, ProxyError, UpstreamError
from shared.metrics import MetricsCollector

BASE_URL = "https://weatherkit.test/api/v1/weather/en"


def _response(status_code, content):
    return httpx.Response(
        status_code=status_code,
        content=content if isinstance(content, bytes) else json.dumps(content).encode(),
        request=httpx.Request("GET", BASE_URL),
    )


class TestWeatherKitClient:
    """Test cases for WeatherKitClient."""

    @pytest.fixture
    def http_client(self):
        client = MagicMock(spec=httpx.AsyncClient)
        client.aclose = AsyncMock()
        return client

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("weather")

    @pytest.fixture
    def weatherkit_client(self, http_client, metrics):
        return WeatherKitClient(BASE_URL, client=http_client, metrics=metrics)

    @pytest.fixture
    def query(self):
        return CoordinateQuery(lat=40.7128, lng=-74.006)

    def test_build_url(self, weatherkit_client, query):
        url = weatherkit_client.build_url(query)

        assert url.path == "/api/v1/weather/en/40.712800/-74.006000"
        assert url.params["dataSets"] == "currentWeather,forecastDaily"
        assert url.params["timezone"] == "auto"
        assert url.params["countryCode"] == "US"

    def test_build_url_country_override(self, http_client, query):
        client = WeatherKitClient(BASE_URL + "/", country_code="GB", client=http_client)

        url = client.build_url(query)
        assert url.params["countryCode"] == "GB"
        assert "//40.712800" not in str(url)

    @pytest.mark.asyncio
    async def test_fetch_success(self, weatherkit_client, http_client, query, metrics):
        """Both data sets are returned and the bearer token is attached."""
        http_client.get = AsyncMock(return_value=_response(200, {
            "currentWeather": {"temperature": 20},
            "forecastDaily": {"days": []},
            "forecastHourly": {"hours": []},
        }))

        result = await weatherkit_client.fetch_weather(query, "token-abc")

        assert result == {"currentWeather": {"temperature": 20}, "forecastDaily": {"days": []}}
        assert http_client.get.call_args.kwargs["headers"] == {"Authorization": "Bearer token-abc"}
        assert metrics.registry.get_sample_value("upstream_requests_total", {"status_code": "200"}) == 1

    @pytest.mark.asyncio
    async def test_missing_data_sets_become_none(self, weatherkit_client, http_client, query):
        http_client.get = AsyncMock(return_value=_response(200, {"currentWeather": {"temperature": 3}}))

        result = await weatherkit_client.fetch_weather(query, "token")

        assert result == {"currentWeather": {"temperature": 3}, "forecastDaily": None}

    @pytest.mark.asyncio
    async def test_non_object_payload(self, weatherkit_client, http_client, query):
        http_client.get = AsyncMock(return_value=_response(200, [1, 2, 3]))

        result = await weatherkit_client.fetch_weather(query, "token")

        assert result == {"currentWeather": None, "forecastDaily": None}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 404, 429, 503])
    async def test_error_status(self, weatherkit_client, http_client, query, status_code):
        http_client.get = AsyncMock(return_value=_response(status_code, {"reason": "nope"}))

        with pytest.raises(UpstreamError) as exc_info:
            await weatherkit_client.fetch_weather(query, "token")

        assert exc_info.value.status_code == status_code
        assert exc_info.value.to_response().to_body() == {"error": "weatherkit_error", "status": status_code}

    @pytest.mark.asyncio
    async def test_network_failure(self, weatherkit_client, http_client, query):
        http_client.get = AsyncMock(side_effect=httpx.ConnectError("Connection refused"))

        with pytest.raises(NetworkError, match="Connection refused"):
            await weatherkit_client.fetch_weather(query, "token")

    @pytest.mark.asyncio
    async def test_invalid_json(self, weatherkit_client, http_client, query):
        http_client.get = AsyncMock(return_value=_response(200, b"<html>oops</html>"))

        with pytest.raises(ProxyError, match="invalid JSON"):
            await weatherkit_client.fetch_weather(query, "token")

    @pytest.mark.asyncio
    async def test_redirects_are_followed(self, query):
        """A 3xx from WeatherKit is followed to the final answer."""
        seen = []

        def handler(request):
            seen.append(request.url.path)
            if request.url.path.startswith("/api/v1/weather/en/"):
                return httpx.Response(302, headers={"Location": "https://weatherkit.test/moved"})
            return httpx.Response(200, json={"currentWeather": {"temperature": 7}})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            client = WeatherKitClient(BASE_URL, client=http_client)
            result = await client.fetch_weather(query, "token")

        assert result == {"currentWeather": {"temperature": 7}, "forecastDaily": None}
        assert seen == ["/api/v1/weather/en/40.712800/-74.006000", "/moved"]

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self, weatherkit_client, http_client):
        await weatherkit_client.close()
        http_client.aclose.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_close_owned_client(self):
        client = WeatherKitClient(BASE_URL)

        await client.close()

        assert client._client.is_closed

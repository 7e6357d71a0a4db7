"""
WeatherKit REST client used by the proxy.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from shared.config import WEATHERKIT_BASE_URL
from shared.errors import NetworkError, ProxyError, UpstreamError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..domain.coordinates import CoordinateQuery

DATA_SETS = "currentWeather,forecastDaily"


class WeatherKitClient:
    """Fetch current and daily weather for a point, authenticated by JWT."""

    def __init__(
        self,
        base_url: str = WEATHERKIT_BASE_URL,
        *,
        country_code: str = "US",
        client: Optional[httpx.AsyncClient] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.country_code = country_code
        self.metrics = metrics
        self.logger = get_logger("weather.adapters.weatherkit")
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient()

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    def build_url(self, query: CoordinateQuery) -> httpx.URL:
        return httpx.URL(
            f"{self.base_url}/{query.lat:.6f}/{query.lng:.6f}",
            params={
                "dataSets": DATA_SETS,
                "timezone": "auto",
                "countryCode": self.country_code,
            },
        )

    async def fetch_weather(self, query: CoordinateQuery, token: str) -> Dict[str, Any]:
        """Return ``{"currentWeather": ..., "forecastDaily": ...}`` for a point.

        Missing data sets come back as ``None``; the keys are always present.

        Raises:
            UpstreamError: WeatherKit answered with a non-2xx status.
            NetworkError: the request could not be completed.
            ProxyError: the body was not JSON.
        """
        try:
            response = await self._client.get(
                self.build_url(query),
                headers={"Authorization": f"Bearer {token}"},
                follow_redirects=True,
            )
        except httpx.HTTPError as exc:
            self.logger.error("WeatherKit request failed", error=str(exc))
            raise NetworkError(str(exc) or "WeatherKit request failed.") from exc

        if self.metrics:
            self.metrics.record_upstream_request(response.status_code)

        if not response.is_success:
            self.logger.warning("WeatherKit error response", status_code=response.status_code)
            raise UpstreamError(response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProxyError("WeatherKit returned invalid JSON.") from exc

        if not isinstance(payload, dict):
            payload = {}

        return {
            "currentWeather": payload.get("currentWeather"),
            "forecastDaily": payload.get("forecastDaily"),
        }

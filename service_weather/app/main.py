"""
WeatherKit token proxy service.

Browsers call ``GET /?lat=..&lng=..``. The service checks the caller's
Origin, validates the coordinates, attaches a cached ES256 developer token
and forwards the query to WeatherKit. The private key never leaves the
process.
"""

from typing import Any, Callable, Dict, Optional
import time

import httpx
from fastapi import Request, Response
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import WeatherProxyConfig, get_config
from shared.errors import (
    ForbiddenOriginError,
    InvalidCoordinatesError,
    MethodNotAllowedError,
    ProxyError,
    UpstreamError,
    WeatherProxyError,
)
from shared.logging import set_origin

from .adapters.weatherkit_client import WeatherKitClient
from .cors.origins import build_cors_headers, parse_allowed_origins
from .domain.coordinates import validate_coordinates
from .signing.key_loader import KeyLoader
from .signing.token_cache import TokenCache

SUCCESS_CACHE_CONTROL = "public, max-age=600"
DEFAULT_CACHE_CONTROL = "no-store"
PROXY_METHODS = ["GET", "OPTIONS", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


def _first_param(request: Request, name: str) -> Optional[str]:
    """First value of a repeated query parameter, or None."""
    values = request.query_params.getlist(name)
    return values[0] if values else None


class WeatherProxyService(BaseService):
    """Weather proxy service implementation."""

    def __init__(
        self,
        config: Optional[WeatherProxyConfig] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__("weather", config if config is not None else get_config())
        self.allowed_origins = parse_allowed_origins(self.config.allowed_origins, self.config.allowed_origin)
        self.key_loader = KeyLoader(self.config.weatherkit_p8)
        self.token_cache = TokenCache(self.config, self.key_loader, clock=clock, metrics=self.metrics)
        self.weatherkit_client = WeatherKitClient(
            self.config.weatherkit_base_url,
            country_code=self.config.weatherkit_country_code,
            client=http_client,
            metrics=self.metrics,
        )

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.weatherkit_client.close()

        self._setup_proxy_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.weather_service = self

    def _json_response(
        self,
        status_code: int,
        payload: Dict[str, Any],
        cors_headers: Optional[Dict[str, str]] = None,
        cache_control: str = DEFAULT_CACHE_CONTROL,
    ) -> JSONResponse:
        headers = {
            "content-type": "application/json; charset=utf-8",
            "cache-control": cache_control,
        }
        headers.update(cors_headers or {})
        return JSONResponse(status_code=status_code, content=payload, headers=headers)

    def _error_response(self, error: WeatherProxyError, cors_headers: Optional[Dict[str, str]] = None) -> JSONResponse:
        self.metrics.record_error(error.code)
        return self._json_response(error.status_code, error.to_response().to_body(), cors_headers)

    def _setup_proxy_routes(self):
        """Set up the proxy route."""

        # Registered after /health and /metrics so those keep their own handlers.
        @self.app.api_route("/{path:path}", methods=PROXY_METHODS)
        async def proxy_weather(request: Request):
            """Forward a coordinate query to WeatherKit."""
            origin = request.headers.get("Origin")
            set_origin(origin)

            cors_headers = build_cors_headers(request.headers, self.allowed_origins)
            if cors_headers is None:
                self.logger.warning("Origin rejected", origin=origin)
                return self._error_response(ForbiddenOriginError(origin or ""))

            if request.method == "OPTIONS":
                return Response(status_code=204, headers=cors_headers)

            if request.method != "GET":
                return self._error_response(MethodNotAllowedError(request.method), cors_headers)

            try:
                query = validate_coordinates(
                    _first_param(request, "lat"),
                    _first_param(request, "lng"),
                )
            except InvalidCoordinatesError as exc:
                return self._error_response(exc, cors_headers)

            try:
                token = await self.token_cache.get_token()
                weather = await self.weatherkit_client.fetch_weather(query, token)
            except UpstreamError as exc:
                if exc.status_code == 401:
                    self.token_cache.invalidate()
                return self._error_response(exc, cors_headers)
            except Exception as exc:
                error = ProxyError.from_exception(exc)
                self.logger.error("Proxy error", message=error.message, error_type=type(exc).__name__)
                return self._error_response(error, cors_headers)

            return self._json_response(200, weather, cors_headers, SUCCESS_CACHE_CONTROL)

    async def _check_dependencies(self) -> Dict[str, str]:
        """Report whether signing is configured and the key is loaded."""
        return {
            "signing": "configured" if self.config.signing_configured else "missing",
            "signing_key": "loaded" if self.key_loader.loaded else "not_loaded",
        }


def create_app(
    config: Optional[WeatherProxyConfig] = None,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    clock: Callable[[], float] = time.time,
):
    """Create FastAPI application."""
    service = WeatherProxyService(config, http_client=http_client, clock=clock)
    return service.app


def main():
    service = WeatherProxyService()
    service.run()


if __name__ == "__main__":
    main()

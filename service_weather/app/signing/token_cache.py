"""
Single-slot cache for the WeatherKit developer token.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Optional

from shared.config import WeatherProxyConfig
from shared.errors import ConfigError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .key_loader import KeyLoader
from .minter import TokenRecord, mint

# Served tokens must stay valid at least this long.
EXPIRY_MARGIN_SECONDS = 60


class TokenCache:
    """Serve a cached token while it is fresh, remint otherwise.

    The cache is cold until the first successful mint. After that a token is
    served while ``now < expires_at - 60``; past that point the next caller
    mints a replacement. Concurrent callers that find the cache cold or stale
    wait on a single mint.
    """

    def __init__(
        self,
        config: WeatherProxyConfig,
        key_loader: KeyLoader,
        *,
        clock: Callable[[], float] = time.time,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self.config = config
        self.key_loader = key_loader
        self.clock = clock
        self.metrics = metrics
        self.logger = get_logger("weather.signing.token_cache")

        self._record: Optional[TokenRecord] = None
        self._lock = asyncio.Lock()

    @property
    def record(self) -> Optional[TokenRecord]:
        return self._record

    def _fresh(self, now: int) -> Optional[TokenRecord]:
        record = self._record
        if record is not None and now < record.expires_at - EXPIRY_MARGIN_SECONDS:
            return record
        return None

    def _check_config(self) -> None:
        if not (self.config.weatherkit_team_id and self.config.weatherkit_service_id and self.config.weatherkit_key_id):
            raise ConfigError("Missing required WeatherKit configuration.")

    async def get_token(self) -> str:
        """Return a token valid for at least another minute."""
        self._check_config()

        record = self._fresh(int(self.clock()))
        if record is not None:
            if self.metrics:
                self.metrics.record_token_cache_hit()
            return record.token

        async with self._lock:
            # Another caller may have minted while we waited.
            record = self._fresh(int(self.clock()))
            if record is not None:
                return record.token

            key = await self.key_loader.get_key()
            record = mint(
                self.config.weatherkit_team_id,
                self.config.weatherkit_service_id,
                self.config.weatherkit_key_id,
                self.config.weatherkit_token_ttl_seconds,
                key,
                now=int(self.clock()),
            )
            self._record = record

        if self.metrics:
            self.metrics.record_token_mint()
        self.logger.info(
            "WeatherKit token minted",
            kid=self.config.weatherkit_key_id,
            expires_at=record.expires_at,
        )
        return record.token

    def invalidate(self) -> None:
        """Drop the cached token so the next call mints a new one."""
        if self._record is not None:
            self.logger.warning("WeatherKit token invalidated", expires_at=self._record.expires_at)
        self._record = None

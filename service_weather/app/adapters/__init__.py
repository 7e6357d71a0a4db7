"""
Adapters for upstream services.
"""

from .weatherkit_client import WeatherKitClient

__all__ = ["WeatherKitClient"]

"""
Mock WeatherKit server that checks developer tokens and serves canned weather.
"""

import copy
import jwt
from typing import Dict, Any, Optional, List
from fastapi import FastAPI, HTTPException, Request

from shared.logging import get_logger


class MockWeatherKitServer:
    """Mock WeatherKit REST API implementation."""

    def __init__(
        self,
        public_key_pem: str,
        *,
        team_id: str,
        service_id: str,
        key_id: str,
        payload: Optional[Dict[str, Any]] = None,
        port: int = 8090,
        leeway: int = 0,
    ):
        self.port = port
        self.public_key_pem = public_key_pem
        self.team_id = team_id
        self.service_id = service_id
        self.key_id = key_id
        self.leeway = leeway
        self.payload = payload if payload is not None else {
            "currentWeather": {"temperature": 20},
            "forecastDaily": {"days": []},
        }
        self.logger = get_logger("mock.weatherkit")
        self.app = FastAPI(title="Mock WeatherKit", version="1.0.0")

        # Inspection hooks for tests
        self.requests: List[Dict[str, Any]] = []
        self.fail_with_status: Optional[int] = None

        self._setup_routes()

    def _verify_token(self, authorization: Optional[str]) -> Dict[str, Any]:
        """Validate the bearer token the way WeatherKit does."""
        if not authorization or not authorization.startswith("Bearer "):
            raise HTTPException(status_code=401, detail="Missing bearer token")

        token = authorization[7:]
        try:
            header = jwt.get_unverified_header(token)
            claims = jwt.decode(
                token,
                self.public_key_pem,
                algorithms=["ES256"],
                issuer=self.team_id,
                leeway=self.leeway,
            )
        except jwt.InvalidTokenError as exc:
            raise HTTPException(status_code=401, detail=f"Invalid token: {exc}")

        if header.get("kid") != self.key_id:
            raise HTTPException(status_code=401, detail="Unknown key id")
        if header.get("id") != f"{self.team_id}.{self.service_id}":
            raise HTTPException(status_code=401, detail="Token id mismatch")
        if claims.get("sub") != self.service_id:
            raise HTTPException(status_code=401, detail="Token subject mismatch")

        return claims

    def _setup_routes(self):
        """Set up mock WeatherKit routes."""

        @self.app.get("/api/v1/weather/{language}/{latitude}/{longitude}")
        async def weather(language: str, latitude: str, longitude: str, request: Request):
            """Weather for a location."""
            claims = self._verify_token(request.headers.get("Authorization"))
            self.requests.append({
                "language": language,
                "latitude": latitude,
                "longitude": longitude,
                "params": dict(request.query_params),
                "claims": claims,
                "token": request.headers["Authorization"][7:],
            })
            self.logger.info("Weather request", latitude=latitude, longitude=longitude)

            if self.fail_with_status is not None:
                raise HTTPException(status_code=self.fail_with_status, detail="Forced failure")

            return copy.deepcopy(self.payload)

    def run(self):
        """Run the mock server."""
        import uvicorn
        uvicorn.run(self.app, host="0.0.0.0", port=self.port)

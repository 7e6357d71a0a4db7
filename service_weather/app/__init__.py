"""
WeatherKit token proxy application package.

The proxy lets browsers read WeatherKit data without holding Apple
credentials:
- Origin gating: requests are checked against a literal/wildcard allow-list
- Signing: an ES256 developer token is minted from the configured key
- Caching: the token is reused until a minute before it expires
- Forwarding: validated coordinates are queried upstream with the token

Structure:
- app.main: FastAPI app, routes, and request handling.
- app.signing: Key import, DER/JOSE codec, minting, token cache.
- app.cors: Origin matching and CORS headers.
- app.domain: Coordinate validation.
- app.adapters: WeatherKit HTTP client.
"""

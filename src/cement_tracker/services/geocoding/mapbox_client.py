"""HTTP client for the Mapbox geocoding API."""

from __future__ import annotations

import logging
from typing import Protocol
from urllib.parse import quote

import httpx

from ...config import settings
from ...errors import AddressNotFound, ProviderError
from ...models.domain import GeocodeResult

logger = logging.getLogger(__name__)


class GeoResolver(Protocol):
    """Forward and reverse geocoding; calls are idempotent and side-effect free."""

    def forward(self, address: str) -> GeocodeResult: ...

    def reverse(self, latitude: float, longitude: float) -> str: ...


class MapboxGeocoder:
    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        country: str | None = None,
        language: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.token = token or settings.mapbox_token
        if not self.token:
            raise ValueError("Mapbox access token is not configured.")
        self.base_url = (base_url or settings.mapbox_base_url).rstrip("/")
        self.country = country if country is not None else settings.geocoding_country
        self.language = language if language is not None else settings.geocoding_language
        self.timeout = timeout if timeout is not None else settings.geocoding_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        """Create a short-lived client; resolutions share no state."""
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            transport=self._transport,
        )

    def _places_request(self, query: str, params: dict[str, str]) -> list[dict]:
        url = f"{self.base_url}/geocoding/v5/mapbox.places/{quote(query, safe=',')}.json"
        params = {"access_token": self.token, **params}
        if self.language:
            params["language"] = self.language

        client = self._get_client()
        try:
            response = client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            raise ProviderError(f"Geocoding provider timed out after {self.timeout}s.") from exc
        except httpx.HTTPStatusError as exc:
            code = exc.response.status_code
            if code in (401, 403):
                raise ProviderError("Geocoding provider rejected the access token.") from exc
            raise ProviderError(f"Geocoding provider returned HTTP {code}.") from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Failed to reach geocoding provider: {exc}") from exc
        except ValueError as exc:
            raise ProviderError("Geocoding provider returned a malformed response.") from exc
        finally:
            client.close()

        features = data.get("features") if isinstance(data, dict) else None
        if features is None:
            raise ProviderError("Geocoding response missing 'features'.")
        return features

    def forward(self, address: str) -> GeocodeResult:
        """Resolve postal address text to coordinates."""
        query = address.strip()
        if not query:
            raise AddressNotFound(address)

        params = {"limit": "1"}
        if self.country:
            params["country"] = self.country
        features = self._places_request(query, params)
        if not features:
            raise AddressNotFound(query)

        feature = features[0]
        try:
            lng, lat = feature["center"]
            result = GeocodeResult(
                latitude=float(lat),
                longitude=float(lng),
                normalized_address=feature.get("place_name") or query,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError("Geocoding feature has no usable center.") from exc
        logger.debug("Geocoded '%s' to (%.6f, %.6f)", query, result.latitude, result.longitude)
        return result

    def reverse(self, latitude: float, longitude: float) -> str:
        """Resolve coordinates to the provider's best address text."""
        query = f"{longitude},{latitude}"
        features = self._places_request(query, {"limit": "1"})
        if not features or not features[0].get("place_name"):
            raise AddressNotFound(f"{latitude},{longitude}")
        return features[0]["place_name"]


def check_health(geocoder: MapboxGeocoder | None = None) -> bool:
    """Check geocoding provider health with a minimal forward lookup."""
    try:
        resolver = geocoder or MapboxGeocoder()
        resolver.forward("Avenida Paulista, São Paulo")
        return True
    except (ValueError, ProviderError, AddressNotFound):
        return False

"""Address lookup over a Nominatim-compatible geocoding service."""
import logging
import os

import httpx

logger = logging.getLogger(__name__)

NOMINATIM_URL = os.environ.get("NOMINATIM_URL", "https://nominatim.openstreetmap.org")
GEOCODER_USER_AGENT = os.environ.get("GEOCODER_USER_AGENT", "fieldstop/0.1")
GEOCODER_TIMEOUT = float(os.environ.get("GEOCODER_TIMEOUT", "10"))


class GeocodingError(Exception):
    """The geocoding service could not be reached or gave an unusable answer."""


def _location_from_result(data: dict) -> dict:
    address = data.get("address") or {}
    return {
        "street": address.get("road") or address.get("pedestrian") or "",
        "street_number": address.get("house_number") or "",
        "district": address.get("suburb") or address.get("neighbourhood") or address.get("city_district") or "",
        "latitude": float(data["lat"]) if data.get("lat") is not None else None,
        "longitude": float(data["lon"]) if data.get("lon") is not None else None,
    }


class GeocodingClient:
    def __init__(self, base_url: str = NOMINATIM_URL, timeout: float = GEOCODER_TIMEOUT,
                 transport: httpx.BaseTransport | None = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _get(self, path: str, params: dict):
        headers = {"User-Agent": GEOCODER_USER_AGENT}
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.get(f"{self._base_url}{path}", params=params, headers=headers)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as e:
            logger.warning("Geocoder timed out on %s: %s", path, e)
            raise GeocodingError("Geocoding service timed out") from e
        except httpx.HTTPError as e:
            logger.warning("Geocoder request to %s failed: %s", path, e)
            raise GeocodingError(f"Geocoding request failed: {e}") from e
        except ValueError as e:
            raise GeocodingError("Geocoding service returned invalid JSON") from e

    def reverse(self, latitude: float, longitude: float) -> dict:
        """Resolve coordinates to a street address. Coordinates are kept as given."""
        data = self._get("/reverse", {
            "format": "json", "lat": latitude, "lon": longitude, "addressdetails": 1,
        })
        if not isinstance(data, dict) or "error" in data:
            raise GeocodingError("No address found for these coordinates")
        location = _location_from_result(data)
        location["latitude"] = latitude
        location["longitude"] = longitude
        return location

    def search(self, query: str, limit: int = 5) -> list[dict]:
        """Forward lookup: free-text address to candidate locations."""
        query = (query or "").strip()
        if not query:
            return []
        data = self._get("/search", {
            "format": "json", "q": query, "addressdetails": 1, "limit": max(1, min(int(limit), 20)),
        })
        if not isinstance(data, list):
            raise GeocodingError("Unexpected response from geocoding service")
        return [_location_from_result(item) for item in data if isinstance(item, dict)]

import logging
from typing import Optional

import requests

from ..config import settings

logger = logging.getLogger(__name__)


class GeocoderUnavailable(Exception):
    """The reverse geocoder could not be reached or returned no usable address."""


class NominatimClient:
    """
    Reverse geocoder backed by OpenStreetMap Nominatim.
    Nominatim's usage policy requires an identifying User-Agent on every request.
    """

    def __init__(self, url: str = None, user_agent: str = None, timeout: float = None):
        self.url = url or settings.NOMINATIM_URL
        self.user_agent = user_agent or settings.GEOCODER_USER_AGENT
        self.timeout = timeout if timeout is not None else settings.GEOCODER_TIMEOUT
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": self.user_agent})

    def reverse(self, lat: str, lng: str) -> dict:
        """
        Resolve coordinates to Nominatim's structured address dict.

        Raises:
            requests.exceptions.RequestException: on network errors, timeouts or non-2xx
            ValueError: if the body is not the expected JSON document
        """
        params = {"format": "json", "lat": lat, "lon": lng}
        logger.debug(f"Reverse geocoding lat={lat} lng={lng}")
        response = self.session.get(self.url, params=params, timeout=self.timeout)
        response.raise_for_status()

        data = response.json()
        if not isinstance(data, dict) or "error" in data:
            raise ValueError(f"Geocoder returned no address: {data}")
        return data.get("address") or {}

    def close(self):
        self.session.close()


def pick_place_name(address: dict) -> Optional[str]:
    """Most likely district-level name: state_district, then county, city, village."""
    for key in ("state_district", "county", "city", "village"):
        value = address.get(key)
        if value:
            return value
    return None

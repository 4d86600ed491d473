"""
HTTP client for the MGNREGA tracker API, used by the Streamlit dashboard.
Retries GETs with exponential backoff on throttling and 5xx responses.
"""

import os
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_API_URL = os.getenv("DASHBOARD_API_URL", "http://localhost:3000")


def get_session_with_retries(total=3, backoff=1.0):
    s = requests.Session()
    retries = Retry(
        total=total,
        backoff_factor=backoff,  # wait 1s, 2s, 4s
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],
        raise_on_status=False
    )
    s.mount("https://", HTTPAdapter(max_retries=retries))
    s.mount("http://", HTTPAdapter(max_retries=retries))
    return s


class TrackerApiClient:
    def __init__(self, base_url=None, timeout=10, session=None):
        self.base_url = (base_url or DEFAULT_API_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or get_session_with_retries()

    def _get(self, path, **params):
        response = self.session.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def health(self):
        return self._get("/api/health")

    def states(self):
        return self._get("/api/states")

    def districts(self, state):
        return self._get("/api/districts", state=state)

    def district_data(self, state, district):
        return self._get("/api/district-data", state=state, district=district)

    def detect_location(self, lat, lng):
        return self._get("/api/detect-location", lat=lat, lng=lng)


def error_message(exc):
    """User-facing text for a failed call; prefers the API's own message."""
    response = getattr(exc, "response", None)
    if response is not None:
        try:
            body = response.json()
            return body.get("message") or body.get("error") or str(exc)
        except ValueError:
            pass
    return "Could not reach the server. Please try again."

"""Nominatim client for resolving free-text locations to coordinates."""

import logging
from typing import Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from streetsafety.core.config import get_settings
from streetsafety.core.exceptions import GeocodingError

logger = logging.getLogger(__name__)


class NominatimClient:
    """Client for the OpenStreetMap Nominatim search API."""

    def __init__(
        self,
        api_url: str = "https://nominatim.openstreetmap.org/search",
        user_agent: str = "StreetSafety/1.0",
        timeout: int = 10,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize Nominatim client.

        Args:
            api_url: Nominatim search endpoint URL
            user_agent: User-Agent header, required by the Nominatim usage policy
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            retry_delay: Backoff factor between retries in seconds
            session: Optional preconfigured requests session
        """
        self.api_url = api_url
        self.timeout = timeout

        if session is None:
            session = requests.Session()
            retry_strategy = Retry(
                total=max_retries,
                backoff_factor=retry_delay,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["GET"],
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        session.headers.update({"User-Agent": user_agent})
        self.session = session

    def geocode(self, query: str) -> Tuple[float, float]:
        """
        Resolve a location string to (latitude, longitude).

        Args:
            query: Free-text address or place name

        Returns:
            (latitude, longitude) of the best match

        Raises:
            GeocodingError: Nothing matched, or the service could not be reached
        """
        query = (query or "").strip()
        if not query:
            raise GeocodingError(query, "An address is required to look up coordinates.")

        params = {"q": query, "format": "jsonv2", "limit": 1}

        try:
            response = self.session.get(self.api_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            results = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Geocoding request failed for '{query}': {str(e)}")
            raise GeocodingError(
                query, "The geocoding service is unavailable. Please try again later."
            ) from e
        except ValueError as e:
            logger.error(f"Invalid geocoding response for '{query}': {str(e)}")
            raise GeocodingError(query) from e

        if not results:
            logger.info(f"No geocoding match for '{query}'")
            raise GeocodingError(query)

        best = results[0]
        lat, lng = float(best["lat"]), float(best["lon"])
        logger.debug(f"Geocoded '{query}' to ({lat}, {lng})")
        return lat, lng


_client: Optional[NominatimClient] = None


def get_geocoder() -> NominatimClient:
    """
    Get the singleton geocoder built from settings.

    Returns:
        NominatimClient instance
    """
    global _client
    if _client is None:
        settings = get_settings()
        _client = NominatimClient(
            api_url=settings.geocoder_url,
            user_agent=settings.geocoder_user_agent,
            timeout=settings.geocoder_timeout,
            max_retries=settings.geocoder_max_retries,
        )
    return _client

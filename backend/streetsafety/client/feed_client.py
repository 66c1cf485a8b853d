"""
HTTP client for the Street Safety API.

The client owns a CrimeFeedCache: the sorted crime feed is fetched with a
single GET and kept until the next vote or submission made through the
same client, which drops it.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from streetsafety.core.exceptions import (
    AuthError,
    NotFoundError,
    StoreError,
    StreetSafetyError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class CrimeFeedCache:
    """Holds one snapshot of the crime feed."""

    def __init__(self):
        self._crimes: Optional[List[Dict[str, Any]]] = None

    def get(self) -> Optional[List[Dict[str, Any]]]:
        return self._crimes

    def set(self, crimes: List[Dict[str, Any]]):
        self._crimes = list(crimes)

    def invalidate(self):
        if self._crimes is not None:
            logger.debug("Crime feed cache invalidated")
        self._crimes = None

    def is_populated(self) -> bool:
        return self._crimes is not None


class CrimeFeedClient:
    """Client for the crime report, vote and account endpoints."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        api_prefix: str = "/api",
        timeout: int = 10,
        max_retries: int = 3,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Server root URL
            api_prefix: Prefix the API router is mounted under
            timeout: Request timeout in seconds
            max_retries: Retries for idempotent requests
            session: Optional preconfigured requests session
        """
        self.api_url = base_url.rstrip("/") + api_prefix
        self.timeout = timeout
        self.cache = CrimeFeedCache()
        self.user_email: Optional[str] = None

        if session is None:
            session = requests.Session()
            retry_strategy = Retry(
                total=max_retries,
                backoff_factor=0.5,
                status_forcelist=[502, 503, 504],
                allowed_methods=["GET"],
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

    def login(self, email: str, password: str) -> str:
        """Log in and remember the returned email as the voter identifier."""
        data = self._request("POST", "/login", json={"email": email, "password": password})
        self.user_email = data["userEmail"]
        return self.user_email

    def register(self, username: str, email: str, password: str) -> dict:
        return self._request(
            "POST",
            "/register",
            json={"username": username, "email": email, "password": password},
        )

    def list_crimes(self, refresh: bool = False) -> List[Dict[str, Any]]:
        """The sorted crime feed, served from the cache when populated."""
        if refresh:
            self.cache.invalidate()
        cached = self.cache.get()
        if cached is not None:
            return cached

        crimes = self._request("GET", "/crimes")
        self.cache.set(crimes)
        return crimes

    def submit_crime(
        self,
        crime_type: str,
        location: str,
        address: str,
        details: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> Dict[str, Any]:
        payload = {
            "type": crime_type,
            "location": location,
            "address": address,
            "details": details,
            "latitude": latitude,
            "longitude": longitude,
        }
        try:
            return self._request("POST", "/crimes", json=payload)
        finally:
            self.cache.invalidate()

    def upvote(self, crime_id: str, user_email: Optional[str] = None) -> Dict[str, Any]:
        return self._vote(crime_id, "upvote", user_email)

    def downvote(self, crime_id: str, user_email: Optional[str] = None) -> Dict[str, Any]:
        return self._vote(crime_id, "downvote", user_email)

    def nearby(
        self,
        lat: float,
        lng: float,
        policy: Optional[str] = None,
        radius_m: Optional[float] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"lat": lat, "lng": lng}
        if policy:
            params["policy"] = policy
        if radius_m:
            params["radius_m"] = radius_m
        return self._request("GET", "/crimes/nearby", params=params)

    def _vote(self, crime_id: str, action: str, user_email: Optional[str]) -> Dict[str, Any]:
        voter = user_email or self.user_email
        if not voter:
            raise AuthError("Log in before voting")
        try:
            data = self._request("POST", f"/crimes/{crime_id}/{action}", json={"userEmail": voter})
        finally:
            self.cache.invalidate()

        # Repeated votes come back as {"message": ..., "crime": ...}
        if "crime" in data and "message" in data:
            logger.info(data["message"])
            return data["crime"]
        return data

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.api_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {url} failed: {str(e)}")
            raise StoreError(f"Could not reach the Street Safety API: {str(e)}") from e

        if response.status_code >= 400:
            raise _error_from_response(response)
        return response.json()


def _error_from_response(response) -> StreetSafetyError:
    try:
        message = response.json().get("detail", response.text)
    except ValueError:
        message = response.text

    code = response.status_code
    if code in (400, 422):
        return ValidationError(str(message))
    if code == 401:
        return AuthError(str(message))
    if code == 404:
        return NotFoundError("Resource", response.url)
    return StoreError(f"Error {code}: {message}")

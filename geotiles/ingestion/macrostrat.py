"""
Macrostrat API Client

Queries the Macrostrat geologic map API for the map units at a point.

Request:
    GET {base_url}?lat=..&lng=..&adjacents=false

Failure handling:
- 5xx and 429 responses and any httpx request error are retried by the
  RetryPolicy
- any other non-2xx status, undecodable JSON, or exhausted retries means
  "no data" for the point (an empty list), never an exception
"""

import logging
from typing import List, Optional

import httpx

from ..config import MACROSTRAT_API_URL, REQUEST_TIMEOUT, USER_AGENT
from ..exceptions import TransientAPIError
from ..parsers.map_units import MapUnit, parse_map_units
from ..tables import LITHOLOGY_SPECIFICITY, ROCK_NAME_HINTS, SpecificityTable
from .lithology import extract_unit_labels, rank_labels
from .rate_limit import RetryPolicy

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (TransientAPIError, httpx.RequestError)


def _is_retryable_status(status_code: int) -> bool:
    return status_code >= 500 or status_code == 429


class MacrostratClient:
    """
    HTTP client for point queries against the Macrostrat map API.

    Usage:
        with MacrostratClient() as client:
            labels = client.fetch_labels(40.71, -74.0)
    """

    def __init__(
        self,
        base_url: str = MACROSTRAT_API_URL,
        timeout: float = REQUEST_TIMEOUT,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.BaseTransport] = None,
        table: SpecificityTable = LITHOLOGY_SPECIFICITY,
    ):
        self.base_url = base_url
        self.table = table
        self.retry_policy = retry_policy or RetryPolicy(retry_on=RETRYABLE_ERRORS)

        self._client = httpx.Client(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            transport=transport,
        )

    def _get_units(self, lat: float, lng: float) -> List[MapUnit]:
        params = {"lat": lat, "lng": lng, "adjacents": "false"}
        response = self._client.get(self.base_url, params=params)

        if _is_retryable_status(response.status_code):
            raise TransientAPIError(response.status_code)

        if not response.is_success:
            logger.warning("API error for %s,%s: %s", lat, lng, response.status_code)
            return []

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Undecodable response for %s,%s", lat, lng)
            return []

        return parse_map_units(payload)

    def query(self, lat: float, lng: float) -> List[MapUnit]:
        """Map units at a point; empty when the point has no data."""
        try:
            return self.retry_policy.call(
                lambda: self._get_units(lat, lng),
                description=f"Query {lat:.4f},{lng:.4f}",
            )
        except RETRYABLE_ERRORS as e:
            logger.warning("Giving up on %s,%s: %s", lat, lng, e)
            return []

    def fetch_labels(self, lat: float, lng: float) -> List[str]:
        """Lithology labels at a point, deduplicated and most specific first."""
        units = self.query(lat, lng)
        return rank_labels(extract_unit_labels(units, ROCK_NAME_HINTS), self.table)

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

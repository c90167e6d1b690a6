"""HTTP client resolving postal codes to coordinates through Nominatim."""

from __future__ import annotations

import logging

import httpx

from ..config import settings
from ..errors import NotFoundError, ProviderError, UpstreamTimeoutError
from ..models.domain import Coordinate

logger = logging.getLogger(__name__)

STAGE = "geocoding"


class NominatimGeocoder:
    """Resolve a postal code to a single coordinate.

    The first match returned by the provider wins; Nominatim already orders its
    results by importance and there is no ranking among multiple hits here.
    There is no retry loop, callers decide whether a failed lookup is retried.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        user_agent: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = (base_url or settings.geocoding_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.geocoding_timeout_seconds
        self.user_agent = user_agent or settings.geocoding_user_agent
        self._client = client

    def _get_client(self) -> httpx.Client:
        if self._client is not None:
            return self._client
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout),
            headers={"User-Agent": self.user_agent},
        )

    def _search(self, postal_code: str) -> list:
        url = f"{self.base_url}/search"
        params = {"postalcode": postal_code, "format": "json"}
        client = self._get_client()
        try:
            response = client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(
                f"Geocoding request for '{postal_code}' timed out after {self.timeout}s", stage=STAGE
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Geocoding request for '{postal_code}' failed: {exc}", stage=STAGE) from exc
        except ValueError as exc:
            raise ProviderError(f"Geocoding response for '{postal_code}' is not JSON", stage=STAGE) from exc
        finally:
            if client is not self._client:
                client.close()

        if not isinstance(data, list):
            raise ProviderError(
                f"Unexpected geocoding payload for '{postal_code}': {type(data).__name__}", stage=STAGE
            )
        return data

    def resolve(self, postal_code: str) -> Coordinate:
        logger.info(f"Fetching coordinates for pincode: {postal_code}")
        matches = self._search(postal_code)
        if not matches:
            raise NotFoundError(f"No location found for postal code '{postal_code}'", stage=STAGE)

        first = matches[0]
        try:
            coordinate = Coordinate(latitude=float(first["lat"]), longitude=float(first["lon"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError(f"Malformed geocoding match for '{postal_code}': {exc}", stage=STAGE) from exc

        logger.info(
            f"Found coordinates for {postal_code}: latitude={coordinate.latitude}, longitude={coordinate.longitude}"
        )
        return coordinate


def check_health(base_url: str | None = None, client: httpx.Client | None = None) -> bool:
    """Check the geocoder by looking up the configured health-check postal code."""
    geocoder = NominatimGeocoder(base_url=base_url, client=client)
    try:
        geocoder._search(settings.geocoding_health_postal_code)
    except (ProviderError, UpstreamTimeoutError) as exc:
        logger.warning(f"Geocoder health check failed: {exc}")
        return False
    return True

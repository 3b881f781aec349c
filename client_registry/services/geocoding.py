from __future__ import annotations

import httpx
from pydantic import ValidationError

from client_registry.core.config import settings
from client_registry.core.exceptions import (
    GeocodingFailure,
    GeocodingResponseError,
    GeocodingStatusError,
    GeocodingTransportError,
)
from client_registry.core.logging_setup import logger
from client_registry.schemas.geocoding import GeocodingResponse
from client_registry.utils.tracing import generate_trace_id

SUCCESS_STATUS = "OK"


class GeocodingClient:
    """HTTP client for the geocoding provider. One attempt per call, no retries."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        api_key: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.geocoding_base_url or "").rstrip("/")
        self._api_key = api_key if api_key is not None else settings.geocoding_api_key
        self._timeout = timeout_seconds or settings.geocoding_timeout_seconds or 10.0
        self._transport = transport

    def resolve(self, address: str, *, trace_id: str | None = None) -> tuple[float, float]:
        """Return (latitude, longitude) of the first result for ``address``."""
        trace_id = trace_id or generate_trace_id()
        logger.debug("[TRACE-ID: %s] - Getting coordinates for address: %s", trace_id, address)

        if not self._base_url:
            raise GeocodingFailure("Geocoding base URL is not configured.", address=address)
        if not self._api_key:
            logger.error("[TRACE-ID: %s] - Geocoding API key is not configured.", trace_id)
            raise GeocodingFailure("Geocoding API key is not configured.", address=address)

        payload = self._fetch(address, trace_id)

        if payload.status != SUCCESS_STATUS:
            message = f"Geocoding API request failed with status: {payload.status} for address: {address}"
            logger.error("[TRACE-ID: %s] - %s", trace_id, message)
            raise GeocodingStatusError(message, status=payload.status, address=address)

        if not payload.results:
            message = f"Geocoding API returned no results for address: {address}"
            logger.error("[TRACE-ID: %s] - %s", trace_id, message)
            raise GeocodingStatusError(message, status=payload.status, address=address)

        location = payload.results[0].geometry.location
        logger.debug(
            "[TRACE-ID: %s] - Coordinates retrieved successfully. Latitude: %s, Longitude: %s",
            trace_id,
            location.lat,
            location.lng,
        )
        return location.lat, location.lng

    def _fetch(self, address: str, trace_id: str) -> GeocodingResponse:
        url = f"{self._base_url}/json"
        params = {"address": address, "key": self._api_key}

        # Exception text is not logged as it may carry the request URL, key included.
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as http:
                response = http.get(url, params=params)
        except httpx.TimeoutException as exc:
            logger.error("[TRACE-ID: %s] - Geocoding request timed out for address: %s", trace_id, address)
            raise GeocodingTransportError(
                f"Geocoding request timed out for address: {address}", address=address
            ) from exc
        except httpx.RequestError as exc:
            logger.error(
                "[TRACE-ID: %s] - Failed to reach geocoding provider for address: %s (%s)",
                trace_id,
                address,
                type(exc).__name__,
            )
            raise GeocodingTransportError(
                f"Failed to retrieve coordinates from address: {address}", address=address
            ) from exc

        if response.status_code >= 400:
            logger.error(
                "[TRACE-ID: %s] - Geocoding provider answered HTTP %s for address: %s",
                trace_id,
                response.status_code,
                address,
            )
            raise GeocodingTransportError(
                f"Geocoding provider answered HTTP {response.status_code} for address: {address}",
                address=address,
                status_code=response.status_code,
            )

        try:
            return GeocodingResponse.model_validate_json(response.content)
        except ValidationError as exc:
            logger.error("[TRACE-ID: %s] - Unreadable geocoding response for address: %s", trace_id, address)
            raise GeocodingResponseError(
                f"Failed to parse geocoding response for address: {address}", address=address
            ) from exc


def get_geocoding_client() -> GeocodingClient:
    return GeocodingClient()

"""Async client for the booking/admin REST API.

Every call carries ``Authorization: Bearer <token>``.  Non-success answers
are raised as :class:`officemap.errors.ApiError` carrying the HTTP status and
the server's ``message`` (or the raw body).
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

import httpx

from officemap.api.models import FloorSpaces, FloorSpacesPayload, SpaceType
from officemap.booking.model import TimeIntervalItem
from officemap.config import ApiConfig
from officemap.errors import ApiError

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

CREATE_FLOOR_SPACES_PATH = "/api/admin/work-space/create-floor-spaces"
TIME_INTERVALS_PATH = "/api/booking/time-intervals"


def _error_message(response: httpx.Response) -> str:
    if response.status_code == 404:
        return "Endpoint not found. Check that the server is running and the API path is correct."
    text = response.text
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    if response.status_code == 403:
        return "Access denied."
    return text or "Request failed"


class BookingApiClient:
    """Thin async wrapper over :class:`httpx.AsyncClient`."""

    def __init__(
        self,
        config: Optional[ApiConfig] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or ApiConfig()
        token = token or self.config.token
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            headers=headers,
            transport=transport,
        )

    async def __aenter__(self) -> "BookingApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        logger.debug("[API Request] %s %s", method, path)
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("[API Network Error] %s %s: %s", method, path, exc)
            raise ApiError(str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            message = _error_message(response)
            logger.error("[API Error] %s %s -> %d %s", method, path, response.status_code, message)
            raise ApiError(message, status=response.status_code)

        if response.status_code == 204 or not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("Could not parse the server response", status=response.status_code) from exc

    # ------------------------------------------------------------------ #
    # Floor plan
    # ------------------------------------------------------------------ #

    async def get_floor_spaces(self, location_id: int, floor_number: int) -> FloorSpaces:
        data = await self._request(
            "GET",
            f"/api/locations/{location_id}/spaces",
            params={"floorNumber": floor_number},
        )
        return FloorSpaces.from_dict(floor_number, data)

    async def get_space_types(self, location_id: int) -> list[SpaceType]:
        data = await self._request("GET", f"/api/locations/{location_id}/spacetypes")
        return [SpaceType.from_dict(t) for t in data or []]

    async def create_floor_spaces(self, payload: FloorSpacesPayload) -> Any:
        return await self._request("POST", CREATE_FLOOR_SPACES_PATH, json=payload.to_dict())

    # ------------------------------------------------------------------ #
    # Booking
    # ------------------------------------------------------------------ #

    async def get_time_intervals(self, date: str, space_id: int) -> list[TimeIntervalItem]:
        """Return the raw availability windows of *space_id* on *date* (YYYY-MM-DD)."""
        if not _DATE_RE.match(date):
            raise ValueError(f"Invalid date format: {date!r}; expected YYYY-MM-DD")
        if isinstance(space_id, bool) or not isinstance(space_id, int) or space_id <= 0:
            raise ValueError(f"Invalid spaceId: {space_id!r}; expected a positive integer")
        data = await self._request("POST", TIME_INTERVALS_PATH, json={"date": date, "spaceId": space_id})
        return [TimeIntervalItem.from_dict(item) for item in data or []]

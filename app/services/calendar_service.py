import asyncio
from typing import Any, Dict, Optional

import requests

from app.core.logger import logger


class CalendarAPIError(Exception):
    """Cal.com could not be reached or answered with something unusable."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self):
        detail = super().__str__()
        if self.status_code is not None:
            detail += f" (status={self.status_code}, body={self.body[:500]})"
        return detail


class CalComClient:
    """
    Minimal Cal.com v1 client. One instance per tenant API key.
    Calls are blocking `requests` calls pushed to a worker thread.
    """

    def __init__(self, api_key: str, base_url: str = "https://api.cal.com/v1", timeout: float = 5.0):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def get_slots(self, event_type_id: str, date: str, timezone: str) -> Dict[str, Any]:
        """
        GET /slots for a whole calendar day.
        Returns the raw payload: {"slots": {"YYYY-MM-DD": [{"time": ...}, ...]}}.
        """
        params = {
            "apiKey": self.api_key,
            "eventTypeId": event_type_id,
            "startTime": f"{date}T00:00:00.000Z",
            "endTime": f"{date}T23:59:59.000Z",
            "timeZone": timezone,
        }

        def _get():
            logger.debug(f"🔍 Cal.com slots: eventTypeId={event_type_id} date={date}")
            try:
                response = requests.get(f"{self.base_url}/slots", params=params, timeout=self.timeout)
            except requests.RequestException as e:
                raise CalendarAPIError(f"GET /slots failed: {e}") from e
            return self._parse(response, "GET /slots")

        return await asyncio.to_thread(_get)

    async def create_booking(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """POST /bookings. Returns the created booking, including its startTime."""

        def _post():
            logger.debug(f"✏️ Cal.com booking: eventTypeId={body.get('eventTypeId')} start={body.get('start')}")
            try:
                response = requests.post(
                    f"{self.base_url}/bookings",
                    params={"apiKey": self.api_key},
                    json=body,
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                raise CalendarAPIError(f"POST /bookings failed: {e}") from e
            return self._parse(response, "POST /bookings")

        return await asyncio.to_thread(_post)

    @staticmethod
    def _parse(response: requests.Response, operation: str) -> Dict[str, Any]:
        if not response.ok:
            raise CalendarAPIError(f"{operation} returned an error", response.status_code, response.text)
        try:
            payload = response.json()
        except ValueError as e:
            raise CalendarAPIError(f"{operation} returned invalid JSON", response.status_code, response.text) from e
        if not isinstance(payload, dict):
            raise CalendarAPIError(f"{operation} returned unexpected payload", response.status_code, response.text)
        return payload

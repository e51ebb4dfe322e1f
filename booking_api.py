from typing import Any, Dict, List, Mapping, Optional, Union

from api_helpers import ACCEPT_JSON, ACCEPT_XML, RawResponse, RequestGateway
from models import Booking, BookingRecord
from normalizer import ContentKind, decode

BOOKING_ENDPOINTS = {
    "BASE": "/booking",
    "BY_ID": lambda booking_id: f"/booking/{booking_id}",
}

Payload = Union[Booking, Mapping[str, Any]]
BookingId = Union[int, str]


def _payload_body(payload: Payload) -> Dict[str, Any]:
    # Mappings go out verbatim so tests can send extra or missing fields.
    if isinstance(payload, Booking):
        return payload.to_dict()
    return dict(payload)


def _token_headers(token: str, extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    headers = {"Accept": ACCEPT_JSON, "Cookie": f"token={token}"}
    headers.update(extra or {})
    return headers


class BookingClient:
    """CRUD over /booking with JSON and XML response negotiation."""

    def __init__(self, gateway: RequestGateway):
        self.gateway = gateway

    @property
    def logger(self):
        return self.gateway.logger

    def _log(self, message: str) -> None:
        if self.logger is not None:
            self.logger.log(message)

    # ========== CREATE ==========

    async def create_booking(
        self,
        payload: Payload,
        *,
        accept: str = ACCEPT_JSON,
        expected_status: Optional[int] = None,
    ) -> RawResponse:
        return await self.gateway.post(
            BOOKING_ENDPOINTS["BASE"],
            data=_payload_body(payload),
            headers={"Accept": accept},
            expected_status=expected_status,
        )

    async def create_booking_json(self, payload: Payload, expected_status: int = 200) -> BookingRecord:
        response = await self.create_booking(payload, accept=ACCEPT_JSON, expected_status=expected_status)
        self.gateway.read_body(response)
        return decode(response.text, ContentKind.JSON, BookingRecord)

    async def create_booking_xml(self, payload: Payload, expected_status: int = 200) -> BookingRecord:
        response = await self.create_booking(payload, accept=ACCEPT_XML, expected_status=expected_status)
        self._log(f"XML Response:\n{response.text}")
        return decode(response.text, ContentKind.XML, BookingRecord)

    # ========== READ ==========

    async def get_booking(
        self,
        booking_id: BookingId,
        *,
        accept: str = ACCEPT_JSON,
        expected_status: Optional[int] = None,
    ) -> RawResponse:
        return await self.gateway.get(
            BOOKING_ENDPOINTS["BY_ID"](booking_id),
            headers={"Accept": accept},
            expected_status=expected_status,
        )

    async def get_booking_json(self, booking_id: BookingId, expected_status: int = 200) -> Booking:
        response = await self.get_booking(booking_id, accept=ACCEPT_JSON, expected_status=expected_status)
        self.gateway.read_body(response)
        return decode(response.text, ContentKind.JSON, Booking)

    async def get_booking_xml(self, booking_id: BookingId, expected_status: int = 200) -> Booking:
        response = await self.get_booking(booking_id, accept=ACCEPT_XML, expected_status=expected_status)
        self._log(f"XML Response:\n{response.text}")
        return decode(response.text, ContentKind.XML, Booking)

    async def get_all_bookings(
        self,
        query_params: Optional[str] = None,
        *,
        expected_status: Optional[int] = None,
    ) -> RawResponse:
        # query_params is an already-encoded "?firstname=..." string; the server
        # owns its semantics, including 500 for malformed dates.
        endpoint = BOOKING_ENDPOINTS["BASE"]
        if query_params:
            endpoint = f"{endpoint}{query_params}"
        return await self.gateway.get(endpoint, expected_status=expected_status)

    async def get_booking_ids(self, query_params: Optional[str] = None, expected_status: int = 200) -> List[int]:
        response = await self.get_all_bookings(query_params, expected_status=expected_status)
        return [int(item["bookingid"]) for item in self.gateway.read_body(response)]

    # ========== UPDATE ==========

    async def update_booking(
        self,
        booking_id: BookingId,
        payload: Payload,
        token: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        expected_status: Optional[int] = None,
    ) -> RawResponse:
        return await self.gateway.put(
            BOOKING_ENDPOINTS["BY_ID"](booking_id),
            data=_payload_body(payload),
            headers=_token_headers(token, headers),
            expected_status=expected_status,
        )

    async def update_booking_json(
        self,
        booking_id: BookingId,
        payload: Payload,
        token: str,
        expected_status: int = 200,
    ) -> Booking:
        response = await self.update_booking(booking_id, payload, token, expected_status=expected_status)
        self.gateway.read_body(response)
        return decode(response.text, ContentKind.JSON, Booking)

    # ========== DELETE ==========

    async def delete_booking(
        self,
        booking_id: BookingId,
        token: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        expected_status: Optional[int] = None,
    ) -> RawResponse:
        merged = {"Cookie": f"token={token}"}
        merged.update(headers or {})
        return await self.gateway.delete(
            BOOKING_ENDPOINTS["BY_ID"](booking_id),
            headers=merged,
            expected_status=expected_status,
        )

from typing import Optional

from api_helpers import BodyKind, RawResponse, RequestGateway

PING_ENDPOINT = "/ping"


class HealthClient:
    def __init__(self, gateway: RequestGateway):
        self.gateway = gateway

    async def ping(self, expected_status: Optional[int] = None) -> RawResponse:
        """GET /ping. A live restful-booker answers 201 "Created"."""
        response = await self.gateway.get(PING_ENDPOINT, expected_status=expected_status)
        self.gateway.read_body(response, BodyKind.TEXT)
        return response

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

import httpx
from hamcrest import assert_that, contains_string, equal_to

from logging_helper import TestLogger

ACCEPT_JSON = "application/json"
ACCEPT_XML = "application/xml"

DEFAULT_HEADERS = {"Accept": ACCEPT_JSON}


class ParseError(ValueError):
    """A response body could not be decoded into the requested shape."""


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class BodyKind(str, Enum):
    JSON = "json"
    TEXT = "text"


@dataclass(frozen=True)
class RawResponse:
    status: int
    headers: httpx.Headers
    text: str
    url: str = ""

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "RawResponse":
        return cls(
            status=response.status_code,
            headers=response.headers,
            text=response.text,
            url=str(response.request.url),
        )

    @property
    def content_type(self):
        return self.headers.get("content-type", "")

    def read_body(self, kind: BodyKind = BodyKind.JSON) -> Any:
        if kind is BodyKind.TEXT:
            return self.text
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as exc:
            raise ParseError(
                f"Response from {self.url or 'request'} is not valid JSON "
                f"(status={self.status}): {self.text[:200]!r}"
            ) from exc


def verify_status_code(response, expected):
    assert_that(
        response.status,
        equal_to(expected),
        f"Unexpected status for {response.url}. Body: {response.text[:500]}",
    )


def verify_content_type(response, expected):
    assert_that(response.content_type, contains_string(expected), "Unexpected Content-Type")


# GET and DELETE never carry a body; restful-booker ignores one anyway.
_TRANSPORT_CALLS = {
    HttpMethod.GET: lambda client, url, body, **kw: client.get(url, **kw),
    HttpMethod.POST: lambda client, url, body, **kw: client.post(url, json=body, **kw),
    HttpMethod.PUT: lambda client, url, body, **kw: client.put(url, json=body, **kw),
    HttpMethod.DELETE: lambda client, url, body, **kw: client.delete(url, **kw),
}


class RequestGateway:
    """
    Single entry point for every HTTP call the harness makes.

    Builds the absolute URL, layers caller headers over DEFAULT_HEADERS,
    logs the request and the resulting status through the per-test logger
    and, when asked, asserts the status code. Exactly one call, no retries.
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str, logger: Optional[TestLogger] = None):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.logger = logger

    @classmethod
    def from_settings(cls, client, settings, logger=None):
        return cls(client, settings.base_url, logger)

    def _log(self, message):
        if self.logger is not None:
            self.logger.log(message)

    async def send(
        self,
        method: HttpMethod,
        endpoint: str,
        *,
        data: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
        expected_status: Optional[int] = None,
    ) -> RawResponse:
        method = HttpMethod(method)
        url = f"{self.base_url}{endpoint}"

        merged = httpx.Headers(DEFAULT_HEADERS)
        merged.update(headers or {})

        self._log(f"{method.value} {url}")
        if data is not None:
            self._log(f"Request body: {json.dumps(data, indent=2, default=str)}")

        call = _TRANSPORT_CALLS[method]
        try:
            raw = await call(self.client, url, data, headers=merged, params=params)
        except httpx.TransportError as exc:
            if self.logger is not None:
                self.logger.error(f"{method.value} {url} failed: {exc!r}")
            raise

        response = RawResponse.from_httpx(raw)
        self._log(f"Status: {response.status}")

        if expected_status is not None:
            verify_status_code(response, expected_status)

        return response

    async def get(self, endpoint, **options):
        return await self.send(HttpMethod.GET, endpoint, **options)

    async def post(self, endpoint, **options):
        return await self.send(HttpMethod.POST, endpoint, **options)

    async def put(self, endpoint, **options):
        return await self.send(HttpMethod.PUT, endpoint, **options)

    async def delete(self, endpoint, **options):
        return await self.send(HttpMethod.DELETE, endpoint, **options)

    def read_body(self, response: RawResponse, kind: BodyKind = BodyKind.JSON) -> Any:
        body = response.read_body(kind)
        if kind is BodyKind.JSON:
            self._log(f"Response body: {json.dumps(body, indent=2)}")
        else:
            self._log(f"Response text: {body}")
        return body

import json

import httpx
import pytest

from api_helpers import (
    BodyKind,
    HttpMethod,
    ParseError,
    RawResponse,
    RequestGateway,
    verify_content_type,
    verify_status_code,
)


def _recorder(status=200, **response_kwargs):
    """Handler that records every request and answers with a fixed response."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status, **response_kwargs)

    return handler, seen


# -----------------------------
# URL + headers
# -----------------------------
@pytest.mark.asyncio
async def test_send_builds_absolute_url_from_base_and_endpoint(make_gateway):
    handler, seen = _recorder(json={})
    gateway = make_gateway(handler, base_url="http://booker.test/")

    await gateway.send(HttpMethod.GET, "/booking/12")

    assert len(seen) == 1
    assert str(seen[0].url) == "http://booker.test/booking/12"


@pytest.mark.asyncio
async def test_default_accept_header_is_json(make_gateway):
    handler, seen = _recorder(json={})
    gateway = make_gateway(handler)

    await gateway.get("/booking")

    assert seen[0].headers["accept"] == "application/json"


@pytest.mark.asyncio
async def test_caller_header_overrides_default_case_insensitively(make_gateway):
    handler, seen = _recorder(text="<booking/>")
    gateway = make_gateway(handler)

    await gateway.get("/booking/1", headers={"accept": "application/xml", "Cookie": "token=abc"})

    assert seen[0].headers.get_list("accept") == ["application/xml"]
    assert seen[0].headers["cookie"] == "token=abc"


@pytest.mark.asyncio
async def test_params_are_sent_as_query(make_gateway):
    handler, seen = _recorder(json=[])
    gateway = make_gateway(handler)

    await gateway.get("/booking", params={"firstname": "Geoff"})

    assert seen[0].url.params["firstname"] == "Geoff"


# -----------------------------
# Verb dispatch
# -----------------------------
@pytest.mark.asyncio
@pytest.mark.parametrize("method", list(HttpMethod))
async def test_each_verb_dispatches_exactly_once(make_gateway, method):
    handler, seen = _recorder(json={})
    gateway = make_gateway(handler)

    await gateway.send(method, "/booking/1")

    assert [r.method for r in seen] == [method.value]


@pytest.mark.asyncio
async def test_string_method_is_accepted(make_gateway):
    handler, seen = _recorder(json={})
    gateway = make_gateway(handler)

    await gateway.send("PUT", "/booking/1", data={"a": 1})

    assert seen[0].method == "PUT"


@pytest.mark.asyncio
@pytest.mark.parametrize("method", [HttpMethod.POST, HttpMethod.PUT])
async def test_body_is_json_encoded(make_gateway, method, booking_payload):
    handler, seen = _recorder(json={})
    gateway = make_gateway(handler)

    await gateway.send(method, "/booking", data=booking_payload)

    assert json.loads(seen[0].content) == booking_payload


@pytest.mark.asyncio
async def test_no_retry_on_server_error(make_gateway):
    handler, seen = _recorder(status=500, text="Internal Server Error")
    gateway = make_gateway(handler)

    response = await gateway.post("/booking", data={})

    assert response.status == 500
    assert len(seen) == 1


# -----------------------------
# Status assertion
# -----------------------------
@pytest.mark.asyncio
async def test_expected_status_match_returns_response(make_gateway):
    handler, _ = _recorder(status=201, text="Created")
    gateway = make_gateway(handler)

    response = await gateway.get("/ping", expected_status=201)

    assert response.status == 201
    assert response.text == "Created"


@pytest.mark.asyncio
async def test_expected_status_mismatch_fails_hard(make_gateway):
    handler, _ = _recorder(status=418, text="I'm a Teapot")
    gateway = make_gateway(handler)

    with pytest.raises(AssertionError) as err:
        await gateway.post("/booking", data={}, expected_status=200)

    assert "418" in str(err.value)


# -----------------------------
# Transport errors
# -----------------------------
@pytest.mark.asyncio
async def test_transport_error_surfaces_unchanged_and_is_logged(make_gateway, logger):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    gateway = make_gateway(handler)

    with pytest.raises(httpx.ConnectError):
        await gateway.get("/booking")

    assert logger.entries[-1].level == "error"
    assert "connection refused" in logger.entries[-1].message


# -----------------------------
# Logging
# -----------------------------
@pytest.mark.asyncio
async def test_request_and_status_are_logged_in_order(make_gateway, logger, booking_payload):
    handler, _ = _recorder(json={"bookingid": 1})
    gateway = make_gateway(handler)

    await gateway.post("/booking", data=booking_payload)

    messages = [e.message for e in logger.entries]
    assert messages[0] == "POST http://booker.test/booking"
    assert messages[1].startswith("Request body: {")
    assert '"firstname": "Sally"' in messages[1]
    assert messages[2] == "Status: 200"


@pytest.mark.asyncio
async def test_empty_body_is_still_logged(make_gateway, logger):
    handler, _ = _recorder(json={"reason": "Bad credentials"})
    gateway = make_gateway(handler)

    await gateway.post("/auth", data={})

    assert any(e.message == "Request body: {}" for e in logger.entries)


@pytest.mark.asyncio
async def test_gateway_without_logger_is_silent():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))
    try:
        gateway = RequestGateway(client, "http://booker.test")
        response = await gateway.get("/booking")
    finally:
        await client.aclose()

    assert response.status == 200


# -----------------------------
# RawResponse
# -----------------------------
def _raw(text, status=200, content_type="application/json"):
    return RawResponse(status=status, headers=httpx.Headers({"Content-Type": content_type}), text=text, url="http://booker.test/x")


def test_read_body_json():
    assert _raw('{"token": "abc"}').read_body(BodyKind.JSON) == {"token": "abc"}


def test_read_body_text():
    assert _raw("Created", content_type="text/plain").read_body(BodyKind.TEXT) == "Created"


def test_read_body_malformed_json_raises_parse_error():
    with pytest.raises(ParseError):
        _raw("<html>not json</html>").read_body()


def test_parse_error_is_a_value_error():
    assert issubclass(ParseError, ValueError)


def test_verify_status_code_and_content_type():
    response = _raw("{}", status=200, content_type="application/json; charset=utf-8")
    verify_status_code(response, 200)
    verify_content_type(response, "application/json")

    with pytest.raises(AssertionError):
        verify_content_type(response, "application/xml")

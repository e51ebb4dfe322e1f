"""
Content negotiation for restful-booker responses.

The API answers the same request as JSON or XML depending on the Accept
header. Both encodings are decoded here into the dataclasses in models.py,
so everything downstream (validator, assertions) only ever sees one shape.

JSON arrives already typed and passes through untouched. XML is all text,
so the coercion rules below are applied:

    totalprice   -> int when integral, float otherwise
    depositpaid  -> True only if the lower-cased text is "true"
    bookingid    -> int
    strings      -> trimmed text

Anything that is not well-formed, or lacks a required field, raises
ParseError.
"""
import json
import xml.etree.ElementTree as ET
from enum import Enum
from typing import Any, Optional, Type, Union

from api_helpers import ParseError, RawResponse
from models import AuthOutcome, Booking, BookingDates, BookingRecord

__all__ = [
    "ContentKind",
    "ParseError",
    "content_kind_for",
    "decode",
    "decode_mapping",
    "decode_response",
    "is_valid_xml",
]

Shape = Union[Type[Booking], Type[BookingRecord], Type[AuthOutcome]]

_XML_ROOTS = {
    Booking: "booking",
    BookingRecord: "created-booking",
}


class ContentKind(str, Enum):
    JSON = "json"
    XML = "xml"


def content_kind_for(content_type: str, body=None) -> ContentKind:
    """
    Pick the decoder from the Content-Type header.

    restful-booker labels its XML as text/html, so when the header names
    neither json nor xml the body decides: well-formed XML goes to the XML
    decoder and everything else to JSON, which raises ParseError if it is not.
    """
    lowered = (content_type or "").lower()
    if "xml" in lowered:
        return ContentKind.XML
    if "json" in lowered:
        return ContentKind.JSON
    if body is None:
        raise ParseError(f"Unsupported content type: {content_type!r}")
    return ContentKind.XML if is_valid_xml(body) else ContentKind.JSON


def is_valid_xml(text: str) -> bool:
    try:
        ET.fromstring(text)
    except (ET.ParseError, TypeError):
        return False
    return True


def decode(raw_body: str, content_kind: ContentKind, shape: Shape):
    if ContentKind(content_kind) is ContentKind.XML:
        return _decode_xml(raw_body, shape)
    return _decode_json(raw_body, shape)


def decode_response(response: RawResponse, shape: Shape):
    return decode(response.text, content_kind_for(response.content_type, response.text), shape)


# JSON

def _decode_json(raw_body: str, shape: Shape):
    try:
        data = json.loads(raw_body)
    except (json.JSONDecodeError, TypeError) as exc:
        raise ParseError(f"Malformed JSON: {str(raw_body)[:200]!r}") from exc

    return decode_mapping(data, shape)


def decode_mapping(data, shape: Shape):
    """Build shape from an already-parsed JSON value."""
    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object for {shape.__name__}, got {type(data).__name__}")

    try:
        return shape.from_dict(data)
    except (KeyError, TypeError, AttributeError) as exc:
        raise ParseError(f"JSON body does not describe a {shape.__name__}: missing {exc}") from exc


# XML

def _decode_xml(raw_body: str, shape: Shape):
    root_tag = _XML_ROOTS.get(shape)
    if root_tag is None:
        raise ParseError(f"No XML mapping for {shape.__name__}")

    try:
        root = ET.fromstring(raw_body)
    except (ET.ParseError, TypeError) as exc:
        raise ParseError(f"Malformed XML: {str(raw_body)[:200]!r}") from exc

    if root.tag != root_tag:
        raise ParseError(f"Expected <{root_tag}> root element, got <{root.tag}>")

    if shape is BookingRecord:
        return BookingRecord(
            bookingid=_to_int(_required_text(root, "bookingid"), "bookingid"),
            booking=_booking_from_element(_required_child(root, "booking")),
        )
    return _booking_from_element(root)


def _booking_from_element(element: ET.Element) -> Booking:
    dates = _required_child(element, "bookingdates")
    return Booking(
        firstname=_required_text(element, "firstname"),
        lastname=_required_text(element, "lastname"),
        totalprice=_to_number(_required_text(element, "totalprice"), "totalprice"),
        depositpaid=_to_bool(_optional_text(element, "depositpaid")),
        bookingdates=BookingDates(
            checkin=_required_text(dates, "checkin"),
            checkout=_required_text(dates, "checkout"),
        ),
        additionalneeds=_optional_text(element, "additionalneeds"),
    )


def _required_child(element: ET.Element, tag: str) -> ET.Element:
    child = element.find(tag)
    if child is None:
        raise ParseError(f"<{element.tag}> is missing <{tag}>")
    return child


def _required_text(element: ET.Element, tag: str) -> str:
    return (_required_child(element, tag).text or "").strip()


def _optional_text(element: ET.Element, tag: str) -> Optional[str]:
    child = element.find(tag)
    if child is None:
        return None
    return (child.text or "").strip()


def _to_bool(text: Optional[str]) -> bool:
    # "1", "yes" and a missing element are all False; only "true" counts.
    return text is not None and text.lower() == "true"


def _to_int(text: str, field: str) -> int:
    try:
        return int(text)
    except ValueError as exc:
        raise ParseError(f"{field} is not an integer: {text!r}") from exc


def _to_number(text: str, field: str) -> Any:
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError as exc:
        raise ParseError(f"{field} is not a number: {text!r}") from exc

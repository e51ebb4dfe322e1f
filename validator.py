from dataclasses import dataclass
from typing import Any, List, Mapping

from hamcrest import assert_that, equal_to, greater_than, has_key, matches_regexp
from hamcrest.core.base_matcher import BaseMatcher
from jsonschema import Draft7Validator

import schemas
from models import AuthOutcome, Booking, BookingRecord

_TYPE_CHECKER = Draft7Validator.TYPE_CHECKER

# One schema per entity; assert_structure() walks the same tables.
SCHEMAS = {
    Booking: schemas.booking,
    BookingRecord: schemas.booking_record,
    AuthOutcome: schemas.auth_outcome,
}


class JsonTyped(BaseMatcher):
    """Matches values of a JSON-Schema type, using jsonschema's own rules."""

    def __init__(self, json_type: str):
        self.json_type = json_type

    def _matches(self, item):
        return _TYPE_CHECKER.is_type(item, self.json_type)

    def describe_to(self, description):
        description.append_text(f"a JSON {self.json_type}")

    def describe_mismatch(self, item, mismatch_description):
        mismatch_description.append_text(f"was {type(item).__name__} ").append_description_of(item)


def json_typed(json_type):
    return JsonTyped(json_type)


@dataclass(frozen=True)
class SchemaViolation:
    field: str
    message: str

    def __str__(self):
        return f"{self.field or '<root>'}: {self.message}"


class BookingSchemaError(ValueError):
    def __init__(self, shape_name: str, violations: List[SchemaViolation]):
        self.shape_name = shape_name
        self.violations = violations
        lines = "\n".join(f"  - {v}" for v in violations)
        super().__init__(f"{shape_name} failed schema validation ({len(violations)} violation(s)):\n{lines}")

    @property
    def fields(self) -> List[str]:
        return [v.field for v in self.violations]


def _as_mapping(candidate):
    if isinstance(candidate, (Booking, BookingRecord, AuthOutcome)):
        return candidate.to_dict()
    return candidate


# Structural assertions

def _walk_required(schema, prefix=""):
    """Yield (parent path, key, property schema) for required fields, breadth-first."""
    nested = []
    for key in schema.get("required", []):
        prop = schema["properties"][key]
        yield prefix, key, prop
        if prop.get("type") == "object":
            nested.append((f"{prefix}{key}.", prop))
    for child_prefix, child in nested:
        yield from _walk_required(child, child_prefix)


def _lookup(data, dotted):
    for part in filter(None, dotted.split(".")):
        data = data[part]
    return data


def _assert_schema_structure(data, schema):
    required = list(_walk_required(schema))

    for parent, key, _ in required:
        assert_that(_lookup(data, parent), has_key(key), f"missing property '{parent}{key}'")

    for parent, key, prop in required:
        assert_that(_lookup(data, parent)[key], json_typed(prop["type"]), f"wrong type for '{parent}{key}'")

    for parent, key, prop in required:
        if "pattern" in prop:
            assert_that(_lookup(data, parent)[key], matches_regexp(prop["pattern"]), f"bad format for '{parent}{key}'")

    for key, prop in schema.get("properties", {}).items():
        if key in schema.get("required", []) or key not in data:
            continue
        assert_that(data[key], json_typed(prop["type"]), f"wrong type for optional '{key}'")


def assert_structure(candidate: Any) -> None:
    """
    Fail-fast structural check of a booking.

    Presence of every required field first, then runtime types, then the
    YYYY-MM-DD date format, then additionalneeds if it is there. The first
    violation raises AssertionError; nothing is aggregated.
    """
    data = _as_mapping(candidate)
    assert_that(data, json_typed("object"), "booking must be an object")
    _assert_schema_structure(data, schemas.booking)


def assert_record_structure(candidate: Any) -> None:
    data = _as_mapping(candidate)
    assert_that(data, has_key("bookingid"), "missing property 'bookingid'")
    assert_that(data["bookingid"], json_typed("integer"), "wrong type for 'bookingid'")
    assert_that(data["bookingid"], greater_than(0), "bookingid must be positive")
    assert_that(data, has_key("booking"), "missing property 'booking'")
    assert_structure(data["booking"])


# Schema validation

def _violation_field(error):
    path = [str(p) for p in error.absolute_path]
    if error.validator == "required" and isinstance(error.instance, Mapping):
        missing = next(
            (name for name in error.validator_value
             if name not in error.instance and repr(name) in error.message),
            None,
        )
        if missing is not None:
            path.append(missing)
    return ".".join(path)


def schema_violations(candidate: Any, shape=Booking) -> List[SchemaViolation]:
    validator = Draft7Validator(SCHEMAS[shape])
    errors = sorted(validator.iter_errors(_as_mapping(candidate)), key=lambda e: list(map(str, e.absolute_path)))
    return [SchemaViolation(_violation_field(e), e.message) for e in errors]


def validate_schema(candidate: Any, shape=Booking):
    """
    Validate candidate against the schema for shape and return it as the
    typed dataclass. Raises BookingSchemaError listing every violation.
    """
    violations = schema_violations(candidate, shape)
    if violations:
        raise BookingSchemaError(shape.__name__, violations)
    return shape.from_dict(_as_mapping(candidate))


# Partial equality

def assert_matches(actual, expected_partial):
    actual_data = _as_mapping(actual)
    expected = _as_mapping(expected_partial)

    for key, value in expected.items():
        if value is None or key == "bookingdates":
            continue
        assert_that(actual_data.get(key), equal_to(value), f"{key} mismatch")

    dates = expected.get("bookingdates")
    if dates:
        actual_dates = actual_data.get("bookingdates") or {}
        for key in ("checkin", "checkout"):
            if dates.get(key) is not None:
                assert_that(actual_dates.get(key), equal_to(dates[key]), f"bookingdates.{key} mismatch")

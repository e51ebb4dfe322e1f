from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union


@dataclass(frozen=True)
class BookingDates:
    checkin: str
    checkout: str

    @classmethod
    def from_dict(cls, data):
        return cls(checkin=data["checkin"], checkout=data["checkout"])

    def to_dict(self):
        return {"checkin": self.checkin, "checkout": self.checkout}


@dataclass(frozen=True)
class Booking:
    """
    Canonical booking. JSON and XML responses both end up here, so two
    Booking values can be compared with == regardless of wire encoding.
    Unknown keys are dropped by from_dict().
    """
    firstname: str
    lastname: str
    totalprice: Union[int, float]
    depositpaid: bool
    bookingdates: BookingDates
    additionalneeds: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Booking":
        return cls(
            firstname=data["firstname"],
            lastname=data["lastname"],
            totalprice=data["totalprice"],
            depositpaid=data["depositpaid"],
            bookingdates=BookingDates.from_dict(data["bookingdates"]),
            additionalneeds=data.get("additionalneeds"),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "firstname": self.firstname,
            "lastname": self.lastname,
            "totalprice": self.totalprice,
            "depositpaid": self.depositpaid,
            "bookingdates": self.bookingdates.to_dict(),
        }
        if self.additionalneeds is not None:
            payload["additionalneeds"] = self.additionalneeds
        return payload


@dataclass(frozen=True)
class BookingRecord:
    bookingid: int
    booking: Booking

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BookingRecord":
        return cls(bookingid=data["bookingid"], booking=Booking.from_dict(data["booking"]))

    def to_dict(self):
        return {"bookingid": self.bookingid, "booking": self.booking.to_dict()}


@dataclass(frozen=True)
class AuthCredential:
    # Either field may be left out to exercise the failure paths of /auth.
    username: Optional[str] = None
    password: Optional[str] = None

    def to_dict(self):
        return {k: v for k, v in (("username", self.username), ("password", self.password)) if v is not None}


@dataclass(frozen=True)
class AuthOutcome:
    token: Optional[str] = None
    reason: Optional[str] = None

    @property
    def succeeded(self):
        return bool(self.token)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuthOutcome":
        return cls(token=data.get("token"), reason=data.get("reason"))

    def to_dict(self):
        return {k: v for k, v in (("token", self.token), ("reason", self.reason)) if v is not None}


Entity = Union[Booking, BookingRecord, AuthOutcome]

DATE_PATTERN = "^\\d{4}-\\d{2}-\\d{2}$"


booking_dates = {
    "type": "object",
    "required": ["checkin", "checkout"],
    "properties": {
        "checkin": {
            "type": "string",
            "pattern": DATE_PATTERN
        },
        "checkout": {
            "type": "string",
            "pattern": DATE_PATTERN
        }
    }
}


booking = {
    "type": "object",
    "required": ["firstname", "lastname", "totalprice", "depositpaid", "bookingdates"],
    "properties": {
        "firstname": {
            "type": "string",
            "minLength": 1
        },
        "lastname": {
            "type": "string",
            "minLength": 1
        },
        "totalprice": {
            "type": "number",
            "exclusiveMinimum": 0
        },
        "depositpaid": {
            "type": "boolean"
        },
        "bookingdates": booking_dates,
        "additionalneeds": {
            "type": "string"
        }
    }
}


booking_record = {
    "type": "object",
    "required": ["bookingid", "booking"],
    "properties": {
        "bookingid": {
            "type": "integer",
            "exclusiveMinimum": 0
        },
        "booking": booking
    }
}


auth_outcome = {
    "type": "object",
    "properties": {
        "token": {
            "type": "string"
        },
        "reason": {
            "type": "string"
        }
    },
    "oneOf": [
        {"required": ["token"]},
        {"required": ["reason"]}
    ]
}

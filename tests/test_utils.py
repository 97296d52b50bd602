import re

import pytest

from salonflow.utils import (
    create_jwt_token,
    decode_jwt_token,
    format_date_short,
    format_price,
    format_time_12h,
    generate_otp,
    normalize_phone,
)


@pytest.mark.parametrize(
    "raw",
    ["0771234567", "771234567", "94771234567", "+94 77 123 4567", "(077) 123-4567"],
)
def test_normalize_phone_produces_national_key(raw):
    assert normalize_phone(raw) == "94771234567"


@pytest.mark.parametrize("raw", ["0771234567", "+94 (71) 000 1111", "123", "4"])
def test_normalize_phone_is_idempotent(raw):
    once = normalize_phone(raw)
    assert normalize_phone(once) == once
    assert re.match(r"^94\d+$", once)


def test_generate_otp_has_requested_length():
    for _ in range(50):
        code = generate_otp(6)
        assert len(code) == 6
        assert code.isdigit()
        assert 100000 <= int(code) <= 999999


def test_jwt_round_trip_carries_claims():
    token = create_jwt_token({"sub": "cust-1", "phone": "94771234567"})
    payload = decode_jwt_token(token)
    assert payload["sub"] == "cust-1"
    assert payload["phone"] == "94771234567"
    assert payload["type"] == "access"


def test_decode_rejects_garbage():
    assert decode_jwt_token("not-a-token") is None


def test_display_formatting():
    assert format_time_12h("14:05") == "2:05 PM"
    assert format_time_12h("00:30") == "12:30 AM"
    assert format_time_12h("12:00") == "12:00 PM"
    assert format_date_short("2025-03-07") == "Mar 7"
    assert format_price(1500) == "1,500"
    assert format_price(1250.5) == "1,250.50"

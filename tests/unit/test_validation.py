from chanlevel.validation import (
    validate_int_range,
    validate_non_negative,
    validate_payload,
    validate_probability_per_mille,
)


def test_validate_payload_identical() -> None:
    assert validate_payload(b"HELLO", b"HELLO") is False
    assert validate_payload(b"", b"") is False


def test_validate_payload_detects_byte_difference() -> None:
    assert validate_payload(b"HELLO", b"HELLX") is True
    assert validate_payload(b"HELLO", b"JELLO") is True


def test_validate_payload_detects_length_difference() -> None:
    assert validate_payload(b"HELLO", b"HELL") is True
    assert validate_payload(b"HELL", b"HELLO") is True


def test_validate_probability_bounds() -> None:
    assert validate_probability_per_mille(0) == (True, "")
    assert validate_probability_per_mille(1000) == (True, "")
    ok, reason = validate_probability_per_mille(1001, "bit_error")
    assert not ok
    assert "bit_error out of range" in reason


def test_validate_int_range_rejects_non_int() -> None:
    ok, reason = validate_int_range("nope", 0, 1, "value")
    assert not ok
    assert "must be an int" in reason
    ok, _ = validate_int_range(True, 0, 1, "value")
    assert not ok
    ok, _ = validate_int_range(0.5, 0, 1, "value")
    assert not ok


def test_validate_non_negative() -> None:
    assert validate_non_negative(0, "grace") == (True, "")
    assert validate_non_negative(2.5, "grace") == (True, "")
    assert validate_non_negative(-1, "grace") == (False, "grace must be non-negative")
    assert validate_non_negative(0, "timeout", allow_zero=False) == (False, "timeout must be positive")
    assert validate_non_negative("30s", "grace") == (False, "grace must be a number")
    assert validate_non_negative(True, "grace") == (False, "grace must be a number")

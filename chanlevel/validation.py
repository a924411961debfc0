from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

PROBABILITY_MIN_PER_MILLE = 0
PROBABILITY_MAX_PER_MILLE = 1000


def validate_payload(original: bytes, reconstructed: bytes) -> bool:
    """Compare the reconstructed payload against the original.

    Returns:
        True when a mismatch was detected (length or any byte differs)
    """
    if len(original) != len(reconstructed):
        logger.debug(
            "Payload length mismatch: sent %d bytes, got %d", len(original), len(reconstructed)
        )
        return True
    for index, (sent, received) in enumerate(zip(original, reconstructed)):
        if sent != received:
            logger.debug("Payload mismatch at byte %d", index)
            return True
    return False


def validate_int_range(value: Any, min_value: int, max_value: int, label: str) -> tuple[bool, str]:
    if isinstance(value, bool):
        return False, f"{label} must be an int"
    try:
        int_value = int(value)
    except (TypeError, ValueError):
        return False, f"{label} must be an int"
    if int_value != value:
        return False, f"{label} must be an int"
    if int_value < min_value or int_value > max_value:
        return False, f"{label} out of range {min_value}-{max_value}"
    return True, ""


def validate_probability_per_mille(value: Any, label: str = "probability") -> tuple[bool, str]:
    return validate_int_range(value, PROBABILITY_MIN_PER_MILLE, PROBABILITY_MAX_PER_MILLE, label)


def validate_non_negative(value: Any, label: str, allow_zero: bool = True) -> tuple[bool, str]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False, f"{label} must be a number"
    if value < 0 or (value == 0 and not allow_zero):
        return False, f"{label} must be {'non-negative' if allow_zero else 'positive'}"
    return True, ""

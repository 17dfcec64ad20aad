#!/usr/bin/env python3
"""WAGMI Library

A reusable library that provides the /wagmi request handling logic, which can
be used from the Flask service, the CLI, or any other context.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

LANG = "Python"
MAX_SUM = 100

INVALID_INPUT = "Invalid input"
INTERNAL_ERROR = "Internal server error"
ROUTE_NOT_FOUND = "Route not found. Use POST /wagmi"


class WagmiException(Exception):
    """Base exception for errors in the wagmi operations."""
    pass


class InvalidInputError(WagmiException):
    """Raised when a payload fails validation."""

    def __init__(self, reason: str = INVALID_INPUT):
        super().__init__(reason)
        self.reason = reason


def is_number(value: Any) -> bool:
    """
    Check that a value is a real, finite number.

    Booleans are rejected even though they are ints in Python, and so are
    numeric strings, NaN and infinities.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return True


def validate_numbers(a, b):
    """
    Validate that inputs are non-negative numbers.

    Args:
        a: First input to validate
        b: Second input to validate

    Returns:
        tuple: The validated (a, b), unchanged

    Raises:
        InvalidInputError: If either input is not a number or is negative
    """
    if not is_number(a) or not is_number(b):
        raise InvalidInputError("Inputs must be numbers")
    if a < 0 or b < 0:
        raise InvalidInputError("Inputs must not be negative")
    return a, b


def add(a, b):
    """
    Add two numbers together, keeping the sum within MAX_SUM.

    Args:
        a: First number to add
        b: Second number to add

    Returns:
        The result of adding a and b

    Raises:
        InvalidInputError: If inputs are invalid or the sum exceeds MAX_SUM
    """
    a, b = validate_numbers(a, b)
    try:
        result = a + b
    except OverflowError:
        # huge int plus float
        raise InvalidInputError(f"Sum must not exceed {MAX_SUM}")
    if result > MAX_SUM:
        raise InvalidInputError(f"Sum must not exceed {MAX_SUM}")
    return result


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """Format a datetime as UTC ISO-8601 with millisecond precision and a Z suffix."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


def greeting(now: Optional[datetime] = None) -> Dict[str, str]:
    """Build the greeting response body."""
    return {
        "message": "wagmi",
        "timestamp": iso_timestamp(now),
        "lang": LANG,
    }


def handle_wagmi(payload: Optional[Dict[str, Any]],
                 now: Optional[datetime] = None) -> Tuple[Dict[str, Any], int]:
    """
    Decide the response for a /wagmi request.

    A payload that is absent, empty, or carries neither "a" nor "b" gets the
    greeting. Otherwise both operands must be valid and the sum is returned.

    Args:
        payload: Parsed JSON object, or None when the request had no body
        now: Optional clock override for the greeting timestamp

    Returns:
        tuple: (response body, HTTP status code)

    Raises:
        InvalidInputError: If payload is present but not a mapping
    """
    if payload is None:
        return greeting(now), 200
    if not isinstance(payload, dict):
        raise InvalidInputError("Payload must be a JSON object")
    if "a" not in payload and "b" not in payload:
        return greeting(now), 200

    try:
        result = add(payload.get("a"), payload.get("b"))
    except InvalidInputError:
        return {"error": INVALID_INPUT}, 400

    return {
        "result": result,
        "a": payload["a"],
        "b": payload["b"],
        "status": "success",
    }, 200

"""
Input validation utilities for the Checkout Bridge.

Order references and amounts arrive as JSON numbers from the storefront
plugin but as strings from Stripe (client_reference_id), so both forms are
accepted here.
"""
import re
from typing import Any, Optional

_DIGITS = re.compile(r"^\s*\d+\s*$")


def parse_positive_int(value: Any) -> int:
    """
    Coerce a JSON integer or a string of digits to a positive int.

    Args:
        value: Raw value from a request body or Stripe payload

    Returns:
        The parsed integer (> 0)

    Raises:
        ValueError if the value is missing, not an integer, or not positive
    """
    # bool is a subclass of int; True must not become order #1
    if value is None or isinstance(value, bool):
        raise ValueError("expected a positive integer")

    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and _DIGITS.match(value):
        parsed = int(value)
    else:
        raise ValueError("expected a positive integer")

    if parsed <= 0:
        raise ValueError("expected a positive integer")
    return parsed


def parse_order_reference(value: Any) -> Optional[int]:
    """Parse a client_reference_id; None when missing, non-numeric or zero."""
    try:
        return parse_positive_int(value)
    except ValueError:
        return None

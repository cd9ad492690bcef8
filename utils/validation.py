#!/usr/bin/env python3
"""
Input Validation Utilities
Guards used at the boundary of the ESG analytics pipeline.

Only structurally invalid top-level input raises. Everything narrower
(a bad metric value, an empty series, an unknown industry) is coerced to a
documented neutral value by the engines themselves.

Author: ESG Analytics Team
Version: 1.0.0
"""

import math
from typing import Any, Mapping, Optional


class InvalidInputError(ValueError):
    """Raised when the top-level analytics input has the wrong shape."""


def to_number(value: Any) -> Optional[float]:
    """Coerce a raw metric value to a finite float.

    Numeric strings are accepted. Booleans, None, NaN, infinities,
    integers too large for a float and anything unparsable return None.

    Args:
        value: Raw metric value

    Returns:
        Float value or None when the value is unusable
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None

    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None

    if math.isnan(number) or math.isinf(number):
        return None

    return number


def require_mapping(value: Any, what: str) -> Mapping:
    """Ensure ``value`` is a mapping.

    Args:
        value: Object to check
        what: Description used in the error message

    Returns:
        The value itself

    Raises:
        InvalidInputError: If the value is not a mapping
    """
    if not isinstance(value, Mapping):
        raise InvalidInputError(f"Invalid {what}: expected a mapping, got {type(value).__name__}")
    return value


def require_industry(industry: Any) -> str:
    """Ensure the industry is a non-empty string and normalize it.

    Args:
        industry: Industry identifier supplied by the caller

    Returns:
        Lower-cased, stripped industry key

    Raises:
        InvalidInputError: If the industry is not a non-empty string
    """
    if not isinstance(industry, str) or not industry.strip():
        raise InvalidInputError("Valid industry must be specified")
    return industry.strip().lower()


def normalize_region(region: Any, default: str = 'global') -> str:
    """Normalize a region identifier, falling back to ``default``."""
    if not isinstance(region, str) or not region.strip():
        return default
    return region.strip().lower()

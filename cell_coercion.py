import math
import re

import numpy as np
import pandas as pd

from column_type import ColumnType
from table_errors import InvalidValueError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+$")

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1


def is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def value_to_text(value) -> str | None:
    """Display form of a stored value; blanks become None."""
    if is_blank(value):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def is_canonical_integer(text: str) -> bool:
    try:
        return str(int(text)) == text
    except (TypeError, ValueError):
        return False


def is_integer_in_range(value) -> bool:
    return INT_MIN <= value <= INT_MAX


def is_integer_text(text: str) -> bool:
    """Canonical decimal that fits a 32-bit signed integer."""
    return is_canonical_integer(text) and is_integer_in_range(int(text))


def is_boolean_text(text: str) -> bool:
    return isinstance(text, str) and text.strip().lower() in ("true", "false")


def normalize_scalar(value):
    """Turn pandas/numpy cell payloads into plain Python values (None for missing)."""
    if value is None or value is pd.NA or value is pd.NaT:
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


# ---------- per-type grammars ----------
def _coerce_text(text: str) -> str:
    return text


def _coerce_email(text: str) -> str:
    if not EMAIL_PATTERN.match(text):
        raise InvalidValueError(f"Invalid email format: {text!r}")
    return text


def _coerce_boolean(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise InvalidValueError(f"Invalid boolean string: {text!r}")


def _coerce_integer(text: str) -> int:
    # leading zeros, signs and padding are rejected
    if not is_canonical_integer(text):
        raise InvalidValueError(f"Invalid integer: {text!r}")
    value = int(text)
    if not is_integer_in_range(value):
        raise InvalidValueError(f"Integer out of range [{INT_MIN}, {INT_MAX}]: {text!r}")
    return value


_COERCERS = {
    ColumnType.TEXT: _coerce_text,
    ColumnType.EMAIL: _coerce_email,
    ColumnType.BOOLEAN: _coerce_boolean,
    ColumnType.INTEGER: _coerce_integer,
}


def coerce_cell_value(column_type: ColumnType, text):
    """Parse display text under a column type's grammar; blanks become None."""
    if is_blank(text):
        return None
    if not isinstance(text, str):
        raise InvalidValueError(f"Expected text, got {type(text).__name__}")
    return _COERCERS[column_type](text)

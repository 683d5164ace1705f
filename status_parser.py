"""
status_parser.py - Canonical textual form for raw status values

SHOW SLAVE STATUS reports word booleans and binlog positions, SHOW GLOBAL
STATUS reports numeric-looking strings. Both collapse here to text that
to_float() understands, or to text that is dropped as non-numeric.
"""
import re
from typing import Any, Optional

# Trailing ".<digits>" at the end of the value, e.g. "mysql-bin.000123"
_TRAILING_DIGITS = re.compile(r'\.([0-9]+)$')

# Decimal floats, optional exponent, inf/infinity/nan; no whitespace or "_"
_NUMERIC = re.compile(
    r'[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)',
    re.IGNORECASE
)

_BOOLEAN_WORDS = {
    "Yes": "1",
    "No": "0",
}


def _as_text(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw).decode("utf-8", errors="replace")
    return str(raw)


def parse_status(raw: Any) -> str:
    """
    Canonicalize a raw status value.

    Rules, in priority order:
        "Yes" -> "1", "No" -> "0",
        a trailing ".<digits>" -> the digits only,
        anything else is returned unchanged.

    Args:
        raw: Value as returned by the driver (bytes, str, number or None).
            Undecodable bytes are replaced, never raised.

    Returns:
        Canonical string
    """
    data = _as_text(raw)

    if data in _BOOLEAN_WORDS:
        return _BOOLEAN_WORDS[data]

    match = _TRAILING_DIGITS.search(data)
    if match:
        return match.group(1)

    return data


def to_float(text: Any) -> Optional[float]:
    """
    Convert canonical text to a float, None when it is not numeric.

    Only plain decimal notation is accepted: surrounding whitespace and
    digit-group underscores make a value non-numeric.
    """
    if text is None:
        return None
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8", errors="replace")
    if not isinstance(text, str):
        text = str(text)
    if not _NUMERIC.fullmatch(text):
        return None
    return float(text)

# app/domain/phone.py
import re

COUNTRY_CODE = "221"
LOCAL_NUMBER_LENGTH = 9

_NON_DIGITS = re.compile(r"\D")
_WHITESPACE = re.compile(r"\s")


def normalize_phone(raw: str) -> str:
    """
    Best-effort canonical form used for order lookup, not an E.164 parser:
    - digits only
    - "221..." -> "+221..."
    - 9 digits (local subscriber number) -> "+221" + number
    - anything else -> "+" + digits, empty string for empty input
    """
    cleaned = _NON_DIGITS.sub("", raw or "")
    if cleaned.startswith(COUNTRY_CODE):
        return f"+{cleaned}"
    if len(cleaned) == LOCAL_NUMBER_LENGTH:
        return f"+{COUNTRY_CODE}{cleaned}"
    return f"+{cleaned}" if cleaned else ""


def strip_whitespace(raw: str) -> str:
    return _WHITESPACE.sub("", raw or "")


def has_accepted_prefix(raw: str, prefixes) -> bool:
    return strip_whitespace(raw).startswith(tuple(prefixes))

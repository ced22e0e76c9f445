from __future__ import annotations

import re
from typing import Final

NON_DIGIT_RE: Final = re.compile(r"\D", re.ASCII)
# re.ASCII so that \d never matches non-ASCII digits.
AU_MOBILE_RE: Final = re.compile(r"\+61\d{9}", re.ASCII)


def normalize_phone(raw: str) -> str:
    """
    Turn freeform phone input into international format.

    The leading-zero / "61" rules look at the digits only; the "+" passthrough
    looks at the raw input and only applies when neither rule matched:

      "(04) 1234-5678" -> "+61412345678"
      "61412345678"    -> "+61412345678"
      "+1 555 0100"    -> "+1 555 0100"   (returned as given)
      "12345"          -> "+12345"
    """
    cleaned = NON_DIGIT_RE.sub("", raw)
    if cleaned.startswith("0"):
        return f"+61{cleaned[1:]}"
    if cleaned.startswith("61"):
        return f"+{cleaned}"
    if raw.startswith("+"):
        return raw
    return f"+{cleaned}"


def is_valid_au_mobile(value: str) -> bool:
    """True iff value is exactly +61 followed by 9 digits."""
    return AU_MOBILE_RE.fullmatch(value) is not None

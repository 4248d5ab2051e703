"""Locale capability used by the masking core.

Separators and grouping are locale data, so everything here defers to
``QLocale`` instead of carrying its own tables.
"""

from __future__ import annotations

import math
import re
from functools import lru_cache

from PySide6.QtCore import QLocale

DEFAULT_LOCALE = "en-US"

_DIGIT = re.compile(r"[0-9]")
_LOCALE_TAG = re.compile(r"[A-Za-z]{2,3}(?:[-_][A-Za-z0-9]{2,4})*")


@lru_cache(maxsize=64)
def qlocale_for(tag: str) -> QLocale:
    """Return the ``QLocale`` for a BCP 47 style tag (``en-US`` or ``en_US``).

    Unrecognised tags resolve to whatever QLocale falls back to, which is the
    "C" locale.
    """
    return QLocale(tag)


def is_known_locale(tag: str) -> bool:
    """True when ``tag`` is well formed and QLocale resolves it to a real language."""
    if not isinstance(tag, str) or not _LOCALE_TAG.fullmatch(tag.strip()):
        return False
    return qlocale_for(tag.strip()).language() != QLocale.Language.C


@lru_cache(maxsize=64)
def decimal_separator(tag: str) -> str:
    """Return the character separating integer and fractional digits in ``tag``.

    Derived by rendering ``1.1`` and taking the first non-digit character.
    """
    sample = qlocale_for(tag).toString(1.1, "f", 1)
    for char in _DIGIT.sub("", sample):
        return char
    return "."


@lru_cache(maxsize=64)
def group_separator(tag: str) -> str:
    """Return the thousands grouping character for ``tag``."""
    return qlocale_for(tag).groupSeparator()


def format_integer(value: float, tag: str) -> str:
    """Render ``floor(value)`` with locale grouping and no fractional digits."""
    # Rendered through the double overload so values beyond 64-bit ints still format
    return qlocale_for(tag).toString(float(math.floor(value)), "f", 0)


def format_fraction(value: float, tag: str, min_digits: int, max_digits: int = 2) -> str:
    """Render ``value`` rounded to ``max_digits`` fractional digits.

    Trailing zeroes are dropped down to ``min_digits``; the decimal separator
    is dropped as well when no fractional digit remains.
    """
    text = qlocale_for(tag).toString(float(value), "f", max_digits)
    if max_digits <= 0:
        return text

    separator = decimal_separator(tag)
    integer_part, _, fraction = text.rpartition(separator)
    if not integer_part:
        return text

    keep = len(fraction)
    while keep > min_digits and fraction[keep - 1] == "0":
        keep -= 1
    if keep == 0:
        return integer_part
    return f"{integer_part}{separator}{fraction[:keep]}"

"""
Number Mask Engine.

Keystroke-level masking for amount fields. Raw field text is reduced to a
numeric value with at most two fractional digits and re-rendered as a
grouped, locale-correct display string. While the user types, whatever was
typed after the decimal separator is kept verbatim; once editing finishes the
value is rendered in full. After every rewrite the caret is mapped back onto
the same digit it sat after before the rewrite.

All functions in this module are pure and total. ``NumberMaskEngine`` binds
them to one field's ``MaskConfig`` and runs the per-event pipelines that a
widget adapter drives.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from locale_support import (
    DEFAULT_LOCALE,
    decimal_separator as locale_decimal_separator,
    format_fraction,
    format_integer,
)
from logger import LoggableMixin

MAX_FRACTION_DIGITS = 2

NAVIGATION_KEYS = frozenset({"Backspace", "Delete", "ArrowLeft", "ArrowRight", "Tab"})

_NOT_NUMERIC = re.compile(r"[^0-9.]")
_LEADING_ZEROES = re.compile(r"^0+(?=[0-9])")
_DIGIT_KEY = re.compile(r"[0-9]")


class FormatMode(Enum):
    """How the fractional part is rendered."""
    LIVE = "live"
    FINAL = "final"


@dataclass(frozen=True)
class MaskConfig:
    """Per-field masking configuration.

    ``final_locale`` selects the locale used when a value is finalised (blur or
    programmatic set). ``None`` keeps it consistent with ``locale``; ``"en-US"``
    pins finalised values to the en-US convention regardless of ``locale``.
    """
    locale: str = DEFAULT_LOCALE
    final_locale: Optional[str] = None

    @property
    def decimal_separator(self) -> str:
        return locale_decimal_separator(self.locale)

    @property
    def effective_final_locale(self) -> str:
        return self.final_locale or self.locale


@dataclass(frozen=True)
class MaskResult:
    """Outcome of one masking event."""
    display: str
    value: Optional[float]
    caret: Optional[int] = None


def canonicalize(raw: str, decimal_separator: str) -> str:
    """Reduce display text to digits and ``.`` as the only decimal marker.

    Grouping characters, whitespace and anything else are dropped; every
    occurrence of the locale's decimal separator becomes ``.``.
    """
    kept = []
    for char in raw or "":
        if char == decimal_separator:
            kept.append(".")
        elif "0" <= char <= "9":
            kept.append(char)
    return "".join(kept)


def extract_numeric(raw: str) -> float:
    """Parse canonical text into a non-negative float with at most two decimals.

    Returns ``0`` for empty, unparseable or out-of-range text; never raises.
    """
    if not raw:
        return 0
    cleaned = _NOT_NUMERIC.sub("", raw)
    cleaned = _LEADING_ZEROES.sub("", cleaned)

    integer_part, dot, fraction = cleaned.partition(".")
    if dot:
        # Anything from a second decimal point onward is discarded
        fraction = fraction.split(".", 1)[0][:MAX_FRACTION_DIGITS]
        cleaned = f"{integer_part}.{fraction}"

    try:
        value = float(cleaned)
    except ValueError:
        return 0
    # Hundreds of pasted digits overflow to inf; treat them as unusable
    return value if math.isfinite(value) else 0


def typed_fraction(user_input: str, decimal_separator: str) -> str:
    """Digits typed after the first decimal separator, at most two."""
    segments = user_input.split(decimal_separator)
    if len(segments) < 2:
        return ""
    digits = "".join(_DIGIT_KEY.findall(segments[1]))
    return digits[:MAX_FRACTION_DIGITS]


def format_value(value: Optional[float], user_input: str, mode: FormatMode,
                 config: MaskConfig) -> str:
    """Render ``value`` for display.

    Whether a fractional part is shown at all depends only on whether
    ``user_input`` contains the decimal separator.
    """
    if value is None or not math.isfinite(value):
        return ""

    separator = config.decimal_separator
    integer_text = format_integer(value, config.locale)
    if separator not in user_input:
        return integer_text

    fraction = typed_fraction(user_input, separator)
    if mode is FormatMode.LIVE:
        if user_input.endswith(separator):
            return integer_text + separator
        return integer_text + separator + fraction

    min_digits = MAX_FRACTION_DIGITS if fraction else 0
    return format_fraction(value, config.effective_final_locale, min_digits, MAX_FRACTION_DIGITS)


def accept_key(key: str, current: str, selection_start: int, selection_end: int,
               decimal_separator: str) -> bool:
    """Decide whether ``key`` may be inserted into ``current``.

    A second decimal separator is only accepted when it replaces the existing
    one, either because the selection covers it or covers the whole text.
    """
    if key in NAVIGATION_KEYS:
        return True

    if key == decimal_separator:
        if decimal_separator not in current:
            return True
        start, end = sorted((selection_start, selection_end))
        selected = current[start:end]
        return decimal_separator in selected or (start == 0 and end == len(current))

    return len(key) == 1 and bool(_DIGIT_KEY.fullmatch(key))


def recompute_cursor(raw_before: str, formatted_after: str, caret_before: int,
                     decimal_separator: str = ".") -> int:
    """Map a caret offset in ``raw_before`` onto ``formatted_after``.

    The caret lands right after the same number of digits and separators it
    followed before the rewrite, so inserted or removed grouping characters do
    not move it relative to the digits.
    """
    def counts(char: str) -> bool:
        return "0" <= char <= "9" or char == decimal_separator

    caret_before = max(0, min(caret_before, len(raw_before)))
    prefix = "".join(char for char in raw_before[:caret_before] if counts(char))
    target = len(prefix)

    seen = 0
    index = 0
    while seen < target and index < len(formatted_after):
        if counts(formatted_after[index]):
            seen += 1
        index += 1

    # 0|.75: stay in front of the separator rather than after it
    if len(prefix) == 2 and prefix.startswith("0") and len(raw_before) > len(prefix):
        index -= 1
    # Separator typed into an empty field renders as "0.": step past the zero
    elif prefix == decimal_separator and len(raw_before) == 1:
        index += 1

    return max(0, min(index, len(formatted_after)))


def positional_text(value: float, decimal_separator: str) -> str:
    """Plain positional rendering of ``value`` using ``decimal_separator``."""
    text = np.format_float_positional(float(value), trim="-")
    return text.replace(".", decimal_separator)


class NumberMaskEngine(LoggableMixin):
    """Masking pipelines bound to a single field's configuration."""

    def __init__(self, config: Optional[MaskConfig] = None):
        LoggableMixin.__init__(self)
        self.config = config or MaskConfig()
        self.log_debug("Number mask engine initialized",
                       locale=self.config.locale,
                       final_locale=self.config.effective_final_locale)

    @property
    def decimal_separator(self) -> str:
        return self.config.decimal_separator

    def accept_key(self, key: str, current: str, selection_start: int, selection_end: int) -> bool:
        accepted = accept_key(key, current, selection_start, selection_end, self.decimal_separator)
        self._logger.log_keystroke(key, accepted, display=current,
                                   selection=(selection_start, selection_end))
        return accepted

    def extract(self, raw: str) -> float:
        """Numeric value of locale display text."""
        return extract_numeric(canonicalize(raw, self.decimal_separator))

    def format(self, value: Optional[float], user_input: str, mode: FormatMode) -> str:
        return format_value(value, user_input, mode, self.config)

    def recompute_cursor(self, raw_before: str, formatted_after: str, caret_before: int) -> int:
        return recompute_cursor(raw_before, formatted_after, caret_before, self.decimal_separator)

    def on_input(self, raw: str, caret: int) -> MaskResult:
        """Live reformat after the field's text changed."""
        if not raw.strip():
            return MaskResult("", None, 0)

        value = self.extract(raw)
        display = self.format(value, raw, FormatMode.LIVE)
        new_caret = self.recompute_cursor(raw, display, caret)
        self._logger.log_reformat(raw, display, FormatMode.LIVE.value,
                                  value=value, caret_before=caret, caret_after=new_caret)
        return MaskResult(display, value, new_caret)

    def on_blur(self, raw: str) -> MaskResult:
        """Final reformat once editing is complete."""
        if not raw.strip():
            return MaskResult("", None)

        value = self.extract(raw)
        display = self.format(value, raw, FormatMode.FINAL)
        self._logger.log_reformat(raw, display, FormatMode.FINAL.value, value=value)
        return MaskResult(display, value)

    def on_write(self, value: Optional[float]) -> str:
        """Display text for a programmatically set value."""
        if value is None or not math.isfinite(value):
            return ""
        display = self.format(value, positional_text(value, self.decimal_separator), FormatMode.FINAL)
        self._logger.log_reformat(str(value), display, FormatMode.FINAL.value, value=value)
        return display

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from fractions import Fraction
import re

from .logger import logger


INTEGER_RE = re.compile(r"^[0-9]+$")
FRACTION_RE = re.compile(r"^(?P<num>[0-9]+)/(?P<den>[0-9]+)$")
MIXED_RE = re.compile(r"^(?P<whole>[0-9]+)[ \t]+(?P<num>[0-9]+)/(?P<den>[0-9]+)$")
DECIMAL_RE = re.compile(r"^[0-9]*\.[0-9]+$|^[0-9]+\.[0-9]*$")
# longer amounts stay free text
MAX_AMOUNT_CHARS = 64


@dataclass(frozen=True)
class Quantity:
    """An ingredient amount: an exact rational, or the original text when it is not one."""

    value: Fraction | None
    raw: str

    @property
    def is_free_text(self) -> bool:
        return self.value is None

    @property
    def display(self) -> str:
        if self.value is None:
            return self.raw
        return format_quantity(self.value)

    def __str__(self) -> str:
        return self.display


def parse_quantity(text: str) -> Quantity:
    value = _parse_value(text.strip())
    if value is None:
        logger.debug("Amount {!r} kept as free text", text)
    return Quantity(value=value, raw=text)


def format_quantity(quantity: Fraction) -> str:
    if quantity.denominator == 1:
        return str(quantity.numerator)

    whole = quantity.numerator // quantity.denominator
    remainder = quantity - whole
    if whole == 0:
        return f"{remainder.numerator}/{remainder.denominator}"
    return f"{whole} {remainder.numerator}/{remainder.denominator}"


def _parse_value(text: str) -> Fraction | None:
    if not text or len(text) > MAX_AMOUNT_CHARS:
        return None

    if INTEGER_RE.match(text):
        return Fraction(int(text))

    match = MIXED_RE.match(text)
    if match:
        frac = _fraction(match.group("num"), match.group("den"))
        if frac is None:
            return None
        return int(match.group("whole")) + frac

    match = FRACTION_RE.match(text)
    if match:
        return _fraction(match.group("num"), match.group("den"))

    if DECIMAL_RE.match(text):
        try:
            return Fraction(Decimal(text))
        except InvalidOperation:
            return None
    return None


def _fraction(num_text: str, den_text: str) -> Fraction | None:
    try:
        return Fraction(int(num_text), int(den_text))
    except ZeroDivisionError:
        return None

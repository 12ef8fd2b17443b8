"""
dracpu/shared/quantity.py
─────────────────────────
Kubernetes resource quantities and the CPU normalisation rule.

A quantity string is a number followed by an optional suffix:

    decimal SI   n u m "" k M G T P E      "500m"  = 0.5
    binary SI    Ki Mi Gi Ti Pi Ei         "2Ki"   = 2048
    exponent     e<int> / E<int>           "1e3"   = 1000

The amount is kept as an exact Decimal so that "is this a whole number of
cores?" can be answered without float drift.

CPU normalisation
──────────────────
cpu_request_count() turns a container CPU request into whole cores:

    ≤ 0          → 0
    whole cores  → unchanged            "4"     → 4
    fractional   → rounded UP           "400m"  → 1, "1500m" → 2
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal, DecimalException, getcontext, localcontext
from typing import Optional, Union

_DECIMAL_SUFFIXES = {
    "n": Decimal("1e-9"),
    "u": Decimal("1e-6"),
    "m": Decimal("1e-3"),
    "": Decimal(1),
    "k": Decimal("1e3"),
    "M": Decimal("1e6"),
    "G": Decimal("1e9"),
    "T": Decimal("1e12"),
    "P": Decimal("1e15"),
    "E": Decimal("1e18"),
}

_BINARY_SUFFIXES = {
    "Ki": Decimal(1024),
    "Mi": Decimal(1024 ** 2),
    "Gi": Decimal(1024 ** 3),
    "Ti": Decimal(1024 ** 4),
    "Pi": Decimal(1024 ** 5),
    "Ei": Decimal(1024 ** 6),
}

_MAX_AMOUNT = Decimal(2 ** 63 - 1)
"""Largest magnitude accepted, in base units. Kubernetes caps quantities at int64."""

# Exponent form is tried before the bare "E" (exa) suffix.
_QUANTITY_RE = re.compile(
    r"(?P<number>[+-]?(?:\d+(?:\.\d*)?|\.\d+))"
    r"(?P<suffix>[eE][+-]?\d+|Ki|Mi|Gi|Ti|Pi|Ei|[numkMGTPE])?"
)


class QuantityParseError(ValueError):
    """Raised when a value cannot be read as a Kubernetes quantity."""


def _exact_context(*operands: Decimal):
    """A decimal context wide enough that multiplying `operands` never rounds."""
    ctx = getcontext().copy()
    digits = sum(len(d.as_tuple().digits) for d in operands)
    ctx.prec = max(ctx.prec, digits + 4)
    return localcontext(ctx)


def _checked(amount: Decimal, raw: object) -> Decimal:
    if not amount.is_finite() or amount.copy_abs() > _MAX_AMOUNT:
        raise QuantityParseError(f"quantity {raw!r} is out of range")
    return amount


@dataclass(frozen=True)
class Quantity:
    """
    An exact resource quantity.

    Attributes:
        amount: The value in base units (cores for CPU).
        text:   The original representation, kept for messages.
    """
    amount: Decimal
    text: str = ""

    @classmethod
    def parse(cls, raw: Union["Quantity", str, int, float]) -> "Quantity":
        """
        Build a Quantity from a string, number, or existing Quantity.

        Raises:
            QuantityParseError: if the value is not a valid quantity, is not
                finite, or its magnitude exceeds 2**63 - 1 base units.
        """
        if isinstance(raw, Quantity):
            return raw
        if isinstance(raw, bool):
            raise QuantityParseError(f"invalid quantity {raw!r}")
        if isinstance(raw, (int, float)):
            try:
                amount = Decimal(str(raw))
            except DecimalException as e:
                raise QuantityParseError(f"invalid quantity {raw!r}") from e
            return cls(amount=_checked(amount, raw), text=str(raw))
        if not isinstance(raw, str):
            raise QuantityParseError(f"invalid quantity {raw!r}")

        text = raw.strip()
        match = _QUANTITY_RE.fullmatch(text)
        if match is None:
            raise QuantityParseError(f"invalid quantity {raw!r}")

        number = Decimal(match.group("number"))
        suffix = match.group("suffix") or ""
        try:
            if suffix in _BINARY_SUFFIXES:
                scale = _BINARY_SUFFIXES[suffix]
            elif suffix in _DECIMAL_SUFFIXES:
                scale = _DECIMAL_SUFFIXES[suffix]
            else:
                scale = None
            with _exact_context(number, scale or Decimal(1)):
                if scale is None:
                    amount = number.scaleb(int(suffix[1:]))
                else:
                    amount = number * scale
        except (DecimalException, ValueError) as e:
            raise QuantityParseError(f"quantity {raw!r} is out of range") from e
        return cls(amount=_checked(amount, raw), text=text)

    def milli_value(self) -> int:
        """Value in thousandths, rounded up."""
        with _exact_context(self.amount, Decimal(1000)):
            return int((self.amount * 1000).to_integral_value(rounding=ROUND_CEILING))

    def value(self) -> int:
        """Value in whole units, rounded up."""
        with _exact_context(self.amount):
            return int(self.amount.to_integral_value(rounding=ROUND_CEILING))

    def as_int(self) -> Optional[int]:
        """The exact integer value, or None if the quantity is fractional."""
        integral = self.amount.to_integral_value()
        if integral != self.amount:
            return None
        return int(integral)

    def __str__(self) -> str:
        return self.text or str(self.amount)


def cpu_request_count(quantity: Quantity) -> int:
    """
    Return a CPU quantity as whole cores, rounding fractional values up.

    Returns 0 when the quantity is ≤ 0.
    """
    millis = quantity.milli_value()
    if millis <= 0:
        return 0
    value = quantity.value()
    if value * 1000 == millis:
        return value
    # 400m → 1, 500m → 1, 1500m → 2
    return (millis + 999) // 1000

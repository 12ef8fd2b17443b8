"""
tests/test_quantity.py
──────────────────────
Quantity parsing and the CPU rounding rule.

Test groups:
    Group 1 — Quantity.parse() (suffixes, numbers, malformed input)
    Group 2 — milli_value() / value() / as_int()
    Group 3 — cpu_request_count()
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from dracpu.shared.quantity import Quantity, QuantityParseError, cpu_request_count


# ─────────────────────────────────────────────────────────────────────────────
# Group 1: Quantity.parse()
# ─────────────────────────────────────────────────────────────────────────────

class TestParse:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("4", Decimal(4)),
            ("500m", Decimal("0.5")),
            ("1.5", Decimal("1.5")),
            ("2k", Decimal(2000)),
            ("2Ki", Decimal(2048)),
            ("1Mi", Decimal(1024 ** 2)),
            ("1e3", Decimal(1000)),
            ("5E-1", Decimal("0.5")),
            ("1E", Decimal("1e18")),
            ("+3", Decimal(3)),
            ("-1", Decimal(-1)),
            (" 2 ", Decimal(2)),
        ],
    )
    def test_parses_kubernetes_notation(self, raw: str, expected: Decimal) -> None:
        assert Quantity.parse(raw).amount == expected

    def test_accepts_numbers(self) -> None:
        assert Quantity.parse(4).amount == Decimal(4)
        assert Quantity.parse(0.25).amount == Decimal("0.25")

    def test_passes_quantity_through(self) -> None:
        q = Quantity.parse("3")
        assert Quantity.parse(q) is q

    @pytest.mark.parametrize("raw", ["", "abc", "5x", "1.2.3", "m", "1e", None, True])
    def test_rejects_malformed_input(self, raw) -> None:
        with pytest.raises(QuantityParseError):
            Quantity.parse(raw)

    @pytest.mark.parametrize(
        "raw",
        [
            "1e50000000",
            "1e999999",
            "9223372036854775808",
            "8Ei",
            "-1e19",
            float("nan"),
            float("inf"),
            float("-inf"),
            2 ** 63,
        ],
    )
    def test_rejects_out_of_range(self, raw) -> None:
        with pytest.raises(QuantityParseError):
            Quantity.parse(raw)

    def test_accepts_int64_bounds(self) -> None:
        assert Quantity.parse("9223372036854775807").as_int() == 2 ** 63 - 1
        assert Quantity.parse("-9223372036854775807").as_int() == -(2 ** 63 - 1)

    def test_parse_error_is_value_error(self) -> None:
        assert issubclass(QuantityParseError, ValueError)

    def test_str_keeps_original_text(self) -> None:
        assert str(Quantity.parse("500m")) == "500m"


# ─────────────────────────────────────────────────────────────────────────────
# Group 2: scaled values
# ─────────────────────────────────────────────────────────────────────────────

class TestScaledValues:

    def test_milli_value(self) -> None:
        assert Quantity.parse("500m").milli_value() == 500
        assert Quantity.parse("2").milli_value() == 2000

    def test_milli_value_rounds_sub_milli_precision_up(self) -> None:
        assert Quantity.parse("1n").milli_value() == 1
        assert Quantity.parse("1500u").milli_value() == 2

    def test_value_rounds_up(self) -> None:
        assert Quantity.parse("1500m").value() == 2
        assert Quantity.parse("3").value() == 3

    def test_as_int_exact(self) -> None:
        assert Quantity.parse("4").as_int() == 4
        assert Quantity.parse("2000m").as_int() == 2

    def test_as_int_fractional_is_none(self) -> None:
        assert Quantity.parse("1500m").as_int() is None
        assert Quantity.parse("0.5").as_int() is None

    def test_long_quantities_keep_every_digit(self) -> None:
        q = Quantity.parse("1234567890123456.7890000000000000001k")
        assert q.as_int() is None
        assert q.value() == 1234567890123456790
        assert q.milli_value() == 1234567890123456789001

    def test_long_fraction_rounds_up(self) -> None:
        q = Quantity.parse("1.00000000000000000000000000000001")
        assert q.value() == 2
        assert q.milli_value() == 1001
        assert cpu_request_count(q) == 2


# ─────────────────────────────────────────────────────────────────────────────
# Group 3: cpu_request_count()
# ─────────────────────────────────────────────────────────────────────────────

class TestCpuRequestCount:

    @pytest.mark.parametrize(
        "raw, cores",
        [
            ("0", 0),
            ("-2", 0),
            ("400m", 1),
            ("500m", 1),
            ("1500m", 2),
            ("1001m", 2),
            ("4", 4),
            ("4000m", 4),
        ],
    )
    def test_rounds_fractional_up(self, raw: str, cores: int) -> None:
        assert cpu_request_count(Quantity.parse(raw)) == cores

    def test_whole_cores_unchanged(self) -> None:
        for n in range(0, 65, 7):
            assert cpu_request_count(Quantity.parse(str(n))) == n

    def test_monotonic(self) -> None:
        raws = ["0", "1m", "400m", "999m", "1", "1001m", "1.5", "2", "2500m", "3"]
        counts = [cpu_request_count(Quantity.parse(r)) for r in raws]
        assert counts == sorted(counts)

"""
Value Normalizer Tests
======================
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from fieldmap.exceptions import NormalizationError
from fieldmap.normalization import normalize, parse_decimal, try_normalize, uses_percent_points


class TestCurrency:
    @pytest.mark.parametrize("raw,expected", [
        ("$1,200.50", 1200.5),
        ("1,200.50", 1200.5),
        ("(45.00)", -45.0),
        ("-$5", -5.0),
        ("€1.234,56", 1234.56),
        ("USD 15", 15.0),
        ("£ 99", 99.0),
        (42, 42.0),
        (19.99, 19.99),
    ])
    def test_parses_common_encodings(self, raw, expected):
        assert normalize(raw, "currency") == pytest.approx(expected)

    def test_text_is_unparseable(self):
        with pytest.raises(NormalizationError) as exc_info:
            normalize("n/a", "currency")
        assert exc_info.value.reason == "unparseable"
        assert exc_info.value.raw_value == "n/a"

    def test_boolean_is_unparseable(self):
        with pytest.raises(NormalizationError):
            normalize(True, "currency")


class TestNumber:
    def test_thousands_separators(self):
        assert normalize("12,345", "number") == 12345.0
        assert normalize("1.234.567", "number") == 1234567.0

    def test_ambiguous_separator_rejected(self):
        with pytest.raises(NormalizationError):
            normalize("1,2345", "number")

    def test_currency_symbol_not_a_plain_number(self):
        with pytest.raises(NormalizationError):
            normalize("$5", "number")

    def test_parse_decimal_trailing_minus(self):
        assert parse_decimal("12-") == Decimal("-12")


class TestPercentage:
    @pytest.mark.parametrize("raw,expected", [
        ("12%", 0.12),
        ("-3.5%", -0.035),
        ("12", 0.12),
        (0.25, 0.25),
        (45, 0.45),
        ("100 %", 1.0),
    ])
    def test_returns_fraction(self, raw, expected):
        assert normalize(raw, "percentage") == pytest.approx(expected)

    def test_column_scale_applies_to_every_cell(self):
        assert normalize("1", "percentage", percent_points=True) == pytest.approx(0.01)
        assert normalize("0.25", "percentage", percent_points=False) == pytest.approx(0.25)
        assert normalize("12%", "percentage", percent_points=False) == pytest.approx(0.12)

    @pytest.mark.parametrize("values,expected", [
        (["1", "2", "15"], True),
        (["0.1", "1", "0.75"], False),
        (["5%", "0.5", None, "n/a"], False),
        ([], False),
    ])
    def test_uses_percent_points(self, values, expected):
        assert uses_percent_points(values) is expected


class TestDate:
    LEAP_DAY = date(2024, 2, 29)

    @pytest.mark.parametrize("raw", [
        "2024-02-29",
        "2024-02-29T13:45:00",
        "2024-02-29T13:45:00Z",
        "02/29/2024",
        "29-02-2024",
        "20240229",
        "Feb 29, 2024",
        45351,
        "45351",
        1709164800,
        1709164800000,
        datetime(2024, 2, 29, 13, 5),
        date(2024, 2, 29),
    ])
    def test_recognized_formats(self, raw):
        assert normalize(raw, "date") == self.LEAP_DAY

    def test_day_first_fallback(self):
        assert normalize("13/02/2024", "date") == date(2024, 2, 13)

    def test_garbage_is_unparseable(self):
        with pytest.raises(NormalizationError) as exc_info:
            normalize("sometime soon", "date")
        assert exc_info.value.reason == "unparseable"


class TestStrings:
    def test_identifier_strips_integral_float(self):
        assert normalize(1001.0, "identifier") == "1001"

    def test_text_is_stripped(self):
        assert normalize("  Widget  ", "text") == "Widget"

    def test_categorical(self):
        assert normalize("Electronics", "categorical") == "Electronics"


class TestEmptyAndErrors:
    @pytest.mark.parametrize("raw", [None, "", "   ", float("nan")])
    def test_empty_values(self, raw):
        with pytest.raises(NormalizationError) as exc_info:
            normalize(raw, "currency")
        assert exc_info.value.reason == "empty"

    def test_unknown_type(self):
        with pytest.raises(ValueError) as exc_info:
            normalize("1", "complex")
        assert not isinstance(exc_info.value, NormalizationError)

    def test_try_normalize_returns_none(self):
        assert try_normalize("n/a", "currency") is None
        assert try_normalize("$3", "currency") == 3.0

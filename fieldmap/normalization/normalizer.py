"""
Value normalization.

Converts raw cell values into canonical semantic types:

- currency, number -> float
- percentage -> float fraction ("12%" -> 0.12). Bare numbers are read as
  points above 1 in absolute value, so a lone "1" means 100%; columns pick
  one scale with uses_percent_points()
- date -> datetime.date
- identifier, text, categorical -> stripped str

Failures raise NormalizationError with reason "empty" (missing cell) or
"unparseable". Callers that aggregate many cells catch it per cell.
"""

import logging
import math
import re
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from fieldmap.constants import ExpectedType, NormalizationReason
from fieldmap.exceptions import NormalizationError
from fieldmap.utils.value_utils import is_valid_value

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS = "$€£¥₹₩₽₺₪฿¢"
CURRENCY_CODES = (
    "USD", "EUR", "GBP", "JPY", "INR", "CAD", "AUD", "CHF", "CNY", "NZD",
    "SGD", "HKD", "SEK", "NOK", "DKK", "ZAR", "BRL", "MXN", "RMB",
)

_CURRENCY_CODE_RE = re.compile(r"\b(?:%s)\b" % "|".join(CURRENCY_CODES), re.IGNORECASE)
_CURRENCY_SYMBOL_RE = re.compile("[%s]" % re.escape(CURRENCY_SYMBOLS))
_PLAIN_DECIMAL_RE = re.compile(r"(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")
_COMMA_THOUSANDS_RE = re.compile(r"\d{1,3}(?:,\d{3})+(?:\.\d*)?")
_DOT_THOUSANDS_RE = re.compile(r"\d{1,3}(?:\.\d{3}){2,}")
_DECIMAL_COMMA_RE = re.compile(r"\d+,\d{1,2}")
_PERCENT_SUFFIX_RE = re.compile(r"\s*(?:%|pct|percent)\s*$", re.IGNORECASE)

# Ordered: the first format that parses wins. ISO 8601 is tried before these.
DATE_FORMATS = (
    "%m/%d/%Y",
    "%d-%m-%Y",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%m-%d-%Y",
    "%m/%d/%y",
    "%d.%m.%Y",
    "%Y.%m.%d",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%B %d %Y",
    "%d-%b-%Y",
    "%d-%b-%y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M %p",
    "%d-%m-%Y %H:%M",
    "%Y-%m",
    "%b %Y",
    "%B %Y",
)

# Spreadsheet serial day numbers count from this date (1900 date system)
SPREADSHEET_EPOCH = date(1899, 12, 30)
MAX_SPREADSHEET_SERIAL = 2958465  # 9999-12-31
EPOCH_SECONDS_RANGE = (1e9, 1e11)
EPOCH_MILLIS_RANGE = (1e11, 1e14)


def parse_decimal(text: str, allow_currency: bool = False) -> Decimal:
    """
    Parse a numeric string with thousands separators and sign conventions.

    Accepts "1,200.50", "1.200,50", "(45.00)", "-12", "12-" and, when
    ``allow_currency`` is set, currency symbols and ISO codes ("$1,200",
    "EUR 15").

    Raises:
        ValueError: If the text is not numeric
    """
    s = str(text).strip()
    negative = False

    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1].strip()

    if allow_currency:
        s = _CURRENCY_CODE_RE.sub("", s)
        s = _CURRENCY_SYMBOL_RE.sub("", s)
        s = s.strip()

    if s.startswith("-"):
        negative = not negative
        s = s[1:].strip()
    elif s.startswith("+"):
        s = s[1:].strip()
    elif s.endswith("-"):
        negative = not negative
        s = s[:-1].strip()

    s = s.replace(" ", "").replace("\u00a0", "").replace("'", "")

    if "," in s and "." in s:
        if s.rfind(",") > s.rfind("."):
            # 1.234,56
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif "," in s:
        if _COMMA_THOUSANDS_RE.fullmatch(s):
            s = s.replace(",", "")
        elif _DECIMAL_COMMA_RE.fullmatch(s):
            s = s.replace(",", ".")
        else:
            raise ValueError(f"Ambiguous separators in {text!r}")
    elif s.count(".") > 1 and _DOT_THOUSANDS_RE.fullmatch(s):
        s = s.replace(".", "")

    if not _PLAIN_DECIMAL_RE.fullmatch(s):
        raise ValueError(f"Not a number: {text!r}")

    try:
        value = Decimal(s)
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {text!r}") from e

    return -value if negative else value


def parse_date_string(text: str) -> date:
    """
    Parse a date string: ISO 8601 first, then DATE_FORMATS in order.

    Raises:
        ValueError: If no known layout matches
    """
    s = str(text).strip()

    iso = s[:-1] + "+00:00" if s.endswith("Z") else s
    try:
        return datetime.fromisoformat(iso).date()
    except ValueError:
        pass

    if len(s) == 8 and s.isdigit():
        try:
            return datetime.strptime(s, "%Y%m%d").date()
        except ValueError:
            pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue

    raise ValueError(f"Unrecognized date: {text!r}")


def date_from_serial(number: float) -> date:
    """
    Convert a spreadsheet serial day number or Unix epoch timestamp to a date.

    Raises:
        ValueError: If the number is outside every supported range
    """
    if not math.isfinite(number) or number <= 0:
        raise ValueError(f"Not a date serial: {number!r}")
    if number <= MAX_SPREADSHEET_SERIAL:
        return SPREADSHEET_EPOCH + timedelta(days=int(number))
    if EPOCH_SECONDS_RANGE[0] <= number < EPOCH_SECONDS_RANGE[1]:
        return datetime.fromtimestamp(number, tz=timezone.utc).date()
    if EPOCH_MILLIS_RANGE[0] <= number < EPOCH_MILLIS_RANGE[1]:
        return datetime.fromtimestamp(number / 1000, tz=timezone.utc).date()
    raise ValueError(f"Not a date serial: {number!r}")


def _is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _to_float(value: Decimal) -> float:
    result = float(value)
    if not math.isfinite(result):
        raise ValueError(f"Non-finite number: {value!r}")
    return result


def _to_currency(raw: Any) -> float:
    if _is_numeric(raw):
        return _to_float(Decimal(str(raw)))
    return _to_float(parse_decimal(raw, allow_currency=True))


def _to_number(raw: Any) -> float:
    if _is_numeric(raw):
        return _to_float(Decimal(str(raw)))
    return _to_float(parse_decimal(raw))


def _split_percentage(raw: Any) -> Tuple[Decimal, bool]:
    """Parse a percentage cell into (number, carried an explicit % sign)."""
    if _is_numeric(raw):
        return Decimal(str(raw)), False
    text = str(raw).strip()
    has_sign = bool(_PERCENT_SUFFIX_RE.search(text)) or text.startswith("%")
    text = _PERCENT_SUFFIX_RE.sub("", text).lstrip("%")
    return parse_decimal(text), has_sign


def _to_percentage(raw: Any, percent_points: Optional[bool] = None) -> float:
    value, has_sign = _split_percentage(raw)
    if percent_points is None:
        # Per cell: bare values above 1 are percentage points ("12" -> 0.12)
        percent_points = abs(value) > 1
    if has_sign or percent_points:
        value = value / Decimal(100)
    return _to_float(value)


def uses_percent_points(values: Iterable[Any]) -> bool:
    """
    Decide once for a whole column whether bare numbers are percentage points.

    A column is read as points when any bare value (no % sign) lies outside
    [-1, 1]; otherwise its bare values are already fractions. Passing the
    result to normalize() keeps "1" and "2" in the same column on one scale.

    Args:
        values: Raw cells of one percentage column

    Returns:
        True if bare numbers should be divided by 100
    """
    for value in values:
        if not is_valid_value(value) or isinstance(value, bool):
            continue
        try:
            number, has_sign = _split_percentage(value)
        except (ValueError, ArithmeticError):
            continue
        if not has_sign and abs(number) > 1:
            return True
    return False


def _to_date(raw: Any) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if _is_numeric(raw):
        return date_from_serial(float(raw))

    text = str(raw).strip()
    try:
        return parse_date_string(text)
    except ValueError:
        pass
    return date_from_serial(float(parse_decimal(text)))


def _to_string(raw: Any) -> str:
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw).strip()


_CONVERTERS: Dict[str, Callable[[Any], Any]] = {
    ExpectedType.CURRENCY: _to_currency,
    ExpectedType.NUMBER: _to_number,
    ExpectedType.PERCENTAGE: _to_percentage,
    ExpectedType.DATE: _to_date,
    ExpectedType.IDENTIFIER: _to_string,
    ExpectedType.TEXT: _to_string,
    ExpectedType.CATEGORICAL: _to_string,
}


def normalize(raw_value: Any, expected_type: str, percent_points: Optional[bool] = None) -> Any:
    """
    Convert a raw cell value to its canonical type.

    Args:
        raw_value: Raw cell value (str, int, float, bool, date or None)
        expected_type: One of ExpectedType.ALL
        percent_points: Percentage columns only. True divides bare numbers
            by 100, False keeps them as fractions, None decides per cell
            (a bare 1 stays 1.0 while a bare 2 becomes 0.02); see
            uses_percent_points()

    Returns:
        Canonical value (float, date or str depending on type)

    Raises:
        NormalizationError: If the value is empty or cannot be parsed
        ValueError: If expected_type is not a known type
    """
    converter = _CONVERTERS.get(expected_type)
    if converter is None:
        raise ValueError(f"Unknown expected type: {expected_type}")

    if not is_valid_value(raw_value):
        raise NormalizationError(NormalizationReason.EMPTY, raw_value, expected_type)

    if isinstance(raw_value, bool) and expected_type in (
        ExpectedType.CURRENCY, ExpectedType.NUMBER, ExpectedType.PERCENTAGE, ExpectedType.DATE
    ):
        raise NormalizationError(NormalizationReason.UNPARSEABLE, raw_value, expected_type)

    try:
        if expected_type == ExpectedType.PERCENTAGE:
            return _to_percentage(raw_value, percent_points)
        return converter(raw_value)
    except (ValueError, ArithmeticError, OverflowError, OSError) as e:
        raise NormalizationError(NormalizationReason.UNPARSEABLE, raw_value, expected_type) from e


def try_normalize(raw_value: Any, expected_type: str) -> Optional[Any]:
    """Like normalize(), but returns None instead of raising NormalizationError."""
    try:
        return normalize(raw_value, expected_type)
    except NormalizationError:
        return None

"""
Data Normalizers Module.

This module provides normalization functions for:
    - Monetary numerals found in OCR text
    - Day/month/year tokens and the canonical time zone

Author: ML Engineering Team
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Callable, Optional

from dateutil import parser as date_parser
from dateutil import tz

from config import get_config
from invoice_analyzer.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

DEFAULT_VAT_RATE = Decimal("0.17")
DEFAULT_DAY_FIRST = True
DEFAULT_TIMEZONE = "UTC"
DEFAULT_CENTURY_PIVOT = 50


def quantize_amount(value: Decimal) -> Decimal:
    """Round a monetary value to cents (half up)."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class AmountNormalizer:
    """
    Normalizes monetary numerals to ``Decimal`` values.

    Separator rule:
        - both "," and "." present: "," is a thousands separator
        - only "," present with at most 2 trailing digits: "," is the decimal point
        - otherwise every "," is a thousands separator

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.normalize("1,638.00")
        Decimal('1638.00')
        >>> normalizer.normalize("1638,00")
        Decimal('1638.00')
        >>> normalizer.normalize("₪ 1,638")
        Decimal('1638')
    """

    # Longer integer parts are OCR runs of digits, not amounts
    MAX_INTEGER_DIGITS = 12

    CURRENCY_SYMBOLS = ['₪', '$', '€', '£']
    CURRENCY_CODES = ['ILS', 'NIS', 'USD', 'EUR', 'GBP', 'ש"ח', 'ש״ח']

    def normalize(self, amount_str: Optional[str]) -> Optional[Decimal]:
        """
        Normalize an amount string.

        Args:
            amount_str: Numeral as captured from the text, possibly with
                       a currency marker.

        Returns:
            Non-negative Decimal, or None when the numeral can't be parsed.
        """
        if not amount_str:
            return None

        cleaned = self._clean_amount_string(amount_str)
        if not cleaned:
            return None

        cleaned = self._apply_separator_rule(cleaned)

        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            logger.debug(f"Unparsable amount skipped: {amount_str!r}")
            return None

        if not value.is_finite() or value < 0:
            return None
        if value.adjusted() >= self.MAX_INTEGER_DIGITS:
            logger.debug(f"Out-of-range amount skipped: {amount_str!r}")
            return None
        return value

    def _clean_amount_string(self, amount_str: str) -> str:
        """Remove currency markers and whitespace, keep digits and separators."""
        cleaned = amount_str
        for code in self.CURRENCY_CODES:
            cleaned = re.sub(re.escape(code), '', cleaned, flags=re.IGNORECASE)
        for symbol in self.CURRENCY_SYMBOLS:
            cleaned = cleaned.replace(symbol, '')
        return re.sub(r'[^\d.,]', '', cleaned)

    @staticmethod
    def _apply_separator_rule(amount_str: str) -> str:
        has_comma = ',' in amount_str
        has_period = '.' in amount_str

        if has_comma and has_period:
            return amount_str.replace(',', '')

        if has_comma:
            head, _, tail = amount_str.rpartition(',')
            if 0 < len(tail) <= 2:
                return head.replace(',', '') + '.' + tail
            return amount_str.replace(',', '')

        return amount_str


class DateNormalizer:
    """
    Builds canonical dates from day/month/year tokens.

    Dates are returned as timezone-aware datetimes at midnight in the
    configured canonical time zone.

    Attributes:
        day_first: Interpret the first token as the day
        timezone: Canonical tzinfo
        century_pivot: Two-digit years above the pivot map to 19xx

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.build("05", "03", "24")
        datetime.datetime(2024, 3, 5, 0, 0, tzinfo=tzutc())
    """

    def __init__(
        self,
        day_first: Optional[bool] = None,
        timezone: Optional[str] = None,
        century_pivot: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None
    ) -> None:
        """
        Initialize the date normalizer.

        Args:
            day_first: Override for analysis.date.day_first.
            timezone: Override for analysis.date.timezone (IANA name).
            century_pivot: Override for analysis.date.century_pivot.
            clock: Callable returning the current time; defaults to the
                  system clock in the canonical time zone.
        """
        if day_first is None:
            day_first = get_config("analysis.date.day_first", DEFAULT_DAY_FIRST)
        if timezone is None:
            timezone = get_config("analysis.date.timezone", DEFAULT_TIMEZONE)
        if century_pivot is None:
            century_pivot = get_config("analysis.date.century_pivot", DEFAULT_CENTURY_PIVOT)

        self.day_first = bool(day_first)
        self.century_pivot = int(century_pivot)
        self.timezone = tz.gettz(timezone)
        if self.timezone is None:
            logger.warning(f"Unknown time zone {timezone!r}, falling back to UTC")
            self.timezone = tz.UTC
        self._clock = clock

    def now(self) -> datetime:
        """Return the current time in the canonical time zone."""
        if self._clock is not None:
            return self._clock().astimezone(self.timezone)
        return datetime.now(self.timezone)

    def expand_year(self, year: str) -> Optional[int]:
        """
        Expand a year token.

        Example:
            >>> normalizer.expand_year("24")
            2024
            >>> normalizer.expand_year("85")
            1985
        """
        if not year or not year.isdigit():
            return None
        value = int(year)
        if len(year) == 2:
            return 1900 + value if value > self.century_pivot else 2000 + value
        if len(year) == 4:
            return value
        return None

    def build(self, first: str, second: str, year: str) -> Optional[datetime]:
        """
        Construct a date from three captured tokens.

        Args:
            first: First token (day when day_first is set).
            second: Second token (month when day_first is set).
            year: Two- or four-digit year token.

        Returns:
            Midnight of that day in the canonical time zone, or None when the
            tokens don't form a real date (e.g. 31/02).
        """
        full_year = self.expand_year(year)
        if full_year is None:
            return None

        day, month = (first, second) if self.day_first else (second, first)
        try:
            return datetime(full_year, int(month), int(day), tzinfo=self.timezone)
        except ValueError:
            logger.debug(f"Impossible date tokens skipped: {first}/{second}/{year}")
            return None

    def parse_textual(self, date_str: str) -> Optional[datetime]:
        """
        Parse a date written with a month name ("5 March 2024", "Jan 5, 2024").

        Returns:
            Midnight of that day in the canonical time zone, or None.
        """
        if not date_str:
            return None
        cleaned = re.sub(r'(\d+)(st|nd|rd|th)\b', r'\1', date_str, flags=re.IGNORECASE)
        try:
            parsed = date_parser.parse(cleaned, dayfirst=self.day_first, fuzzy=True)
        except (ValueError, OverflowError) as e:
            logger.debug(f"Could not parse date {date_str!r}: {e}")
            return None
        return datetime(parsed.year, parsed.month, parsed.day, tzinfo=self.timezone)

"""
Date Extraction Module.

Recovers the transaction date. Patterns are tried in order (labelled
transaction date first, then bare numeric dates with a 4-digit and then a
2-digit year, then dates written with a month name); the first pattern
producing a real date wins. Without one, the current time is returned.

Author: ML Engineering Team
"""

from datetime import datetime
from typing import Callable, List, Optional

from invoice_analyzer.extraction.analysis_result import AnalysisTrace
from invoice_analyzer.extraction.rules import PatternRule, first_match
from invoice_analyzer.postprocessor.normalizers import DEFAULT_DAY_FIRST, DateNormalizer
from invoice_analyzer.utils.logger import get_logger

logger = get_logger(__name__)

__all__ = ['DateExtractor', 'DEFAULT_DAY_FIRST']

_SEP = r'[/.\-]'
_DMY = rf'(\d{{1,2}}){_SEP}(\d{{1,2}}){_SEP}(\d{{4}}|\d{{2}})(?!\d)'
_MONTHS = r'(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?'

_TRANSACTION_LABEL = r'(?:תאריך[:\s]*(?:ה)?עסקה|transaction\s+date)'
_DATE_LABEL = r'(?:תאריך(?:\s*הפקה|\s*חשבונית)?|\b(?:invoice\s+|issue\s+)?date)'


class DateExtractor:
    """
    Extracts the transaction date from document text.

    Attributes:
        normalizer: DateNormalizer that builds canonical dates

    Example:
        >>> extractor = DateExtractor()
        >>> extractor.extract("Transaction date: 05/03/24")
        datetime.datetime(2024, 3, 5, 0, 0, tzinfo=tzutc())
    """

    def __init__(
        self,
        day_first: Optional[bool] = None,
        clock: Optional[Callable[[], datetime]] = None,
        normalizer: Optional[DateNormalizer] = None
    ) -> None:
        self.normalizer = normalizer or DateNormalizer(day_first=day_first, clock=clock)
        self.rules = self._build_rules()

    def _numeric(self, match) -> Optional[datetime]:
        return self.normalizer.build(match.group(1), match.group(2), match.group(3))

    def _textual(self, match) -> Optional[datetime]:
        return self.normalizer.parse_textual(match.group(0))

    def _build_rules(self) -> List[PatternRule]:
        return [
            PatternRule("transaction_date", rf'{_TRANSACTION_LABEL}[:\s]*{_DMY}', handler=self._numeric),
            PatternRule("labelled_date", rf'{_DATE_LABEL}[:\s]*{_DMY}', handler=self._numeric),
            PatternRule(
                "numeric_4_digit_year",
                rf'(?<!\d)(\d{{1,2}}){_SEP}(\d{{1,2}}){_SEP}(\d{{4}})(?!\d)',
                handler=self._numeric
            ),
            PatternRule(
                "numeric_2_digit_year",
                rf'(?<![\d/.\-])(\d{{1,2}}){_SEP}(\d{{1,2}}){_SEP}(\d{{2}})(?![\d/\-]|\.\d)',
                handler=self._numeric
            ),
            PatternRule(
                "month_name_date",
                rf'\b(?:\d{{1,2}}(?:st|nd|rd|th)?\s+{_MONTHS},?\s+\d{{4}}|{_MONTHS}\s+\d{{1,2}}(?:st|nd|rd|th)?,?\s+\d{{4}})\b',
                handler=self._textual
            ),
        ]

    def extract(self, text: str, trace: Optional[AnalysisTrace] = None) -> datetime:
        """
        Extract the transaction date.

        Args:
            text: Full document text.
            trace: Optional trace receiving the decision points.

        Returns:
            Timezone-aware datetime in the canonical zone.
        """
        hit = first_match(self.rules, text or "")
        if hit is not None:
            logger.debug(f"Date {hit.value.date()} matched by {hit.rule}")
            if trace is not None:
                trace.record('transaction_date', 'matched', hit.rule, hit.value)
            return hit.value

        now = self.normalizer.now()
        if trace is not None:
            trace.record('transaction_date', 'default', None, now)
        return now

"""
Service Description Extraction Module.

Recovers a short description of the goods or services on the document.
An explicit label wins; otherwise body lines are filtered and up to four
letter runs are kept, joined with "; ".

Author: ML Engineering Team
"""

from typing import List, Optional

from config import get_config
from invoice_analyzer.extraction.analysis_result import AnalysisTrace
from invoice_analyzer.extraction.rules import (
    GERSHAYIM, NAME_SCRIPT, PatternRule, compile_pattern
)
from invoice_analyzer.utils.helpers import split_lines
from invoice_analyzer.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_ITEMS = 4

_REST = r'([^\n\r]+)'

LABEL_RULES: List[PatternRule] = [
    PatternRule("service_provided_he", rf'ה?שירות\s*שסופק[:\s]*{_REST}'),
    PatternRule("service_description_he", rf'תיאור\s*ה?שירות[:\s]*{_REST}'),
    PatternRule("service_provided_en", rf'\bservices?\s+provided[:\s]*{_REST}'),
    PatternRule("description_en", rf'\bdescription\s*:[ \t]*{_REST}'),
]

SKIP_KEYWORDS_HE = [
    f'סה{GERSHAYIM}כ', f'מע{GERSHAYIM}מ', 'תאריך', 'מספר', 'לכבוד', 'טלפון', 'פקס',
    'כתובת', 'השירות שסופק', 'חשבונית', 'קבלה', 'עוסק', f'ח{GERSHAYIM}פ',
]
SKIP_KEYWORDS_EN = [
    'total', 'subtotal', 'vat', 'date', 'number', 'phone', 'tel', 'fax',
    'attention', 'address', 'invoice', 'receipt', 'email',
]
COLUMN_LABELS = {
    'פריט', 'תאור', 'תיאור', 'כמות', 'יחידה', 'מחיר',
    'item', 'description', 'quantity', 'qty', 'unit', 'price',
}

_SKIP = compile_pattern(
    '|'.join(SKIP_KEYWORDS_HE) + r'|\b(?:' + '|'.join(SKIP_KEYWORDS_EN) + r')\b'
)
_NUMBER_TOKEN = compile_pattern(r'^\d+[/-]\d+')
_BARE_NUMBER = compile_pattern(r'^[₪$]?\s*\d+[,.]?\d*\s*[₪$]?$')
_HAS_SCRIPT = compile_pattern(f'[{NAME_SCRIPT}]')
_SCRIPT_WORDS = compile_pattern(f'[{NAME_SCRIPT}]{{5,}}')
_SCRIPT_RUN = compile_pattern(rf'[{NAME_SCRIPT}][{NAME_SCRIPT}\s\'"״\-]*[{NAME_SCRIPT}]')


class ServiceDescriptionExtractor:
    """
    Extracts the service description.

    Attributes:
        max_items: Maximum number of phrases kept from the line scan
        min_line_length: Shorter body lines are skipped
        max_line_length: Longer body lines are skipped

    Example:
        >>> extractor = ServiceDescriptionExtractor()
        >>> extractor.extract("Service provided: Annual maintenance")
        'Annual maintenance'
    """

    def __init__(self, max_items: Optional[int] = None) -> None:
        self.max_items = max_items or get_config("analysis.service.max_items", DEFAULT_MAX_ITEMS)
        self.min_line_length = get_config("analysis.service.min_line_length", 10)
        self.max_line_length = get_config("analysis.service.max_line_length", 100)

    def from_label(self, text: str) -> Optional[str]:
        """First labelled description whose first line is 5-100 characters long."""
        for rule in LABEL_RULES:
            hit = rule.evaluate(text)
            if hit is None:
                continue
            value = hit.value.splitlines()[0].rstrip(': \t')
            if 5 <= len(value) <= 100:
                return value
        return None

    def is_candidate_line(self, line: str) -> bool:
        if not self.min_line_length <= len(line) <= self.max_line_length:
            return False
        if _SKIP.search(line):
            return False
        if _NUMBER_TOKEN.match(line) or _BARE_NUMBER.match(line):
            return False
        return bool(_HAS_SCRIPT.search(line))

    def from_lines(self, text: str) -> List[str]:
        """Scan body lines and keep up to max_items distinct letter runs."""
        candidates: List[str] = []
        for line in split_lines(text):
            if len(candidates) >= self.max_items:
                break
            if not self.is_candidate_line(line) or not _SCRIPT_WORDS.search(line):
                continue
            run = _SCRIPT_RUN.search(line)
            if run is None:
                continue
            phrase = ' '.join(run.group(0).split())
            if len(phrase) < 5 or phrase.lower() in COLUMN_LABELS or phrase in candidates:
                continue
            candidates.append(phrase)
        return candidates

    def extract(self, text: str, trace: Optional[AnalysisTrace] = None) -> Optional[str]:
        """
        Extract the service description.

        Args:
            text: Full document text.
            trace: Optional trace receiving the decision points.

        Returns:
            Description string, or None when nothing qualifies.
        """
        text = text or ""
        labelled = self.from_label(text)
        if labelled:
            if trace is not None:
                trace.record('service_provided', 'matched', 'label', labelled)
            return labelled

        candidates = self.from_lines(text)
        if not candidates:
            return None

        description = '; '.join(candidates)
        logger.debug(f"Service description from {len(candidates)} line(s)")
        if trace is not None:
            trace.record('service_provided', 'matched', 'line_scan', description)
        return description

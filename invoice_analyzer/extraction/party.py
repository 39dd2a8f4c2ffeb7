"""
Party Name Resolution Module.

Tells the issuing business apart from the document's addressee.

Resolution order:
    1. Remember the addressee ("לכבוד", "To the attention of", "Bill to")
    2. Header heuristic: the first acceptable line among the top lines
    3. Labelled patterns ("שם העסק:", "Company name:", "Seller:", ...)
    4. Default name

Author: ML Engineering Team
"""

import re
from typing import List, Optional

from config import get_config
from invoice_analyzer.extraction.analysis_result import AnalysisTrace, DEFAULT_BUSINESS_NAME
from invoice_analyzer.extraction.rules import (
    GERSHAYIM, NAME_SCRIPT, PatternRule, compile_pattern, first_match
)
from invoice_analyzer.utils.helpers import split_lines
from invoice_analyzer.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_HEADER_LINES = 12

ADDRESSEE_RULES: List[PatternRule] = [
    PatternRule(
        "addressee",
        r'(?:לכבוד|to\s+the\s+attention\s+of|attention|attn\.?|bill(?:ed)?\s+to)[:\s]*([^\n\r]{2,100})'
    ),
]

_NAME = r'([^\n\r]{2,100})'

LABEL_RULES: List[PatternRule] = [
    PatternRule("business_name_he", rf'שם\s*העסק[:\s]*{_NAME}'),
    PatternRule("company_name_he", rf'שם\s*החברה[:\s]*{_NAME}'),
    PatternRule("seller_name_he", rf'שם\s*המוכר[:\s]*{_NAME}'),
    PatternRule("business_he", rf'(?<![{NAME_SCRIPT}])עסק[:\s]+{_NAME}'),
    PatternRule("company_he", rf'(?<![{NAME_SCRIPT}])חברה[:\s]+{_NAME}'),
    PatternRule("before_transaction_invoice_he", r'^([^\n\r]{2,60}?)\s*חשבו(?:ן|נית)\s*עסקה'),
    PatternRule("before_invoice_he", r'^([^\n\r]{2,60}?)\s*חשבונית'),
    PatternRule("business_name_en", rf'\b(?:business|company|trade)\s+name[:\s]*{_NAME}'),
    PatternRule("seller_en", rf'\b(?:seller|vendor|supplier|issued\s+by)[:\s]+{_NAME}'),
    PatternRule("from_en", rf'^\s*from[:\s]+{_NAME}'),
]

# Hebrew words are matched as substrings since OCR often glues them to neighbours
EXCLUDED_WORDS_HE = [
    'חשבון', 'חשבונית', 'קבלה', 'לכבוד', 'עבור', 'מספר', 'עוסק', 'מורשה', 'ורשה',
    'ח.פ', 'ח"פ', 'ח״פ', 'טלפון', 'פקס', 'כתובת', 'רחוב', 'ת.ד', 'תאריך', 'שעה',
    'דף', 'העתק', 'מקור', 'תודה רבה',
]
EXCLUDED_WORDS_EN = [
    'invoice', 'receipt', 'tax', 'address', 'phone', 'fax', 'date', 'page',
    'copy', 'original', 'number', 'attention', 'attn', 'street', 'thank you',
    'dealer', 'vat', 'total', 'amount', 'bill to', 'email', 'www',
]

_EXCLUDED_EN = compile_pattern(r'\b(?:' + '|'.join(re.escape(w) for w in EXCLUDED_WORDS_EN) + r')\b|\btel\b\s*(?:[.:]|\d)')
_TAX_ID_RUN = compile_pattern(r'\d{8,9}')
_SCRIPT_RUN = compile_pattern(rf'[{NAME_SCRIPT}]{{3,}}')
_SUFFIX = compile_pattern(rf'בע{GERSHAYIM}?מ|\bltd\b\.?|\binc\b\.?')
_CUT_BEFORE = compile_pattern(r'חשבון|מספר|\binvoice\b|\breceipt\b|\bnumber\b')


class PartyNameResolver:
    """
    Resolves the issuing business name.

    Attributes:
        header_lines: How many top lines the header heuristic examines
        default_name: Name returned when nothing acceptable is found

    Example:
        >>> resolver = PartyNameResolver()
        >>> resolver.resolve("Invoice Number: 12345\\nACME Ltd")
        'ACME Ltd'
    """

    def __init__(self, header_lines: Optional[int] = None, default_name: Optional[str] = None) -> None:
        self.header_lines = header_lines or get_config(
            "analysis.business_name.header_lines", DEFAULT_HEADER_LINES
        )
        self.default_name = default_name or get_config(
            "analysis.business_name.default", DEFAULT_BUSINESS_NAME
        )

    def find_addressee(self, text: str) -> Optional[str]:
        hit = first_match(ADDRESSEE_RULES, text)
        return hit.value if hit else None

    def is_excluded(self, candidate: str, addressee: Optional[str] = None) -> bool:
        """
        Check whether a candidate can't be a business name.

        A candidate is excluded when it is shorter than 3 characters, holds a
        structural word, is purely numeric, holds an 8-9 digit run or
        contains the addressee.
        """
        candidate = candidate.strip()
        if len(candidate) < 3:
            return True
        if any(word in candidate for word in EXCLUDED_WORDS_HE):
            return True
        if _EXCLUDED_EN.search(candidate):
            return True
        if candidate.replace(' ', '').isdigit():
            return True
        if _TAX_ID_RUN.search(candidate):
            return True
        if addressee and addressee.strip() in candidate:
            return True
        return False

    def clean(self, candidate: str) -> str:
        """
        Post-process an accepted candidate.

        Keeps the first line, drops separators and 8-9 digit runs, keeps a
        trailing company suffix and cuts everything after other stop words.
        """
        lines = split_lines(candidate)
        if not lines:
            return ''
        name = _TAX_ID_RUN.sub('', lines[0])
        name = name.strip(' \t:-|')

        suffix = _SUFFIX.search(name)
        if suffix and suffix.start() > 0:
            name = name[:suffix.end()]
        else:
            cut = _CUT_BEFORE.search(name)
            if cut and cut.start() > 0:
                name = name[:cut.start()]

        return re.sub(r'\s+', ' ', name).strip(' \t:-|')

    def resolve(self, text: str, trace: Optional[AnalysisTrace] = None) -> str:
        """
        Resolve the business name.

        Args:
            text: Full document text.
            trace: Optional trace receiving the decision points.

        Returns:
            Non-empty business name.
        """
        text = text or ""
        addressee = self.find_addressee(text)
        if addressee:
            logger.debug(f"Addressee detected: {addressee!r}")
            if trace is not None:
                trace.record('addressee', 'matched', 'addressee', addressee)

        for line in split_lines(text)[:self.header_lines]:
            if self.is_excluded(line, addressee) or not _SCRIPT_RUN.search(line):
                if trace is not None:
                    trace.record('business_name', 'discarded', 'header_line', line)
                continue
            name = self.clean(line)
            if name:
                return self._accept(name, 'header_line', trace)

        hit = first_match(
            LABEL_RULES, text, accept=lambda h: not self.is_excluded(h.value, addressee)
        )
        if hit is not None:
            name = self.clean(hit.value)
            if name:
                return self._accept(name, hit.rule, trace)

        if trace is not None:
            trace.record('business_name', 'default', None, self.default_name)
        return self.default_name

    def _accept(self, name: str, rule: str, trace: Optional[AnalysisTrace]) -> str:
        logger.debug(f"Business name {name!r} accepted by {rule}")
        if trace is not None:
            trace.record('business_name', 'matched', rule, name)
        return name

"""
Identifier Extraction Module.

Recovers the tax/dealer identifier (8-9 digits) and the invoice number.
Both cascades carry label-before-number and number-before-label rules, as
OCR frequently swaps word order on right-to-left layouts. The first rule
producing a value wins.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from typing import List, Optional

from invoice_analyzer.extraction.analysis_result import AnalysisTrace
from invoice_analyzer.extraction.rules import GERSHAYIM, PatternRule, first_match
from invoice_analyzer.utils.logger import get_logger

logger = get_logger(__name__)

_TAX_ID = r'(?<!\d)(\d{8,9})(?!\d)'
_HP = rf'ח{GERSHAYIM}?\.?פ\.?'
_INVOICE_NO = r'([A-Z]{0,4}-?\d+(?:[/-]\d+)*)'


def _unqualified_number(match) -> Optional[str]:
    """Group 2 unless group 1 names a phone, order or account number."""
    if match.group(1):
        return None
    return match.group(2)

TAX_ID_RULES: List[PatternRule] = [
    PatternRule("licensed_dealer_number_he", rf'(?:מספר|מס[\'׳.]?)\s*עוסק\s*מורשה[:\s#]*{_TAX_ID}'),
    PatternRule("licensed_dealer_he", rf'עוסק\s*מורשה[:\s#]*{_TAX_ID}'),
    PatternRule("dealer_number_he", rf'(?:מספר|מס[\'׳.]?)\s*עוסק[:\s#]*{_TAX_ID}'),
    PatternRule("company_number_he", rf'{_HP}[:\s#]*{_TAX_ID}'),
    PatternRule("dealer_ocr_fragment_he", rf'ורשה[:\s#]*{_TAX_ID}'),
    PatternRule("number_before_label_he", rf'{_TAX_ID}\s*(?:ורשה|עוסק|{_HP})'),
    PatternRule(
        "tax_id_en",
        rf'\b(?:tax|vat|dealer|company|business)\s*(?:id|no\.?|number|reg(?:istration)?\.?(?:\s*no\.?)?)[:\s#]*{_TAX_ID}'
    ),
    PatternRule("number_before_label_en", rf'{_TAX_ID}\s*\(?(?:tax|vat|company)\s*(?:id|no\.?)'),
]

INVOICE_NUMBER_RULES: List[PatternRule] = [
    PatternRule("tax_invoice_receipt_number_he", rf'מספר\s*חשבונית\s*מס\s*קבלה[:\s#]*{_INVOICE_NO}'),
    PatternRule("tax_invoice_receipt_he", rf'חשבונית\s*מס\s*קבלה\s*(?:מספר|מס[\'׳.]|#)[:\s#]*{_INVOICE_NO}'),
    PatternRule("invoice_number_he", rf'מספר\s*חשבונית[:\s#]*{_INVOICE_NO}'),
    PatternRule("invoice_then_number_he", rf'חשבונית\s*(?:מס\s*)?(?:מספר|#)[:\s#]*{_INVOICE_NO}'),
    PatternRule("transaction_invoice_he", rf'חשבו(?:ן|נית)\s*עסקה[:\s#]*{_INVOICE_NO}'),
    PatternRule(
        "number_with_separator_he",
        r'(?:(טלפון|טל|פקס|נייד|הזמנה)[:\s.]*)?מספר[:\s#]*(\d+[/-]\d+)',
        handler=_unqualified_number
    ),
    PatternRule(
        "tax_invoice_receipt_number_en",
        rf'\btax\s+invoice[\s/\-]*receipt\s*(?:no\.?|number|#)[:\s#]*{_INVOICE_NO}'
    ),
    PatternRule("invoice_number_en", rf'\binvoice\s*(?:no\.?|number|num\.?|#)[:\s#]*{_INVOICE_NO}'),
    PatternRule("receipt_number_en", rf'\breceipt\s*(?:no\.?|number|#)[:\s#]*{_INVOICE_NO}'),
    PatternRule(
        "number_with_separator_en",
        r'\b(?:(phone|tel|fax|mobile|cell|order|account|acct|reg(?:istration)?)\.?\s*)?(?:number|no\.)[:\s#]*(\d+[/-]\d+)',
        handler=_unqualified_number
    ),
]


@dataclass(frozen=True)
class Identifiers:
    tax_id: Optional[str] = None
    invoice_number: Optional[str] = None


class IdentifierExtractor:
    """
    Extracts the tax ID and the invoice number.

    Example:
        >>> extractor = IdentifierExtractor()
        >>> extractor.extract('ח"פ 514123456\\nTax Invoice Receipt No. 02/000001')
        Identifiers(tax_id='514123456', invoice_number='02/000001')
    """

    def find_tax_id(self, text: str, trace: Optional[AnalysisTrace] = None) -> Optional[str]:
        return self._find('tax_id', TAX_ID_RULES, text, trace)

    def find_invoice_number(self, text: str, trace: Optional[AnalysisTrace] = None) -> Optional[str]:
        return self._find('invoice_number', INVOICE_NUMBER_RULES, text, trace)

    def extract(self, text: str, trace: Optional[AnalysisTrace] = None) -> Identifiers:
        text = text or ""
        return Identifiers(
            tax_id=self.find_tax_id(text, trace),
            invoice_number=self.find_invoice_number(text, trace),
        )

    @staticmethod
    def _find(field_name: str, rules: List[PatternRule], text: str,
              trace: Optional[AnalysisTrace]) -> Optional[str]:
        hit = first_match(rules, text)
        if hit is None:
            return None
        logger.debug(f"{field_name} {hit.value!r} matched by {hit.rule}")
        if trace is not None:
            trace.record(field_name, 'matched', hit.rule, hit.value)
        return hit.value

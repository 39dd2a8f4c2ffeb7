"""
Document Classification Module.

Assigns one of Receipt, TaxInvoice or TaxInvoiceReceipt. Rules run from
the most specific phrase to the most general token so that a "tax invoice
receipt" is never taken for a plain invoice.

Author: ML Engineering Team
"""

from typing import List, Optional

from invoice_analyzer.extraction.analysis_result import AnalysisTrace, DocumentType
from invoice_analyzer.extraction.rules import HEBREW, PatternRule, first_match
from invoice_analyzer.utils.logger import get_logger

logger = get_logger(__name__)


def _fixed(document_type: DocumentType):
    return lambda match: document_type


# Hebrew word boundaries; \b doesn't apply to Hebrew in every OCR encoding
_NB = f'(?<![{HEBREW}])'
_NA = f'(?![{HEBREW}])'

CLASSIFICATION_RULES: List[PatternRule] = [
    PatternRule(
        "tax_invoice_receipt",
        rf'{_NB}חשבונית[:\s]*מס[:\s]*קבלה|\btax\s+invoice[\s/\-]*receipt\b',
        handler=_fixed(DocumentType.TAX_INVOICE_RECEIPT)
    ),
    PatternRule(
        "tax_invoice",
        rf'{_NB}חשבונית[:\s]*מס{_NA}(?![:\s]*קבלה)|\btax\s+invoice\b(?![\s/\-]*receipt)',
        handler=_fixed(DocumentType.TAX_INVOICE)
    ),
    PatternRule(
        "business_invoice",
        rf'{_NB}חשבו(?:ן|נית)[:\s]*עסקה|\b(?:business|transaction)\s+invoice\b',
        handler=_fixed(DocumentType.TAX_INVOICE)
    ),
    PatternRule(
        "invoice_token",
        rf'{_NB}חשבונית{_NA}|\binvoice\b',
        handler=_fixed(DocumentType.TAX_INVOICE)
    ),
    PatternRule(
        "receipt_token",
        rf'{_NB}קבלה{_NA}|\breceipt\b',
        handler=_fixed(DocumentType.RECEIPT)
    ),
]


class DocumentClassifier:
    """
    Classifies a document by its type phrases.

    Example:
        >>> classifier = DocumentClassifier()
        >>> classifier.classify("Tax Invoice Receipt No. 02/000001")
        <DocumentType.TAX_INVOICE_RECEIPT: 'TaxInvoiceReceipt'>
    """

    def classify(
        self,
        text: str,
        invoice_number: Optional[str] = None,
        trace: Optional[AnalysisTrace] = None
    ) -> DocumentType:
        """
        Classify the document.

        Args:
            text: Full document text.
            invoice_number: Extracted invoice number, used when no phrase matches.
            trace: Optional trace receiving the decision points.

        Returns:
            The document type; never None.
        """
        hit = first_match(CLASSIFICATION_RULES, text or "")
        if hit is not None:
            document_type, rule = hit.value, hit.rule
        elif invoice_number:
            document_type, rule = DocumentType.TAX_INVOICE, "invoice_number_present"
        else:
            document_type, rule = DocumentType.RECEIPT, "fallback"

        logger.debug(f"Classified as {document_type.value} by {rule}")
        if trace is not None:
            trace.record('document_type', 'matched' if hit else 'default', rule, document_type)
        return document_type

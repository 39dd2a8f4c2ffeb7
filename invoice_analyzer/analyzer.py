"""
Invoice Analyzer Module.

This module provides the InvoiceAnalyzer class that runs every field
extractor over one document text and assembles the AnalysisResult.

Approach:
    Deterministic, rule-based extraction. Each extractor is an ordered
    cascade of pattern rules and runs independently over the same text;
    only the classifier consumes another extractor's output (the invoice
    number, for its fallback rule). Missing signal degrades to defaults,
    never to an error.

Author: ML Engineering Team
"""

import time
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Tuple

from invoice_analyzer.extraction.analysis_result import AnalysisResult, AnalysisTrace
from invoice_analyzer.extraction.amounts import AmountExtractor
from invoice_analyzer.extraction.classifier import DocumentClassifier
from invoice_analyzer.extraction.dates import DateExtractor
from invoice_analyzer.extraction.identifiers import IdentifierExtractor
from invoice_analyzer.extraction.party import PartyNameResolver
from invoice_analyzer.extraction.services import ServiceDescriptionExtractor
from invoice_analyzer.postprocessor.processor import PostProcessor
from invoice_analyzer.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class InvoiceAnalyzer:
    """
    Rule-based invoice/receipt text analyzer.

    Instances hold no per-document state, so one analyzer can serve
    concurrent calls for unrelated documents.

    Attributes:
        amounts: AmountExtractor instance
        dates: DateExtractor instance
        party: PartyNameResolver instance
        identifiers: IdentifierExtractor instance
        classifier: DocumentClassifier instance
        services: ServiceDescriptionExtractor instance
        post_processor: PostProcessor instance

    Example:
        >>> analyzer = InvoiceAnalyzer()
        >>> result = analyzer.analyze(ocr_text)
        >>> print(result.business_name, result.amount_after_vat)
        >>> result, trace = analyzer.analyze_with_trace(ocr_text)
    """

    def __init__(
        self,
        vat_rate: Optional[Decimal] = None,
        day_first: Optional[bool] = None,
        now: Optional[Callable[[], datetime]] = None
    ) -> None:
        """
        Initialize the analyzer.

        Args:
            vat_rate: Fallback VAT rate. If None, uses config (17%).
            day_first: Date token order. If None, uses config (day first).
            now: Clock used for the default transaction date. If None,
                the system clock in the canonical time zone is used.
        """
        self.amounts = AmountExtractor(vat_rate=vat_rate)
        self.dates = DateExtractor(day_first=day_first, clock=now)
        self.party = PartyNameResolver()
        self.identifiers = IdentifierExtractor()
        self.classifier = DocumentClassifier()
        self.services = ServiceDescriptionExtractor()
        self.post_processor = PostProcessor(vat_rate=self.amounts.vat_rate)

        logger.debug(f"InvoiceAnalyzer initialized (VAT fallback {self.amounts.vat_rate})")

    def analyze(self, text: Optional[str]) -> AnalysisResult:
        """
        Analyze one document text.

        Args:
            text: Text recovered from the document; empty means no signal.

        Returns:
            AnalysisResult; all defaults when nothing is recognised.
        """
        result, _ = self.analyze_with_trace(text)
        return result

    def analyze_with_trace(self, text: Optional[str]) -> Tuple[AnalysisResult, AnalysisTrace]:
        """
        Analyze one document text and return the decision trace with it.

        Args:
            text: Text recovered from the document.

        Returns:
            Tuple of (AnalysisResult, AnalysisTrace).
        """
        start_time = time.time()
        text = text or ""
        trace = AnalysisTrace()

        if not text.strip():
            logger.warning("Empty document text, returning default record")

        before_vat, after_vat = self.amounts.extract(text, trace)
        transaction_date = self.dates.extract(text, trace)
        business_name = self.party.resolve(text, trace)
        identifiers = self.identifiers.extract(text, trace)
        document_type = self.classifier.classify(text, identifiers.invoice_number, trace)
        service_provided = self.services.extract(text, trace)

        candidate = AnalysisResult(
            transaction_date=transaction_date,
            document_type=document_type,
            amount_before_vat=before_vat,
            amount_after_vat=after_vat,
            business_name=business_name,
            tax_id=identifiers.tax_id,
            invoice_number=identifiers.invoice_number,
            service_provided=service_provided,
        )
        result = self.post_processor.process(candidate, trace)

        elapsed = time.time() - start_time
        logger.info(
            f"Analyzed document: {result.document_type.value}, "
            f"{result.business_name!r}, total {result.amount_after_vat} ({elapsed:.3f}s)"
        )
        return result, trace

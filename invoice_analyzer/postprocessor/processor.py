"""
Main Post-Processor Module.

This module provides the PostProcessor class that turns the extractors'
candidate record into the final, invariant-respecting AnalysisResult.

Operations:
    - Quantise and clamp amounts, re-deriving the pre-VAT amount when the
      pair is out of order
    - Drop identifiers that don't match their format
    - Default an empty business name
    - Truncate the service description
    - Record every correction in the trace

Author: ML Engineering Team
"""

import dataclasses
from decimal import Decimal
from typing import Optional

from config import get_config
from invoice_analyzer.extraction.analysis_result import (
    AnalysisResult, AnalysisTrace, DEFAULT_BUSINESS_NAME
)
from invoice_analyzer.utils.logger import get_logger
from .normalizers import DEFAULT_VAT_RATE, ZERO, quantize_amount
from .validators import AmountValidator, FieldValidator

# Initialize module logger
logger = get_logger(__name__)

DEFAULT_SERVICE_MAX_LENGTH = 400


class PostProcessor:
    """
    Final validation pass over an analysis result.

    Attributes:
        vat_rate: Rate used when the amount pair has to be re-derived
        default_business_name: Name used when the resolved one is empty
        service_max_length: Maximum length of the service description

    Example:
        >>> processor = PostProcessor()
        >>> final = processor.process(candidate, trace)
        >>> final.amount_after_vat >= final.amount_before_vat >= 0
        True
    """

    def __init__(self, vat_rate: Optional[Decimal] = None) -> None:
        if vat_rate is None:
            vat_rate = get_config("analysis.vat_rate", DEFAULT_VAT_RATE)
        self.vat_rate = Decimal(str(vat_rate))
        self.default_business_name = get_config(
            "analysis.business_name.default", DEFAULT_BUSINESS_NAME
        )
        self.service_max_length = get_config(
            "analysis.service.max_length", DEFAULT_SERVICE_MAX_LENGTH
        )

        self.amount_validator = AmountValidator()
        self.field_validator = FieldValidator()

    def process(self, result: AnalysisResult, trace: Optional[AnalysisTrace] = None) -> AnalysisResult:
        """
        Validate a candidate result and return a corrected copy.

        Args:
            result: Record assembled from the extractors.
            trace: Optional trace receiving every correction.

        Returns:
            New AnalysisResult satisfying the record invariants.
        """
        trace = trace if trace is not None else AnalysisTrace()
        before, after = self._process_amounts(result, trace)

        processed = dataclasses.replace(
            result,
            amount_before_vat=before,
            amount_after_vat=after,
            business_name=self._process_business_name(result.business_name, trace),
            tax_id=self._process_identifier(
                'tax_id', result.tax_id, self.field_validator.validate_tax_id, trace
            ),
            invoice_number=self._process_identifier(
                'invoice_number', result.invoice_number,
                self.field_validator.validate_invoice_number, trace
            ),
            service_provided=self._process_service(result.service_provided, trace),
        )
        return processed

    def _process_amounts(self, result: AnalysisResult, trace: AnalysisTrace):
        before = self._clamp('amount_before_vat', result.amount_before_vat, trace)
        after = self._clamp('amount_after_vat', result.amount_after_vat, trace)

        valid, message = self.amount_validator.validate_pair(before, after)
        if not valid:
            logger.debug(f"Amount pair corrected: {message}")
            before = quantize_amount(after / (1 + self.vat_rate))
            trace.record('amount_before_vat', 'corrected', 'total_div_rate', before)
        return before, after

    def _clamp(self, field_name: str, amount: Optional[Decimal], trace: AnalysisTrace) -> Decimal:
        valid, message = self.amount_validator.validate(amount)
        if not valid:
            logger.debug(f"{field_name} reset to zero: {message}")
            trace.record(field_name, 'corrected', 'clamp', ZERO)
            return ZERO
        return quantize_amount(amount)

    def _process_business_name(self, name: Optional[str], trace: AnalysisTrace) -> str:
        name = (name or '').strip()
        valid, message = self.field_validator.validate_business_name(name)
        if not valid:
            logger.debug(f"Business name defaulted: {message}")
            trace.record('business_name', 'corrected', 'default', self.default_business_name)
            return self.default_business_name
        return name

    @staticmethod
    def _process_identifier(field_name, value, validate, trace: AnalysisTrace) -> Optional[str]:
        if value is None:
            return None
        valid, message = validate(value)
        if not valid:
            logger.debug(f"{field_name} dropped: {message}")
            trace.record(field_name, 'corrected', 'format', value)
            return None
        return value

    def _process_service(self, service: Optional[str], trace: AnalysisTrace) -> Optional[str]:
        if service is None:
            return None
        service = service.strip()
        if not service:
            return None
        if len(service) > self.service_max_length:
            service = service[:self.service_max_length].rstrip()
            trace.record('service_provided', 'corrected', 'truncate', len(service))
        return service

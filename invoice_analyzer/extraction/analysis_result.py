"""
Analysis Result Data Classes.

This module defines the engine's output record and the structured decision
trace returned alongside it.

Author: ML Engineering Team
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

DEFAULT_BUSINESS_NAME = "Unknown Business"


class DocumentType(str, Enum):
    """Classification of a financial document."""

    RECEIPT = "Receipt"
    TAX_INVOICE = "TaxInvoice"
    TAX_INVOICE_RECEIPT = "TaxInvoiceReceipt"

    @property
    def display_name(self) -> str:
        """Bilingual label, e.g. 'חשבונית מס (Tax Invoice)'."""
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    DocumentType.RECEIPT: "קבלה (Receipt)",
    DocumentType.TAX_INVOICE: "חשבונית מס (Tax Invoice)",
    DocumentType.TAX_INVOICE_RECEIPT: "חשבונית מס קבלה (Tax Invoice Receipt)",
}


@dataclass(frozen=True)
class AnalysisResult:
    """
    Structured record recovered from one document's text.

    Instances are immutable. Amounts are Decimals quantised to cents and the
    transaction date is timezone-aware in the canonical zone.

    Attributes:
        transaction_date: Transaction date (or analysis time when none found)
        document_type: Receipt, TaxInvoice or TaxInvoiceReceipt
        amount_before_vat: Pre-VAT amount, non-negative
        amount_after_vat: Payable total, never below amount_before_vat
        business_name: Issuing business, never empty
        tax_id: 8-9 digit dealer/company number, if found
        invoice_number: Invoice number, if found
        service_provided: Up to 4 semicolon-joined phrases, if found

    Example:
        >>> result = analyzer.analyze(text)
        >>> result.document_type
        <DocumentType.TAX_INVOICE: 'TaxInvoice'>
        >>> print(result.to_json())
    """
    transaction_date: datetime
    document_type: DocumentType = DocumentType.RECEIPT
    amount_before_vat: Decimal = Decimal("0.00")
    amount_after_vat: Decimal = Decimal("0.00")
    business_name: str = DEFAULT_BUSINESS_NAME
    tax_id: Optional[str] = None
    invoice_number: Optional[str] = None
    service_provided: Optional[str] = None

    @property
    def is_receipt(self) -> bool:
        return self.document_type is DocumentType.RECEIPT

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert result to a JSON-ready dictionary.

        Keys follow the persistence record's camelCase naming; amounts are
        strings with two decimal places and the date is ISO 8601.
        """
        return {
            'documentType': self.document_type.value,
            'isReceipt': self.is_receipt,
            'amountBeforeVat': f"{self.amount_before_vat:.2f}",
            'amountAfterVat': f"{self.amount_after_vat:.2f}",
            'transactionDate': self.transaction_date.isoformat(),
            'businessName': self.business_name,
            'taxId': self.tax_id,
            'invoiceNumber': self.invoice_number,
            'serviceProvided': self.service_provided,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


@dataclass(frozen=True)
class TraceEvent:
    """
    One decision point of an analysis.

    Attributes:
        field: Result field the decision concerns (e.g. 'amount_after_vat')
        outcome: 'matched', 'discarded', 'derived', 'corrected' or 'default'
        rule: Name of the rule or step involved
        value: Value produced or rejected, if any
    """
    field: str
    outcome: str
    rule: Optional[str] = None
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        value = self.value
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, Decimal):
            value = str(value)
        elif isinstance(value, datetime):
            value = value.isoformat()
        return {'field': self.field, 'outcome': self.outcome, 'rule': self.rule, 'value': value}


@dataclass
class AnalysisTrace:
    """
    Ordered record of the decisions taken while analysing one text.

    A fresh trace is created for every analysis call and returned to the
    caller together with the result.

    Example:
        >>> result, trace = analyzer.analyze_with_trace(text)
        >>> [e.rule for e in trace.for_field('amount_after_vat')]
        ['total_to_pay_en']
    """
    events: List[TraceEvent] = field(default_factory=list)

    def record(
        self,
        field_name: str,
        outcome: str,
        rule: Optional[str] = None,
        value: Any = None
    ) -> None:
        self.events.append(TraceEvent(field_name, outcome, rule, value))

    def for_field(self, field_name: str) -> List[TraceEvent]:
        return [event for event in self.events if event.field == field_name]

    def outcomes(self, field_name: str) -> List[str]:
        return [event.outcome for event in self.for_field(field_name)]

    def to_list(self) -> List[Dict[str, Any]]:
        return [event.to_dict() for event in self.events]

    def __len__(self) -> int:
        return len(self.events)

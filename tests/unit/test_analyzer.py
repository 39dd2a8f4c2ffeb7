"""Unit tests for the InvoiceAnalyzer orchestrator."""

import json
from datetime import datetime
from decimal import Decimal

import pytest
from dateutil import tz

from invoice_analyzer import AnalysisResult, DocumentType, InvoiceAnalyzer


class TestDefaults:
    """Inputs without any recognisable signal."""

    @pytest.mark.parametrize("text", ["", "   \n  ", "--- 42 ---", None])
    def test_full_default_record(
        self, analyzer: InvoiceAnalyzer, fixed_now: datetime, text: str
    ) -> None:
        assert analyzer.analyze(text) == AnalysisResult(transaction_date=fixed_now)

    def test_default_field_values(self, analyzer: InvoiceAnalyzer) -> None:
        result = analyzer.analyze("")
        assert result.document_type is DocumentType.RECEIPT
        assert result.amount_before_vat == Decimal("0.00")
        assert result.amount_after_vat == Decimal("0.00")
        assert result.business_name == "Unknown Business"
        assert result.tax_id is None
        assert result.invoice_number is None
        assert result.service_provided is None

    def test_default_date_without_injected_clock(self) -> None:
        before = datetime.now(tz.UTC)
        result = InvoiceAnalyzer().analyze("")
        assert before <= result.transaction_date <= datetime.now(tz.UTC)


class TestScenarios:
    """End-to-end analysis of complete documents."""

    def test_english_scenario(self, analyzer: InvoiceAnalyzer, scenario_text: str) -> None:
        result = analyzer.analyze(scenario_text)

        assert result.business_name == "ACME Ltd"
        assert result.document_type is DocumentType.TAX_INVOICE
        assert result.amount_after_vat == Decimal("1170.00")
        assert result.amount_before_vat == Decimal("1000.00")
        assert result.transaction_date == datetime(2024, 1, 5, tzinfo=tz.UTC)

    def test_full_english_invoice(self, analyzer: InvoiceAnalyzer, english_invoice_text: str) -> None:
        result = analyzer.analyze(english_invoice_text)

        assert result.tax_id == "513987654"
        assert result.invoice_number == "INV-2024-001"
        assert result.service_provided == "Website redesign and hosting"
        assert result.amount_before_vat == Decimal("1000.00")
        assert result.amount_after_vat == Decimal("1170.00")

    def test_hebrew_invoice(self, analyzer: InvoiceAnalyzer, hebrew_invoice_text: str) -> None:
        result = analyzer.analyze(hebrew_invoice_text)

        assert result.business_name == 'מוסך הגליל בע"מ'
        assert result.document_type is DocumentType.TAX_INVOICE_RECEIPT
        assert result.amount_before_vat == Decimal("1400.00")
        assert result.amount_after_vat == Decimal("1638.00")
        assert result.transaction_date == datetime(2024, 3, 12, tzinfo=tz.UTC)
        assert result.tax_id == "514123456"
        assert result.invoice_number == "02/000123"
        assert result.service_provided == "טיפול תקופתי לרכב"
        assert result.is_receipt is False


class TestProperties:
    """Behaviour that holds across inputs."""

    @pytest.mark.parametrize("text", [
        "Total: 100\nSubtotal: 500",
        "Total: 1,170.00\nVAT: 2,000.00",
        "Subtotal: 1,000.00",
        "Grand total 99,90",
        'סה"כ 1638,00',
    ])
    def test_amount_invariant(self, analyzer: InvoiceAnalyzer, text: str) -> None:
        result = analyzer.analyze(text)
        assert result.amount_after_vat >= result.amount_before_vat >= 0

    @pytest.mark.parametrize("numeral", ["1,638.00", "1638.00", "1638,00"])
    def test_numeral_conventions(self, analyzer: InvoiceAnalyzer, numeral: str) -> None:
        result = analyzer.analyze(f"Total to pay: {numeral}")
        assert result.amount_after_vat == Decimal("1638.00")

    def test_classification_precedence(self, analyzer: InvoiceAnalyzer) -> None:
        result = analyzer.analyze("Tax Invoice Receipt No. 02/000001")
        assert result.document_type is DocumentType.TAX_INVOICE_RECEIPT
        assert result.invoice_number == "02/000001"

    @pytest.mark.parametrize("year, expected", [("24", 2024), ("85", 1985)])
    def test_two_digit_year(self, analyzer: InvoiceAnalyzer, year: str, expected: int) -> None:
        result = analyzer.analyze(f"Transaction date: 05/03/{year}")
        assert result.transaction_date == datetime(expected, 3, 5, tzinfo=tz.UTC)

    def test_business_name_exclusion(self, analyzer: InvoiceAnalyzer) -> None:
        result = analyzer.analyze("Invoice Number: 12345\nACME Ltd")
        assert result.business_name == "ACME Ltd"

    def test_invoice_number_fallback_classification(self, analyzer: InvoiceAnalyzer) -> None:
        result = analyzer.analyze("ACME Ltd\nNo. 12/345")
        assert result.invoice_number == "12/345"
        assert result.document_type is DocumentType.TAX_INVOICE

    @pytest.mark.parametrize("text", [
        "Total: 12345678901234567890123456789",
        "ACME Ltd\n₪ 7290000000000123456789012345",
        "Subtotal: 99999999999999999999999999999999\nVAT 17%: 99999999999999999999999999",
    ])
    def test_digit_runs_never_raise(self, analyzer: InvoiceAnalyzer, text: str) -> None:
        result = analyzer.analyze(text)
        assert result.amount_after_vat == Decimal("0.00")
        assert result.amount_before_vat == Decimal("0.00")

    def test_phone_number_is_not_an_invoice_number(self, analyzer: InvoiceAnalyzer) -> None:
        result = analyzer.analyze("ACME Ltd\nPhone number: 03-5551234\nTotal: 100.00")
        assert result.invoice_number is None
        assert result.document_type is DocumentType.RECEIPT
        assert result.business_name == "ACME Ltd"

    def test_vat_rate_override(self, clock) -> None:
        result = InvoiceAnalyzer(vat_rate=Decimal("0.18"), now=clock).analyze("Total: 1,180.00")
        assert result.amount_before_vat == Decimal("1000.00")

    def test_results_are_immutable(self, analyzer: InvoiceAnalyzer, scenario_text: str) -> None:
        result = analyzer.analyze(scenario_text)
        with pytest.raises(AttributeError):
            result.business_name = "Other"


class TestTrace:
    """Tests for analyze_with_trace."""

    def test_largest_total_wins(self, analyzer: InvoiceAnalyzer) -> None:
        _, trace = analyzer.analyze_with_trace("Total: 500.00\nGrand total: 1,170.00")
        matched = [e for e in trace.for_field("amount_after_vat") if e.outcome == "matched"]
        assert [(e.rule, e.value) for e in matched] == [("grand_total_en", Decimal("1170.00"))]

    def test_first_pre_vat_wins(self, analyzer: InvoiceAnalyzer) -> None:
        result, trace = analyzer.analyze_with_trace("Subtotal: 900.00\nSubtotal: 1,000.00")
        assert result.amount_before_vat == Decimal("900.00")
        matched = [e for e in trace.for_field("amount_before_vat") if e.outcome == "matched"]
        assert [e.value for e in matched] == [Decimal("900.00")]

    def test_scenario_records_derivation(self, analyzer: InvoiceAnalyzer, scenario_text: str) -> None:
        _, trace = analyzer.analyze_with_trace(scenario_text)
        derived = [e for e in trace.for_field("amount_before_vat") if e.outcome == "derived"]
        assert derived[0].rule == "total_minus_vat"
        assert "discarded" in trace.outcomes("amount_after_vat")

    def test_default_record_traced(self, analyzer: InvoiceAnalyzer) -> None:
        _, trace = analyzer.analyze_with_trace("")
        assert trace.outcomes("transaction_date") == ["default"]
        assert trace.outcomes("business_name") == ["default"]

    def test_trace_is_per_call(self, analyzer: InvoiceAnalyzer, scenario_text: str) -> None:
        _, first = analyzer.analyze_with_trace(scenario_text)
        _, second = analyzer.analyze_with_trace(scenario_text)
        assert first is not second
        assert len(first) == len(second)

    def test_trace_serialises(self, analyzer: InvoiceAnalyzer, hebrew_invoice_text: str) -> None:
        _, trace = analyzer.analyze_with_trace(hebrew_invoice_text)
        assert json.loads(json.dumps(trace.to_list(), ensure_ascii=False))

"""Unit tests for validators and the final post-processing pass."""

from datetime import datetime
from decimal import Decimal

import pytest
from dateutil import tz

from invoice_analyzer.extraction.analysis_result import AnalysisResult, AnalysisTrace
from invoice_analyzer.postprocessor import AmountValidator, FieldValidator, PostProcessor

DATE = datetime(2024, 1, 5, tzinfo=tz.UTC)


class TestAmountValidator:
    """Tests for AmountValidator."""

    def test_valid_amount(self) -> None:
        assert AmountValidator().validate(Decimal("10.00")) == (True, "Valid amount")

    def test_negative_amount(self) -> None:
        assert AmountValidator().validate(Decimal("-1")) == (False, "Amount cannot be negative")

    def test_missing_amount(self) -> None:
        assert AmountValidator().is_valid(None) is False

    def test_large_amount_valid(self) -> None:
        assert AmountValidator().is_valid(Decimal("2500000000.00")) is True

    def test_pair_order(self) -> None:
        validator = AmountValidator()
        assert validator.validate_pair(Decimal("1000"), Decimal("1170"))[0] is True
        assert validator.validate_pair(Decimal("1170"), Decimal("1000"))[0] is False


class TestFieldValidator:
    """Tests for FieldValidator."""

    @pytest.mark.parametrize("value, expected", [
        ("514123456", True),
        ("51412345", True),
        ("5141234", False),
        ("5141234567", False),
        ("51412345a", False),
        ("", False),
    ])
    def test_tax_id(self, value: str, expected: bool) -> None:
        assert FieldValidator().validate_tax_id(value)[0] is expected

    @pytest.mark.parametrize("value, expected", [
        ("02/000001", True),
        ("INV-2024-001", True),
        ("12345", True),
        ("abc", False),
        ("12 34", False),
    ])
    def test_invoice_number(self, value: str, expected: bool) -> None:
        assert FieldValidator().validate_invoice_number(value)[0] is expected

    def test_business_name(self) -> None:
        validator = FieldValidator()
        assert validator.validate_business_name("ACME Ltd")[0] is True
        assert validator.validate_business_name("  ")[0] is False
        assert validator.validate_business_name("12-34")[0] is False


class TestPostProcessor:
    """Tests for PostProcessor.process."""

    @pytest.fixture
    def processor(self) -> PostProcessor:
        return PostProcessor()

    def test_valid_result_unchanged(self, processor: PostProcessor) -> None:
        result = AnalysisResult(
            transaction_date=DATE,
            amount_before_vat=Decimal("1000.00"),
            amount_after_vat=Decimal("1170.00"),
            business_name="ACME Ltd",
            tax_id="514123456",
            invoice_number="02/000001",
        )
        assert processor.process(result) == result

    def test_inverted_pair_rederived(self, processor: PostProcessor) -> None:
        trace = AnalysisTrace()
        result = AnalysisResult(
            transaction_date=DATE,
            amount_before_vat=Decimal("200"),
            amount_after_vat=Decimal("117"),
        )

        processed = processor.process(result, trace)

        assert processed.amount_before_vat == Decimal("100.00")
        assert processed.amount_after_vat == Decimal("117.00")
        assert "corrected" in trace.outcomes("amount_before_vat")

    def test_negative_amount_clamped(self, processor: PostProcessor) -> None:
        result = AnalysisResult(transaction_date=DATE, amount_after_vat=Decimal("-5"))
        processed = processor.process(result)
        assert processed.amount_after_vat == Decimal("0.00")
        assert processed.amount_before_vat == Decimal("0.00")

    def test_amounts_quantised(self, processor: PostProcessor) -> None:
        result = AnalysisResult(
            transaction_date=DATE,
            amount_before_vat=Decimal("1"),
            amount_after_vat=Decimal("1.175"),
        )
        processed = processor.process(result)
        assert str(processed.amount_before_vat) == "1.00"
        assert str(processed.amount_after_vat) == "1.18"

    def test_malformed_identifiers_dropped(self, processor: PostProcessor) -> None:
        result = AnalysisResult(transaction_date=DATE, tax_id="1234", invoice_number="N/A")
        processed = processor.process(result)
        assert processed.tax_id is None
        assert processed.invoice_number is None

    def test_empty_business_name_defaulted(self, processor: PostProcessor) -> None:
        result = AnalysisResult(transaction_date=DATE, business_name="")
        assert processor.process(result).business_name == "Unknown Business"

    def test_service_truncated(self, processor: PostProcessor) -> None:
        result = AnalysisResult(transaction_date=DATE, service_provided="x" * 500)
        assert len(processor.process(result).service_provided) == 400

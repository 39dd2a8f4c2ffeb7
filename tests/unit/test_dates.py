"""Unit tests for transaction date extraction."""

from datetime import datetime

import pytest
from dateutil import tz

from invoice_analyzer.extraction.analysis_result import AnalysisTrace
from invoice_analyzer.extraction.dates import DateExtractor


def utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=tz.UTC)


@pytest.fixture
def extractor(clock) -> DateExtractor:
    return DateExtractor(clock=clock)


class TestDateExtractor:
    """Tests for DateExtractor.extract."""

    def test_transaction_date_two_digit_year(self, extractor: DateExtractor) -> None:
        assert extractor.extract("Transaction date: 05/03/24") == utc(2024, 3, 5)

    def test_two_digit_year_above_pivot(self, extractor: DateExtractor) -> None:
        assert extractor.extract("Transaction date: 05/03/85") == utc(1985, 3, 5)

    def test_hebrew_transaction_label(self, extractor: DateExtractor) -> None:
        assert extractor.extract("תאריך עסקה: 12.03.2024") == utc(2024, 3, 12)

    def test_transaction_label_wins_over_earlier_date(self, extractor: DateExtractor) -> None:
        text = "Printed 01/01/2023\nTransaction date: 05/03/2024"
        assert extractor.extract(text) == utc(2024, 3, 5)

    def test_bare_four_digit_year(self, extractor: DateExtractor) -> None:
        assert extractor.extract("05/01/2024") == utc(2024, 1, 5)

    def test_bare_two_digit_year(self, extractor: DateExtractor) -> None:
        assert extractor.extract("Issued 7-8-23 at noon") == utc(2023, 8, 7)

    def test_two_digit_year_before_sentence_period(self, extractor: DateExtractor) -> None:
        assert extractor.extract("Paid on 05/03/24.") == utc(2024, 3, 5)

    def test_two_digit_year_run_on_rejected(self, extractor: DateExtractor, fixed_now: datetime) -> None:
        assert extractor.extract("Ref 05/03/24.7") == fixed_now

    def test_month_name(self, extractor: DateExtractor) -> None:
        assert extractor.extract("Issued on 5 March 2024") == utc(2024, 3, 5)

    def test_impossible_date_falls_through(self, extractor: DateExtractor) -> None:
        text = "Transaction date: 31/02/2024\nPrinted 15/04/24"
        assert extractor.extract(text) == utc(2024, 4, 15)

    def test_month_first_convention(self, clock) -> None:
        extractor = DateExtractor(day_first=False, clock=clock)
        assert extractor.extract("05/01/2024") == utc(2024, 5, 1)

    def test_default_is_now(self, extractor: DateExtractor, fixed_now: datetime) -> None:
        trace = AnalysisTrace()
        assert extractor.extract("no dates here", trace) == fixed_now
        assert trace.outcomes("transaction_date") == ["default"]

    def test_trace_names_rule(self, extractor: DateExtractor) -> None:
        trace = AnalysisTrace()
        extractor.extract("Transaction date: 05/03/24", trace)
        assert trace.for_field("transaction_date")[0].rule == "transaction_date"

"""Shared test fixtures."""

from datetime import datetime
from typing import Callable

import pytest
from dateutil import tz

from invoice_analyzer import InvoiceAnalyzer

FIXED_NOW = datetime(2025, 6, 1, 9, 30, tzinfo=tz.UTC)


@pytest.fixture
def fixed_now() -> datetime:
    """Point in time returned by the injected clock."""
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now: datetime) -> Callable[[], datetime]:
    """Clock returning a fixed time."""
    return lambda: fixed_now


@pytest.fixture
def analyzer(clock: Callable[[], datetime]) -> InvoiceAnalyzer:
    """Analyzer with the default configuration and a fixed clock."""
    return InvoiceAnalyzer(now=clock)


@pytest.fixture
def scenario_text() -> str:
    """Minimal English tax invoice."""
    return "\n".join([
        "ACME Ltd",
        "Tax Invoice",
        "Total to pay: ₪1,170.00",
        "VAT: ₪170.00",
        "05/01/2024",
    ])


@pytest.fixture
def english_invoice_text() -> str:
    """Fuller English tax invoice with identifiers and a service line."""
    return "\n".join([
        "ACME Ltd",
        "Tax Invoice",
        "Invoice No. INV-2024-001",
        "Tax ID: 513987654",
        "Date: 05/01/2024",
        "Bill to: Globex Corporation",
        "Services provided: Website redesign and hosting",
        "Subtotal: 1,000.00",
        "VAT 17%: 170.00",
        "Total to pay: ₪1,170.00",
    ])


@pytest.fixture
def hebrew_invoice_text() -> str:
    """Hebrew tax invoice receipt as produced by OCR."""
    return "\n".join([
        'מוסך הגליל בע"מ',
        "עוסק מורשה 514123456",
        "רחוב הרצל 10, חיפה טלפון 04-8123456",
        "חשבונית מס קבלה מספר 02/000123",
        "תאריך עסקה: 12/03/2024",
        "לכבוד: ישראל ישראלי",
        "השירות שסופק: טיפול תקופתי לרכב",
        'סכום לפני מע"מ: 1,400.00',
        'מע"מ 17%: 238.00',
        'סה"כ לתשלום: 1,638.00',
        "תודה רבה",
    ])

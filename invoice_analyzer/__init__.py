"""
Invoice Analysis Engine.

Recovers a structured record (amounts, date, business name, identifiers,
document type, service description) from noisy bilingual Hebrew/English
OCR text.
"""

from .analyzer import InvoiceAnalyzer
from .extraction.analysis_result import AnalysisResult, AnalysisTrace, DocumentType

__version__ = "1.0.0"

__all__ = ['InvoiceAnalyzer', 'AnalysisResult', 'AnalysisTrace', 'DocumentType']

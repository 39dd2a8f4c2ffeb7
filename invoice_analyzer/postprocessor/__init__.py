"""
Post-Processing Module for the Invoice Analysis Engine.

This module provides:
    - Amount and date normalization
    - Field validation
    - The final validation pass producing the AnalysisResult
"""

from .normalizers import AmountNormalizer, DateNormalizer, quantize_amount
from .validators import AmountValidator, FieldValidator
from .processor import PostProcessor

__all__ = [
    'AmountNormalizer',
    'DateNormalizer',
    'quantize_amount',
    'AmountValidator',
    'FieldValidator',
    'PostProcessor'
]

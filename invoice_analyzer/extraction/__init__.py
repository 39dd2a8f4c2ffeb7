"""
Extraction Module for the Invoice Analysis Engine.

One extractor per field group, each an ordered cascade of pattern rules:
    - AmountExtractor: VAT, pre-VAT and payable amounts
    - DateExtractor: transaction date
    - PartyNameResolver: issuing business name
    - IdentifierExtractor: tax ID and invoice number
    - DocumentClassifier: document type
    - ServiceDescriptionExtractor: goods/services description
"""

from .analysis_result import AnalysisResult, AnalysisTrace, DocumentType, TraceEvent
from .rules import PatternRule, RuleHit, first_match, iter_hits
from .amounts import AmountExtractor, AmountCandidates, DEFAULT_VAT_RATE, derive_amounts
from .dates import DateExtractor, DEFAULT_DAY_FIRST
from .party import PartyNameResolver
from .identifiers import IdentifierExtractor, Identifiers
from .classifier import DocumentClassifier
from .services import ServiceDescriptionExtractor

__all__ = [
    'AnalysisResult',
    'AnalysisTrace',
    'DocumentType',
    'TraceEvent',
    'PatternRule',
    'RuleHit',
    'first_match',
    'iter_hits',
    'AmountExtractor',
    'AmountCandidates',
    'DEFAULT_VAT_RATE',
    'derive_amounts',
    'DateExtractor',
    'DEFAULT_DAY_FIRST',
    'PartyNameResolver',
    'IdentifierExtractor',
    'Identifiers',
    'DocumentClassifier',
    'ServiceDescriptionExtractor'
]

"""
Amount Extraction Module.

Recovers the VAT amount, the pre-VAT amount and the payable total from
document text, then derives whichever of the pair is missing.

Matching strategies differ on purpose:
    - VAT amount: first acceptable match wins
    - after VAT: every match of every rule is collected and the largest
      candidate above the VAT amount wins (final totals are the largest
      figure on the page)
    - before VAT: first match wins

Author: ML Engineering Team
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from config import get_config
from invoice_analyzer.extraction.analysis_result import AnalysisTrace
from invoice_analyzer.extraction.rules import (
    CURRENCY, NUMERAL, TOTAL_HE, VAT_HE, PatternRule, RuleHit, compile_pattern,
    first_match, iter_hits
)
from invoice_analyzer.postprocessor.normalizers import (
    DEFAULT_VAT_RATE, ZERO, AmountNormalizer, quantize_amount
)
from invoice_analyzer.utils.exceptions import ConfigurationError
from invoice_analyzer.utils.logger import get_logger

logger = get_logger(__name__)


_normalizer = AmountNormalizer()


def _amount(match) -> Optional[Decimal]:
    return _normalizer.normalize(match.group(1))


def _rate(match) -> Optional[Decimal]:
    rate = Decimal(match.group(1)) / 100
    return rate if 0 < rate < 1 else None


def _amount_rule(name: str, pattern: str) -> PatternRule:
    return PatternRule(name, pattern, handler=_amount)


_RATE = r'\(?\d{1,2}(?:\.\d{1,2})?\s*%\)?'
_EXCL = r'(?:excl(?:uding|\.)?|without|before)'
_INCL = r'(?:incl(?:uding|\.)?|after)'

VAT_AMOUNT_RULES: List[PatternRule] = [
    _amount_rule("vat_rate_amount_he", rf'{VAT_HE}[:\s]*{_RATE}[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("vat_amount_he", rf'סכום[:\s]*ה?{VAT_HE}[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("vat_he", rf'{VAT_HE}[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("vat_rate_amount_en", rf'\bVAT\s*{_RATE}[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("vat_amount_en", rf'\bVAT\s+amount[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("vat_en", rf'\bVAT[:\s]*{CURRENCY}{NUMERAL}'),
]

VAT_RATE_RULES: List[PatternRule] = [
    PatternRule("vat_rate_he", rf'{VAT_HE}[:\s]*\(?(\d{{1,2}}(?:\.\d{{1,2}})?)\s*%', handler=_rate),
    PatternRule("vat_rate_en", r'\bVAT\s*\(?(\d{1,2}(?:\.\d{1,2})?)\s*%', handler=_rate),
]

AFTER_VAT_RULES: List[PatternRule] = [
    _amount_rule("total_to_pay_he", rf'{TOTAL_HE}[:\s]*לתשלום[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("amount_to_pay_he", rf'סכום[:\s]*לתשלום[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("to_pay_he", rf'לתשלום[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("amount_after_vat_he", rf'סכום[:\s]*אחרי[:\s]*{VAT_HE}[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("total_incl_vat_he", rf'{TOTAL_HE}[:\s]*כולל[:\s]*{VAT_HE}[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("total_to_pay_en", rf'\btotal\s+(?:to\s+pay|due|payable)[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("amount_due_en", rf'\b(?:amount|balance)\s+(?:due|to\s+pay|payable)[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("grand_total_en", rf'\bgrand\s+total[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("total_incl_vat_en", rf'\b(?:amount|total)\s+{_INCL}\s+VAT[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("total_he", rf'{TOTAL_HE}[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("amount_he", rf'סכום[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("incl_vat_he", rf'כולל[:\s]*{VAT_HE}[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("total_en", rf'\btotal[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("shekel_suffix", rf'{NUMERAL}\s*(?:ש"ח|ש״ח|שקלים|שקל|₪|\bNIS\b|\bILS\b)'),
    _amount_rule("currency_prefix", rf'(?:₪|\bNIS\b|\bILS\b)\s*{NUMERAL}'),
]

BEFORE_VAT_RULES: List[PatternRule] = [
    _amount_rule("amount_before_vat_he", rf'סכום[:\s]*לפני[:\s]*{VAT_HE}[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("total_without_vat_he", rf'{TOTAL_HE}[:\s]*(?:ללא|לפני)[:\s]*{VAT_HE}[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("without_vat_he", rf'(?:ללא|לפני)[:\s]*{VAT_HE}[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("amount_before_vat_en", rf'\b(?:amount|total|sum)\s+{_EXCL}\s+VAT[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("before_vat_en", rf'\b{_EXCL}\s+VAT[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("subtotal_en", rf'\bsub[\s-]?total[:\s]*{CURRENCY}{NUMERAL}'),
    _amount_rule("net_amount_en", rf'\bnet\s+(?:amount|total)[:\s]*{CURRENCY}{NUMERAL}'),
]

# A VAT label qualified like this introduces a total, not the VAT itself
_QUALIFIED_VAT = compile_pattern(
    r'(?:לפני|ללא|כולל|אחרי|before|excl(?:uding|\.)?|without|incl(?:uding|\.)?|after)[\s:.]*\Z'
)


@dataclass(frozen=True)
class AmountCandidates:
    """Raw amounts found in the text before derivation."""
    vat_amount: Optional[Decimal] = None
    vat_rate: Optional[Decimal] = None
    after_vat: Optional[Decimal] = None
    before_vat: Optional[Decimal] = None


def derive_amounts(
    candidates: AmountCandidates,
    vat_rate: Decimal = DEFAULT_VAT_RATE,
    trace: Optional[AnalysisTrace] = None
) -> Tuple[Decimal, Decimal]:
    """
    Derive the (before VAT, after VAT) pair from raw candidates.

    With a total, the pre-VAT amount is the first of: the explicit pre-VAT
    amount, the total minus the VAT amount, the total divided by
    (1 + rate). A candidate that would exceed the total or go negative is
    skipped. With only a pre-VAT amount, the total is that amount times
    (1 + rate). The detected rate takes precedence over ``vat_rate``.

    Returns:
        Both amounts quantised to cents; (0.00, 0.00) when nothing was found.
    """
    rate = candidates.vat_rate if candidates.vat_rate is not None else vat_rate
    after = candidates.after_vat
    before = candidates.before_vat

    if after is not None:
        options = [("explicit", before)]
        if candidates.vat_amount is not None:
            options.append(("total_minus_vat", after - candidates.vat_amount))
        options.append(("total_div_rate", after / (1 + rate)))

        for step, value in options:
            if value is None:
                continue
            if not ZERO <= value <= after:
                if trace is not None:
                    trace.record('amount_before_vat', 'discarded', step, quantize_amount(value))
                continue
            if trace is not None and step != "explicit":
                trace.record('amount_before_vat', 'derived', step, quantize_amount(value))
            return quantize_amount(value), quantize_amount(after)

    if before is not None:
        derived_after = before * (1 + rate)
        if trace is not None:
            trace.record('amount_after_vat', 'derived', 'before_times_rate', quantize_amount(derived_after))
        return quantize_amount(before), quantize_amount(derived_after)

    if trace is not None:
        trace.record('amount_before_vat', 'default', None, ZERO)
        trace.record('amount_after_vat', 'default', None, ZERO)
    return ZERO, ZERO


class AmountExtractor:
    """
    Extracts monetary amounts from document text.

    Attributes:
        vat_rate: Fallback VAT rate used when no rate is printed

    Example:
        >>> extractor = AmountExtractor()
        >>> extractor.extract("Total to pay: ₪1,170.00\\nVAT: ₪170.00")
        (Decimal('1000.00'), Decimal('1170.00'))
    """

    def __init__(self, vat_rate: Optional[Decimal] = None) -> None:
        if vat_rate is None:
            vat_rate = get_config("analysis.vat_rate", DEFAULT_VAT_RATE)
        try:
            self.vat_rate = Decimal(str(vat_rate))
        except InvalidOperation:
            raise ConfigurationError("analysis.vat_rate", vat_rate, "not a number")
        if not 0 <= self.vat_rate < 1:
            raise ConfigurationError("analysis.vat_rate", vat_rate, "expected a fraction such as 0.17")

    def find_vat_amount(self, text: str, trace: Optional[AnalysisTrace] = None) -> Optional[Decimal]:
        """First VAT-amount match whose label isn't qualified by before/after/incl/excl."""
        for hit in iter_hits(VAT_AMOUNT_RULES, text):
            if _QUALIFIED_VAT.search(text[max(0, hit.start - 20):hit.start]):
                continue
            logger.debug(f"VAT amount {hit.value} matched by {hit.rule}")
            if trace is not None:
                trace.record('vat_amount', 'matched', hit.rule, hit.value)
            return hit.value
        return None

    def find_vat_rate(self, text: str, trace: Optional[AnalysisTrace] = None) -> Optional[Decimal]:
        hit = first_match(VAT_RATE_RULES, text)
        if hit is None:
            return None
        if trace is not None:
            trace.record('vat_rate', 'matched', hit.rule, hit.value)
        return hit.value

    def find_after_vat(
        self,
        text: str,
        vat_amount: Optional[Decimal] = None,
        trace: Optional[AnalysisTrace] = None
    ) -> Optional[Decimal]:
        """
        Collect every total candidate and keep the largest one.

        Candidates that are zero or not above the VAT amount are discarded.
        """
        best: Optional[RuleHit] = None
        for hit in iter_hits(AFTER_VAT_RULES, text):
            if hit.value <= 0 or (vat_amount is not None and hit.value <= vat_amount):
                logger.debug(f"Total candidate {hit.value} from {hit.rule} discarded")
                if trace is not None:
                    trace.record('amount_after_vat', 'discarded', hit.rule, hit.value)
                continue
            if best is None or hit.value > best.value:
                best = hit

        if best is None:
            return None
        logger.debug(f"Total {best.value} chosen from {best.rule}")
        if trace is not None:
            trace.record('amount_after_vat', 'matched', best.rule, best.value)
        return best.value

    def find_before_vat(self, text: str, trace: Optional[AnalysisTrace] = None) -> Optional[Decimal]:
        for hit in iter_hits(BEFORE_VAT_RULES, text):
            if hit.value <= 0:
                continue
            logger.debug(f"Pre-VAT amount {hit.value} matched by {hit.rule}")
            if trace is not None:
                trace.record('amount_before_vat', 'matched', hit.rule, hit.value)
            return hit.value
        return None

    def find_candidates(self, text: str, trace: Optional[AnalysisTrace] = None) -> AmountCandidates:
        vat_amount = self.find_vat_amount(text, trace)
        return AmountCandidates(
            vat_amount=vat_amount,
            vat_rate=self.find_vat_rate(text, trace),
            after_vat=self.find_after_vat(text, vat_amount, trace),
            before_vat=self.find_before_vat(text, trace),
        )

    def extract(self, text: str, trace: Optional[AnalysisTrace] = None) -> Tuple[Decimal, Decimal]:
        """
        Extract the (amount before VAT, amount after VAT) pair.

        Args:
            text: Full document text.
            trace: Optional trace receiving the decision points.

        Returns:
            Tuple of non-negative Decimals quantised to cents.
        """
        candidates = self.find_candidates(text or "", trace)
        return derive_amounts(candidates, self.vat_rate, trace)

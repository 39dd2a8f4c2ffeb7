"""
Ordered Rule Cascade Module.

Every field extractor in this package is an ordered list of
``PatternRule`` objects evaluated in sequence. Keeping the rules as data
(name + regex + optional handler) keeps the priority order auditable and
lets each rule be tested on its own.

Two evaluation strategies are provided:
    - first_match: the first rule whose first match yields a value wins
    - iter_hits: every match of every rule, in rule order then text order

Shared regex fragments for noisy bilingual OCR text are defined here too.

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Iterable, Iterator, Match, Optional, Pattern

# ASCII double quote, Hebrew gershayim, or two apostrophes (common OCR output)
GERSHAYIM = r'(?:"|״|\'\')'

# Hebrew block as used for script detection
HEBREW = '֐-׿'
HEBREW_LETTER = f'[{HEBREW}]'

# Latin or Hebrew letters: the scripts a business name or service line is written in
NAME_SCRIPT = f'A-Za-z{HEBREW}'

# A monetary numeral. Either digit groups with comma thousands separators
# ("1,638.00"), or plain digits with an optional 1-2 digit decimal part using
# either separator ("1638.00", "1638,00"). A percentage is never an amount.
NUMERAL = r'(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:[.,]\d{1,2})?)(?![\d%])'

# Optional currency marker in front of an amount
CURRENCY = r'(?:₪|NIS|ILS)?\s*'

# Common Hebrew abbreviations
TOTAL_HE = f'סה{GERSHAYIM}כ'
VAT_HE = f'מע{GERSHAYIM}מ'

DEFAULT_FLAGS = re.IGNORECASE | re.MULTILINE


@lru_cache(maxsize=None)
def compile_pattern(pattern: str, flags: int = DEFAULT_FLAGS) -> Pattern:
    """Compile and cache a regex pattern."""
    return re.compile(pattern, flags)


@dataclass(frozen=True)
class RuleHit:
    """
    A value produced by one rule for one match.

    Attributes:
        rule: Name of the rule that produced the value
        value: Value returned by the rule handler
        matched_text: Full text of the regex match
        start: Offset of the match in the searched text
    """
    rule: str
    value: Any
    matched_text: str
    start: int


def _first_group(match: Match) -> Optional[str]:
    """Default handler: the stripped first capture group, or None if empty."""
    value = match.group(1)
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class PatternRule:
    """
    One matcher+handler pair in an ordered cascade.

    The handler receives the regex match and returns a value, or None to
    abstain (for example when a captured numeral cannot be parsed). An
    abstaining rule never stops the cascade.

    Example:
        >>> rule = PatternRule("tax_id_he", r'ח"פ[:\\s]*(\\d{8,9})')
        >>> rule.evaluate('ח"פ: 514123456').value
        '514123456'
    """
    name: str
    pattern: str
    handler: Optional[Callable[[Match], Any]] = None
    flags: int = DEFAULT_FLAGS

    @property
    def regex(self) -> Pattern:
        return compile_pattern(self.pattern, self.flags)

    def apply(self, match: Match) -> Any:
        handler = self.handler or _first_group
        return handler(match)

    def hits(self, text: str) -> Iterator[RuleHit]:
        """Yield a hit for every match whose handler produced a value."""
        for match in self.regex.finditer(text):
            value = self.apply(match)
            if value is not None:
                yield RuleHit(self.name, value, match.group(0), match.start())

    def evaluate(self, text: str) -> Optional[RuleHit]:
        """Evaluate only the first match of this rule."""
        match = self.regex.search(text)
        if match is None:
            return None
        value = self.apply(match)
        if value is None:
            return None
        return RuleHit(self.name, value, match.group(0), match.start())


def first_match(
    rules: Iterable[PatternRule],
    text: str,
    accept: Optional[Callable[[RuleHit], bool]] = None
) -> Optional[RuleHit]:
    """
    Return the hit of the first rule whose first match yields a value.

    Args:
        rules: Rules in priority order.
        text: Text to search.
        accept: Optional predicate; a rejected hit moves on to the next rule.

    Returns:
        The winning RuleHit, or None when every rule abstains.
    """
    if not text:
        return None

    for rule in rules:
        hit = rule.evaluate(text)
        if hit is None:
            continue
        if accept is not None and not accept(hit):
            continue
        return hit
    return None


def iter_hits(rules: Iterable[PatternRule], text: str) -> Iterator[RuleHit]:
    """Yield every hit of every rule, in rule order then text order."""
    if not text:
        return
    for rule in rules:
        yield from rule.hits(text)

"""
Data Validators Module.

This module provides validation functions for:
    - Amount fields
    - Identifier and name fields

Validators report (is_valid, message) tuples; the PostProcessor decides
what to do with an invalid value.

Author: ML Engineering Team
"""

import re
from decimal import Decimal
from typing import Optional, Tuple

from invoice_analyzer.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class AmountValidator:
    """
    Validates monetary amounts.

    Checks for:
        - Presence
        - Non-negative values
        - The pair ordering after >= before >= 0

    Example:
        >>> validator = AmountValidator()
        >>> validator.validate(Decimal("-1"))
        (False, 'Amount cannot be negative')
        >>> validator.validate_pair(Decimal("1000"), Decimal("1170"))
        (True, 'Valid amount pair')
    """

    def is_valid(self, amount: Optional[Decimal]) -> bool:
        valid, _ = self.validate(amount)
        return valid

    def validate(self, amount: Optional[Decimal]) -> Tuple[bool, str]:
        """
        Validate an amount with detailed feedback.

        Args:
            amount: Amount to validate.

        Returns:
            Tuple of (is_valid, message).
        """
        if amount is None:
            return False, "Amount is empty"
        if not amount.is_finite():
            return False, f"Amount {amount} is not a number"
        if amount < 0:
            return False, "Amount cannot be negative"
        return True, "Valid amount"

    def validate_pair(self, before: Decimal, after: Decimal) -> Tuple[bool, str]:
        for label, amount in (("before VAT", before), ("after VAT", after)):
            valid, message = self.validate(amount)
            if not valid:
                return False, f"{label}: {message}"
        if before > after:
            return False, "Amount before VAT exceeds amount after VAT"
        return True, "Valid amount pair"


class FieldValidator:
    """
    Format validation for identifier and name fields.

    Example:
        >>> validator = FieldValidator()
        >>> validator.validate_tax_id("514123456")
        (True, 'Valid tax ID')
        >>> validator.validate_invoice_number("02/000001")
        (True, 'Valid invoice number')
    """

    TAX_ID_PATTERN = re.compile(r'^\d{8,9}$')
    INVOICE_NUMBER_PATTERN = re.compile(r'^[A-Za-z]{0,4}-?\d+(?:[/-]\d+)*$')

    def validate_tax_id(self, value: Optional[str]) -> Tuple[bool, str]:
        """
        Validate a tax/dealer identifier.

        Args:
            value: Identifier to validate.

        Returns:
            Tuple of (is_valid, message).
        """
        if not value:
            return False, "Tax ID is empty"
        if not self.TAX_ID_PATTERN.match(value):
            return False, f"Tax ID must be 8-9 digits: {value!r}"
        return True, "Valid tax ID"

    def validate_invoice_number(self, value: Optional[str]) -> Tuple[bool, str]:
        """
        Validate invoice number format.

        Args:
            value: Invoice number to validate.

        Returns:
            Tuple of (is_valid, message).
        """
        if not value:
            return False, "Invoice number is empty"
        if not self.INVOICE_NUMBER_PATTERN.match(value):
            return False, f"Invoice number has an unexpected format: {value!r}"
        return True, "Valid invoice number"

    def validate_business_name(self, value: Optional[str]) -> Tuple[bool, str]:
        if not value or not value.strip():
            return False, "Business name is empty"
        if not re.search(r'[A-Za-z֐-׿]', value):
            return False, "Business name must contain letters"
        return True, "Valid business name"

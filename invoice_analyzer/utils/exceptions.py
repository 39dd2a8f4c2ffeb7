"""
Custom Exceptions Module.

This module defines the exceptions raised at the edges of the invoice
analysis system (document input, OCR, configuration). The analysis
engine itself never raises: a missing signal resolves to a default
value, not an error.

Exception Hierarchy:
    InvoiceAnalysisError (base)
    ├── InputError
    │   ├── DocumentNotFoundError
    │   ├── UnsupportedFileTypeError
    │   └── CorruptedFileError
    ├── OCRError
    │   ├── OCREngineNotAvailableError
    │   └── OCRProcessingError
    └── ConfigurationError
"""


class InvoiceAnalysisError(Exception):
    """
    Base exception for all invoice analysis errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(InvoiceAnalysisError):
    """Base exception for document input errors."""
    pass


class DocumentNotFoundError(InputError):
    """Raised when an input document cannot be found."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class UnsupportedFileTypeError(InputError):
    """
    Raised when an unsupported file type is provided.

    Example:
        >>> raise UnsupportedFileTypeError(".doc", [".pdf", ".jpg"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


class CorruptedFileError(InputError):
    """Raised when a document appears to be corrupted or unreadable."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Corrupted or unreadable file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# OCR ERRORS
# =============================================================================

class OCRError(InvoiceAnalysisError):
    """Base exception for OCR-related errors."""
    pass


class OCREngineNotAvailableError(OCRError):
    """Raised when the configured OCR engine is not available."""

    def __init__(self, engine_name: str):
        message = f"OCR engine not available: {engine_name}"
        details = {"engine": engine_name}
        super().__init__(message, details)


class OCRProcessingError(OCRError):
    """Raised when OCR processing fails."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"OCR processing failed for: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(InvoiceAnalysisError):
    """Raised when a configuration value cannot be used."""

    def __init__(self, key: str, value, reason: str = None):
        message = f"Invalid configuration value for '{key}'"
        details = {"key": key, "value": value, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'InvoiceAnalysisError',
    'InputError',
    'DocumentNotFoundError',
    'UnsupportedFileTypeError',
    'CorruptedFileError',
    'OCRError',
    'OCREngineNotAvailableError',
    'OCRProcessingError',
    'ConfigurationError',
]

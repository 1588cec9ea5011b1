"""
Custom Exceptions Module.

All errors raised by uplatko derive from UplatkoError so callers can
catch the whole family at once. "Field not found" during extraction is
never an exception; it is represented as an absent (None) field.

Exception Hierarchy:
    UplatkoError (base)
    ├── ConfigurationError
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   ├── FileNotFoundError
    │   └── CorruptedFileError
    ├── FormatViolationError
    ├── ProviderError
    └── CompositionError
"""

from typing import List, Optional


class UplatkoError(Exception):
    """
    Base exception for all uplatko errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(UplatkoError):
    """Raised when a configuration value is missing or unusable."""

    def __init__(self, key: str, reason: str = None):
        message = f"Invalid configuration: {key}"
        details = {"key": key, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(UplatkoError):
    """Base exception for input handling errors."""
    pass


class UnsupportedFileTypeError(InputError):
    """
    Raised when the input document is not a PDF.

    Example:
        >>> raise UnsupportedFileTypeError(".docx", [".pdf"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


class FileNotFoundError(InputError):
    """Raised when the input file cannot be found."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class CorruptedFileError(InputError):
    """Raised when a PDF cannot be opened or read."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Corrupted or unreadable file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# HUB3 ERRORS
# =============================================================================

class FormatViolationError(UplatkoError):
    """
    Raised when a payment record cannot be encoded as HUB3.

    Carries every problem found, so a caller can report them all at once.

    Example:
        >>> raise FormatViolationError("iban", "HR12", "must be HR + 19 digits")
    """

    def __init__(
        self,
        field: str,
        value: object = None,
        reason: str = None,
        errors: Optional[List[str]] = None
    ):
        self.field = field
        self.errors = errors or [f"{field}: {reason}"]
        message = f"Payment record violates HUB3 format at '{field}'"
        details = {"field": field, "value": value, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# EXTRACTION ERRORS
# =============================================================================

class ProviderError(UplatkoError):
    """
    Raised when an AI extraction provider fails.

    Covers transport failures, non-success HTTP status, missing text
    payload and undecodable JSON. The orchestrator always recovers from it.
    """

    def __init__(self, provider: str, reason: str, status_code: Optional[int] = None):
        self.provider = provider
        self.reason = reason
        self.status_code = status_code
        message = f"Provider '{provider}' failed: {reason}"
        details = {"provider": provider}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class CompositionError(UplatkoError):
    """Raised when barcode rendering or PDF composition fails."""

    def __init__(self, stage: str, reason: str = None):
        message = f"Composition failed during {stage}"
        details = {"stage": stage, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'UplatkoError',
    'ConfigurationError',
    'InputError',
    'UnsupportedFileTypeError',
    'FileNotFoundError',
    'CorruptedFileError',
    'FormatViolationError',
    'ProviderError',
    'CompositionError',
]

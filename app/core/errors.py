"""
Exception types for MediClear.

Every error carries a message that is safe to show to the end user,
a machine-readable error code and the HTTP status the API answers with.
Diagnostic detail belongs in the logs and in the exception chain,
never in the message.
"""

from typing import Optional


class MediClearError(Exception):
    """Base class for all MediClear errors."""

    status_code: int = 500
    default_code: str = "MEDICLEAR_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code or self.default_code
        super().__init__(self.message)


class ConfigurationError(MediClearError):
    """Raised when the language model client cannot be used."""

    status_code = 503
    default_code = "LLM_NOT_CONFIGURED"


class InputValidationError(MediClearError):
    """Raised when caller input is rejected before any remote call."""

    status_code = 400
    default_code = "INVALID_INPUT"


class AnalysisFailedError(MediClearError):
    """Raised when a report could not be analyzed, whatever the cause."""

    status_code = 502
    default_code = "ANALYSIS_FAILED"


class TranslationFailedError(MediClearError):
    """Raised when the model returned nothing for a translation request."""

    status_code = 502
    default_code = "TRANSLATION_FAILED"


class ReportDecodeError(MediClearError):
    """Raised when model output does not decode as a SimplifiedReport."""

    status_code = 502
    default_code = "INVALID_MODEL_OUTPUT"


class SessionNotFoundError(MediClearError):
    """Raised when a report session id is unknown."""

    status_code = 404
    default_code = "SESSION_NOT_FOUND"

"""
Exception classes for the domain appraiser.

All exceptions inherit from DomainAppraiserError and carry a machine-readable
code, a human-readable message and optional details.
"""

from typing import Optional


class DomainAppraiserError(Exception):
    """Base exception for all domain appraiser errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainAppraiserError):
    """Raised when the requested domain is missing or malformed (400-equivalent)."""

    pass


class MalformedResponseError(DomainAppraiserError):
    """
    Raised when the generative service returns unparseable or
    schema-violating output.

    Always recovered locally by the fallback generator; never surfaced
    to the caller of a report request.
    """

    pass


class UpstreamServiceError(DomainAppraiserError):
    """Raised when the generative or image service cannot be reached or fails."""

    pass


class RenderError(DomainAppraiserError):
    """Raised when an export is rendered from an inconsistent session."""

    pass


class ConfigurationError(DomainAppraiserError):
    """Raised when configuration cannot be loaded or is invalid."""

    pass

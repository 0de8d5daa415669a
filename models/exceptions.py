"""
Exception classes for the AI Visibility Scanner.

All exceptions inherit from ScannerError and carry a machine-readable
code, a user-facing message, and optional details.
"""

from typing import Optional


class ScannerError(Exception):
    """Base exception for all scanner errors."""

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


class DomainValidationError(ScannerError):
    """Raised when a domain is missing or not a valid hostname."""

    pass


class DomainResolutionError(ScannerError):
    """Raised when a syntactically valid domain does not resolve in DNS."""

    pass


class PlatformError(ScannerError):
    """Base class for failures of a single AI platform call."""

    def __init__(self, platform: str, code: str, message: str, details: Optional[dict] = None) -> None:
        self.platform = platform
        super().__init__(code, message, details)


class PlatformNotConfiguredError(PlatformError):
    """Raised when a platform has no credential configured."""

    def __init__(self, platform: str) -> None:
        super().__init__(platform, "not_configured", f"{platform} API key not configured")


class PlatformRequestError(PlatformError):
    """Raised when a platform call times out, returns non-2xx, or is malformed."""

    def __init__(self, platform: str, kind: str, message: str, details: Optional[dict] = None) -> None:
        self.kind = kind
        super().__init__(platform, kind, message, details)


class ReportStoreError(ScannerError):
    """Raised when a report cannot be saved or loaded."""

    pass

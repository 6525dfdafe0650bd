"""Custom exceptions for provider access.

The parsing engine itself defines no exceptions; it degrades to empty output.
"""

from __future__ import annotations

_STATUS_MESSAGES = {
    400: "No train formation data available. Please check your search parameters.",
    401: "Authentication failed. Please check your API key.",
    403: "Access to this API has been disallowed.",
    404: "Train formation data not found. The train might not exist for the specified date.",
    429: (
        "Rate limit exceeded. Please wait 1 minute before trying again "
        "(maximum 5 requests per minute allowed)."
    ),
}
_DEFAULT_MESSAGE = "An unexpected error occurred. Please try again later."


class FormationApiError(Exception):
    """Raised when the formation API cannot deliver a usable response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        technical_details: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.technical_details = technical_details

    @classmethod
    def from_status(cls, status_code: int, reason: str | None = None) -> FormationApiError:
        """Build the user-facing error for an HTTP status from the formation API."""

        if status_code == 429:
            details: str | None = f"HTTP {status_code}: Rate Limit Exceeded"
        elif status_code in _STATUS_MESSAGES:
            details = f"HTTP {status_code}: {reason}" if reason else f"HTTP {status_code}"
        else:
            details = reason
        return cls(
            _STATUS_MESSAGES.get(status_code, _DEFAULT_MESSAGE),
            status_code=status_code or 500,
            technical_details=details,
        )

    @classmethod
    def unexpected(cls, technical_details: str | None = None) -> FormationApiError:
        return cls(_DEFAULT_MESSAGE, status_code=500, technical_details=technical_details)

"""Exception hierarchy for MIME composition and provider dispatch."""

from __future__ import annotations

from typing import Any


class ButtressMailError(Exception):
    """Base class for all errors raised by buttress-mail."""


class MimeCompositionError(ButtressMailError):
    """Raised when a MIME tree cannot be composed or serialized."""


class BoundaryNotInitializedError(MimeCompositionError):
    """Raised when a multipart container is serialized before its boundary exists.

    Attributes:
        mime_type: The multipart type of the offending container.
    """

    def __init__(self, mime_type: str) -> None:
        self.mime_type = mime_type
        super().__init__(
            f"Boundary of '{mime_type}' container was not initialized before serialization"
        )


class BoundaryCollisionError(MimeCompositionError):
    """Raised when a boundary token occurs inside the content it delimits."""

    def __init__(self, boundary: str) -> None:
        self.boundary = boundary
        super().__init__(f"Boundary '{boundary}' appears inside a child part")


class TransportError(ButtressMailError):
    """Raised when a provider endpoint answers with an unexpected status.

    Attributes:
        provider: Provider name (e.g. ``"google"``).
        status_code: HTTP status returned by the provider.
        body: Decoded response body, kept for diagnostics.
    """

    def __init__(self, provider: str, status_code: int, body: Any = None) -> None:
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(f"{provider} request failed with status {status_code}: {body}")


class AuthenticationError(TransportError):
    """Raised when the provider rejects the access token as expired or invalid."""


class TokenRefreshError(ButtressMailError):
    """Raised when a new access token cannot be obtained."""

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = provider
        self.reason = reason
        super().__init__(f"Failed to refresh {provider} access token: {reason}")

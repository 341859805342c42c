"""Domain types and errors for buttress-mail."""

from buttress_mail.domain.errors import (
    AuthenticationError,
    BoundaryCollisionError,
    BoundaryNotInitializedError,
    ButtressMailError,
    MimeCompositionError,
    TokenRefreshError,
    TransportError,
)
from buttress_mail.domain.types import DispatchState, DispatchStatus, Provider

__all__ = [
    "AuthenticationError",
    "BoundaryCollisionError",
    "BoundaryNotInitializedError",
    "ButtressMailError",
    "DispatchState",
    "DispatchStatus",
    "MimeCompositionError",
    "Provider",
    "TokenRefreshError",
    "TransportError",
]

"""Dispatch a composed message through a provider, recovering from token expiry.

A dispatch is a two-state machine.  It starts in ``ATTEMPTING``: the message
is encoded with the transport's base64 variant and sent with the current
access token.  An :class:`AuthenticationError` causes exactly one token
refresh and exactly one retry.  Any result, success or failure, moves the
dispatch to ``TERMINAL``.
"""

from __future__ import annotations

from typing import Protocol

import structlog

from buttress_mail.domain.types import DispatchState
from buttress_mail.mail.models import DispatchResult, OAuthCredentials, OAuthTokens
from buttress_mail.mime.encoding import encode_message
from buttress_mail.mime.parts import MimeLeaf, MimeMultipart
from buttress_mail.resilience.retry import retry_once_after_refresh

logger = structlog.get_logger()


class MailTransport(Protocol):
    """Provider-specific send and refresh operations."""

    name: str
    url_safe: bool

    async def send(self, encoded_message: str, access_token: str) -> DispatchResult:
        """Submit a base64-encoded MIME message."""
        ...

    async def refresh_token(self, credentials: OAuthCredentials, tokens: OAuthTokens) -> str:
        """Exchange the refresh token for a new access token."""
        ...

    async def describe(self, result: DispatchResult, access_token: str) -> DispatchResult:
        """Complete *result* with metadata read back from the provider."""
        ...


class Dispatch:
    """A single dispatch of one composed message.

    Args:
        transport: Provider transport performing the HTTP calls.
        credentials: OAuth client registration for refreshing.
        tokens: The sender's tokens; the access token is replaced after a
            refresh.
    """

    def __init__(
        self,
        transport: MailTransport,
        credentials: OAuthCredentials,
        tokens: OAuthTokens,
    ) -> None:
        self._transport = transport
        self._credentials = credentials
        self._tokens = tokens
        self._state = DispatchState.ATTEMPTING
        self._attempts = 0
        self._refreshes = 0

    @property
    def state(self) -> DispatchState:
        """Return the current dispatch state."""
        return self._state

    @property
    def attempts(self) -> int:
        """Return how many send attempts were made."""
        return self._attempts

    @property
    def refreshes(self) -> int:
        """Return how many token refreshes were made (0 or 1)."""
        return self._refreshes

    async def run(self, message: MimeLeaf | MimeMultipart) -> DispatchResult:
        """Encode and send *message*.

        Returns:
            The provider's metadata for the sent message.

        Raises:
            AuthenticationError: If the retry after a refresh is also rejected.
            TokenRefreshError: If the refresh itself fails.
            TransportError: For any other provider failure, without retry.
        """
        encoded = encode_message(message, url_safe=self._transport.url_safe)
        try:
            result = await retry_once_after_refresh(
                lambda: self._send(encoded),
                self._refresh,
                api_name=self._transport.name,
            )
        finally:
            self._state = DispatchState.TERMINAL

        logger.info(
            "message_dispatched",
            provider=self._transport.name,
            provider_id=result.id,
            attempts=self._attempts,
            refreshed=bool(self._refreshes),
        )
        return result

    async def _send(self, encoded: str) -> DispatchResult:
        self._attempts += 1
        return await self._transport.send(encoded, self._tokens.access_token)

    async def _refresh(self) -> None:
        self._refreshes += 1
        self._tokens.access_token = await self._transport.refresh_token(
            self._credentials, self._tokens
        )


async def dispatch(
    transport: MailTransport,
    credentials: OAuthCredentials,
    tokens: OAuthTokens,
    message: MimeLeaf | MimeMultipart,
) -> DispatchResult:
    """Send *message* through *transport* with single-shot token recovery."""
    return await Dispatch(transport, credentials, tokens).run(message)

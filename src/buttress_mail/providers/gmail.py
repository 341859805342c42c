"""Gmail REST transport for dispatching raw MIME messages.

Provides the ``GmailTransport`` class, which sends a URL-safe base64 message
through ``users.messages.send``, refreshes Google access tokens via the
OAuth2 token endpoint, and reads back message metadata (Subject,
Message-ID, In-Reply-To) for the delivery record.
"""

from __future__ import annotations

from typing import Any

import httpx

from buttress_mail.domain.types import Provider
from buttress_mail.mail.models import DispatchResult, OAuthCredentials, OAuthTokens
from buttress_mail.providers.http import post_refresh_grant, raise_for_provider_status

GMAIL_API_BASE = "https://gmail.googleapis.com/gmail/v1/users/me"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

_METADATA_HEADERS = {
    "subject": "subject",
    "message-id": "message_id",
    "in-reply-to": "in_reply_to",
}


class GmailTransport:
    """Send mail through the Gmail API on behalf of an OAuth user.

    No connection handling happens here; the injected ``httpx.AsyncClient``
    owns timeouts and pooling.

    Args:
        client: HTTP client used for every request.
    """

    name = Provider.GOOGLE.value
    url_safe = True

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def send(self, encoded_message: str, access_token: str) -> DispatchResult:
        """POST the encoded message to ``users.messages.send``.

        Args:
            encoded_message: URL-safe base64 of the CRLF-joined MIME message.
            access_token: Current Google access token.

        Returns:
            A ``DispatchResult`` with the Gmail message and thread ids.
        """
        response = await self._client.post(
            f"{GMAIL_API_BASE}/messages/send",
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json; charset=UTF-8",
            },
            json={"raw": encoded_message},
        )
        body: dict[str, Any] = raise_for_provider_status(response, self.name)
        return DispatchResult(id=body["id"], thread_id=body.get("threadId"))

    async def refresh_token(self, credentials: OAuthCredentials, tokens: OAuthTokens) -> str:
        """Obtain a new Google access token with the refresh-token grant."""
        return await post_refresh_grant(
            self._client, GOOGLE_TOKEN_URL, self.name, credentials, tokens
        )

    async def describe(self, result: DispatchResult, access_token: str) -> DispatchResult:
        """Add Subject, Message-ID and In-Reply-To from the sent message's metadata."""
        message = await self.get_message(access_token, result.id, fmt="metadata")
        return result.model_copy(
            update={
                "thread_id": message.get("threadId", result.thread_id),
                **message_metadata(message),
            }
        )

    async def get_message(
        self, access_token: str, message_id: str, fmt: str = "full"
    ) -> dict[str, Any]:
        """Fetch a Gmail message resource in the requested *fmt*."""
        response = await self._client.get(
            f"{GMAIL_API_BASE}/messages/{message_id}",
            headers={"Authorization": f"Bearer {access_token}"},
            params={"format": fmt},
        )
        result: dict[str, Any] = raise_for_provider_status(response, self.name)
        return result


def message_metadata(message: dict[str, Any]) -> dict[str, str]:
    """Extract subject, Message-ID and In-Reply-To from a Gmail message resource.

    Header names are matched case-insensitively; absent headers are omitted.
    """
    found: dict[str, str] = {}
    for header in message.get("payload", {}).get("headers", []):
        field = _METADATA_HEADERS.get(str(header.get("name", "")).lower())
        if field is not None:
            found[field] = header.get("value", "")
    return found

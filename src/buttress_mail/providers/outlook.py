"""Microsoft Graph transport for dispatching MIME messages from Outlook mailboxes.

Graph sends a MIME message in two steps: the standard base64 message is
POSTed to ``/me/messages`` (creating a draft), then the draft is sent with
``/me/messages/{id}/send``.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from buttress_mail.domain.errors import AuthenticationError
from buttress_mail.domain.types import Provider
from buttress_mail.mail.models import DispatchResult, OAuthCredentials, OAuthTokens
from buttress_mail.providers.http import post_refresh_grant, raise_for_provider_status

GRAPH_API_BASE = "https://graph.microsoft.com/v1.0/me"
MICROSOFT_TOKEN_URL = "https://login.microsoftonline.com/{issuer}/oauth2/v2.0/token"

logger = structlog.get_logger()


class OutlookTransport:
    """Send mail through Microsoft Graph on behalf of an OAuth user.

    Args:
        client: HTTP client used for every request.
    """

    name = Provider.MICROSOFT.value
    url_safe = False

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client
        self._drafts: dict[str, dict[str, Any]] = {}

    async def send(self, encoded_message: str, access_token: str) -> DispatchResult:
        """Create a draft from the encoded MIME message and send it.

        Both steps use the same access token; a 401 on either surfaces as
        ``AuthenticationError`` so the send is retried after refresh.  A
        draft whose send step was rejected for authentication is kept per
        encoded message, so the retry sends the same draft instead of
        creating another one.
        """
        message = self._drafts.get(encoded_message)
        if message is None:
            message = await self._create_draft(encoded_message, access_token)
            self._drafts[encoded_message] = message
        else:
            logger.info("draft_reused", provider=self.name, draft_id=message["id"])

        try:
            await self._send_draft(message["id"], access_token)
        except AuthenticationError:
            raise
        except Exception:
            self._drafts.pop(encoded_message, None)
            raise
        self._drafts.pop(encoded_message, None)

        reply_to = message.get("replyTo") or []
        in_reply_to = ", ".join(
            r.get("emailAddress", {}).get("address", "") for r in reply_to
        )
        return DispatchResult(
            id=message["id"],
            thread_id=message.get("conversationId"),
            subject=message.get("subject"),
            message_id=message.get("internetMessageId"),
            in_reply_to=in_reply_to or None,
        )

    async def _create_draft(self, encoded_message: str, access_token: str) -> dict[str, Any]:
        created = await self._client.post(
            f"{GRAPH_API_BASE}/messages",
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "text/plain",
                "Prefer": 'IdType="ImmutableId"',
            },
            content=encoded_message,
        )
        message: dict[str, Any] = raise_for_provider_status(created, self.name, expected=201)
        return message

    async def _send_draft(self, draft_id: str, access_token: str) -> None:
        sent = await self._client.post(
            f"{GRAPH_API_BASE}/messages/{draft_id}/send",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        raise_for_provider_status(sent, self.name, expected=202)

    async def describe(self, result: DispatchResult, access_token: str) -> DispatchResult:
        """Return *result* unchanged; the draft response already carries metadata."""
        return result

    async def refresh_token(self, credentials: OAuthCredentials, tokens: OAuthTokens) -> str:
        """Obtain a new Microsoft access token for the credential's tenant."""
        url = MICROSOFT_TOKEN_URL.format(issuer=credentials.issuer or "common")
        return await post_refresh_grant(
            self._client, url, self.name, credentials, tokens, scope=credentials.scope
        )

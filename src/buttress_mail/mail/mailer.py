"""End-to-end sending of a stored email record through one provider.

``Mailer.send`` turns an ``EmailRecord`` into message headers, composes the
MIME tree, dispatches it with single-shot token recovery, and returns the
``DeliveryRecord`` that the caller writes back to the email record.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import httpx
import structlog

from buttress_mail.config import Settings
from buttress_mail.domain.errors import ButtressMailError, TransportError
from buttress_mail.domain.types import DispatchStatus, Provider
from buttress_mail.mail.compose import compose_email
from buttress_mail.mail.dispatch import MailTransport, dispatch
from buttress_mail.mail.headers import (
    debug_redirect_headers,
    find_key,
    format_date_header,
    kv_to_mapping,
    set_header,
)
from buttress_mail.mail.models import (
    DeliveryRecord,
    EmailParams,
    EmailRecord,
    OAuthCredentials,
    OAuthTokens,
)
from buttress_mail.mime.boundary import RandomSource, default_random_bytes
from buttress_mail.mime.parts import MimeMultipart

logger = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class Mailer:
    """Compose and dispatch email records through a single provider transport.

    Args:
        transport: Provider transport (Gmail or Outlook).
        settings: Application settings (debug redirect configuration).
        random_bytes: Random source for MIME boundaries.
        clock: Returns the current time; used for ``Date`` and
            ``dispatched_at``.
    """

    def __init__(
        self,
        transport: MailTransport,
        settings: Settings,
        random_bytes: RandomSource = default_random_bytes,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._transport = transport
        self._settings = settings
        self._random_bytes = random_bytes
        self._clock = clock

    def build_headers(
        self, email: EmailRecord, debug_redirect_all: bool, now: datetime
    ) -> dict[str, str]:
        """Build the top-level message headers for *email*."""
        headers = kv_to_mapping(email.headers)
        if email.subject is not None:
            set_header(headers, "Subject", email.subject)
        if email.from_address and find_key(headers, "From") is None:
            headers["From"] = email.from_address

        if debug_redirect_all:
            address = self._settings.development_email_address
            if not address:
                msg = "Debug redirect is enabled but DEVELOPMENT_EMAIL_ADDRESS is not set"
                raise ButtressMailError(msg)
            headers = debug_redirect_headers(headers, email.subject, address, email_id=email.id)

        set_header(headers, "Date", format_date_header(now))
        return headers

    async def compose(
        self, email: EmailRecord, debug_redirect_all: bool | None = None
    ) -> MimeMultipart:
        """Compose the MIME message for *email* without sending it."""
        redirect = debug_redirect_all
        if redirect is None:
            redirect = self._settings.debug_redirect_all
        headers = self.build_headers(email, redirect, self._clock())
        params = EmailParams(text=email.text, html=email.body, attachments=email.attachments)
        return await compose_email(headers, params, self._random_bytes)

    async def send(
        self,
        email: EmailRecord,
        credentials: OAuthCredentials,
        tokens: OAuthTokens,
        debug_redirect_all: bool | None = None,
    ) -> DeliveryRecord:
        """Send *email* and return its delivery metadata.

        Args:
            email: The stored email record.
            credentials: OAuth client registration for token refresh.
            tokens: Sender tokens; refreshed in place when expired.
            debug_redirect_all: Override ``settings.debug_redirect_all``.

        Returns:
            A ``DeliveryRecord`` with status ``SENT``.  Metadata that cannot be read
            after a successful send is left empty rather than failing the
            call.
        """
        log = logger.bind(email_id=email.id, provider=self._transport.name)
        message = await self.compose(email, debug_redirect_all)

        result = await dispatch(self._transport, credentials, tokens, message)
        try:
            result = await self._transport.describe(result, tokens.access_token)
        except (TransportError, httpx.HTTPError) as exc:
            log.warning("delivery_metadata_unavailable", provider_id=result.id, error=str(exc))
        log.debug("email_sent", provider_id=result.id, thread_id=result.thread_id)

        return DeliveryRecord(
            email_id=email.id,
            status=DispatchStatus.SENT,
            dispatched_at=self._clock().isoformat(),
            provider=Provider(self._transport.name),
            provider_id=result.id,
            thread_id=result.thread_id,
            subject=result.subject,
            message_id=result.message_id,
            in_reply_to=result.in_reply_to,
        )

"""Pydantic v2 models for the mail dispatch pipeline.

Email records and dispatch results are frozen; ``OAuthTokens`` is mutable
because a successful refresh replaces its access token in place.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from buttress_mail.domain.types import DispatchStatus, Provider
from buttress_mail.mime.parts import MimeLeaf


class HeaderEntry(BaseModel):
    """One ``{key, value}`` header entry as stored on an email record."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str


class EmailParams(BaseModel):
    """Body variants and attachments for a composed email."""

    model_config = ConfigDict(frozen=True)

    text: str | None = None
    html: str | None = None
    attachments: list[MimeLeaf] = Field(default_factory=list)


class OAuthCredentials(BaseModel):
    """OAuth client registration used for the refresh-token grant."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: SecretStr
    issuer: str | None = None  # Microsoft tenant
    scope: str | None = None


class OAuthTokens(BaseModel):
    """A sender's current token pair."""

    access_token: str
    refresh_token: str | None = None


class EmailRecord(BaseModel):
    """An outgoing email as held by the host data store.

    ``body`` is the HTML rendering; ``text`` is an optional plain-text
    alternative.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    from_address: str = Field(default="", alias="from")
    subject: str | None = None
    headers: list[HeaderEntry] = Field(default_factory=list)
    body: str | None = None
    text: str | None = None
    attachments: list[MimeLeaf] = Field(default_factory=list)


class DispatchResult(BaseModel):
    """Provider metadata returned by a successful send."""

    model_config = ConfigDict(frozen=True)

    id: str
    thread_id: str | None = None
    subject: str | None = None
    message_id: str | None = None  # RFC 2822 Message-ID header
    in_reply_to: str | None = None


class DeliveryRecord(BaseModel):
    """Delivery metadata the caller persists against the email record."""

    model_config = ConfigDict(frozen=True)

    email_id: str
    status: DispatchStatus
    dispatched_at: str  # ISO 8601
    provider: Provider
    provider_id: str
    thread_id: str | None = None
    subject: str | None = None
    message_id: str | None = None
    in_reply_to: str | None = None

"""Provider transports (Gmail, Microsoft Graph) and their OAuth registrations."""

import httpx

from buttress_mail.config import Settings
from buttress_mail.domain.types import Provider
from buttress_mail.mail.dispatch import MailTransport
from buttress_mail.mail.models import OAuthCredentials
from buttress_mail.providers.gmail import GmailTransport
from buttress_mail.providers.outlook import OutlookTransport


def provider_credentials(settings: Settings, provider: Provider) -> OAuthCredentials:
    """Build the OAuth client registration for *provider* from *settings*."""
    if provider is Provider.GOOGLE:
        return OAuthCredentials(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
        )
    return OAuthCredentials(
        client_id=settings.microsoft_client_id,
        client_secret=settings.microsoft_client_secret,
        issuer=settings.microsoft_issuer,
        scope=settings.microsoft_scope,
    )


def create_transport(provider: Provider, client: httpx.AsyncClient) -> MailTransport:
    """Return the transport for *provider* bound to *client*."""
    if provider is Provider.GOOGLE:
        return GmailTransport(client)
    return OutlookTransport(client)


__all__ = [
    "GmailTransport",
    "OutlookTransport",
    "create_transport",
    "provider_credentials",
]

"""Shared HTTP helpers for provider transports."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from buttress_mail.domain.errors import AuthenticationError, TokenRefreshError, TransportError
from buttress_mail.mail.models import OAuthCredentials, OAuthTokens
from buttress_mail.resilience.retry import resilient_api_call

logger = structlog.get_logger()

_INVALID_TOKEN_MARKERS = ("INVALID_TOKEN", "INVALIDAUTHENTICATIONTOKEN", "INVALID_GRANT")


def response_body(response: httpx.Response) -> Any:
    """Return the decoded JSON body, or the raw text when it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text


def _is_invalid_token(body: Any) -> bool:
    text = str(body).upper()
    return any(marker in text for marker in _INVALID_TOKEN_MARKERS)


def raise_for_provider_status(
    response: httpx.Response,
    provider: str,
    expected: int = 200,
) -> Any:
    """Check a provider response and return its decoded body.

    Raises:
        AuthenticationError: On 401, or on a 400 whose payload reports an
            invalid token.
        TransportError: On any other status than *expected*.
    """
    body = response_body(response)
    if response.status_code == expected:
        return body

    status = response.status_code
    logger.error("provider_request_failed", provider=provider, status=status, body=body)
    if status == 401 or (status == 400 and _is_invalid_token(body)):
        raise AuthenticationError(provider, status, body)
    raise TransportError(provider, status, body)


@resilient_api_call("oauth_token")
async def post_refresh_grant(
    client: httpx.AsyncClient,
    url: str,
    provider: str,
    credentials: OAuthCredentials,
    tokens: OAuthTokens,
    scope: str | None = None,
) -> str:
    """Run the OAuth2 ``refresh_token`` grant and return the new access token.

    Raises:
        TokenRefreshError: If no refresh token is held, the token endpoint
            rejects the grant, or the response has no access token.
    """
    if not tokens.refresh_token:
        raise TokenRefreshError(provider, "no refresh token available")

    form = {
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret.get_secret_value(),
        "grant_type": "refresh_token",
        "refresh_token": tokens.refresh_token,
    }
    if scope:
        form["scope"] = scope

    response = await client.post(url, data=form)
    body = response_body(response)
    if response.status_code != 200:
        raise TokenRefreshError(provider, f"status {response.status_code}: {body}")

    access_token = body.get("access_token") if isinstance(body, dict) else None
    if not access_token:
        raise TokenRefreshError(provider, "token response carried no access_token")

    logger.info("access_token_refreshed", provider=provider)
    return str(access_token)

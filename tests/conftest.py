"""Shared pytest fixtures for the buttress-mail test suite."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from buttress_mail.config import Settings
from buttress_mail.mail.models import DispatchResult, OAuthCredentials, OAuthTokens


class SequenceRandom:
    """Deterministic random source yielding 0, 1, 2, ... modulo 62.

    The first 16-byte draw maps to ``ABCDEFGHIJKLMNOP``, the second to
    ``QRSTUVWXYZabcdef``.
    """

    def __init__(self) -> None:
        self._next = 0
        self.calls: list[int] = []

    async def __call__(self, size: int) -> bytes:
        self.calls.append(size)
        data = bytes((self._next + i) % 62 for i in range(size))
        self._next = (self._next + size) % 62
        return data


@pytest.fixture
def sequence_random() -> SequenceRandom:
    """A fresh deterministic random source."""
    return SequenceRandom()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any ``.env`` file."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        google_client_id="google-client",
        google_client_secret="google-secret",  # type: ignore[arg-type]
        microsoft_client_id="ms-client",
        microsoft_client_secret="ms-secret",  # type: ignore[arg-type]
        microsoft_issuer="tenant-123",
        development_email_address="dev@example.com",
    )


@pytest.fixture
def credentials() -> OAuthCredentials:
    """A representative OAuth client registration."""
    return OAuthCredentials(client_id="client-id", client_secret="client-secret")  # type: ignore[arg-type]


@pytest.fixture
def tokens() -> OAuthTokens:
    """A representative sender token pair."""
    return OAuthTokens(access_token="old-token", refresh_token="refresh-token")


@pytest.fixture
def fake_transport() -> MagicMock:
    """A Gmail-like transport whose send succeeds on the first attempt."""
    transport = MagicMock()
    transport.name = "google"
    transport.url_safe = True
    transport.send = AsyncMock(return_value=DispatchResult(id="msg_1", thread_id="thread_1"))
    transport.refresh_token = AsyncMock(return_value="new-token")
    transport.describe = AsyncMock(side_effect=lambda result, access_token: result)
    return transport

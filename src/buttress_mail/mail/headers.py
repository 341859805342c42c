"""Header helpers for turning stored email records into message headers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from email.utils import format_datetime
from typing import Any

import structlog

from buttress_mail.mail.models import HeaderEntry

logger = structlog.get_logger()

_RECIPIENT_HEADERS = frozenset({"TO", "CC", "BCC"})


def kv_to_mapping(entries: Iterable[HeaderEntry], uppercase_keys: bool = False) -> dict[str, str]:
    """Collapse ``{key, value}`` entries into a dict, later keys winning."""
    mapping: dict[str, str] = {}
    for entry in entries:
        key = entry.key.upper() if uppercase_keys else entry.key
        mapping[key] = entry.value
    return mapping


def find_key(mapping: Mapping[str, Any], name: str) -> str | None:
    """Return the key of *mapping* matching *name* case-insensitively."""
    wanted = name.casefold()
    for key in mapping:
        if key.casefold() == wanted:
            return key
    return None


def set_header(headers: dict[str, str], name: str, value: str) -> None:
    """Set *name* on *headers*, replacing any existing key that differs only by case."""
    existing = find_key(headers, name)
    if existing is not None:
        del headers[existing]
    headers[name] = value


def debug_redirect_headers(
    headers: Mapping[str, str],
    subject: str | None,
    development_address: str,
    email_id: str = "",
) -> dict[str, str]:
    """Redirect a message to the development mailbox.

    Removes every To/CC/BCC header, addresses the message to
    *development_address*, and marks the subject as a test.

    Returns:
        A new header dict; *headers* is not modified.
    """
    logger.warning(
        "debug_redirect_enabled",
        email_id=email_id,
        to=headers.get(find_key(headers, "To") or "", None),
        cc=headers.get(find_key(headers, "CC") or "", None),
    )
    redirected = {k: v for k, v in headers.items() if k.upper() not in _RECIPIENT_HEADERS}
    set_header(redirected, "Subject", f"[TESTING]: {subject or ''}")
    set_header(redirected, "To", development_address)
    return redirected


def format_date_header(when: datetime | None = None) -> str:
    """Format *when* (default: now, UTC) as an RFC 2822 ``Date`` value."""
    return format_datetime(when or datetime.now(tz=UTC))

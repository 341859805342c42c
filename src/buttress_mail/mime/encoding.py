"""Base64 transforms used when handing a MIME message to a provider.

Gmail expects the raw message as URL-safe base64 inside a JSON field;
Microsoft Graph accepts standard base64 as a ``text/plain`` request body.
"""

from __future__ import annotations

import base64
import json
from typing import Any

from buttress_mail.mime.parts import MimeLeaf, MimeMultipart, to_string


def _as_bytes(data: str | bytes) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else data


def b64encode(data: str | bytes, url_safe: bool = False, strip_padding: bool = False) -> str:
    """Encode *data* as base64 text.

    Args:
        data: Text (encoded as UTF-8) or raw bytes.
        url_safe: Use the ``-``/``_`` alphabet instead of ``+``/``/``.
        strip_padding: Drop trailing ``=`` characters.

    Returns:
        The ASCII base64 string.
    """
    raw = _as_bytes(data)
    encoded = base64.urlsafe_b64encode(raw) if url_safe else base64.b64encode(raw)
    text = encoded.decode("ascii")
    return text.rstrip("=") if strip_padding else text


def b64decode(data: str | bytes, url_safe: bool = False) -> bytes:
    """Decode base64 text, tolerating stripped padding."""
    raw = _as_bytes(data)
    raw += b"=" * (-len(raw) % 4)
    return base64.urlsafe_b64decode(raw) if url_safe else base64.b64decode(raw)


def b64url_json(payload: Any) -> str:
    """Serialize *payload* to JSON and encode it as unpadded URL-safe base64."""
    return b64encode(json.dumps(payload, separators=(",", ":")), url_safe=True, strip_padding=True)


def encode_message(part: MimeLeaf | MimeMultipart, url_safe: bool = False) -> str:
    """Serialize *part* and encode the CRLF-joined message as base64."""
    return b64encode(to_string(part), url_safe=url_safe)

"""Assemble the canonical MIME tree for an outgoing email.

The outer container is always ``multipart/mixed``.  A message carrying both
renderings nests them in a ``multipart/alternative`` container, plain text
first and HTML last so mail clients prefer the HTML part.  Attachments are
appended as siblings of the body in the outer container.  Text leaves
declare ``charset="UTF-8"``, matching the message encoding.
"""

from __future__ import annotations

import textwrap
from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from buttress_mail.domain.errors import MimeCompositionError
from buttress_mail.mail.models import EmailParams
from buttress_mail.mime.boundary import RandomSource, default_random_bytes
from buttress_mail.mime.encoding import b64encode
from buttress_mail.mime.parts import MimeLeaf, MimeMultipart

logger = structlog.get_logger()

_BASE64_LINE_LENGTH = 76

TEXT_PLAIN = 'text/plain; charset="UTF-8"'
TEXT_HTML = 'text/html; charset="UTF-8"'


def attachment_part(
    filename: str,
    content: bytes,
    mime_type: str = "application/octet-stream",
) -> MimeLeaf:
    """Build a base64 transfer-encoded attachment leaf.

    Args:
        filename: Name presented to the recipient.
        content: Raw attachment bytes.
        mime_type: Attachment media type.

    Returns:
        A leaf whose body is base64 wrapped at 76 characters per line.
    """
    encoded = b64encode(content)
    body = "\r\n".join(textwrap.wrap(encoded, _BASE64_LINE_LENGTH)) if encoded else ""
    return MimeLeaf(
        mime_type=f'{mime_type}; name="{filename}"',
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Transfer-Encoding": "base64",
        },
        body=body,
    )


async def compose_email(
    headers: Mapping[str, Any] | Iterable[tuple[str, Any]],
    params: EmailParams,
    random_bytes: RandomSource = default_random_bytes,
) -> MimeMultipart:
    """Compose a ``multipart/mixed`` message from headers and body variants.

    Args:
        headers: Top-level message headers (To, Subject, Date, ...).
        params: Text and/or HTML body plus optional attachments.
        random_bytes: Random source used for every boundary in the tree.

    Returns:
        The composed container with all boundaries initialized.

    Raises:
        MimeCompositionError: If the message has no text body, no HTML body
            and no attachments.
    """
    if not params.text and not params.html and not params.attachments:
        raise MimeCompositionError("An email needs a body or an attachment")

    container = MimeMultipart(mime_type="multipart/mixed", headers=headers)

    if params.text and params.html:
        alternative = MimeMultipart(mime_type="multipart/alternative")
        alternative.add_part(MimeLeaf(mime_type=TEXT_PLAIN, body=params.text))
        alternative.add_part(MimeLeaf(mime_type=TEXT_HTML, body=params.html))
        container.add_part(alternative)
    elif params.text:
        container.add_part(MimeLeaf(mime_type=TEXT_PLAIN, body=params.text))
    elif params.html:
        container.add_part(MimeLeaf(mime_type=TEXT_HTML, body=params.html))

    for attachment in params.attachments:
        container.add_part(attachment)

    await container.initialize_boundaries(random_bytes)
    logger.debug(
        "email_composed",
        parts=len(container.children),
        attachments=len(params.attachments),
        alternative=bool(params.text and params.html),
    )
    return container

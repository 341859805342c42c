"""MIME part tree: leaf sections and multipart containers.

A MIME message is modelled as a tagged variant.  ``MimeLeaf`` holds a single
content section (one ``Content-Type`` plus a body) and ``MimeMultipart``
holds an ordered list of child parts delimited by a random boundary token.
Both are serialized by the single recursive :func:`serialize_lines`
function, which dispatches on the ``kind`` tag.

Wire format of a container::

    Content-Type: multipart/mixed; boundary=<token>
    <own headers>

    --<token>
    <child lines>

    --<token>--
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from buttress_mail.domain.errors import (
    BoundaryCollisionError,
    BoundaryNotInitializedError,
    MimeCompositionError,
)
from buttress_mail.mime.boundary import RandomSource, default_random_bytes, generate_boundary

CRLF = "\r\n"

_NEWLINE_RE = re.compile(r"\r\n|\r|\n")
_LINE_BREAK_RE = re.compile(r"[\r\n]")

HeaderPairs = tuple[tuple[str, str], ...]


def header_pairs(headers: Mapping[str, Any] | Iterable[tuple[str, Any]] | None) -> HeaderPairs:
    """Freeze a header mapping (or pair sequence) into ordered ``(name, value)`` pairs.

    Headers whose value is ``None`` are omitted.

    Raises:
        MimeCompositionError: If a name or value contains CR or LF.
    """
    if not headers:
        return ()
    items = headers.items() if isinstance(headers, Mapping) else headers
    pairs = tuple((str(name), str(value)) for name, value in items if value is not None)
    for name, value in pairs:
        if _LINE_BREAK_RE.search(name) or _LINE_BREAK_RE.search(value):
            raise MimeCompositionError(f"Header {name!r} contains a line break")
    return pairs


class MimeLeaf(BaseModel):
    """A single non-multipart content section, e.g. ``text/plain``.

    ``body`` may be text or 7-bit bytes (already transfer-encoded).
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["leaf"] = "leaf"
    mime_type: str
    headers: HeaderPairs = ()
    body: str | bytes = ""

    @field_validator("headers", mode="before")
    @classmethod
    def _freeze_headers(cls, value: Any) -> HeaderPairs:
        return header_pairs(value)


class MimeMultipart(BaseModel):
    """A multipart container holding ordered child parts.

    The boundary is ``None`` until :meth:`initialize_boundary` is awaited.
    Children may be added before or after the boundary is drawn; both must
    happen before serialization.
    """

    kind: Literal["multipart"] = "multipart"
    mime_type: str
    headers: HeaderPairs = ()
    boundary: str | None = None
    children: list[MimePart] = Field(default_factory=list)

    @field_validator("headers", mode="before")
    @classmethod
    def _freeze_headers(cls, value: Any) -> HeaderPairs:
        return header_pairs(value)

    def add_part(self, part: MimePart) -> None:
        """Append *part* after the existing children."""
        self.children.append(part)

    async def initialize_boundary(
        self, random_bytes: RandomSource = default_random_bytes
    ) -> str:
        """Draw a new boundary token for this container.

        Every call replaces the previous token.

        Returns:
            The newly assigned boundary.
        """
        self.boundary = await generate_boundary(random_bytes)
        return self.boundary

    async def initialize_boundaries(
        self, random_bytes: RandomSource = default_random_bytes
    ) -> None:
        """Draw boundaries for this container and every nested container."""
        await self.initialize_boundary(random_bytes)
        for child in self.children:
            if isinstance(child, MimeMultipart):
                await child.initialize_boundaries(random_bytes)


MimePart = Annotated[MimeLeaf | MimeMultipart, Field(discriminator="kind")]

MimeMultipart.model_rebuild()


def _body_text(body: str | bytes) -> str:
    if isinstance(body, bytes):
        try:
            body = body.decode("ascii")
        except UnicodeDecodeError as exc:
            msg = "Binary part bodies must be transfer-encoded to 7-bit ASCII"
            raise MimeCompositionError(msg) from exc
    return _NEWLINE_RE.sub(CRLF, body)


def _header_lines(headers: HeaderPairs) -> list[str]:
    return [f"{name}: {value}" for name, value in headers]


def serialize_lines(part: MimeLeaf | MimeMultipart) -> list[str]:
    """Serialize *part* into its ordered wire-format lines.

    The ``Content-Type`` line is always first, even when the caller's
    headers already contain one.

    Raises:
        BoundaryNotInitializedError: If a container has no boundary yet.
        BoundaryCollisionError: If a boundary occurs inside a child part.
    """
    if part.kind == "leaf":
        return [
            f"Content-Type: {part.mime_type}",
            *_header_lines(part.headers),
            "",
            _body_text(part.body),
        ]

    boundary = part.boundary
    if boundary is None:
        raise BoundaryNotInitializedError(part.mime_type)

    lines = [f"Content-Type: {part.mime_type}; boundary={boundary}", *_header_lines(part.headers)]
    for child in part.children:
        child_lines = serialize_lines(child)
        if any(boundary in line for line in child_lines):
            raise BoundaryCollisionError(boundary)
        lines.append("")
        lines.append(f"--{boundary}")
        lines.extend(child_lines)

    lines.append("")
    lines.append(f"--{boundary}--")
    return lines


def to_string(part: MimeLeaf | MimeMultipart) -> str:
    """Render *part* with every line terminated by CRLF."""
    return "".join(f"{line}{CRLF}" for line in serialize_lines(part))

"""Tests for email composition."""

from __future__ import annotations

import base64

import pytest

from buttress_mail.domain.errors import MimeCompositionError
from buttress_mail.mail.compose import TEXT_HTML, TEXT_PLAIN, attachment_part, compose_email
from buttress_mail.mail.models import EmailParams
from buttress_mail.mime.parts import MimeLeaf, MimeMultipart, serialize_lines, to_string

HEADERS = {"To": "a@example.com", "Subject": "Test"}


class TestComposeEmail:
    """Tests for compose_email."""

    @pytest.mark.anyio()
    async def test_text_only_is_single_plain_leaf(self, sequence_random) -> None:  # type: ignore[no-untyped-def]
        container = await compose_email(HEADERS, EmailParams(text="hello"), sequence_random)

        assert container.mime_type == "multipart/mixed"
        assert len(container.children) == 1
        child = container.children[0]
        assert isinstance(child, MimeLeaf)
        assert child.mime_type == TEXT_PLAIN
        assert child.body == "hello"

    @pytest.mark.anyio()
    async def test_html_only_is_single_html_leaf(self, sequence_random) -> None:  # type: ignore[no-untyped-def]
        container = await compose_email(HEADERS, EmailParams(html="<b>hi</b>"), sequence_random)

        assert len(container.children) == 1
        assert container.children[0].mime_type == TEXT_HTML
        assert "multipart/alternative" not in to_string(container)

    @pytest.mark.anyio()
    async def test_both_bodies_nest_alternative_plain_first(self, sequence_random) -> None:  # type: ignore[no-untyped-def]
        container = await compose_email(
            HEADERS, EmailParams(text="hello", html="<b>hi</b>"), sequence_random
        )

        assert container.mime_type == "multipart/mixed"
        assert len(container.children) == 1
        alternative = container.children[0]
        assert isinstance(alternative, MimeMultipart)
        assert alternative.mime_type == "multipart/alternative"
        assert [(c.mime_type, c.body) for c in alternative.children] == [  # type: ignore[union-attr]
            (TEXT_PLAIN, "hello"),
            (TEXT_HTML, "<b>hi</b>"),
        ]

    @pytest.mark.anyio()
    async def test_every_boundary_is_initialized(self, sequence_random) -> None:  # type: ignore[no-untyped-def]
        container = await compose_email(
            HEADERS, EmailParams(text="hello", html="<b>hi</b>"), sequence_random
        )

        alternative = container.children[0]
        assert isinstance(alternative, MimeMultipart)
        assert container.boundary == "ABCDEFGHIJKLMNOP"
        assert alternative.boundary == "QRSTUVWXYZabcdef"
        serialize_lines(container)

    @pytest.mark.anyio()
    async def test_headers_follow_content_type(self, sequence_random) -> None:  # type: ignore[no-untyped-def]
        container = await compose_email(HEADERS, EmailParams(text="hello"), sequence_random)

        lines = serialize_lines(container)

        assert lines[:3] == [
            "Content-Type: multipart/mixed; boundary=ABCDEFGHIJKLMNOP",
            "To: a@example.com",
            "Subject: Test",
        ]

    @pytest.mark.anyio()
    async def test_attachments_are_siblings_after_body(self, sequence_random) -> None:  # type: ignore[no-untyped-def]
        pdf = attachment_part("report.pdf", b"%PDF-1.4", "application/pdf")
        params = EmailParams(text="hello", html="<b>hi</b>", attachments=[pdf])

        container = await compose_email(HEADERS, params, sequence_random)

        assert len(container.children) == 2
        assert container.children[0].mime_type == "multipart/alternative"
        assert container.children[1] == pdf

    @pytest.mark.anyio()
    async def test_default_boundaries_are_unique_per_call(self) -> None:
        first = await compose_email(HEADERS, EmailParams(text="hello"))
        second = await compose_email(HEADERS, EmailParams(text="hello"))

        assert first.boundary != second.boundary
        assert to_string(first).replace(first.boundary or "", "") == to_string(second).replace(
            second.boundary or "", ""
        )

    @pytest.mark.anyio()
    async def test_no_body_raises(self, sequence_random) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(MimeCompositionError):
            await compose_email(HEADERS, EmailParams(), sequence_random)

    @pytest.mark.anyio()
    async def test_text_leaves_declare_utf8(self, sequence_random) -> None:  # type: ignore[no-untyped-def]
        container = await compose_email(HEADERS, EmailParams(text="caf\u00e9"), sequence_random)

        assert 'Content-Type: text/plain; charset="UTF-8"\r\n\r\ncaf\u00e9\r\n' in to_string(container)

    @pytest.mark.anyio()
    async def test_attachments_only(self, sequence_random) -> None:  # type: ignore[no-untyped-def]
        pdf = attachment_part("report.pdf", b"%PDF-1.4", "application/pdf")

        container = await compose_email(HEADERS, EmailParams(attachments=[pdf]), sequence_random)

        assert container.children == [pdf]
        assert container.boundary == "ABCDEFGHIJKLMNOP"


class TestAttachmentPart:
    """Tests for attachment_part."""

    def test_headers_and_encoding(self) -> None:
        part = attachment_part("notes.txt", b"hello world", "text/plain")

        assert part.mime_type == 'text/plain; name="notes.txt"'
        assert dict(part.headers) == {
            "Content-Disposition": 'attachment; filename="notes.txt"',
            "Content-Transfer-Encoding": "base64",
        }
        assert base64.b64decode(part.body) == b"hello world"

    def test_long_content_wraps_at_76_characters(self) -> None:
        part = attachment_part("blob.bin", bytes(range(256)) * 4)

        lines = str(part.body).split("\r\n")

        assert len(lines) > 1
        assert all(len(line) <= 76 for line in lines)
        assert base64.b64decode("".join(lines)) == bytes(range(256)) * 4

    def test_default_mime_type(self) -> None:
        assert attachment_part("x.bin", b"x").mime_type.startswith("application/octet-stream")

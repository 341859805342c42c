"""Tests for header helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

from structlog.testing import capture_logs

from buttress_mail.mail.headers import (
    debug_redirect_headers,
    find_key,
    format_date_header,
    kv_to_mapping,
    set_header,
)
from buttress_mail.mail.models import HeaderEntry


class TestKvToMapping:
    """Tests for kv_to_mapping."""

    def test_preserves_keys_and_order(self) -> None:
        entries = [HeaderEntry(key="To", value="a@x.com"), HeaderEntry(key="CC", value="b@x.com")]

        assert kv_to_mapping(entries) == {"To": "a@x.com", "CC": "b@x.com"}
        assert list(kv_to_mapping(entries)) == ["To", "CC"]

    def test_uppercase_keys(self) -> None:
        entries = [HeaderEntry(key="Reply-To", value="r@x.com")]

        assert kv_to_mapping(entries, uppercase_keys=True) == {"REPLY-TO": "r@x.com"}

    def test_later_entry_wins(self) -> None:
        entries = [HeaderEntry(key="To", value="first"), HeaderEntry(key="To", value="second")]

        assert kv_to_mapping(entries) == {"To": "second"}


class TestFindAndSetHeader:
    """Tests for case-insensitive key lookup and replacement."""

    def test_find_key_ignores_case(self) -> None:
        assert find_key({"subject": "x"}, "SUBJECT") == "subject"

    def test_find_key_missing(self) -> None:
        assert find_key({"To": "x"}, "From") is None

    def test_set_header_replaces_differently_cased_key(self) -> None:
        headers = {"subject": "old", "To": "a@x.com"}

        set_header(headers, "Subject", "new")

        assert headers == {"To": "a@x.com", "Subject": "new"}


class TestDebugRedirectHeaders:
    """Tests for debug_redirect_headers."""

    def test_replaces_recipients_and_marks_subject(self) -> None:
        headers = {"To": "a@x.com", "cc": "b@x.com", "BCC": "c@x.com", "Reply-To": "r@x.com"}

        redirected = debug_redirect_headers(headers, "Hello", "dev@example.com")

        assert redirected == {
            "Reply-To": "r@x.com",
            "Subject": "[TESTING]: Hello",
            "To": "dev@example.com",
        }

    def test_input_is_not_modified(self) -> None:
        headers = {"To": "a@x.com"}

        debug_redirect_headers(headers, "Hello", "dev@example.com")

        assert headers == {"To": "a@x.com"}

    def test_missing_subject(self) -> None:
        redirected = debug_redirect_headers({}, None, "dev@example.com")

        assert redirected["Subject"] == "[TESTING]: "

    def test_logs_original_recipients(self) -> None:
        with capture_logs() as logs:
            debug_redirect_headers({"to": "a@x.com"}, "Hi", "dev@example.com", email_id="e1")

        assert logs[0]["event"] == "debug_redirect_enabled"
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["to"] == "a@x.com"
        assert logs[0]["email_id"] == "e1"


class TestFormatDateHeader:
    """Tests for format_date_header."""

    def test_rfc2822_utc(self) -> None:
        when = datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)

        assert format_date_header(when) == "Fri, 02 Jan 2026 03:04:05 +0000"

    def test_keeps_offset(self) -> None:
        when = datetime(2026, 6, 1, 12, 0, 0, tzinfo=timezone(timedelta(hours=1)))

        assert format_date_header(when) == "Mon, 01 Jun 2026 12:00:00 +0100"

    def test_defaults_to_now(self) -> None:
        assert format_date_header().endswith("+0000")

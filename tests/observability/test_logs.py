"""Tests for structlog configuration."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from buttress_mail.observability.logs import configure_logging


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Reset structlog so cached loggers don't leak between tests."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


class TestConfigureLogging:
    """Tests for structlog configuration in dev and production modes."""

    def test_development_mode_uses_console_renderer(self) -> None:
        configure_logging(production=False)
        processors = structlog.get_config()["processors"]
        assert any(isinstance(p, structlog.dev.ConsoleRenderer) for p in processors)

    def test_production_mode_uses_json_renderer(self) -> None:
        configure_logging(production=True)
        processors = structlog.get_config()["processors"]
        assert any(isinstance(p, structlog.processors.JSONRenderer) for p in processors)

    def test_default_is_development_mode(self) -> None:
        configure_logging()
        processors = structlog.get_config()["processors"]
        assert not any(isinstance(p, structlog.processors.JSONRenderer) for p in processors)

    def test_binds_service_name(self) -> None:
        configure_logging()

        assert structlog.contextvars.get_contextvars()["service"] == "buttress-mail"

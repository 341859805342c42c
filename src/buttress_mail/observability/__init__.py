"""Logging setup for buttress-mail."""

from buttress_mail.observability.logs import configure_logging

__all__ = ["configure_logging"]

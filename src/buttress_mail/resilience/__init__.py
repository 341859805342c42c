"""Resilience policies for provider API calls."""

from buttress_mail.resilience.retry import resilient_api_call, retry_once_after_refresh

__all__ = [
    "resilient_api_call",
    "retry_once_after_refresh",
]

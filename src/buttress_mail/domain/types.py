"""Domain enumerations shared across the mail pipeline."""

from enum import StrEnum


class Provider(StrEnum):
    """Mail providers a message can be dispatched through."""

    GOOGLE = "google"
    MICROSOFT = "microsoft"


class DispatchState(StrEnum):
    """States of a single dispatch call."""

    ATTEMPTING = "attempting"
    TERMINAL = "terminal"


class DispatchStatus(StrEnum):
    """Delivery status recorded against an email after dispatch."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"

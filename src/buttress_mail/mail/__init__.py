"""Mail domain: models, composition, header helpers, dispatch, and the mailer."""

from buttress_mail.mail.compose import attachment_part, compose_email
from buttress_mail.mail.dispatch import Dispatch, MailTransport, dispatch
from buttress_mail.mail.headers import (
    debug_redirect_headers,
    find_key,
    format_date_header,
    kv_to_mapping,
    set_header,
)
from buttress_mail.mail.mailer import Mailer
from buttress_mail.mail.models import (
    DeliveryRecord,
    DispatchResult,
    EmailParams,
    EmailRecord,
    HeaderEntry,
    OAuthCredentials,
    OAuthTokens,
)

__all__ = [
    "DeliveryRecord",
    "Dispatch",
    "DispatchResult",
    "EmailParams",
    "EmailRecord",
    "HeaderEntry",
    "MailTransport",
    "Mailer",
    "OAuthCredentials",
    "OAuthTokens",
    "attachment_part",
    "compose_email",
    "debug_redirect_headers",
    "dispatch",
    "find_key",
    "format_date_header",
    "kv_to_mapping",
    "set_header",
]

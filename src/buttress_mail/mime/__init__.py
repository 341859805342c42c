"""MIME tree construction, serialization, and base64 transforms."""

from buttress_mail.mime.boundary import (
    BOUNDARY_ALPHABET,
    BOUNDARY_LENGTH,
    RandomSource,
    default_random_bytes,
    generate_boundary,
)
from buttress_mail.mime.encoding import b64decode, b64encode, b64url_json, encode_message
from buttress_mail.mime.parts import (
    CRLF,
    MimeLeaf,
    MimeMultipart,
    MimePart,
    header_pairs,
    serialize_lines,
    to_string,
)

__all__ = [
    "BOUNDARY_ALPHABET",
    "BOUNDARY_LENGTH",
    "CRLF",
    "MimeLeaf",
    "MimeMultipart",
    "MimePart",
    "RandomSource",
    "b64decode",
    "b64encode",
    "b64url_json",
    "default_random_bytes",
    "encode_message",
    "generate_boundary",
    "header_pairs",
    "serialize_lines",
    "to_string",
]

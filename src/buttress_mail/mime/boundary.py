"""Random boundary tokens for multipart containers.

Boundaries are drawn from an injected asynchronous random source so tests
can supply deterministic bytes.  Each byte is reduced with a full 6-bit mask
and values that fall outside the 62-symbol alphabet are rejected, which
keeps every symbol equally likely.
"""

from __future__ import annotations

import secrets
import string
from collections.abc import Awaitable, Callable

from buttress_mail.domain.errors import MimeCompositionError

RandomSource = Callable[[int], Awaitable[bytes]]

BOUNDARY_ALPHABET: str = string.ascii_uppercase + string.ascii_lowercase + string.digits
BOUNDARY_LENGTH: int = 16

_SIX_BIT_MASK = 0x3F


async def default_random_bytes(size: int) -> bytes:
    """Draw *size* bytes from the operating system CSPRNG."""
    return secrets.token_bytes(size)


async def generate_boundary(
    random_bytes: RandomSource = default_random_bytes,
    length: int = BOUNDARY_LENGTH,
) -> str:
    """Generate a boundary token of *length* alphanumeric characters.

    Args:
        random_bytes: Async callable returning the requested number of
            random bytes.
        length: Number of characters in the token.

    Returns:
        A fresh token over ``A-Za-z0-9``.

    Raises:
        MimeCompositionError: If the random source returns no bytes.
    """
    chars: list[str] = []
    while len(chars) < length:
        drawn = await random_bytes(length - len(chars))
        if not drawn:
            raise MimeCompositionError("Random source returned no bytes for boundary generation")
        for byte in drawn:
            index = byte & _SIX_BIT_MASK
            # 62 and 63 have no symbol; drop them and draw again
            if index < len(BOUNDARY_ALPHABET):
                chars.append(BOUNDARY_ALPHABET[index])
    return "".join(chars[:length])
